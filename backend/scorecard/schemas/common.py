"""
Common schemas used across the application.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema that reads and writes camelCase JSON (``metricId``, ``startDate``)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class HealthResponse(BaseModel):
    """Health check response."""
    code: int = 200
    message: str = "API is healthy."


class DeletedResponse(BaseModel):
    """Acknowledgement for a deleted record."""
    id: str
    deleted: bool = True

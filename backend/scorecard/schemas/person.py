"""
Person schemas.
"""
from typing import Optional
from pydantic import Field

from scorecard.schemas.common import CamelModel


class PersonBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class PersonCreate(PersonBase):
    pass


class PersonUpdate(PersonBase):
    pass


class PersonResponse(PersonBase):
    id: str


class PersonRef(CamelModel):
    """Reference to a person as embedded in metric payloads."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

"""
Metric schemas.

Provides Pydantic models for:
- Metric CRUD operations (target embedded as a nested object)
- Reordering the scorecard rows
"""
from typing import Optional, List
from pydantic import BaseModel, Field

from scorecard.models.metric import ValueUnit, ComparisonOperator, MetricValueType
from scorecard.schemas.common import CamelModel
from scorecard.schemas.person import PersonRef, PersonResponse


class TargetSchema(CamelModel):
    """Goal value, unit and comparison operator."""
    value: float = Field(..., allow_inf_nan=False)
    unit: ValueUnit = ValueUnit.NONE
    operator: ComparisonOperator = ComparisonOperator.GTE


class MetricCreate(CamelModel):
    """Schema for creating a metric. New metrics are appended to the grid."""
    name: str = Field(..., min_length=1, max_length=200)
    target: TargetSchema
    owner: PersonRef
    value_type: MetricValueType = MetricValueType.NUMBER


class MetricUpdate(CamelModel):
    """Schema for updating a metric; omitted optional fields keep their value."""
    name: str = Field(..., min_length=1, max_length=200)
    target: TargetSchema
    owner: PersonRef
    display_order: Optional[int] = Field(None, ge=0)
    value_type: Optional[MetricValueType] = None


class MetricResponse(CamelModel):
    id: str
    name: str
    target: TargetSchema
    owner: PersonResponse
    display_order: int
    value_type: MetricValueType


class MetricRef(BaseModel):
    id: str


class MetricReorderRequest(BaseModel):
    """Metrics in their new display order."""
    metrics: List[MetricRef] = Field(..., min_length=1)

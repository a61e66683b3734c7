"""
WeeklyValue schemas.
"""
from typing import Optional
from pydantic import Field

from scorecard.models.metric import ValueUnit
from scorecard.schemas.common import CamelModel


class WeeklyValueUpsert(CamelModel):
    """Create or update the value of one metric for one week."""
    metric_id: str = Field(..., min_length=1, max_length=15)
    week_id: str = Field(..., min_length=1, max_length=15)
    value: float = Field(..., allow_inf_nan=False)
    unit: ValueUnit = ValueUnit.NONE


class WeeklyValueResponse(CamelModel):
    id: Optional[str] = None
    metric_id: str
    week_id: str
    value: float
    unit: ValueUnit

"""
Scorecard grid schemas - the table the UI renders.
"""
from typing import List, Optional

from scorecard.models.metric import ValueUnit
from scorecard.schemas.common import CamelModel
from scorecard.schemas.metric import MetricResponse
from scorecard.schemas.week import WeekResponse


class ScorecardCell(CamelModel):
    week_id: str
    value: Optional[float] = None
    unit: Optional[ValueUnit] = None
    on_target: Optional[bool] = None
    display: str = ""


class ScorecardRow(CamelModel):
    metric: MetricResponse
    goal: str
    cells: List[ScorecardCell]
    on_target_count: int = 0
    entered_count: int = 0


class ScorecardResponse(CamelModel):
    weeks: List[WeekResponse]
    rows: List[ScorecardRow]

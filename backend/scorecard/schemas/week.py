"""
Week schemas.

Dates travel as ISO-8601 calendar dates (``2024-01-08``).
"""
from datetime import date
from typing import List
from pydantic import BaseModel, Field

from scorecard.schemas.common import CamelModel


class WeekResponse(CamelModel):
    id: str
    name: str
    start_date: date
    end_date: date


class WeekUpdateResponse(BaseModel):
    """Result of a roll-forward request."""
    message: str
    new_weeks: List[WeekResponse] = Field(default_factory=list, alias="newWeeks")

    class Config:
        populate_by_name = True

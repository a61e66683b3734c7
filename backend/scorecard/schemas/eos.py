"""
Schemas for importing an EOS One scorecard export.

Only the fields the import uses are declared; everything else in the export
is ignored.
"""
from datetime import date, timedelta
from typing import Any, List, Optional, Union
from dateutil.parser import isoparse
from pydantic import BaseModel, Field, field_validator, model_validator


class EosValue(BaseModel):
    id: Union[str, int]
    interval_id: Union[str, int] = Field(..., alias="intervalId")
    value: float

    class Config:
        populate_by_name = True


class EosMeasurable(BaseModel):
    title: str = Field(..., min_length=1)
    owner_id: Union[str, int] = Field(..., alias="ownerId")
    owner_name: str = Field(..., alias="ownerName", min_length=1)
    goal_value: float = Field(..., alias="goalValue")
    comparison: Optional[str] = None
    unit_of_measure: Optional[str] = Field(None, alias="unitOfMeasure")
    value_scale: Optional[str] = Field(None, alias="valueScale")
    sequence: int = 0
    values: List[EosValue] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class EosDate(BaseModel):
    interval_id: Union[str, int] = Field(..., alias="intervalId")
    interval_no: int = Field(..., alias="intervalNo")
    from_date: date = Field(..., alias="fromDate")
    to_date: date = Field(..., alias="toDate")

    class Config:
        populate_by_name = True

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> Any:
        # Exports carry full timestamps ("2024-01-08T00:00:00Z")
        if isinstance(value, str):
            return isoparse(value).date()
        return value

    @model_validator(mode="after")
    def check_week_span(self) -> "EosDate":
        if self.from_date.weekday() != 0:
            raise ValueError(f"Interval {self.interval_id} does not start on a Monday")
        if self.to_date != self.from_date + timedelta(days=6):
            raise ValueError(f"Interval {self.interval_id} must end six days after it starts")
        return self


class EosData(BaseModel):
    measurables: List[EosMeasurable]
    dates: List[EosDate]


class EosImportRequest(BaseModel):
    data: EosData

"""
Week model - one completed Monday..Sunday bucket.

Weeks are only ever created by the week calendar (or by seeding/import),
never edited by users.
"""
from typing import TYPE_CHECKING, List
from datetime import date
from sqlalchemy import String, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scorecard.models.base import Record

if TYPE_CHECKING:
    from scorecard.models.weekly_value import WeeklyValue


class Week(Record):
    __tablename__ = "weeks"

    # Display label ("Week 12"); not a key
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, unique=True, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    values: Mapped[List["WeeklyValue"]] = relationship(
        "WeeklyValue",
        back_populates="week",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Week {self.name} {self.start_date.isoformat()}..{self.end_date.isoformat()}>"

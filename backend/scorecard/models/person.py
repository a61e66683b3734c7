"""
Person model - the owner of scorecard metrics.
"""
from typing import TYPE_CHECKING, List
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scorecard.models.base import Record

if TYPE_CHECKING:
    from scorecard.models.metric import Metric


class Person(Record):
    """A person who can own metrics. Email addresses are unique."""
    __tablename__ = "people"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    # No delete cascade: people who still own metrics may not be deleted
    metrics: Mapped[List["Metric"]] = relationship(
        "Metric",
        back_populates="owner",
        passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Person {self.name} <{self.email}>>"

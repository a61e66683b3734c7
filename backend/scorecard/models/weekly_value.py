"""
WeeklyValue model - one metric's measurement for one week.

Rows are created lazily when someone enters data; a missing row means
"no data entered", not zero.
"""
from typing import TYPE_CHECKING
from sqlalchemy import String, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scorecard.models.base import Record
from scorecard.models.metric import ValueUnit, _enum_column

if TYPE_CHECKING:
    from scorecard.models.metric import Metric
    from scorecard.models.week import Week


class WeeklyValue(Record):
    __tablename__ = "weekly_values"
    __table_args__ = (
        UniqueConstraint("metric_id", "week_id", name="uq_weekly_values_metric_week"),
    )

    metric_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("metrics.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    week_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("weeks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[ValueUnit] = mapped_column(
        _enum_column(ValueUnit, "valueunit"),
        default=ValueUnit.NONE,
        nullable=False
    )

    # Relationships
    metric: Mapped["Metric"] = relationship(
        "Metric",
        back_populates="values",
        foreign_keys=[metric_id]
    )
    week: Mapped["Week"] = relationship(
        "Week",
        back_populates="values",
        foreign_keys=[week_id]
    )

    def __repr__(self) -> str:
        return f"<WeeklyValue {self.metric_id}@{self.week_id}: {self.value}{self.unit.value}>"

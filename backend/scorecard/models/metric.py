"""
Metric model - a weekly KPI with an embedded target.

The target is stored flattened (value, unit, operator) on the metric row and
exposed as a ``Target`` value object through the ``target`` property.
"""
from typing import TYPE_CHECKING, List
from enum import Enum
from sqlalchemy import String, ForeignKey, Float, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scorecard.models.base import Record
from scorecard.services.targets import Target

if TYPE_CHECKING:
    from scorecard.models.person import Person
    from scorecard.models.weekly_value import WeeklyValue


class ValueUnit(str, Enum):
    """Scale or unit tag attached to a number."""
    NONE = ""
    THOUSAND = "k"
    MILLION = "m"
    BILLION = "b"
    PERCENT = "%"
    DOLLAR = "$"
    SECOND = "sec"
    MINUTE = "min"
    HOUR = "hour"
    DAY = "day"


class ComparisonOperator(str, Enum):
    """How an actual value is compared with the target."""
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    EQ = "eq"


class MetricValueType(str, Enum):
    """Type of metric value for display formatting."""
    NUMBER = "number"
    PERCENT = "percent"
    DOLLARS = "dollars"
    TIME = "time"


def _enum_column(enum_cls: type[Enum], name: str) -> SQLEnum:
    return SQLEnum(
        enum_cls,
        name=name,
        create_constraint=True,
        values_callable=lambda x: [e.value for e in x]
    )


class Metric(Record):
    """A tracked KPI with an owner and a target."""
    __tablename__ = "metrics"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Target
    target_value: Mapped[float] = mapped_column(Float, nullable=False)
    target_unit: Mapped[ValueUnit] = mapped_column(
        _enum_column(ValueUnit, "valueunit"),
        default=ValueUnit.NONE,
        nullable=False
    )
    target_operator: Mapped[ComparisonOperator] = mapped_column(
        _enum_column(ComparisonOperator, "comparisonoperator"),
        nullable=False
    )

    owner_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("people.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Grid position; ties fall back to creation time
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    value_type: Mapped[MetricValueType] = mapped_column(
        _enum_column(MetricValueType, "metricvaluetype"),
        default=MetricValueType.NUMBER,
        nullable=False
    )

    # Relationships
    owner: Mapped["Person"] = relationship(
        "Person",
        back_populates="metrics",
        foreign_keys=[owner_id]
    )
    values: Mapped[List["WeeklyValue"]] = relationship(
        "WeeklyValue",
        back_populates="metric",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.target_operator.value} {self.target_value}{self.target_unit.value})>"

    @property
    def target(self) -> Target:
        return Target(
            value=self.target_value,
            unit=self.target_unit.value,
            operator=self.target_operator.value
        )

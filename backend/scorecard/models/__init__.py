"""
SQLAlchemy models for the scorecard.

- Person: owner of metrics
- Metric: KPI with an embedded target
- Week: completed Monday..Sunday bucket
- WeeklyValue: a metric's value for one week
"""
from scorecard.models.person import Person
from scorecard.models.metric import Metric, ValueUnit, ComparisonOperator, MetricValueType
from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue

__all__ = [
    "Person",
    "Metric",
    "ValueUnit",
    "ComparisonOperator",
    "MetricValueType",
    "Week",
    "WeeklyValue",
]

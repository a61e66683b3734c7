"""
Target evaluation for scorecard values.

Provides:
- Unit normalization (k/m/b scales, percent, time units) to a comparable number
- On-target evaluation of an actual value against a metric target
- Display formatting for values, goals and week ranges

Everything here is pure and safe to call from any request handler.
"""
import logging
import math
import operator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from scorecard.core.errors import InvalidValueError

logger = logging.getLogger(__name__)


# Multiplier that brings a unit-tagged value to its base number.
# Time units normalize to seconds.
UNIT_MULTIPLIERS: dict[str, float] = {
    "k": 1_000,
    "m": 1_000_000,
    "b": 1_000_000_000,
    "$": 1,
    "sec": 1,
    "min": 60,
    "hour": 3_600,
    "day": 86_400,
}

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    "gt": operator.gt,
    "lt": operator.lt,
    "gte": operator.ge,
    "lte": operator.le,
    "eq": operator.eq,
}

OPERATOR_LABELS = {
    "gt": "greater than",
    "lt": "less than",
    "gte": "greater than or equal to",
    "lte": "less than or equal to",
    "eq": "equal to",
}

OPERATOR_SYMBOLS = {
    "gt": ">",
    "lt": "<",
    "gte": "≥",
    "lte": "≤",
    "eq": "=",
}


@dataclass(frozen=True)
class Measurement:
    """A number with its unit tag, e.g. ``Measurement(1.2, "m")``."""
    value: float
    unit: str = ""


@dataclass(frozen=True)
class Target:
    """Goal value, unit and comparison operator a metric is judged against."""
    value: float
    unit: str = ""
    operator: str = "gte"


def _tag(raw: Any) -> str:
    """Plain string for a unit/operator given as str, str-Enum or None."""
    if raw is None:
        return ""
    return str(getattr(raw, "value", raw))


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _as_number(value: Any) -> float:
    # bool is an int subclass but never a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidValueError(f"Expected a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidValueError(f"Expected a finite number, got {value!r}")
    return number


def normalize_value(value: Any, unit: Any = "") -> float:
    """
    Convert a unit-tagged number to its base value for comparison.

    ``1.2, "m"`` -> 1_200_000; ``95, "%"`` -> 0.95; ``6, "hour"`` -> 21_600.
    Unknown unit tags are treated as plain numbers.
    """
    number = _as_number(value)
    tag = _tag(unit)

    if tag == "%":
        return number / 100

    multiplier = UNIT_MULTIPLIERS.get(tag)
    if multiplier is None:
        if tag:
            logger.debug(f"Unrecognized unit {tag!r}; comparing the raw number")
        return number
    return number * multiplier


def is_on_target(actual: Any, target: Any) -> bool:
    """
    Decide whether ``actual`` satisfies ``target``.

    ``actual`` needs ``value``/``unit``; ``target`` needs ``value``/``unit``/``operator``.
    Either may be an object or a mapping. ``eq`` is exact equality on the
    normalized numbers. An unknown operator never counts as on target.
    """
    normalized_actual = normalize_value(_field(actual, "value"), _field(actual, "unit"))
    normalized_target = normalize_value(_field(target, "value"), _field(target, "unit"))

    compare = _COMPARATORS.get(_tag(_field(target, "operator")))
    if compare is None:
        return False
    return compare(normalized_actual, normalized_target)


# ============================================================================
# FORMATTING
# ============================================================================

def format_number(number: float, force_decimals: bool = False) -> str:
    """Thousands separators; whole numbers without decimals, others up to 2 places."""
    if float(number).is_integer() and not force_decimals:
        return f"{int(number):,}"
    if force_decimals:
        return f"{number:,.2f}"
    return f"{number:,.2f}".rstrip("0").rstrip(".")


def _format_time(value: float, unit: str) -> str:
    formatted = format_number(value)
    plural = "" if value == 1 else "s"
    if unit == "sec":
        return f"{formatted} sec"
    if unit == "min":
        return f"{formatted} min"
    if unit == "hour":
        return f"{formatted} hr{plural}"
    if unit == "day":
        return f"{formatted} day{plural}"
    return formatted


def format_value(value: float, unit: Any = "", value_type: Optional[Any] = None) -> str:
    """Human-readable value, e.g. ``$1.5m``-style dollars, ``95%`` or ``6 hrs``."""
    tag = _tag(unit)
    kind = _tag(value_type)

    if kind == "dollars":
        scale = tag if tag in ("k", "m", "b") else ""
        return f"${format_number(value, not float(value).is_integer())}{scale}"
    if kind == "percent":
        return f"{format_number(value)}%"
    if kind == "time":
        return _format_time(value, tag)
    return f"{format_number(value)}{tag}"


def format_operator(op: Any) -> str:
    return OPERATOR_LABELS.get(_tag(op), "")


def format_goal(target: Any, value_type: Optional[Any] = None) -> str:
    """Target rendered with its operator symbol, e.g. ``≥100`` or ``≤8 hrs``."""
    rendered = format_value(_field(target, "value"), _field(target, "unit"), value_type)
    return f"{OPERATOR_SYMBOLS.get(_tag(_field(target, 'operator')), '')}{rendered}"


def format_date_range(start: date, end: date) -> str:
    """Week header label, e.g. ``1/8-1/14``."""
    return f"{start.month}/{start.day}-{end.month}/{end.day}"

"""Predicate builders for the content API query language.

Every builder returns an immutable `Predicate` whose `q` is the textual form
sent in the `q` parameter of a search form, for example::

    >>> Predicate.at("document.type", "article").q
    '[:d = at(document.type, "article")]'

Builders validate their arguments eagerly and raise
`prismkit.exceptions.InvalidPredicateArgument` on anything malformed.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

from prismkit.exceptions import InvalidPredicateArgument


class WeekDay(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class Month(str, Enum):
    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"


Number = Union[int, float]
DateLike = Union[datetime, date, int]


# ----- Literal encoding -----


def _field(path: Any) -> str:
    if not isinstance(path, str) or not path.strip():
        raise InvalidPredicateArgument(f"Fragment path must be a non-empty string, got {path!r}")
    return path.strip()


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _string(value: Any, what: str = "value") -> str:
    if not isinstance(value, str):
        raise InvalidPredicateArgument(f"{what} must be a string, got {value!r}")
    return _quote(value)


def _number(value: Any, what: str = "value") -> str:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPredicateArgument(f"{what} must be a number, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidPredicateArgument(f"{what} must be finite, got {value!r}")
        return repr(value)
    return str(value)


def _integer(value: Any, what: str, low: Optional[int] = None, high: Optional[int] = None) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPredicateArgument(f"{what} must be an integer, got {value!r}")
    if (low is not None and value < low) or (high is not None and value > high):
        raise InvalidPredicateArgument(f"{what} must be within [{low}, {high}], got {value}")
    return str(value)


def _scalar(value: Any) -> str:
    if isinstance(value, str):
        return _quote(value)
    return _number(value)


def _array(values: Any) -> str:
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise InvalidPredicateArgument(f"values must be a list, got {values!r}")
    if not values:
        raise InvalidPredicateArgument("values must not be empty")
    return "[" + ",".join(_scalar(v) for v in values) + "]"


def _millis(value: Any) -> str:
    """Encode a date-like value as epoch milliseconds (naive values are UTC)."""
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        dt = dt.astimezone(timezone.utc)
        return str(calendar.timegm(dt.timetuple()) * 1000 + dt.microsecond // 1000)
    if isinstance(value, date):
        return _millis(datetime.combine(value, time(), tzinfo=timezone.utc))
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise InvalidPredicateArgument(f"Expected a date, datetime or epoch millis, got {value!r}")


def _named(value: Any, enum_cls: Any, what: str) -> str:
    members = list(enum_cls)
    if isinstance(value, enum_cls):
        return _quote(value.value)
    if isinstance(value, str):
        for m in members:
            if value.strip().lower() == m.value.lower():
                return _quote(m.value)
    elif isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= len(members):
        # 1-based: Monday=1 (ISO week), January=1
        return _quote(members[value - 1].value)
    raise InvalidPredicateArgument(f"Unknown {what}: {value!r}")


# ----- Predicate -----


@dataclass(frozen=True)
class Predicate:
    """A single filter condition: `[:d = operator(fragment, values...)]`."""

    operator: str
    fragment: Optional[str]
    values: Tuple[str, ...] = ()

    @property
    def q(self) -> str:
        args = ([self.fragment] if self.fragment else []) + list(self.values)
        return f"[:d = {self.operator}({', '.join(args)})]"

    def serialize(self) -> str:
        return self.q

    def __str__(self) -> str:
        return self.q

    @classmethod
    def _build(cls, operator: str, fragment: Optional[str], *values: str) -> "Predicate":
        return cls(operator=operator, fragment=fragment, values=tuple(values))

    # Basic predicates

    @classmethod
    def at(cls, fragment: str, value: Any) -> "Predicate":
        """Equality of a fragment to a value (a list matches all of its values, e.g. tags)."""
        encoded = _array(value) if isinstance(value, (list, tuple)) else _scalar(value)
        return cls._build("at", _field(fragment), encoded)

    @classmethod
    def any(cls, fragment: str, values: Sequence[Any]) -> "Predicate":
        """Equality of a fragment to any of the given values."""
        return cls._build("any", _field(fragment), _array(values))

    @classmethod
    def fulltext(cls, fragment: str, text: str) -> "Predicate":
        return cls._build("fulltext", _field(fragment), _string(text, "text"))

    @classmethod
    def similar(cls, document_id: str, max_results: int) -> "Predicate":
        """Documents similar to the given one; `document_id` is quoted, not a path."""
        if not isinstance(document_id, str) or not document_id:
            raise InvalidPredicateArgument(f"document_id must be a non-empty string, got {document_id!r}")
        return cls._build(
            "similar", None, _quote(document_id), _integer(max_results, "max_results", low=1)
        )

    @classmethod
    def has(cls, fragment: str) -> "Predicate":
        return cls._build("has", _field(fragment))

    @classmethod
    def missing(cls, fragment: str) -> "Predicate":
        return cls._build("missing", _field(fragment))

    # Number predicates

    @classmethod
    def gt(cls, fragment: str, value: Number) -> "Predicate":
        return cls._build("gt", _field(fragment), _number(value))

    @classmethod
    def lt(cls, fragment: str, value: Number) -> "Predicate":
        return cls._build("lt", _field(fragment), _number(value))

    @classmethod
    def in_range(cls, fragment: str, low: Number, high: Number) -> "Predicate":
        lo, hi = _number(low, "low"), _number(high, "high")
        if low > high:
            raise InvalidPredicateArgument(f"low ({low}) must not exceed high ({high})")
        return cls._build("inRange", _field(fragment), lo, hi)

    # Date predicates

    @classmethod
    def date_before(cls, fragment: str, before: DateLike) -> "Predicate":
        return cls._build("dateBefore", _field(fragment), _millis(before))

    @classmethod
    def date_after(cls, fragment: str, after: DateLike) -> "Predicate":
        return cls._build("dateAfter", _field(fragment), _millis(after))

    @classmethod
    def date_between(cls, fragment: str, start: DateLike, end: DateLike) -> "Predicate":
        lo, hi = _millis(start), _millis(end)
        if int(lo) > int(hi):
            raise InvalidPredicateArgument("start must not be after end")
        return cls._build("dateBetween", _field(fragment), lo, hi)

    @classmethod
    def day_of_month(cls, fragment: str, day: int) -> "Predicate":
        return cls._build("dayOfMonth", _field(fragment), _integer(day, "day", 1, 31))

    @classmethod
    def day_of_month_after(cls, fragment: str, day: int) -> "Predicate":
        return cls._build("dayOfMonthAfter", _field(fragment), _integer(day, "day", 1, 31))

    @classmethod
    def day_of_month_before(cls, fragment: str, day: int) -> "Predicate":
        return cls._build("dayOfMonthBefore", _field(fragment), _integer(day, "day", 1, 31))

    @classmethod
    def day_of_week(cls, fragment: str, day: Union[WeekDay, str, int]) -> "Predicate":
        return cls._build("dayOfWeek", _field(fragment), _named(day, WeekDay, "week day"))

    @classmethod
    def day_of_week_after(cls, fragment: str, day: Union[WeekDay, str, int]) -> "Predicate":
        return cls._build("dayOfWeekAfter", _field(fragment), _named(day, WeekDay, "week day"))

    @classmethod
    def day_of_week_before(cls, fragment: str, day: Union[WeekDay, str, int]) -> "Predicate":
        return cls._build("dayOfWeekBefore", _field(fragment), _named(day, WeekDay, "week day"))

    @classmethod
    def month(cls, fragment: str, month: Union[Month, str, int]) -> "Predicate":
        return cls._build("month", _field(fragment), _named(month, Month, "month"))

    @classmethod
    def month_before(cls, fragment: str, month: Union[Month, str, int]) -> "Predicate":
        return cls._build("monthBefore", _field(fragment), _named(month, Month, "month"))

    @classmethod
    def month_after(cls, fragment: str, month: Union[Month, str, int]) -> "Predicate":
        return cls._build("monthAfter", _field(fragment), _named(month, Month, "month"))

    @classmethod
    def year(cls, fragment: str, year: int) -> "Predicate":
        return cls._build("year", _field(fragment), _integer(year, "year"))

    @classmethod
    def hour(cls, fragment: str, hour: int) -> "Predicate":
        return cls._build("hour", _field(fragment), _integer(hour, "hour", 0, 23))

    @classmethod
    def hour_before(cls, fragment: str, hour: int) -> "Predicate":
        return cls._build("hourBefore", _field(fragment), _integer(hour, "hour", 0, 23))

    @classmethod
    def hour_after(cls, fragment: str, hour: int) -> "Predicate":
        return cls._build("hourAfter", _field(fragment), _integer(hour, "hour", 0, 23))

    # Geo predicates

    @classmethod
    def near(cls, fragment: str, latitude: float, longitude: float, radius: Number) -> "Predicate":
        """Documents whose GeoPoint fragment lies within `radius` km of a point."""
        lat, lng, rad = (
            _number(latitude, "latitude"),
            _number(longitude, "longitude"),
            _number(radius, "radius"),
        )
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise InvalidPredicateArgument(f"Invalid coordinates: ({latitude}, {longitude})")
        if radius <= 0:
            raise InvalidPredicateArgument(f"radius must be positive, got {radius}")
        return cls._build("near", _field(fragment), lat, lng, rad)

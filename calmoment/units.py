"""Calendar units used by Moment arithmetic and rounding."""

from enum import Enum

from dateutil.relativedelta import relativedelta

from calmoment.util import DAY, HOUR, MINUTE, MONTH, QUARTER, SECOND, YEAR


class TimeUnit(Enum):
    """Closed set of units, ordered from finest to coarsest."""

    SECONDS = "s"
    MINUTES = "m"
    HOURS = "H"
    DAYS = "d"
    MONTHS = "M"
    QUARTERS = "Q"
    YEARS = "y"

    @property
    def seconds(self) -> int:
        """Approximate length of one unit in seconds (fixed-length arithmetic)."""
        return _SECONDS[self]

    def to_seconds(self, value: float) -> float:
        return value * _SECONDS[self]

    def delta(self, value: int) -> relativedelta:
        """Express a signed integer count of this unit as a calendar delta."""
        if self is TimeUnit.QUARTERS:
            return relativedelta(months=3 * value)
        return relativedelta(**{_DELTA_FIELDS[self]: value})

    @classmethod
    def parse(cls, name: "str | TimeUnit") -> "TimeUnit | None":
        """Resolve a unit name, returning None when it is not recognized.

        Accepts singular or plural names in any case ("day", "Days") and
        the exact short codes ("s", "m", "H", "d", "M", "Q", "y").

        Example:
            >>> TimeUnit.parse("Months")
            <TimeUnit.MONTHS: 'M'>
            >>> TimeUnit.parse("fortnight") is None
            True
        """
        if isinstance(name, TimeUnit):
            return name
        if not isinstance(name, str):
            return None
        if name in _CODES:
            return _CODES[name]
        return _NAMES.get(name.strip().lower())


_SECONDS: dict[TimeUnit, int] = {
    TimeUnit.SECONDS: SECOND,
    TimeUnit.MINUTES: MINUTE,
    TimeUnit.HOURS: HOUR,
    TimeUnit.DAYS: DAY,
    TimeUnit.MONTHS: MONTH,
    TimeUnit.QUARTERS: QUARTER,
    TimeUnit.YEARS: YEAR,
}

# relativedelta keyword for each unit (quarters are expressed in months)
_DELTA_FIELDS: dict[TimeUnit, str] = {
    TimeUnit.SECONDS: "seconds",
    TimeUnit.MINUTES: "minutes",
    TimeUnit.HOURS: "hours",
    TimeUnit.DAYS: "days",
    TimeUnit.MONTHS: "months",
    TimeUnit.YEARS: "years",
}

_CODES: dict[str, TimeUnit] = {unit.value: unit for unit in TimeUnit}

_NAMES: dict[str, TimeUnit] = {}
for _unit in TimeUnit:
    _plural = _unit.name.lower()
    _NAMES[_plural] = _unit
    _NAMES[_plural[:-1]] = _unit
del _unit, _plural

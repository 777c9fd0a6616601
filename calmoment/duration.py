"""Signed elapsed-time values."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from calmoment.units import TimeUnit
from calmoment.util import DAY, HOUR, MINUTE, MONTH, QUARTER, YEAR

if TYPE_CHECKING:
    from calmoment.core import Moment


@dataclass(frozen=True, order=True)
class Duration:
    """Elapsed time in real-number seconds.

    Produced by subtracting two moments, so ``interval`` is exact rather than
    a calendar approximation. The ``months``, ``quarters`` and ``years``
    accessors divide by the fixed-length table (30, 90 and 365 days).

    Attributes:
        interval: Signed number of seconds (positive means "later")
    """

    interval: float

    @classmethod
    def of(cls, value: float, unit: "TimeUnit | str" = TimeUnit.SECONDS) -> "Duration":
        """Build a duration from a magnitude in the given unit.

        Raises:
            ValueError: If ``unit`` is a name that does not match any TimeUnit
        """
        resolved = TimeUnit.parse(unit)
        if resolved is None:
            raise ValueError(
                f"Unknown time unit: {unit!r}\n"
                f"Valid units: {', '.join(u.name.lower() for u in TimeUnit)}\n"
                f"Example: Duration.of(90, 'minutes')"
            )
        return cls(resolved.to_seconds(value))

    @property
    def seconds(self) -> float:
        return self.interval

    @property
    def minutes(self) -> float:
        return self.interval / MINUTE

    @property
    def hours(self) -> float:
        return self.interval / HOUR

    @property
    def days(self) -> float:
        return self.interval / DAY

    @property
    def months(self) -> float:
        return self.interval / MONTH

    @property
    def quarters(self) -> float:
        return self.interval / QUARTER

    @property
    def years(self) -> float:
        return self.interval / YEAR

    def ago(self) -> "Moment":
        """Return the moment this long before now."""
        from calmoment.core import now

        return now().subtract(self)

    def from_now(self) -> "Moment":
        """Return the moment this long after now."""
        from calmoment.core import now

        return now().add(self)

    def add(self, other: "Duration") -> "Duration":
        return Duration(self.interval + other.interval)

    def subtract(self, other: "Duration") -> "Duration":
        return Duration(self.interval - other.interval)

    def is_equal_to(self, other: "Duration") -> bool:
        return self.interval == other.interval

    def __add__(self, other: object) -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> "Duration":
        return Duration(-self.interval)

    def __abs__(self) -> "Duration":
        return Duration(abs(self.interval))

    def __str__(self) -> str:
        return f"{self.interval:g} seconds"

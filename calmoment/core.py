import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, tzinfo
from typing import Any, overload

from babel import Locale
from babel.dates import get_month_names
from typing_extensions import override

from calmoment import gregorian
from calmoment.context import DEFAULT_CONTEXT, UTC, Context, resolve_locale, resolve_zone
from calmoment.duration import Duration
from calmoment.layout import format_instant
from calmoment.units import TimeUnit

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "yyyy-MM-dd HH:mm:SS ZZZZ"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True, order=True)
class Moment:
    """An immutable point in time viewed through a timezone and a locale.

    Equality, hashing and ordering consider only ``instant``; the zone and
    locale affect field accessors and formatting output. Every operation that
    "changes" a moment returns a new one carrying the same zone and locale.

    Attributes:
        instant: Timezone-aware datetime in UTC
        zone: Timezone used for calendar fields, rounding and formatting
        locale: Babel locale used for names and week conventions
    """

    instant: datetime
    zone: tzinfo = field(default=UTC, compare=False)
    locale: Locale = field(
        default_factory=lambda: DEFAULT_CONTEXT.babel_locale, compare=False
    )

    def __post_init__(self) -> None:
        if self.instant.tzinfo is None:
            raise TypeError(
                f"Moment instant must be a timezone-aware datetime.\n"
                f"Got naive datetime: {self.instant!r}\n"
                f"Hint: Use calmoment.from_datetime(dt, tz='UTC') for naive values"
            )
        if self.instant.tzinfo is not UTC:
            object.__setattr__(self, "instant", self.instant.astimezone(UTC))

    # Calendar fields

    @property
    def local(self) -> datetime:
        """Wall-clock datetime in this moment's zone."""
        return gregorian.fields(self.instant, self.zone)

    @property
    def year(self) -> int:
        return self.local.year

    @property
    def month(self) -> int:
        """Month of the year (1-12)."""
        return self.local.month

    @property
    def month_name(self) -> str:
        """Full month name in this moment's locale."""
        return get_month_names("wide", "format", self.locale)[self.month]

    @property
    def day(self) -> int:
        return self.local.day

    @property
    def hour(self) -> int:
        return self.local.hour

    @property
    def minute(self) -> int:
        return self.local.minute

    @property
    def second(self) -> int:
        return self.local.second

    @property
    def weekday(self) -> int:
        """ISO weekday: Monday is 1, Sunday is 7."""
        return self.local.isoweekday()

    @property
    def weekday_name(self) -> str:
        """Full weekday name in this moment's locale."""
        return self.format("EEEE")

    @property
    def weekday_ordinal(self) -> int:
        """Occurrence of this weekday within the month (3 for "third Tuesday")."""
        return gregorian.weekday_ordinal(self.day)

    @property
    def week_of_year(self) -> int:
        """Week number under the locale's first-weekday and minimum-days rules."""
        return gregorian.week_of_year(self.local, self.locale)[1]

    @property
    def quarter(self) -> int:
        return gregorian.quarter(self.month)

    def get(self, unit: "TimeUnit | str") -> int | None:
        """Return the calendar field for a unit, or None for an unknown unit name."""
        resolved = TimeUnit.parse(unit)
        if resolved is None:
            return None
        return getattr(self, _FIELD_FOR_UNIT[resolved])

    # Formatting

    def format(self, layout: str = DEFAULT_LAYOUT) -> str:
        """Render this moment with a CLDR layout in its own zone and locale.

        Raises:
            ValueError: If the layout cannot be interpreted

        Example:
            >>> from_fields([2024, 5, 1, 9, 30]).format("EEEE, MMMM d, yyyy h:mm a")
            'Wednesday, May 1, 2024 9:30 AM'
        """
        return format_instant(self.instant, layout, self.zone, self.locale)

    def epoch(self) -> float:
        """Seconds since 1970-01-01T00:00:00Z."""
        return (self.instant - _EPOCH).total_seconds()

    def to_datetime(self) -> datetime:
        """Return an aware datetime in this moment's zone."""
        return self.local

    def with_zone(self, tz: "str | tzinfo") -> "Moment":
        return replace(self, zone=resolve_zone(tz))

    def with_locale(self, locale: "str | Locale") -> "Moment":
        return replace(self, locale=resolve_locale(locale))

    # Comparison

    def is_equal_to(self, other: "Moment") -> bool:
        return self.instant == other.instant

    def interval_since(self, other: "Moment") -> Duration:
        """Exact elapsed time from ``other`` to this moment (positive if later)."""
        return Duration((self.instant - other.instant).total_seconds())

    def is_close_to(self, other: "Moment", precision: float = 300) -> bool:
        """True if the two moments are less than ``precision`` seconds apart.

        Proximity is symmetric but not transitive: A close to B and B close to
        C does not make A close to C.
        """
        return abs(self.interval_since(other).interval) < precision

    # Arithmetic

    def add(
        self, value: "int | float | Duration", unit: "TimeUnit | str" = TimeUnit.SECONDS
    ) -> "Moment":
        """Offset this moment by a signed amount of ``unit``.

        An ``int`` value is calendar-relative: the offset is applied on the UTC
        calendar with month overflow clamped (January 31st plus one month is
        the last day of February). A ``float`` value is fixed-length: it is
        converted to seconds with the approximate table (a month is 30 days,
        a year 365 days). A Duration adds its exact seconds and ignores
        ``unit``.

        Never raises: an unknown unit name or an unrepresentable result
        returns this moment unchanged.

        Example:
            >>> jan31 = from_fields([2024, 1, 31])
            >>> jan31.add(1, "month").format("yyyy-MM-dd")
            '2024-02-29'
            >>> jan31.add(1.0, "month").format("yyyy-MM-dd")
            '2024-03-01'
        """
        if isinstance(value, Duration):
            return self._offset(value.interval)

        resolved = TimeUnit.parse(unit)
        if resolved is None:
            logger.debug("Ignoring offset by unknown unit %r", unit)
            return self

        if isinstance(value, int) and not isinstance(value, bool):
            shifted = gregorian.shift(self.instant, resolved.delta(value))
            if shifted is None:
                logger.debug("Calendar offset %d %s out of range", value, resolved.name)
                return self
            return replace(self, instant=shifted)

        return self._offset(resolved.to_seconds(float(value)))

    def subtract(
        self, value: "int | float | Duration", unit: "TimeUnit | str" = TimeUnit.SECONDS
    ) -> "Moment":
        """Same as :meth:`add` with the sign of ``value`` inverted."""
        return self.add(-value, unit)

    def _offset(self, seconds: float) -> "Moment":
        try:
            return replace(self, instant=self.instant + timedelta(seconds=seconds))
        except (OverflowError, ValueError):
            logger.debug("Fixed offset of %s seconds out of range", seconds)
            return self

    # Rounding

    def start_of(self, unit: "TimeUnit | str") -> "Moment":
        """Round down to the first instant of the enclosing ``unit``.

        Fields finer than ``unit`` are reset in this moment's zone: a year
        resets the month, which resets the day, then hour, minute and second.
        A quarter starts on the first day of its first month. Rounding to
        seconds returns this moment unchanged.
        """
        resolved = TimeUnit.parse(unit)
        if resolved is None:
            logger.debug("Ignoring rounding to unknown unit %r", unit)
            return self
        if resolved is TimeUnit.SECONDS:
            return self

        local = self.local
        values = [local.year, local.month, local.day, local.hour, local.minute]
        if resolved is TimeUnit.QUARTERS:
            values[1] = 3 * (gregorian.quarter(local.month) - 1) + 1
        # Keep only the fields at or above the unit; compose fills the rest
        kept = _FIELDS_KEPT[resolved]
        start = gregorian.compose(values[:kept], self.zone)
        if start is None:
            return self
        return replace(self, instant=start)

    def end_of(self, unit: "TimeUnit | str") -> "Moment":
        """Last whole second of the enclosing ``unit`` (23:59:59 for a day).

        The next boundary is found on this moment's local calendar, so a
        month in Tokyo ends on its last local day and a day that springs
        forward still ends at 23:59:59.
        """
        resolved = TimeUnit.parse(unit)
        if resolved is None:
            logger.debug("Ignoring rounding to unknown unit %r", unit)
            return self
        if resolved is TimeUnit.SECONDS:
            return self

        start = self.start_of(resolved)
        boundary = gregorian.advance(start.instant, resolved.delta(1), self.zone)
        if boundary is None:
            logger.debug("End of %s out of range", resolved.name)
            return self
        return replace(start, instant=boundary).subtract(1, TimeUnit.SECONDS)

    # Operators

    def __add__(self, other: object) -> "Moment":
        if not isinstance(other, Duration):
            return NotImplemented
        return self.add(other)

    @overload
    def __sub__(self, other: "Moment") -> Duration: ...

    @overload
    def __sub__(self, other: Duration) -> "Moment": ...

    def __sub__(self, other: "Moment | Duration") -> "Moment | Duration":
        if isinstance(other, Moment):
            return self.interval_since(other)
        if isinstance(other, Duration):
            return self.subtract(other)
        return NotImplemented

    @override
    def __str__(self) -> str:
        return self.format()

    @override
    def __repr__(self) -> str:
        stamp = self.format("yyyy-MM-dd'T'HH:mm:ssZZZZZ")
        return f"Moment({stamp}, zone={self.zone}, locale={self.locale})"


_FIELD_FOR_UNIT: dict[TimeUnit, str] = {
    TimeUnit.SECONDS: "second",
    TimeUnit.MINUTES: "minute",
    TimeUnit.HOURS: "hour",
    TimeUnit.DAYS: "day",
    TimeUnit.MONTHS: "month",
    TimeUnit.QUARTERS: "quarter",
    TimeUnit.YEARS: "year",
}

# Number of leading (year, month, day, hour, minute) fields that survive rounding
_FIELDS_KEPT: dict[TimeUnit, int] = {
    TimeUnit.MINUTES: 5,
    TimeUnit.HOURS: 4,
    TimeUnit.DAYS: 3,
    TimeUnit.MONTHS: 2,
    TimeUnit.QUARTERS: 2,
    TimeUnit.YEARS: 1,
}


def now(
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Return the current instant."""
    zone, babel_locale = context.resolve(tz, locale)
    return Moment(datetime.now(UTC), zone, babel_locale)


def past(
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Sentinel moment earlier than any real date (0001-01-02T00:00:00Z).

    One day after the first representable date, so every timezone can view it.
    """
    zone, babel_locale = context.resolve(tz, locale)
    return Moment(datetime(1, 1, 2, tzinfo=UTC), zone, babel_locale)


def future(
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Sentinel moment later than any real date (4001-01-01T00:00:00Z)."""
    zone, babel_locale = context.resolve(tz, locale)
    return Moment(datetime(4001, 1, 1, tzinfo=UTC), zone, babel_locale)


def since(moment: Moment) -> Duration:
    """Elapsed time from ``moment`` until now."""
    return now().interval_since(moment)


def _collect(moments: tuple[Any, ...]) -> list[Moment]:
    if len(moments) == 1 and not isinstance(moments[0], Moment):
        return list(moments[0])
    return list(moments)


def maximum(*moments: "Moment | Iterable[Moment]") -> Moment | None:
    """Return the latest moment, or None when given nothing.

    Accepts moments as separate arguments or as a single iterable.
    The first of several equal moments wins.
    """
    collected = _collect(moments)
    if not collected:
        return None
    latest = collected[0]
    for moment in collected[1:]:
        if moment > latest:
            latest = moment
    return latest


def minimum(*moments: "Moment | Iterable[Moment]") -> Moment | None:
    """Return the earliest moment, or None when given nothing."""
    collected = _collect(moments)
    if not collected:
        return None
    earliest = collected[0]
    for moment in collected[1:]:
        if moment < earliest:
            earliest = moment
    return earliest

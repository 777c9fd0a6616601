"""Gregorian calendar provider.

Converts between UTC instants and calendar fields. Leap years, month
lengths and DST come from ``datetime``/``zoneinfo``; month overflow when
shifting by calendar units follows ``dateutil.relativedelta`` (adding a month
to January 31st lands on the last day of February). Week numbering follows
the locale's CLDR week data exposed by Babel.
"""

from collections.abc import Sequence
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta, tzinfo

from babel import Locale
from dateutil.relativedelta import relativedelta

from calmoment.context import UTC

# Calendar fields in significance order; constructors accept any prefix
FIELDS: tuple[str, ...] = ("year", "month", "day", "hour", "minute", "second")

_FIELD_DEFAULTS: tuple[int, ...] = (1970, 1, 1, 0, 0, 0)


def fields(instant: datetime, zone: tzinfo) -> datetime:
    """Return the wall-clock view of an instant in ``zone``.

    Falls back to the UTC view when the local date would leave the
    representable range (the first or last day of the calendar).
    """
    try:
        return instant.astimezone(zone)
    except OverflowError:
        return instant.astimezone(UTC)


def shift(instant: datetime, delta: relativedelta) -> datetime | None:
    """Apply a calendar delta against the UTC calendar.

    Returns None when the result falls outside the representable range.
    """
    try:
        return instant.astimezone(UTC) + delta
    except (OverflowError, ValueError):
        return None


def advance(instant: datetime, delta: relativedelta, zone: tzinfo) -> datetime | None:
    """Apply a calendar delta to the wall-clock view of an instant in ``zone``.

    Unlike :func:`shift`, the result keeps local boundaries: one day after
    local midnight is the next local midnight even across a DST change.
    Returns None when the result falls outside the representable range.
    """
    try:
        local = fields(instant, zone).replace(tzinfo=None) + delta
        return local.replace(tzinfo=zone).astimezone(UTC)
    except (OverflowError, ValueError):
        return None


def compose(values: Sequence[int], zone: tzinfo) -> datetime | None:
    """Build a UTC instant from a prefix of year, month, day, hour, minute, second.

    Missing trailing fields take their lowest value. Returns None when the
    combination is not a valid calendar date (e.g. February 30th).
    """
    padded = tuple(values[: len(FIELDS)]) + _FIELD_DEFAULTS[len(values) :]
    try:
        local = datetime(*padded, tzinfo=zone)
        return local.astimezone(UTC)
    except (OverflowError, TypeError, ValueError):
        return None


def quarter(month: int) -> int:
    return (month - 1) // 3 + 1


def weekday_ordinal(day: int) -> int:
    """Which occurrence of its weekday a day of the month is (1-5)."""
    return (day - 1) // 7 + 1


def week_one(year: int, locale: Locale) -> date:
    """Return the first day of week 1 of ``year`` under the locale's week rules.

    Week 1 is the first week (starting on the locale's first weekday) that
    holds at least ``min_week_days`` days of the year.
    """
    jan1 = date(year, 1, 1)
    offset = (jan1.weekday() - locale.first_week_day) % 7
    start = jan1 - timedelta(days=offset)
    if 7 - offset < locale.min_week_days:
        start += timedelta(days=7)
    return start


def week_of_year(local: date, locale: Locale) -> tuple[int, int]:
    """Return (week-numbering year, week number) for a calendar day."""
    day = local if type(local) is date else local.date()
    for year in (day.year + 1, day.year, day.year - 1):
        if not MINYEAR <= year <= MAXYEAR:
            continue
        try:
            start = week_one(year, locale)
        except OverflowError:
            # Week 1 of year 1 starts before the calendar does
            start = date.min
        if day >= start:
            return year, (day - start).days // 7 + 1
    raise ValueError(f"No week-numbering year found for {day!r}")


def week_date(year: int, week: int, weekday: int, locale: Locale) -> date:
    """Resolve a week date; ``weekday`` is 0-based from the locale's first weekday."""
    return week_one(year, locale) + timedelta(weeks=week - 1, days=weekday)

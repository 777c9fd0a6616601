"""Constructors for Moment.

Constructors that can fail (strings, field lists, mappings) return None
instead of a partial or default moment, so callers must check the result.
Every constructor takes optional ``tz``/``locale`` overrides and falls back
to ``context`` (the package defaults unless given).
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, tzinfo

from babel import Locale

from calmoment import gregorian, parsing
from calmoment.context import DEFAULT_CONTEXT, UTC, Context
from calmoment.core import Moment, now

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def moment(
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Return the current instant in the given (or default) zone and locale."""
    return now(tz, locale, context=context)


def utc(locale: "str | Locale | None" = None) -> Moment:
    """Return the current instant viewed in UTC."""
    return now("UTC", locale)


def from_string(
    text: str,
    layout: str | None = None,
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment | None:
    """Parse a string, trying the known layouts in order when none is given.

    Wall-clock text without an explicit offset is read in ``tz``.

    Returns:
        The parsed moment, or None if the text does not match

    Example:
        >>> from_string("2024-05-01").format("yyyy-MM-dd HH:mm")
        '2024-05-01 00:00'
        >>> from_string("01/05/2024", "dd/MM/yyyy", tz="Europe/Paris").month
        5
        >>> from_string("not a date") is None
        True
    """
    zone, babel_locale = context.resolve(tz, locale)
    if layout is None:
        return parsing.discover(text, zone, babel_locale)
    return parsing.parse(text, layout, zone, babel_locale)


def from_fields(
    values: Sequence[int],
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment | None:
    """Build a moment from ``[year, month, day, hour, minute, second]``.

    Any prefix is accepted; missing trailing fields take their lowest value
    and items past the sixth are ignored.

    Returns:
        The moment, or None for an empty list or an invalid date

    Example:
        >>> from_fields([2024, 2, 29, 12]).format("yyyy-MM-dd HH:mm")
        '2024-02-29 12:00'
        >>> from_fields([2023, 2, 29]) is None
        True
    """
    if not values:
        return None
    zone, babel_locale = context.resolve(tz, locale)
    instant = gregorian.compose(values, zone)
    if instant is None:
        logger.debug("Fields %r do not form a valid date", list(values))
        return None
    return Moment(instant, zone, babel_locale)


def from_mapping(
    values: Mapping[str, int],
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment | None:
    """Build a moment from a mapping with keys "year" through "second".

    Fields are read in significance order and reading stops at the first
    absent key, so ``{"year": 2024, "day": 5}`` yields January 1st, 2024.

    Returns:
        The moment, or None when the mapping is empty or has no "year"
    """
    prefix: list[int] = []
    for name in gregorian.FIELDS:
        if name not in values:
            break
        prefix.append(values[name])
    return from_fields(prefix, tz, locale, context=context)


def from_timestamp(
    seconds: float,
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Build a moment from seconds since 1970-01-01T00:00:00Z."""
    zone, babel_locale = context.resolve(tz, locale)
    return Moment(_EPOCH + timedelta(seconds=seconds), zone, babel_locale)


def from_milliseconds(
    milliseconds: int,
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Build a moment from milliseconds since 1970-01-01T00:00:00Z."""
    zone, babel_locale = context.resolve(tz, locale)
    return Moment(_EPOCH + timedelta(milliseconds=milliseconds), zone, babel_locale)


def from_datetime(
    value: datetime,
    tz: "str | tzinfo | None" = None,
    locale: "str | Locale | None" = None,
    *,
    context: Context = DEFAULT_CONTEXT,
) -> Moment:
    """Wrap a datetime.

    An aware datetime keeps its instant; a naive one is read as wall-clock
    time in ``tz``. The moment is viewed in ``tz`` either way.
    """
    zone, babel_locale = context.resolve(tz, locale)
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return Moment(value.astimezone(UTC), zone, babel_locale)


def copy(source: Moment) -> Moment:
    """Return an equal moment with the same zone and locale."""
    return Moment(source.instant, source.zone, source.locale)

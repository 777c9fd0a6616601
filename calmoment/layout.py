"""Layout-driven formatting and parsing.

Layouts are Unicode CLDR (LDML) date patterns such as ``"yyyy-MM-dd"`` or
``"EEEE, MMMM d, yyyy h:mm a"``. Formatting is delegated to Babel. Parsing
compiles a layout into a regular expression using Babel's own pattern
tokenizer and the locale's month, weekday, era and AM/PM names, then resolves
the captured fields into a UTC instant.

CLDR Pattern Syntax (subset supported for parsing):
  Pattern | Meaning                       | Example
  --------|-------------------------------|--------
  yy      | 2-digit year                  | 24
  yyyy    | Year (at least 4 digits)      | 2024
  YYYY    | Week-numbering year           | 2024
  M/MM    | Month (numeric)               | 5, 05
  MMM     | Month (short name)            | May
  MMMM    | Month (full name)             | May
  d/dd    | Day of month                  | 1, 01
  DDD     | Day of year                   | 122
  ww      | Week of year (locale rules)   | 18
  e       | Local weekday (1 = first day) | 4
  E/EEE   | Weekday (short name)          | Wed
  EEEE    | Weekday (full name)           | Wednesday
  G       | Era                           | AD
  H/HH    | Hour (0-23)                   | 14
  h/hh    | Hour (1-12)                   | 2
  k/K     | Hour (1-24) / hour (0-11)     | 24, 11
  m/mm    | Minute                        | 30
  s/ss    | Second                        | 45
  S+      | Fractional seconds            | 123
  a       | AM/PM marker                  | PM
  Z/X/x/O | UTC offset                    | +0100, Z, GMT+01:00
  VV      | IANA timezone id              | Europe/Paris

Numeric fields directly followed by another numeric field (``"yyyyMMdd"``)
are read at exactly their pattern width; otherwise widths are lenient.
Fields absent from a layout default to 1970-01-01 00:00:00 in the parse zone.

Thread-safe. Compiled layouts are cached per (layout, locale).
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Any, Callable

from babel import Locale
from babel.dates import (
    format_datetime,
    get_day_names,
    get_era_names,
    get_month_names,
    get_period_names,
    tokenize_pattern,
)

from calmoment import gregorian
from calmoment.context import UTC, resolve_zone

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = frozenset("yYuMLdDwechHkKmsS")

_OFFSET = r"(Z|(?:GMT|UTC)?[+-]\d{1,2}(?::?\d{2})?|GMT|UTC)"
_OFFSET_PARTS = re.compile(r"([+-])(\d{1,2})(?::?(\d{2}))?")
_ZONE_ID = r"([A-Za-z_]+(?:/[A-Za-z0-9_+\-]+)*)"


class LayoutError(ValueError):
    """Raised when a layout cannot be used for formatting or parsing."""


@dataclass(frozen=True)
class CompiledLayout:
    """A layout compiled for parsing.

    Attributes:
        layout: The source layout string
        pattern: Regular expression matching the whole input
        slots: One (field, lookup) pair per capture group, in group order
    """

    layout: str
    pattern: re.Pattern[str]
    slots: tuple[tuple[str, dict[str, int] | None], ...]


def format_instant(instant: datetime, layout: str, zone: tzinfo, locale: Locale) -> str:
    """Render an instant in ``zone`` and ``locale`` using a CLDR layout.

    Raises:
        LayoutError: If Babel cannot interpret the layout
    """
    try:
        return format_datetime(instant, layout, tzinfo=zone, locale=locale)
    except (KeyError, ValueError) as error:
        raise LayoutError(
            f"Cannot format with layout {layout!r}: {error}\n"
            f"Example: moment.format('yyyy-MM-dd HH:mm:ss')"
        ) from error


def parse_instant(
    text: str, layout: str, zone: tzinfo, locale: Locale
) -> datetime | None:
    """Parse ``text`` with exactly one layout.

    The whole string must match. Returns the UTC instant, or None when the
    text does not match, names an impossible date, or the layout uses a field
    that cannot be parsed.
    """
    try:
        compiled = compile_layout(layout, locale)
    except LayoutError as error:
        logger.debug("Layout %r is not parseable: %s", layout, error)
        return None

    match = compiled.pattern.fullmatch(text)
    if match is None:
        return None

    values: dict[str, int | str] = {}
    for (slot, lookup), raw in zip(compiled.slots, match.groups()):
        if lookup is not None:
            if raw.casefold() not in lookup:
                return None
            values[slot] = lookup[raw.casefold()]
        elif slot in ("offset", "zone_id", "fraction"):
            values[slot] = raw
        else:
            values[slot] = int(raw)

    return _resolve(values, zone, locale)


@lru_cache(maxsize=256)
def compile_layout(layout: str, locale: Locale) -> CompiledLayout:
    """Compile a CLDR layout into a full-match regular expression.

    Raises:
        LayoutError: If the layout contains a field that cannot be parsed
    """
    tokens = tokenize_pattern(layout)
    parts: list[str] = []
    slots: list[tuple[str, dict[str, int] | None]] = []

    for index, (kind, value) in enumerate(tokens):
        if kind == "chars":
            parts.append(_literal(value))
            continue

        char, num = value
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        exact = (
            following is not None
            and following[0] == "field"
            and following[1][0] in _NUMERIC_FIELDS
        )
        regex, slot, lookup = _field(char, num, exact, locale)
        parts.append(regex)
        slots.append((slot, lookup))

    return CompiledLayout(
        layout=layout,
        pattern=re.compile("".join(parts), re.IGNORECASE),
        slots=tuple(slots),
    )


def _literal(text: str) -> str:
    # Any run of whitespace in the layout matches any run in the input
    return r"\s+".join(re.escape(chunk) for chunk in re.split(r"\s+", text))


def _digits(num: int, exact: bool, widest: int) -> str:
    if exact:
        return rf"(\d{{{num}}})"
    return rf"(\d{{1,{max(num, widest)}}})"


def _names(names: Any) -> tuple[str, dict[str, int]]:
    lookup = {str(name).casefold(): key for key, name in dict(names).items()}
    alternatives = sorted(lookup, key=len, reverse=True)
    return "(" + "|".join(re.escape(name) for name in alternatives) + ")", lookup


def _year(num: int, exact: bool) -> str:
    if num == 2:
        return r"(\d{2})"
    if exact:
        return rf"(\d{{{num}}})"
    return rf"(\d{{{num},}})"


_NAME_WIDTHS = {3: "abbreviated", 4: "wide", 6: "short"}

_Field = tuple[str, str, dict[str, int] | None]


def _field(char: str, num: int, exact: bool, locale: Locale) -> _Field:
    handler = _HANDLERS.get(char)
    if handler is None:
        raise LayoutError(f"Field {char * num!r} is not supported for parsing")
    return handler(num, exact, locale)


def _year_field(num: int, exact: bool, locale: Locale) -> _Field:
    return _year(num, exact), "year2" if num == 2 else "year", None


def _week_year_field(num: int, exact: bool, locale: Locale) -> _Field:
    return _year(num, exact), "week_year2" if num == 2 else "week_year", None


def _month_field(context: str) -> Callable[[int, bool, Locale], _Field]:
    def handler(num: int, exact: bool, locale: Locale) -> _Field:
        if num <= 2:
            return _digits(num, exact, 2), "month", None
        width = _NAME_WIDTHS.get(num)
        if width is None or width == "short":
            raise LayoutError(f"Month field {'M' * num!r} is ambiguous for parsing")
        regex, lookup = _names(get_month_names(width, context, locale))
        return regex, "month", lookup

    return handler


def _weekday_field(context: str, numeric: bool) -> Callable[[int, bool, Locale], _Field]:
    def handler(num: int, exact: bool, locale: Locale) -> _Field:
        if numeric and num <= 2:
            return _digits(num, exact, 1), "local_weekday", None
        width = _NAME_WIDTHS.get(max(num, 3))
        if width is None:
            raise LayoutError("Narrow weekday names are ambiguous for parsing")
        regex, lookup = _names(get_day_names(width, context, locale))
        return regex, "weekday", lookup

    return handler


def _era_field(num: int, exact: bool, locale: Locale) -> _Field:
    width = "abbreviated" if num <= 3 else "wide" if num == 4 else "narrow"
    regex, lookup = _names(get_era_names(width, locale))
    return regex, "era", lookup


def _period_field(num: int, exact: bool, locale: Locale) -> _Field:
    names = get_period_names("abbreviated", "format", locale)
    regex, lookup = _names({0: names["am"], 12: names["pm"]})
    return regex, "period", lookup


def _numeric(slot: str, widest: int) -> Callable[[int, bool, Locale], _Field]:
    def handler(num: int, exact: bool, locale: Locale) -> _Field:
        return _digits(num, exact, widest), slot, None

    return handler


def _fraction_field(num: int, exact: bool, locale: Locale) -> _Field:
    return (rf"(\d{{{num}}})" if exact else r"(\d+)"), "fraction", None


def _offset_field(num: int, exact: bool, locale: Locale) -> _Field:
    return _OFFSET, "offset", None


def _zone_field(num: int, exact: bool, locale: Locale) -> _Field:
    if num != 2:
        raise LayoutError("Only the 'VV' timezone id field is supported for parsing")
    return _ZONE_ID, "zone_id", None


_HANDLERS: dict[str, Callable[[int, bool, Locale], _Field]] = {
    "y": _year_field,
    "u": _year_field,
    "Y": _week_year_field,
    "M": _month_field("format"),
    "L": _month_field("stand-alone"),
    "d": _numeric("day", 2),
    "D": _numeric("day_of_year", 3),
    "w": _numeric("week", 2),
    "E": _weekday_field("format", numeric=False),
    "e": _weekday_field("format", numeric=True),
    "c": _weekday_field("stand-alone", numeric=True),
    "G": _era_field,
    "a": _period_field,
    "H": _numeric("hour", 2),
    "h": _numeric("hour12", 2),
    "k": _numeric("hour24", 2),
    "K": _numeric("hour11", 2),
    "m": _numeric("minute", 2),
    "s": _numeric("second", 2),
    "S": _fraction_field,
    "Z": _offset_field,
    "X": _offset_field,
    "x": _offset_field,
    "O": _offset_field,
    "V": _zone_field,
}


def _expand_two_digit(year: int) -> int:
    # POSIX convention: 69-99 are 1969-1999, 00-68 are 2000-2068
    return year + (1900 if year >= 69 else 2000)


def _offset(raw: str) -> tzinfo:
    upper = raw.upper()
    if upper in ("Z", "GMT", "UTC"):
        return timezone.utc
    parts = _OFFSET_PARTS.search(raw)
    if parts is None:
        raise ValueError(f"Invalid UTC offset: {raw!r}")
    sign, hours, minutes = parts.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(-delta if sign == "-" else delta)


def _resolve_date(values: dict[str, Any], locale: Locale) -> date | None:
    year = values.get("year")
    if year is None and "year2" in values:
        year = _expand_two_digit(values["year2"])

    if "day_of_year" in values:
        start = date(1970 if year is None else year, 1, 1)
        resolved = start + timedelta(days=values["day_of_year"] - 1)
        return resolved if resolved.year == start.year else None

    if "week" in values or "week_year" in values or "week_year2" in values:
        week_year = values.get("week_year")
        if week_year is None and "week_year2" in values:
            week_year = _expand_two_digit(values["week_year2"])
        if week_year is None:
            week_year = 1970 if year is None else year
        week = values.get("week", 1)
        if "local_weekday" in values:
            offset = values["local_weekday"] - 1
        elif "weekday" in values:
            offset = (values["weekday"] - locale.first_week_day) % 7
        else:
            offset = 0
        if not 1 <= week <= 53 or not 0 <= offset <= 6:
            return None
        resolved = gregorian.week_date(week_year, week, offset, locale)
        if gregorian.week_of_year(resolved, locale) != (week_year, week):
            return None
        return resolved

    return date(
        1970 if year is None else year, values.get("month", 1), values.get("day", 1)
    )


def _resolve_hour(values: dict[str, Any]) -> int:
    period = values.get("period")
    if "hour" in values:
        return values["hour"]
    if "hour24" in values:
        if not 1 <= values["hour24"] <= 24:
            raise ValueError(f"Hour {values['hour24']} outside 1-24")
        return values["hour24"] % 24
    if "hour12" in values:
        if not 1 <= values["hour12"] <= 12:
            raise ValueError(f"Hour {values['hour12']} outside 1-12")
        return values["hour12"] % 12 + (period or 0)
    if "hour11" in values:
        if not 0 <= values["hour11"] <= 11:
            raise ValueError(f"Hour {values['hour11']} outside 0-11")
        return values["hour11"] + (period or 0)
    return 0


def _resolve(values: dict[str, Any], zone: tzinfo, locale: Locale) -> datetime | None:
    if values.get("era") == 0:
        # datetime cannot represent years before the common era
        return None
    try:
        day = _resolve_date(values, locale)
        if day is None:
            return None
        if "offset" in values:
            zone = _offset(values["offset"])
        elif "zone_id" in values:
            zone = resolve_zone(values["zone_id"])
        fraction = values.get("fraction", "")
        local = datetime(
            day.year,
            day.month,
            day.day,
            _resolve_hour(values),
            values.get("minute", 0),
            values.get("second", 0),
            int(fraction[:6].ljust(6, "0")),
            tzinfo=zone,
        )
        return local.astimezone(UTC)
    except (OverflowError, ValueError) as error:
        logger.debug("Rejected parsed fields %r: %s", values, error)
        return None

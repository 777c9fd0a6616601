"""Tests for layout formatting and single-layout parsing."""

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from babel import Locale

from calmoment.context import UTC
from calmoment.layout import LayoutError, compile_layout, format_instant, parse_instant

EN = Locale.parse("en_US")
FR = Locale.parse("fr_FR")
DE = Locale.parse("de_DE")
PARIS = ZoneInfo("Europe/Paris")


def utc(*fields: int) -> datetime:
    return datetime(*fields, tzinfo=timezone.utc)


def test_format_renders_in_zone_and_locale():
    """Test that formatting converts to the zone and uses locale names."""
    instant = utc(2024, 5, 1, 10, 30)

    assert format_instant(instant, "yyyy-MM-dd HH:mm", PARIS, EN) == "2024-05-01 12:30"
    assert format_instant(instant, "EEEE d MMMM", PARIS, FR) == "mercredi 1 mai"
    assert format_instant(instant, "h:mm a", UTC, EN) == "10:30 AM"


def test_parse_numeric_layout():
    assert parse_instant("2024-05-01 10:20:30", "yyyy-MM-dd HH:mm:ss", UTC, EN) == utc(
        2024, 5, 1, 10, 20, 30
    )


def test_parse_reads_wall_clock_in_zone():
    """Test that text without an offset is interpreted in the given zone."""
    # Paris is UTC+2 in May
    assert parse_instant("2024-05-01 12:00", "yyyy-MM-dd HH:mm", PARIS, EN) == utc(
        2024, 5, 1, 10
    )


def test_parse_requires_whole_string():
    assert parse_instant("2024-05-01 extra", "yyyy-MM-dd", UTC, EN) is None
    assert parse_instant("x2024-05-01", "yyyy-MM-dd", UTC, EN) is None


def test_parse_rejects_impossible_dates():
    """Test that syntactically valid but impossible dates yield no result."""
    assert parse_instant("2023-02-29", "yyyy-MM-dd", UTC, EN) is None
    assert parse_instant("25:00", "HH:mm", UTC, EN) is None


def test_parse_defaults_missing_date_to_epoch_day():
    assert parse_instant("10:20", "HH:mm", UTC, EN) == utc(1970, 1, 1, 10, 20)


def test_adjacent_numeric_fields_use_exact_widths():
    """Test that packed layouts split digits by pattern width."""
    assert parse_instant("20240501", "yyyyMMdd", UTC, EN) == utc(2024, 5, 1)
    assert parse_instant("20240501103000", "yyyyMMddHHmmss", UTC, EN) == utc(
        2024, 5, 1, 10, 30
    )


@pytest.mark.parametrize("text,year", [("05/01/24", 2024), ("05/01/99", 1999), ("05/01/68", 2068)])
def test_two_digit_years(text, year):
    assert parse_instant(text, "MM/dd/yy", UTC, EN) == utc(year, 5, 1)


def test_month_and_weekday_names_follow_locale():
    """Test that names are matched case-insensitively in the layout's locale."""
    assert parse_instant("1 mai 2024", "d MMMM yyyy", UTC, FR) == utc(2024, 5, 1)
    assert parse_instant("1 MAY 2024", "d MMMM yyyy", UTC, EN) == utc(2024, 5, 1)
    assert parse_instant("Wed, 1 May 2024", "EEE, d MMM yyyy", UTC, EN) == utc(2024, 5, 1)
    assert parse_instant("1 mai 2024", "d MMMM yyyy", UTC, EN) is None


@pytest.mark.parametrize(
    "text,hour",
    [("12:30 AM", 0), ("1:30 am", 1), ("12:30 PM", 12), ("11:30 pm", 23)],
)
def test_meridiem(text, hour):
    assert parse_instant(text, "h:mm a", UTC, EN) == utc(1970, 1, 1, hour, 30)


def test_hour_variants():
    assert parse_instant("24:00", "kk:mm", UTC, EN) == utc(1970, 1, 1, 0, 0)
    assert parse_instant("0:15 PM", "K:mm a", UTC, EN) == utc(1970, 1, 1, 12, 15)
    assert parse_instant("13:00 PM", "h:mm a", UTC, EN) is None


def test_fractional_seconds():
    """Test that any number of fraction digits is read as a decimal fraction."""
    assert parse_instant("10:20:30.25", "HH:mm:ss.SSS", UTC, EN) == utc(
        1970, 1, 1, 10, 20, 30, 250000
    )
    assert parse_instant("10:20:30.1234567", "HH:mm:ss.S", UTC, EN) == utc(
        1970, 1, 1, 10, 20, 30, 123456
    )


@pytest.mark.parametrize(
    "text",
    [
        "2024-05-01 12:00 +0200",
        "2024-05-01 12:00 +02:00",
        "2024-05-01 12:00 GMT+02:00",
        "2024-05-01 12:00 +02",
    ],
)
def test_offsets_override_zone(text):
    """Test that an explicit offset in the text wins over the parse zone."""
    assert parse_instant(text, "yyyy-MM-dd HH:mm Z", ZoneInfo("Asia/Tokyo"), EN) == utc(
        2024, 5, 1, 10
    )


def test_zulu_offset():
    assert parse_instant("2024-05-01T10:00:00Z", "yyyy-MM-dd'T'HH:mm:ssX", PARIS, EN) == utc(
        2024, 5, 1, 10
    )


def test_zone_id_field():
    assert parse_instant("2024-05-01 12:00 Europe/Paris", "yyyy-MM-dd HH:mm VV", UTC, EN) == utc(
        2024, 5, 1, 10
    )
    assert parse_instant("2024-05-01 12:00 Mars/Olympus", "yyyy-MM-dd HH:mm VV", UTC, EN) is None


def test_day_of_year():
    assert parse_instant("2024-122", "yyyy-DDD", UTC, EN) == utc(2024, 5, 1)
    assert parse_instant("2023-366", "yyyy-DDD", UTC, EN) is None


def test_week_dates_follow_locale_week_rules():
    """Test that week dates use the locale's first weekday and minimum days."""
    # ISO-style week numbering in Germany
    assert parse_instant("2024-W18-3", "YYYY-'W'ww-e", UTC, DE) == utc(2024, 5, 1)
    # US weeks start on Sunday, so day 3 is a Tuesday
    assert parse_instant("2024-W18-3", "YYYY-'W'ww-e", UTC, EN) == utc(2024, 4, 30)
    assert parse_instant("2024-W18", "YYYY-'W'ww", UTC, DE) == utc(2024, 4, 29)
    # 2024 has no week 53 under ISO rules
    assert parse_instant("2024-W53", "YYYY-'W'ww", UTC, DE) is None


def test_era_field():
    assert parse_instant("2024 AD", "yyyy G", UTC, EN) == utc(2024, 1, 1)
    assert parse_instant("2024 BC", "yyyy G", UTC, EN) is None


def test_literal_quotes_and_whitespace():
    assert parse_instant("1 o'clock", "h 'o''clock'", UTC, EN) == utc(1970, 1, 1, 1)
    assert parse_instant("2024-05-01   10:00", "yyyy-MM-dd HH:mm", UTC, EN) == utc(
        2024, 5, 1, 10
    )


def test_unsupported_fields_raise_on_compile():
    with pytest.raises(LayoutError, match="not supported"):
        compile_layout("QQ yyyy", EN)
    with pytest.raises(LayoutError, match="ambiguous"):
        compile_layout("MMMMM", EN)


def test_unsupported_fields_yield_no_result(caplog):
    """Test that parsing with an unsupported layout logs and returns None."""
    caplog.set_level(logging.DEBUG, logger="calmoment.layout")

    assert parse_instant("Q2 2024", "QQQ yyyy", UTC, EN) is None
    assert "not parseable" in caplog.text


def test_compiled_layouts_are_cached():
    assert compile_layout("yyyy-MM-dd", EN) is compile_layout("yyyy-MM-dd", EN)
    assert compile_layout("yyyy-MM-dd", EN) is not compile_layout("yyyy-MM-dd", FR)

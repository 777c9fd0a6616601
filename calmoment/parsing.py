"""Parse cascade: recover a Moment from a string.

With an explicit layout, exactly one parse is attempted. Without one, the
candidate layouts below are tried in order and the first layout that matches
the whole string wins. Order matters: a bare date such as ``"2024-05-01"``
must reach ``"yyyy-MM-dd"`` before any time-only layout is tried.
"""

import logging
from datetime import tzinfo

from babel import Locale

from calmoment.core import Moment
from calmoment.layout import parse_instant

logger = logging.getLogger(__name__)

# Tried in this exact order; first full match wins
CANDIDATE_LAYOUTS: tuple[str, ...] = (
    "yyyy-MM-dd'T'HH:mm:ssZ",
    "yyyy-MM-dd'T'HH:mm:ss",
    "yyyy-MM-dd'T'HH:mm:ss.SSSZ",
    "yyyy-MM-dd",
    "h:mm:ss a",
    "h:mm a",
    "MM/dd/yyyy",
    "MMMM d, yyyy",
    "MMMM d, yyyy h:mm a",
    "EEEE, MMMM d, yyyy h:mm a",
    "yyyyyy-MM-dd",
    "YYYY-'W'ww-e",
    "YYYY-'W'ww",
    "yyyy-DDD",
    "HH:mm:ss.SSSS",
    "HH:mm:ss",
    "HH:mm",
    "HH",
)


def parse(text: str, layout: str, zone: tzinfo, locale: Locale) -> Moment | None:
    """Parse with one explicit layout; None when it does not match."""
    instant = parse_instant(text, layout, zone, locale)
    if instant is None:
        return None
    return Moment(instant, zone, locale)


def discover(
    text: str,
    zone: tzinfo,
    locale: Locale,
    layouts: tuple[str, ...] = CANDIDATE_LAYOUTS,
) -> Moment | None:
    """Try each candidate layout in order and return the first full match."""
    for layout in layouts:
        moment = parse(text, layout, zone, locale)
        if moment is not None:
            logger.debug("Parsed %r with layout %r", text, layout)
            return moment
    logger.debug("No candidate layout matched %r", text)
    return None


def matching_layout(
    text: str,
    zone: tzinfo,
    locale: Locale,
    layouts: tuple[str, ...] = CANDIDATE_LAYOUTS,
) -> str | None:
    """Return the layout :func:`discover` would use for ``text``, if any."""
    for layout in layouts:
        if parse_instant(text, layout, zone, locale) is not None:
            return layout
    return None

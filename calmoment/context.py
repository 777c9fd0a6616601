"""Timezone and locale defaults.

Every construction and formatting call needs a timezone and a locale. Rather
than reading mutable globals, callers pass ``tz``/``locale`` explicitly or
fall back to an immutable :class:`Context` resolved at the call boundary.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import tzinfo
from functools import cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel import Locale, UnknownLocaleError

TZ_ENV = "CALMOMENT_TZ"
LOCALE_ENV = "CALMOMENT_LOCALE"

DEFAULT_TZ = "UTC"
DEFAULT_LOCALE = "en_US"

UTC = ZoneInfo("UTC")


@cache
def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as error:
        raise ValueError(
            f"Unknown timezone: {name!r}\n"
            f"Hint: Use an IANA timezone name\n"
            f"Example: 'UTC', 'US/Pacific', 'Europe/Paris'"
        ) from error


@cache
def _locale(identifier: str) -> Locale:
    try:
        return Locale.parse(identifier)
    except (UnknownLocaleError, ValueError) as error:
        raise ValueError(
            f"Unknown locale: {identifier!r}\n"
            f"Hint: Use a CLDR locale identifier\n"
            f"Example: 'en_US', 'fr_FR', 'de'"
        ) from error


def resolve_zone(tz: "str | tzinfo") -> tzinfo:
    """Return a tzinfo for an IANA name or pass an existing tzinfo through.

    Raises:
        ValueError: If the name is not in the timezone database
        TypeError: If ``tz`` is neither a string nor a tzinfo
    """
    if isinstance(tz, tzinfo):
        return tz
    if isinstance(tz, str):
        if tz.upper() == "UTC":
            return UTC
        return _zone(tz)
    raise TypeError(
        f"Timezone must be an IANA name or tzinfo.\n"
        f"Got {type(tz).__name__!r}: {tz!r}"
    )


def resolve_locale(locale: "str | Locale") -> Locale:
    """Return a babel Locale for an identifier or pass a Locale through.

    Raises:
        ValueError: If the identifier is not known to CLDR
        TypeError: If ``locale`` is neither a string nor a Locale
    """
    if isinstance(locale, Locale):
        return locale
    if isinstance(locale, str):
        return _locale(locale)
    raise TypeError(
        f"Locale must be a CLDR identifier or babel.Locale.\n"
        f"Got {type(locale).__name__!r}: {locale!r}"
    )


@dataclass(frozen=True)
class Context:
    """Default timezone and locale for constructors and formatting.

    Attributes:
        tz: IANA timezone name or tzinfo (default "UTC")
        locale: CLDR locale identifier or babel Locale (default "en_US")
    """

    tz: "str | tzinfo" = DEFAULT_TZ
    locale: "str | Locale" = DEFAULT_LOCALE
    _resolved_zone: tzinfo = field(init=False, repr=False, compare=False)
    _resolved_locale: Locale = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Resolve eagerly so a bad identifier fails at configuration time
        object.__setattr__(self, "_resolved_zone", resolve_zone(self.tz))
        object.__setattr__(self, "_resolved_locale", resolve_locale(self.locale))

    @property
    def zone(self) -> tzinfo:
        return self._resolved_zone

    @property
    def babel_locale(self) -> Locale:
        return self._resolved_locale

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Context":
        """Build a context from ``CALMOMENT_TZ`` and ``CALMOMENT_LOCALE``.

        Missing or empty variables fall back to the defaults.
        """
        env = os.environ if environ is None else environ
        return cls(
            tz=env.get(TZ_ENV) or DEFAULT_TZ,
            locale=env.get(LOCALE_ENV) or DEFAULT_LOCALE,
        )

    def resolve(
        self,
        tz: "str | tzinfo | None" = None,
        locale: "str | Locale | None" = None,
    ) -> tuple[tzinfo, Locale]:
        """Apply per-call overrides on top of this context."""
        zone = self.zone if tz is None else resolve_zone(tz)
        babel_locale = self.babel_locale if locale is None else resolve_locale(locale)
        return zone, babel_locale


DEFAULT_CONTEXT = Context()

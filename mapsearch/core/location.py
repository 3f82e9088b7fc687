"""Derived location fields: approximate timezone, currency, flag and formatting.

Everything here is pure and local. The timezone is the 15-degrees-per-hour
longitude approximation (no DST, no political boundaries), and the currency
comes from a small static table.
"""
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from mapsearch.core.errors import FormattingError
from mapsearch.core.models import CandidateResult, ResolvedLocation
from mapsearch.utils.error_handler import safe_execute

DEFAULT_TIMEZONE = "UTC"
DEFAULT_CURRENCY = "USD"
DEFAULT_COUNTRY_CODE = "US"
UNKNOWN = "Unknown"

CURRENCY_BY_COUNTRY = {
    "US": "USD", "GB": "GBP", "EU": "EUR", "AU": "AUD",
    "CA": "CAD", "JP": "JPY", "CN": "CNY", "IN": "INR",
    "NZ": "NZD", "CH": "CHF", "SG": "SGD", "HK": "HKD",
    "KR": "KRW", "BR": "BRL", "ZA": "ZAR", "RU": "RUB",
    "MX": "MXN", "AE": "AED",
}

TIMEZONE_LABEL_PATTERN = re.compile(r"^UTC([+-])(\d{2}):00$")
COUNTRY_CODE_PATTERN = re.compile(r"^[A-Za-z]{2}$")

# Regional indicator symbol A is U+1F1E6; 0x1F1E6 - ord("A")
REGIONAL_INDICATOR_OFFSET = 127397


def _normalize_country_code(country_code: Any) -> str:
    if not isinstance(country_code, str) or not COUNTRY_CODE_PATTERN.match(country_code):
        raise FormattingError(f"Not a 2-letter country code: {country_code!r}")
    return country_code.upper()


def utc_offset_hours(longitude: Any) -> int:
    """
    Approximate UTC offset for a longitude, rounded half up.

    Raises:
        FormattingError: if longitude is not a finite number
    """
    try:
        lon = float(longitude)
    except (TypeError, ValueError) as e:
        raise FormattingError(f"Longitude is not numeric: {longitude!r}") from e
    if not math.isfinite(lon):
        raise FormattingError(f"Longitude is not finite: {longitude!r}")
    return math.floor(lon / 15 + 0.5)


def format_timezone_label(longitude: Any) -> str:
    """Strict form of timezone_label; raises FormattingError on bad input."""
    offset = utc_offset_hours(longitude)
    sign = "+" if offset >= 0 else "-"
    return f"UTC{sign}{abs(offset):02d}:00"


def timezone_label(longitude: Any) -> str:
    """
    Approximate timezone label such as "UTC-05:00" for a longitude.

    Falls back to "UTC" if the longitude cannot be used.
    """
    return safe_execute(format_timezone_label, longitude, default_return=DEFAULT_TIMEZONE)


def lookup_currency(country_code: Any) -> str:
    """Strict form of currency_code; raises FormattingError on bad input."""
    return CURRENCY_BY_COUNTRY.get(_normalize_country_code(country_code), DEFAULT_CURRENCY)


def currency_code(country_code: Any) -> str:
    """ISO currency for a country code; "USD" for unknown or malformed codes."""
    return safe_execute(lookup_currency, country_code, default_return=DEFAULT_CURRENCY)


def flag_emoji(country_code: Any) -> str:
    """Flag emoji built from regional indicator symbols, or "" if the code is malformed."""
    try:
        code = _normalize_country_code(country_code)
    except FormattingError:
        return ""
    return "".join(chr(REGIONAL_INDICATOR_OFFSET + ord(char)) for char in code)


def country_domain(country_code: Any) -> str:
    """Country top-level domain, e.g. ".gb"."""
    try:
        return f".{_normalize_country_code(country_code).lower()}"
    except FormattingError:
        return ""


def format_coordinates(latitude: float, longitude: float, precision: int = 4) -> str:
    """Render "lat, lon" with a fixed number of decimals."""
    return f"{latitude:.{precision}f}, {longitude:.{precision}f}"


def label_to_tzinfo(label: str) -> timezone:
    """Fixed-offset tzinfo for a "UTC+HH:00" label; plain UTC for anything else."""
    match = TIMEZONE_LABEL_PATTERN.match(label or "")
    if not match:
        return timezone.utc
    sign, hours = match.groups()
    offset = timedelta(hours=int(hours))
    return timezone(-offset if sign == "-" else offset)


def format_local_time(label: str, now: Optional[datetime] = None) -> str:
    """
    Wall-clock time "HH:MM:SS" in the offset named by a timezone label.

    Args:
        label: Label produced by timezone_label
        now: Instant to format (defaults to the current time; naive values are taken as UTC)
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(label_to_tzinfo(label)).strftime("%H:%M:%S")


def resolve_location(candidate: CandidateResult) -> ResolvedLocation:
    """
    Turn a chosen candidate into the location shown on the map and detail panel.

    Missing country and postcode read "Unknown"; a missing country code is
    taken as "US", matching the currency default.
    """
    code = candidate.country_code.upper() if candidate.country_code else DEFAULT_COUNTRY_CODE
    return ResolvedLocation(
        name=candidate.short_name or candidate.display_name,
        country=candidate.country_name or UNKNOWN,
        postcode=candidate.postcode or UNKNOWN,
        coordinates=(candidate.longitude, candidate.latitude),
        timezone_label=timezone_label(candidate.longitude),
        currency_code=currency_code(code),
        country_code=code,
    )

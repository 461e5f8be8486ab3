"""derives how long a fetched index stays fresh from its http caching headers."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Iterable, Optional

from ..domain.errors import ParseExpiryError
from .client import ResponseMetadata

# four hours
DEFAULT_MAX_AGE = 4 * 60 * 60
# delta-seconds larger than this are treated as this value
MAX_DELTA_SECONDS = 2 ** 31


def format_http_date(value: datetime) -> str:
    """render an instant as an IMF-fixdate, e.g. 'Sun, 06 Nov 1994 08:49:37 GMT'."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc).replace(microsecond=0)
    return format_datetime(value, usegmt=True)


def parse_http_date(text: str) -> datetime:
    """
    parse an http date into an aware utc datetime.

    raises:
        ParseExpiryError: if the text is not a valid http date
    """
    try:
        parsed = parsedate_to_datetime(text.strip())
    except (TypeError, ValueError, IndexError) as e:
        raise ParseExpiryError(text) from e
    if parsed is None:
        raise ParseExpiryError(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def max_age(cache_control: Iterable[str]) -> int:
    """
    returns the first max-age directive found across all Cache-Control values.

    falls back to DEFAULT_MAX_AGE when none is present.
    """
    for header in cache_control:
        for directive in header.split(","):
            name, _, value = directive.strip().partition("=")
            if name.strip().lower() != "max-age":
                continue
            value = value.strip().strip('"')
            if value.isascii() and value.isdecimal():
                return min(int(value), MAX_DELTA_SECONDS)

    return DEFAULT_MAX_AGE


def compute_valid_until(metadata: ResponseMetadata, now: Optional[datetime] = None) -> datetime:
    """
    compute when a freshly fetched index expires.

    an explicit Expires header wins; otherwise the response is fresh for
    max-age seconds from now.
    """
    if metadata.expires:
        try:
            return parse_http_date(metadata.expires)
        except ParseExpiryError:
            # an unreadable Expires header is treated as absent
            pass

    if now is None:
        now = datetime.now(timezone.utc)
    try:
        return now + timedelta(seconds=max_age(metadata.cache_control))
    except OverflowError:
        return now + timedelta(seconds=DEFAULT_MAX_AGE)

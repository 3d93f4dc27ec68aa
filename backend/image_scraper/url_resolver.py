"""
URL Resolver

Turns raw attribute values and user input into absolute http(s) URLs.

Rules:
- Empty / whitespace-only input is rejected
- data: and blob: references are rejected
- Relative references are joined against the base URL
- Only http and https survive; the fragment is always dropped
"""

from typing import Any, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

ACCEPT_SCHEMES = ("http", "https")
REJECT_PREFIXES = ("data:", "blob:")


def _finalize(candidate: str) -> Optional[str]:
    """Validate an already-joined URL and strip its fragment."""
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the numeric range
        parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in ACCEPT_SCHEMES or not parts.hostname:
        return None

    return urlunsplit((scheme, parts.netloc, parts.path or "/", parts.query, ""))


def resolve_url(raw: Optional[str], base: str) -> Optional[str]:
    """
    Resolve a raw reference found in a page against the page URL.

    Args:
        raw: Attribute value as found in markup (may be None)
        base: Absolute URL of the page the reference came from

    Returns:
        Absolute http(s) URL without fragment, or None if rejected
    """
    if not raw:
        return None

    trimmed = raw.strip()
    if not trimmed or trimmed.lower().startswith(REJECT_PREFIXES):
        return None

    try:
        joined = urljoin(base, trimmed)
    except ValueError:
        return None

    return _finalize(joined)


def validate_http_url(raw: Any) -> Optional[str]:
    """
    Validate user input that must already be an absolute http(s) URL.

    Non-string values and relative references are rejected.
    """
    if not isinstance(raw, str):
        return None

    trimmed = raw.strip()
    if not trimmed:
        return None

    return _finalize(trimmed)

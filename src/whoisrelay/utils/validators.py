"""
Input validation for WHOIS queries.

Queries end up verbatim on the outbound WHOIS request line and in HTTP
responses, so anything with a control character is refused outright.
"""

import ipaddress
import re
from typing import Literal

from ..errors import InvalidQueryError

_LINE_BREAKS = re.compile(r"[\r\n]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")
_DOMAIN = re.compile(
    r"(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}",
    re.IGNORECASE | re.ASCII,
)

# Horizontal whitespace only; line breaks are never trimmed away
_TRIMMED = " \t\x0b"


def is_valid_ip(value: str) -> bool:
    """True for IPv4/IPv6 literals in standard textual form."""
    if "%" in value:
        # scoped IPv6 addresses are not queryable
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_valid_domain(value: str) -> bool:
    """True for dot-separated LDH labels ending in an alphabetic TLD."""
    return _DOMAIN.fullmatch(value) is not None


def trim(raw: str) -> str:
    return raw.strip(_TRIMMED)


def is_valid_query(raw: str) -> bool:
    """Check a raw query: non-empty, no control characters, IP or domain.

    CR and LF are refused anywhere, even as trailing whitespace. Spaces and
    tabs around the query are trimmed; other control characters are refused.
    """
    if _LINE_BREAKS.search(raw):
        return False

    value = trim(raw)
    if not value or _CONTROL_CHARS.search(value):
        return False

    return is_valid_ip(value) or is_valid_domain(value)


def ensure_valid_query(raw: str | None) -> str:
    """Return the trimmed query or raise InvalidQueryError."""
    if raw is None or not is_valid_query(raw):
        raise InvalidQueryError()
    return trim(raw)


def classify(query: str) -> Literal["ip", "domain"]:
    return "ip" if is_valid_ip(query) else "domain"

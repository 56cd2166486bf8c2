"""
Error types surfaced by the relay.
"""

from typing import Any


class WhoisRelayError(Exception):
    """Base error carrying a machine-readable code and an HTTP status."""

    code = "internal_error"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class InvalidQueryError(WhoisRelayError, ValueError):
    """Query is empty, carries control characters, or is neither IP nor domain."""

    code = "invalid_query"
    status_code = 400
    default_message = "Query is not a valid domain or IP"


class RateLimitedError(WhoisRelayError):
    """Client asked again before its rate-limit interval elapsed."""

    code = "rate_limited"
    status_code = 429
    default_message = "Rate limit exceeded, try again shortly"


class UpstreamUnreachableError(WhoisRelayError):
    """Connecting to a WHOIS server failed or timed out."""

    code = "upstream_unreachable"
    status_code = 502
    default_message = "WHOIS server is unreachable"

    def __init__(self, server: str, message: str | None = None) -> None:
        self.server = server
        super().__init__(message or f"WHOIS server {server} is unreachable")

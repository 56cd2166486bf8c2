"""
WhoisRelay - WHOIS lookup relay with single-hop referral following.

Resolves the authoritative WHOIS server for a domain or IP address, queries
it over port 43, follows at most one referral and returns the answer over
HTTP (JSON or plain text) or the command line.
"""

__version__ = "0.1.0"

from .config import Config
from .errors import InvalidQueryError, RateLimitedError, UpstreamUnreachableError
from .models import LookupResult, WhoisResponse
from .services import ServerResolver, ServerTable, WhoisService, WhoisTransport, find_referral
from .utils.rate_limiter import RateLimiter
from .utils.validators import is_valid_query

__all__ = [
    "Config",
    "InvalidQueryError",
    "LookupResult",
    "RateLimitedError",
    "RateLimiter",
    "ServerResolver",
    "ServerTable",
    "UpstreamUnreachableError",
    "WhoisResponse",
    "WhoisService",
    "WhoisTransport",
    "find_referral",
    "is_valid_query",
]

from .concurrent_service import ConcurrentLookupService
from .referral import find_referral
from .server_resolver import ServerResolver, ServerTable
from .whois_service import WhoisService
from .whois_transport import WhoisTransport

__all__ = [
    "ConcurrentLookupService",
    "ServerResolver",
    "ServerTable",
    "WhoisService",
    "WhoisTransport",
    "find_referral",
]

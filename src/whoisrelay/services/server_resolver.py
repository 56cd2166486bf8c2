"""
Maps a query to the WHOIS server that should be asked first.
"""

import ipaddress
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

import structlog

from ..config import Config

logger = structlog.get_logger(__name__)

DEFAULT_SERVER = "whois.iana.org"
IP_SERVER = "whois.arin.net"
UK_SERVER = "whois.nic.uk"

TLD_SERVERS: Mapping[str, str] = MappingProxyType(
    {
        "com": "whois.verisign-grs.com",
        "net": "whois.verisign-grs.com",
        "org": "whois.pir.org",
        "info": "whois.afilias.net",
        "biz": "whois.neulevel.biz",
        "io": "whois.nic.io",
        "co": "whois.nic.co",
        "uk": UK_SERVER,
        "us": "whois.nic.us",
        "ca": "whois.cira.ca",
        "de": "whois.denic.de",
        "nl": "whois.domain-registry.nl",
    }
)

COMPOUND_SUFFIXES = frozenset({"co.uk", "org.uk", "ac.uk"})

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class ServerTable:
    """Read-only routing table built once at startup."""

    tld_servers: Mapping[str, str] = field(default_factory=lambda: TLD_SERVERS)
    compound_suffixes: frozenset[str] = COMPOUND_SUFFIXES
    compound_server: str = UK_SERVER
    default_server: str = DEFAULT_SERVER
    ip_server: str = IP_SERVER

    @classmethod
    def from_config(cls, config: Config) -> "ServerTable":
        return cls(
            default_server=config.default_whois_server,
            ip_server=config.ip_whois_server,
        )


class ServerResolver:
    """Pure function of the table and the query; performs no I/O."""

    def __init__(self, table: ServerTable | None = None) -> None:
        self.table = table or ServerTable()

    @staticmethod
    def normalize(query: str) -> str:
        """Drop an http(s) scheme and any path, then lowercase and trim."""
        name = _SCHEME.sub("", query.strip())
        return name.split("/", 1)[0].strip().lower()

    def resolve(self, query: str) -> str:
        name = self.normalize(query)

        try:
            ipaddress.ip_address(name)
        except ValueError:
            pass
        else:
            return self.table.ip_server

        labels = name.split(".")
        tld = labels.pop()
        if not tld:
            return self.table.default_server

        if labels:
            suffix = f"{labels[-1]}.{tld}"
            if suffix in self.table.compound_suffixes:
                return self.table.compound_server

        server = self.table.tld_servers.get(tld)
        if server is None:
            logger.debug("No server for TLD, using default", tld=tld)
            return self.table.default_server
        return server

"""
Configuration management for the WHOIS relay.
"""

import os
import tempfile
from dataclasses import dataclass, field
from typing import Any

RATE_LIMIT_STORES = ("memory", "file")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration for the WHOIS relay."""

    # HTTP server configuration
    http_host: str = field(default_factory=lambda: os.getenv("HTTP_HOST", "0.0.0.0"))
    http_port: int = field(default_factory=lambda: int(os.getenv("HTTP_PORT", "8000")))

    # Upstream WHOIS configuration
    whois_port: int = field(default_factory=lambda: int(os.getenv("WHOIS_PORT", "43")))
    whois_timeout: float = field(
        default_factory=lambda: float(os.getenv("WHOIS_TIMEOUT", "10"))
    )
    default_whois_server: str = field(
        default_factory=lambda: os.getenv("DEFAULT_WHOIS_SERVER", "whois.iana.org")
    )
    ip_whois_server: str = field(
        default_factory=lambda: os.getenv("IP_WHOIS_SERVER", "whois.arin.net")
    )

    # Rate limiting configuration
    rate_limit_interval: float = field(
        default_factory=lambda: float(os.getenv("RATE_LIMIT_INTERVAL", "3.0"))
    )  # seconds between calls per client
    rate_limit_store: str = field(
        default_factory=lambda: os.getenv("RATE_LIMIT_STORE", "memory")
    )
    rate_limit_dir: str = field(
        default_factory=lambda: os.getenv(
            "RATE_LIMIT_DIR", os.path.join(tempfile.gettempdir(), "whoisrelay")
        )
    )
    rate_limit_max_clients: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX_CLIENTS", "10000"))
    )

    # Concurrent lookup configuration
    max_concurrent_lookups: int = field(
        default_factory=lambda: int(os.getenv("MAX_CONCURRENT_LOOKUPS", "10"))
    )
    delay_between_requests: float = field(
        default_factory=lambda: float(os.getenv("DELAY_BETWEEN_REQUESTS", "0.1"))
    )
    max_bulk_targets: int = field(
        default_factory=lambda: int(os.getenv("MAX_BULK_TARGETS", "50"))
    )

    # Logging configuration
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "http_host": self.http_host,
            "http_port": self.http_port,
            "whois_port": self.whois_port,
            "whois_timeout": self.whois_timeout,
            "default_whois_server": self.default_whois_server,
            "ip_whois_server": self.ip_whois_server,
            "rate_limit_interval": self.rate_limit_interval,
            "rate_limit_store": self.rate_limit_store,
            "rate_limit_dir": self.rate_limit_dir,
            "rate_limit_max_clients": self.rate_limit_max_clients,
            "max_concurrent_lookups": self.max_concurrent_lookups,
            "delay_between_requests": self.delay_between_requests,
            "max_bulk_targets": self.max_bulk_targets,
            "log_level": self.log_level,
        }

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        return cls()

    def validate(self) -> None:
        """Validate configuration values."""
        for name in ("http_port", "whois_port"):
            port = getattr(self, name)
            if port < 1 or port > 65535:
                raise ValueError(f"Invalid port number for {name}: {port}")

        if self.whois_timeout <= 0:
            raise ValueError(f"Invalid whois timeout: {self.whois_timeout}")

        if self.rate_limit_interval < 0:
            raise ValueError(
                f"Invalid rate limit interval: {self.rate_limit_interval}"
            )

        if self.rate_limit_store not in RATE_LIMIT_STORES:
            raise ValueError(f"Invalid rate limit store: {self.rate_limit_store}")

        if self.rate_limit_max_clients <= 0:
            raise ValueError(
                f"Invalid rate limit client cap: {self.rate_limit_max_clients}"
            )

        if self.max_concurrent_lookups <= 0:
            raise ValueError(
                f"Invalid max concurrent lookups: {self.max_concurrent_lookups}"
            )

        if self.max_bulk_targets <= 0:
            raise ValueError(f"Invalid max bulk targets: {self.max_bulk_targets}")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

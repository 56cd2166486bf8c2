"""Shared fixtures."""

import pytest

from whoisrelay.config import Config
from whoisrelay.models import WhoisResponse


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeTransport:
    """Stands in for WhoisTransport; answers from a server -> text mapping.

    Servers missing from the mapping behave as unreachable.
    """

    def __init__(self, responses: dict[str, str]):
        self.responses = responses
        self.calls: list[tuple[str, str]] = []

    async def query(self, server: str, query: str) -> WhoisResponse:
        self.calls.append((server, query))
        if server not in self.responses:
            return WhoisResponse.unreachable(server, "connection refused")
        return WhoisResponse(server=server, text=self.responses[server])


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def config(tmp_path):
    return Config(
        whois_timeout=1.0,
        rate_limit_interval=0.0,
        rate_limit_store="memory",
        rate_limit_dir=str(tmp_path / "throttle"),
        delay_between_requests=0.0,
        log_level="INFO",
    )

"""Tests for the lookup orchestrator."""

import pytest

from whoisrelay.services.whois_service import WhoisService
from whoisrelay.services.whois_transport import WhoisTransport

pytestmark = pytest.mark.anyio

VERISIGN = "whois.verisign-grs.com"


class TestLookup:
    async def test_follows_one_referral(self, config, fake_transport):
        transport = fake_transport(
            {
                VERISIGN: "Domain Name: EXAMPLE.COM\nRegistrar WHOIS Server: whois.registrar.example\n",
                "whois.registrar.example": "Registrant: Example Inc.",
            }
        )
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert result.server == "whois.registrar.example"
        assert result.result == "Registrant: Example Inc."
        assert result.primary_server == VERISIGN
        assert transport.calls == [
            (VERISIGN, "example.com"),
            ("whois.registrar.example", "example.com"),
        ]

    async def test_self_referral_is_not_requeried(self, config, fake_transport):
        transport = fake_transport({VERISIGN: f"Whois Server: {VERISIGN}\nrecord"})
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert transport.calls == [(VERISIGN, "example.com")]
        assert result.server == VERISIGN
        assert result.result == f"Whois Server: {VERISIGN}\nrecord"

    async def test_referral_comparison_is_case_sensitive(self, config, fake_transport):
        transport = fake_transport(
            {VERISIGN: "Whois Server: WHOIS.VERISIGN-GRS.COM", "WHOIS.VERISIGN-GRS.COM": "upper"}
        )
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert len(transport.calls) == 2
        assert result.server == "WHOIS.VERISIGN-GRS.COM"

    async def test_empty_secondary_falls_back_to_primary(self, config, fake_transport):
        primary_text = "Whois Server: whois.registrar.example"
        transport = fake_transport({VERISIGN: primary_text, "whois.registrar.example": ""})
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert result.server == VERISIGN
        assert result.result == primary_text
        assert result.referral == "whois.registrar.example"

    async def test_unreachable_secondary_falls_back_to_primary(self, config, fake_transport):
        primary_text = "ReferralServer: whois://whois.down.example"
        transport = fake_transport({VERISIGN: primary_text})
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert result.server == VERISIGN
        assert result.result == primary_text

    async def test_only_one_hop_is_followed(self, config, fake_transport):
        transport = fake_transport(
            {
                VERISIGN: "Whois Server: hop1.example",
                "hop1.example": "Whois Server: hop2.example",
                "hop2.example": "should never be asked",
            }
        )
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert [server for server, _ in transport.calls] == [VERISIGN, "hop1.example"]
        assert result.server == "hop1.example"
        assert result.result == "Whois Server: hop2.example"

    async def test_unreachable_primary_gives_empty_result(self, config, fake_transport):
        transport = fake_transport({})
        service = WhoisService(config, transport=transport)

        result = await service.lookup("example.com")

        assert result.server == VERISIGN
        assert result.result == ""
        assert result.upstream_reachable is False
        assert transport.calls == [(VERISIGN, "example.com")]

    async def test_ip_lookup_end_to_end(self, config, fake_transport):
        transport = fake_transport({"whois.arin.net": "NetRange: 1.0.0.0 - 1.255.255.255"})
        service = WhoisService(config, transport=transport)

        result = await service.lookup("1.2.3.4")

        assert result.model_dump() == {
            "query": "1.2.3.4",
            "server": "whois.arin.net",
            "result": "NetRange: 1.0.0.0 - 1.255.255.255",
        }

    async def test_ip_lookup_follows_arin_referral(self, config, fake_transport):
        transport = fake_transport(
            {
                "whois.arin.net": "NetRange: 193.0.0.0\nReferralServer: whois://whois.ripe.net",
                "whois.ripe.net": "inetnum: 193.0.0.0 - 193.0.7.255",
            }
        )
        service = WhoisService(config, transport=transport)

        result = await service.lookup("193.0.6.139")

        assert result.server == "whois.ripe.net"
        assert result.result.startswith("inetnum:")


class TestReferralToUnencodableHost:
    async def test_falls_back_to_primary_answer(self, config):
        class RegistryTransport(WhoisTransport):
            async def fetch(self, server, query):
                if server == VERISIGN:
                    return "Domain Name: EXAMPLE.COM\nWhois Server: éé..x"
                return await super().fetch(server, query)

        service = WhoisService(config, transport=RegistryTransport(timeout=1.0))

        result = await service.lookup("example.com")

        assert result.server == VERISIGN
        assert result.result == "Domain Name: EXAMPLE.COM\nWhois Server: éé..x"
        assert result.upstream_reachable is True

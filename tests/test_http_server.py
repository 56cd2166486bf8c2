"""Tests for the HTTP front end."""

import json
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from whoisrelay.http_server import HTTPRelayServer, create_app
from whoisrelay.services.whois_service import WhoisService

VERISIGN = "whois.verisign-grs.com"


@pytest.fixture
def transport(fake_transport):
    return fake_transport(
        {
            VERISIGN: "Domain Name: EXAMPLE.COM",
            "whois.arin.net": "",
        }
    )


def make_client(config, transport):
    server = HTTPRelayServer(config, whois_service=WhoisService(config, transport=transport))
    return TestClient(create_app(config, server=server))


@pytest.fixture
def client(config, transport):
    return make_client(config, transport)


def assert_no_cache(response):
    assert "no-store" in response.headers["cache-control"]
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["expires"] == "0"


class TestLookupEndpoint:
    def test_empty_query_shows_form(self, client, transport):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'name="q"' in response.text
        assert transport.calls == []
        assert_no_cache(response)

    def test_json_mode_with_ajax_marker(self, client):
        response = client.get("/", params={"q": "example.com", "ajax": "1"})

        assert response.status_code == 200
        assert response.json() == {
            "query": "example.com",
            "server": VERISIGN,
            "result": "Domain Name: EXAMPLE.COM",
        }
        assert_no_cache(response)

    @pytest.mark.parametrize(
        "headers",
        [{"X-Requested-With": "XMLHttpRequest"}, {"Accept": "application/json"}],
    )
    def test_json_mode_from_programmatic_signals(self, client, headers):
        response = client.get("/", params={"q": "example.com"}, headers=headers)

        assert response.json()["server"] == VERISIGN

    def test_text_mode(self, client):
        response = client.get("/", params={"q": "example.com"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "WHOIS: example.com" in response.text
        assert f"Queried server: {VERISIGN}" in response.text
        assert "Domain Name: EXAMPLE.COM" in response.text
        assert_no_cache(response)

    def test_text_mode_marks_empty_result(self, client):
        response = client.get("/", params={"q": "1.2.3.4"})

        assert "Queried server: whois.arin.net" in response.text
        assert "(no response)" in response.text

    def test_empty_result_in_json_mode_is_empty_string(self, client):
        response = client.get("/", params={"q": "1.2.3.4", "format": "json"})

        assert response.json()["result"] == ""


class TestErrors:
    def test_invalid_query_json(self, client, transport):
        response = client.get("/", params={"q": "exa\nmple.com", "ajax": "1"})

        assert response.status_code == 400
        assert response.json() == {
            "error": "invalid_query",
            "message": "Query is not a valid domain or IP",
        }
        assert transport.calls == []
        assert_no_cache(response)

    def test_invalid_query_text(self, client):
        response = client.get("/", params={"q": "not a domain"})

        assert response.status_code == 400
        assert response.text.startswith("ERROR: Query must be a valid domain name or IP address.")

    def test_rate_limited_json(self, config, transport):
        client = make_client(replace(config, rate_limit_interval=60.0), transport)

        first = client.get("/", params={"q": "example.com", "ajax": "1"})
        second = client.get("/", params={"q": "example.com", "ajax": "1"})

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.json()["error"] == "rate_limited"
        assert len(transport.calls) == 1
        assert_no_cache(second)

    def test_rate_limited_text(self, config, transport):
        client = make_client(replace(config, rate_limit_interval=60.0), transport)

        client.get("/", params={"q": "example.com"})
        response = client.get("/", params={"q": "example.com"})

        assert response.status_code == 429
        assert response.text.startswith("ERROR: Rate limit exceeded.")

    def test_invalid_query_does_not_consume_rate_limit(self, config, transport):
        client = make_client(replace(config, rate_limit_interval=60.0), transport)

        assert client.get("/", params={"q": "bad\rquery"}).status_code == 400
        assert client.get("/", params={"q": "example.com"}).status_code == 200


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert_no_cache(response)


class TestBulkEndpoint:
    def test_streams_ndjson_items(self, client):
        response = client.post(
            "/bulk", json={"targets": ["example.com", "1.2.3.4", "bad\nname"], "max_concurrent": 2}
        )

        assert response.status_code == 200
        items = [json.loads(line) for line in response.text.splitlines() if line]
        by_target = {item["target"]: item for item in items}

        assert set(by_target) == {"example.com", "1.2.3.4", "bad\nname"}
        assert by_target["bad\nname"]["status"] == "error"
        assert by_target["example.com"]["data"] == {
            "query": "example.com",
            "server": VERISIGN,
            "result": "Domain Name: EXAMPLE.COM",
        }

    def test_too_many_targets(self, config, transport):
        client = make_client(replace(config, max_bulk_targets=2), transport)

        response = client.post("/bulk", json={"targets": ["a.com", "b.com", "c.com"]})

        assert response.status_code == 400

    def test_bulk_is_rate_limited(self, config, transport):
        client = make_client(replace(config, rate_limit_interval=60.0), transport)

        assert client.post("/bulk", json={"targets": ["example.com"]}).status_code == 200
        assert client.post("/bulk", json={"targets": ["example.com"]}).status_code == 429

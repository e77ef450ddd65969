from __future__ import annotations

import asyncio
import gzip
import json
import logging

import httpx
import pytest

from xmlstats_events.errors import ResponseParseError
from xmlstats_events.settings import Settings
from xmlstats_events.xmlstats_client import UpstreamResult, XmlstatsClient, is_json_content_type

URL = "https://erikberg.com/events.json?sport=nba&date=20150317"
PAYLOAD = {"events_date": "20150317"}


def _settings() -> Settings:
    return Settings(
        _env_file=None,
        access_token="token-123",
        version="2.1",
        user_agent_contact="ops@example.com",
    )


def _fetch(handler) -> UpstreamResult:
    async def run() -> UpstreamResult:
        async with XmlstatsClient(_settings(), transport=httpx.MockTransport(handler)) as client:
            return await client.fetch(URL)

    return asyncio.run(run())


def test_fetch_sends_fixed_headers() -> None:
    captured: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json=PAYLOAD)

    result = _fetch(handler)
    request = captured["request"]

    assert str(request.url) == URL
    assert request.method == "GET"
    assert request.headers["accept-encoding"] == "gzip"
    assert request.headers["authorization"] == "Bearer token-123"
    assert request.headers["user-agent"] == "xmlstats-exnode/2.1 (ops@example.com)"
    assert result == UpstreamResult(200, "application/json", PAYLOAD)


def test_fetch_decodes_gzip_body_like_plain_body() -> None:
    raw = json.dumps(PAYLOAD).encode("utf-8")

    def gzip_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"content-type": "application/json", "content-encoding": "gzip"},
            content=gzip.compress(raw),
        )

    def plain_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "application/json"}, content=raw)

    compressed = _fetch(gzip_handler)
    plain = _fetch(plain_handler)

    assert compressed.body == plain.body == PAYLOAD


def test_fetch_parses_json_error_bodies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"code": "404", "description": "Not found"}})

    result = _fetch(handler)

    assert result.status_code == 404
    assert result.ok is False
    assert result.body["error"]["description"] == "Not found"


def test_fetch_keeps_non_json_bodies_as_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            503,
            headers={"content-type": "text/html; charset=utf-8"},
            content=b"<h1>Service Unavailable</h1>",
        )

    result = _fetch(handler)

    assert result.status_code == 503
    assert result.is_json is False
    assert result.body == "<h1>Service Unavailable</h1>"


def test_fetch_transport_failure_becomes_500(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("ECONNRESET", request=request)

    with caplog.at_level(logging.ERROR, logger="xmlstats_events.xmlstats_client"):
        result = _fetch(handler)

    assert result == UpstreamResult(500, "text/plain", "Unable to contact server: ECONNRESET")
    assert "Unable to contact server: ECONNRESET" in caplog.text


def test_fetch_malformed_json_on_200_raises_parse_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, headers={"content-type": "application/json"}, content=b"{not json"
        )

    with pytest.raises(ResponseParseError, match="invalid JSON"):
        _fetch(handler)


def test_fetch_malformed_json_on_error_status_is_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            500, headers={"content-type": "application/json"}, content=b"upstream broke"
        )

    result = _fetch(handler)

    assert result.body == "upstream broke"


def test_is_json_content_type_ignores_parameters() -> None:
    assert is_json_content_type("application/json; charset=utf-8")
    assert is_json_content_type("Application/JSON")
    assert not is_json_content_type("text/plain")
    assert not is_json_content_type("")

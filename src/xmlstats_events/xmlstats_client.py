"""Async HTTP client for the xmlstats API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from xmlstats_events.errors import ResponseParseError
from xmlstats_events.settings import Settings

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class UpstreamResult:
    """Status, content type and decoded body of one upstream call."""

    status_code: int
    content_type: str
    body: Any

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def is_json(self) -> bool:
        return is_json_content_type(self.content_type)


def is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_CONTENT_TYPE


def transport_failure(message: str) -> UpstreamResult:
    return UpstreamResult(
        status_code=500,
        content_type="text/plain",
        body=f"Unable to contact server: {message}",
    )


def _decode_body(url: str, status_code: int, content_type: str, raw: bytes) -> Any:
    text = raw.decode("utf-8", errors="replace")
    if not is_json_content_type(content_type):
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        if status_code == 200:
            raise ResponseParseError(url, str(exc)) from exc
        return text


class XmlstatsClient:
    """Single-attempt GET client; transport failures become 500 results."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.timeout_s),
            transport=transport,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept-Encoding": "gzip",
            "Authorization": self.settings.authorization,
            "User-Agent": self.settings.user_agent,
        }

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> XmlstatsClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def fetch(self, url: str) -> UpstreamResult:
        """GET `url` and decode the body.

        A gzip content-encoding is undone while the body streams in. The body
        is parsed as JSON whenever the reply is `application/json`, whatever
        the status. Raises ResponseParseError only for a 200 reply whose JSON
        does not parse.
        """
        try:
            async with self._http.stream("GET", url, headers=self.headers) as response:
                chunks = [chunk async for chunk in response.aiter_bytes()]
                status_code = response.status_code
                content_type = response.headers.get("content-type", "")
        except httpx.RequestError as exc:
            message = str(exc) or type(exc).__name__
            logger.error("Unable to contact server: %s", message)
            return transport_failure(message)

        body = _decode_body(url, status_code, content_type, b"".join(chunks))
        return UpstreamResult(status_code=status_code, content_type=content_type, body=body)

"""Events lookup: date resolution, canonical URL, cache, upstream fetch."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from xmlstats_events.cache_store import ResponseCache
from xmlstats_events.date_resolver import resolve_request_date
from xmlstats_events.errors import InvalidDateError, ResponseParseError
from xmlstats_events.request import XmlstatsRequest, events_request
from xmlstats_events.settings import Settings
from xmlstats_events.time_utils import SHORT_DATE_FORMAT, long_date, parse_event_date
from xmlstats_events.xmlstats_client import UpstreamResult, XmlstatsClient

logger = logging.getLogger(__name__)

INVALID_DATE_REASON = "Invalid date."
INVALID_JSON_REASON = "Invalid JSON from server."


@dataclass(frozen=True)
class EventsPage:
    """Successful lookup handed to the rendering layer."""

    title: str
    events: Any
    cached: bool = False


@dataclass(frozen=True)
class ErrorPage:
    """Failed lookup: HTTP status plus a human-readable reason."""

    status_code: int
    reason: str


EventsOutcome = EventsPage | ErrorPage


def error_reason(result: UpstreamResult) -> str:
    """Pull the XmlstatsError description out of a non-200 reply.

    See https://erikberg.com/api/objects/xmlstats-error
    """
    body = result.body
    if result.is_json and isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("description"):
            return str(error["description"])
        return json.dumps(body, sort_keys=True)
    return str(body)


class EventsService:
    """Serves daily events; one instance is shared by all in-flight lookups."""

    def __init__(
        self,
        settings: Settings,
        *,
        cache: ResponseCache | None = None,
        client: XmlstatsClient | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.cache = cache if cache is not None else ResponseCache(ttl_s=settings.cache_ttl_s)
        self._owns_client = client is None
        self.client = client or XmlstatsClient(settings)
        self._now = now
        self._in_flight: dict[str, asyncio.Task[UpstreamResult]] = {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> EventsService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def request_for(self, date: str) -> XmlstatsRequest:
        return events_request(
            host=self.settings.host,
            sport=self.settings.sport,
            date=date,
            endpoint=self.settings.endpoint,
            format=self.settings.format,
        )

    def resolve_date(self, date_token: str | None) -> str:
        now = self._now() if self._now is not None else None
        return resolve_request_date(date_token, tz_name=self.settings.time_zone, now=now)

    def title_for(self, payload: Any, requested_date: str) -> str:
        raw = payload.get("events_date") if isinstance(payload, dict) else None
        parsed = None
        if isinstance(raw, str):
            parsed = parse_event_date(raw, tz_name=self.settings.time_zone)
        if parsed is None:
            parsed = datetime.strptime(requested_date, SHORT_DATE_FORMAT).date()
        return long_date(parsed)

    async def _fetch(self, url: str) -> UpstreamResult:
        if not self.settings.coalesce_requests:
            return await self.client.fetch(url)
        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self.client.fetch(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda _done: self._in_flight.pop(url, None))
        else:
            logger.debug("joining in-flight fetch for %s", url)
        return await asyncio.shield(task)

    async def events(self, date_token: str | None = None) -> EventsOutcome:
        """Resolve one inbound request into an EventsPage or ErrorPage."""
        try:
            date = self.resolve_date(date_token)
        except InvalidDateError:
            return ErrorPage(status_code=404, reason=INVALID_DATE_REASON)

        url = self.request_for(date).url()
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug("cache hit for %s", url)
            return EventsPage(title=self.title_for(cached, date), events=cached, cached=True)

        try:
            result = await self._fetch(url)
        except ResponseParseError as exc:
            logger.error("%s", exc)
            return ErrorPage(status_code=502, reason=INVALID_JSON_REASON)

        if not result.ok:
            logger.warning(
                'Server did not return a "200 OK" response! Got "%s" instead.',
                result.status_code,
            )
            return ErrorPage(status_code=result.status_code, reason=error_reason(result))

        self.cache.set(url, result.body)
        logger.debug("cached response for %s", url)
        return EventsPage(title=self.title_for(result.body, date), events=result.body)

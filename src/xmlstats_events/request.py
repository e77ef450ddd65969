"""Request descriptor and canonical URL builder for xmlstats lookups.

See https://erikberg.com/api/endpoints#requrl for the request URL convention:
https://<host>/<sport>/<endpoint>[/<id>].<format>[?<params>]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from urllib.parse import quote

from xmlstats_events.errors import InvalidRequestError


def _encode(value: str) -> str:
    # Matches encodeURIComponent: everything but A-Z a-z 0-9 - _ . ! ~ * ' ( )
    return quote(value, safe="-_.!~*'()")


def _check_segment(name: str, value: str | None) -> None:
    if value is None:
        return
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"{name} must be a non-empty string when set")
    if "/" in value:
        raise InvalidRequestError(f"{name} must not contain '/': {value!r}")


@dataclass(frozen=True)
class XmlstatsRequest:
    """Stable identity for one xmlstats lookup."""

    host: str
    endpoint: str
    sport: str | None = None
    id: str | None = None
    format: str = "json"
    params: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.host or "/" in self.host:
            raise InvalidRequestError(f"invalid host: {self.host!r}")
        if not self.format or "." in self.format:
            raise InvalidRequestError(f"invalid format: {self.format!r}")
        _check_segment("sport", self.sport)
        _check_segment("endpoint", self.endpoint)
        _check_segment("id", self.id)
        if self.endpoint is None:
            raise InvalidRequestError("endpoint is required")
        params = tuple((str(key), str(value)) for key, value in self.params)
        keys = [key for key, _ in params]
        if len(set(keys)) != len(keys):
            raise InvalidRequestError(f"duplicate parameter names: {keys}")
        object.__setattr__(self, "params", params)

    @classmethod
    def build(
        cls,
        *,
        host: str,
        endpoint: str,
        sport: str | None = None,
        id: str | None = None,
        format: str = "json",
        params: Mapping[str, str] | None = None,
    ) -> XmlstatsRequest:
        """Construct from a mapping of parameters, keeping insertion order."""
        return cls(
            host=host,
            endpoint=endpoint,
            sport=sport,
            id=id,
            format=format,
            params=tuple((params or {}).items()),
        )

    def with_param(self, key: str, value: str) -> XmlstatsRequest:
        """Return a copy with `key` set, keeping its position if already present."""
        items = dict(self.params)
        items[key] = value
        return replace(self, params=tuple(items.items()))

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(item for item in (self.sport, self.endpoint, self.id) if item is not None)

    @property
    def path(self) -> str:
        return "/" + "/".join(self.segments) + f".{self.format}"

    @property
    def query(self) -> str:
        return "&".join(f"{_encode(key)}={_encode(value)}" for key, value in self.params)

    def url(self) -> str:
        """Canonical URL; also the response cache key."""
        url = f"https://{self.host}{self.path}"
        query = self.query
        if query:
            url += "?" + query
        return url

    def key(self) -> str:
        return self.url()


def events_request(
    *,
    host: str,
    sport: str,
    date: str,
    endpoint: str = "events",
    format: str = "json",
) -> XmlstatsRequest:
    """Daily events lookup: /events.json?sport=<sport>&date=<YYYYMMDD>."""
    return XmlstatsRequest.build(
        host=host,
        endpoint=endpoint,
        format=format,
        params={"sport": sport, "date": date},
    )

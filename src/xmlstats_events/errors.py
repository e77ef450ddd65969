"""Error types for xmlstats-events flows."""

from __future__ import annotations


class XmlstatsError(RuntimeError):
    """Base error for xmlstats-events operations."""


class InvalidDateError(XmlstatsError, ValueError):
    """Raised when a caller-supplied date token is not in YYYYMMDD form."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid date token: {token!r}")


class InvalidRequestError(XmlstatsError, ValueError):
    """Raised when a request descriptor cannot be built."""


class ResponseParseError(XmlstatsError):
    """Raised when a 200 reply carries a body that is not valid JSON."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"invalid JSON from {url}: {detail}")


class CLIError(XmlstatsError):
    """User-facing CLI error for xmlstats-events commands."""

"""Request date resolution for the events endpoint."""

from __future__ import annotations

import re
from datetime import datetime

from xmlstats_events.errors import InvalidDateError
from xmlstats_events.time_utils import SHORT_DATE_FORMAT, short_date, today_in

_SHORT_DATE_RE = re.compile(r"^\d{8}$")


def resolve_request_date(
    token: str | None,
    *,
    tz_name: str,
    now: datetime | None = None,
) -> str:
    """Return the YYYYMMDD date to request.

    - no token: today's date in `tz_name`
    - `20150317`: validated strictly and re-rendered
    - anything else (`2015-03-17`, `20151317`, `2015031`): InvalidDateError
    """
    if token is None or token == "":
        return short_date(today_in(tz_name, now=now))
    if not _SHORT_DATE_RE.match(token):
        raise InvalidDateError(token)
    try:
        parsed = datetime.strptime(token, SHORT_DATE_FORMAT)
    except ValueError as exc:
        raise InvalidDateError(token) from exc
    return short_date(parsed.date())

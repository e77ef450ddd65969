"""CLI entrypoint for xmlstats-events."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from xmlstats_events.date_resolver import resolve_request_date
from xmlstats_events.errors import CLIError, InvalidDateError, XmlstatsError
from xmlstats_events.request import events_request
from xmlstats_events.service import ErrorPage, EventsOutcome, EventsPage, EventsService
from xmlstats_events.settings import Settings


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_settings(args: argparse.Namespace) -> Settings:
    try:
        settings = Settings.from_runtime()
    except RuntimeError as exc:
        raise CLIError(str(exc)) from exc
    sport = str(getattr(args, "sport", "") or "").strip()
    if sport:
        settings = settings.model_copy(update={"sport": sport})
    return settings


def _team_name(team: Any) -> str:
    if isinstance(team, dict):
        return str(team.get("full_name") or team.get("abbreviation") or "?")
    return "?"


def _event_lines(events: Any) -> list[str]:
    rows = events.get("event", []) if isinstance(events, dict) else []
    lines: list[str] = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        start = str(row.get("start_date_time", ""))
        away = _team_name(row.get("away_team"))
        home = _team_name(row.get("home_team"))
        lines.append(f"{start} {away} at {home}".strip())
    return lines


def _print_outcome(outcome: EventsOutcome, *, json_output: bool) -> None:
    if json_output:
        kind = "events" if isinstance(outcome, EventsPage) else "error"
        print(json.dumps({"kind": kind, **asdict(outcome)}, sort_keys=True, indent=2))
        return
    if isinstance(outcome, ErrorPage):
        print(f"error {outcome.status_code}: {outcome.reason}")
        return
    print(outcome.title)
    lines = _event_lines(outcome.events)
    if not lines:
        print("no events")
    for line in lines:
        print(line)


async def _run_events(settings: Settings, date_token: str | None) -> EventsOutcome:
    async with EventsService(settings) as service:
        return await service.events(date_token)


def _cmd_events(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    outcome = asyncio.run(_run_events(settings, args.date or None))
    _print_outcome(outcome, json_output=bool(args.json_output))
    return 0 if isinstance(outcome, EventsPage) else 1


def _cmd_url(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    try:
        date = resolve_request_date(args.date or None, tz_name=settings.time_zone)
    except InvalidDateError as exc:
        raise CLIError(str(exc)) from exc
    request = events_request(
        host=settings.host,
        sport=settings.sport,
        date=date,
        endpoint=settings.endpoint,
        format=settings.format,
    )
    print(request.url())
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xmlstats-events")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    events = subparsers.add_parser("events", help="Show events for a day (default: today)")
    events.set_defaults(func=_cmd_events)
    events.add_argument("date", nargs="?", default="", help="Date as YYYYMMDD")
    events.add_argument("--sport", default="")
    events.add_argument("--json", dest="json_output", action="store_true")

    url = subparsers.add_parser("url", help="Print the request URL without fetching")
    url.set_defaults(func=_cmd_url)
    url.add_argument("date", nargs="?", default="", help="Date as YYYYMMDD")
    url.add_argument("--sport", default="")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(bool(args.verbose))
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return int(func(args))
    except (CLIError, XmlstatsError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

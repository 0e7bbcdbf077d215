"""iCalendar and Google Calendar exports for selected events."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Iterable
from urllib.parse import urlencode

from festival_config import DEFAULT_CONFIG
from festival_events import FestivalEvent
from festival_time import format_utc_basic

CRLF = "\r\n"
GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"


def escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str, limit: int = 75) -> str:
    """Fold a content line into chunks of at most ``limit`` octets."""
    chunks: list[str] = []
    current = ""
    size = 0
    for char in line:
        width = len(char.encode("utf-8"))
        # continuation lines start with a space, which counts against the limit
        budget = limit if not chunks else limit - 1
        if size + width > budget:
            chunks.append(current)
            current = ""
            size = 0
        current += char
        size += width
    chunks.append(current)
    return (CRLF + " ").join(chunks)


def event_uids(events: list[FestivalEvent], domain: str) -> list[str]:
    seen: dict[str, int] = {}
    uids = []
    for event in events:
        seen[event.id] = seen.get(event.id, 0) + 1
        # slug ids end in "-d<day>", so a "-N" counter cannot clash with another id
        suffix = f"-{seen[event.id]}" if seen[event.id] > 1 else ""
        uids.append(f"{event.id}{suffix}@{domain}")
    return uids


def event_summary(event: FestivalEvent, config: dict) -> str:
    return f"{event.artist} - {config['festival_name']}"


def event_location(event: FestivalEvent, config: dict) -> str:
    return f"Escenario {event.stage}, {config['location']}"


def event_description(event: FestivalEvent, config: dict) -> str:
    return f"{event.artist} en el escenario {event.stage} del {config['festival_name']}."


def generate_ics(
    events: Iterable[FestivalEvent],
    config: dict | None = None,
    now: dt.datetime | None = None,
) -> str:
    config = config or DEFAULT_CONFIG
    events = list(events)
    stamp = format_utc_basic(now or dt.datetime.now(dt.timezone.utc))
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{escape_text(config['festival_name'])} Lineup//ES",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    for event, uid in zip(events, event_uids(events, config["calendar_uid_domain"])):
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{uid}",
                f"DTSTAMP:{stamp}",
                f"DTSTART:{format_utc_basic(event.start_at)}",
                f"DTEND:{format_utc_basic(event.end_at)}",
                f"SUMMARY:{escape_text(event_summary(event, config))}",
                f"LOCATION:{escape_text(event_location(event, config))}",
                f"DESCRIPTION:{escape_text(event_description(event, config))}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return CRLF.join(fold_line(line) for line in lines) + CRLF


def write_ics(
    path: Path, events: list[FestivalEvent], config: dict | None = None
) -> Path | None:
    if not events:
        return None
    path.write_bytes(generate_ics(events, config).encode("utf-8"))
    return path


def google_calendar_url(event: FestivalEvent, config: dict | None = None) -> str:
    config = config or DEFAULT_CONFIG
    dates = f"{format_utc_basic(event.start_at)}/{format_utc_basic(event.end_at)}"
    query = urlencode(
        [
            ("action", "TEMPLATE"),
            ("text", event_summary(event, config)),
            ("dates", dates),
            ("location", event_location(event, config)),
            ("details", event_description(event, config)),
        ],
        safe="/",
    )
    return f"{GOOGLE_CALENDAR_URL}?{query}"

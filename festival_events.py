"""Turn raw lineup records into validated, time-normalized festival events."""

from __future__ import annotations

import collections
import datetime as dt
import json
import logging
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from festival_time import (
    GRID_START_HOUR,
    UTC_OFFSET_HOURS,
    grid_minutes_from_utc,
    parse_utc_timestamp,
    to_utc,
)

logger = logging.getLogger(__name__)

DEFAULT_DAY = 1
SLUG_RE = re.compile(r"[^a-z0-9]+")


class InvalidEventRecord(ValueError):
    def __init__(self, message: str, record: object = None) -> None:
        super().__init__(message)
        self.record = record


class DuplicateEventIdError(ValueError):
    def __init__(self, duplicate_ids: list[str]) -> None:
        super().__init__(f"Duplicate event ids: {', '.join(duplicate_ids)}")
        self.duplicate_ids = duplicate_ids


@dataclass(frozen=True)
class FestivalEvent:
    id: str
    artist: str
    day: int
    stage: str
    start_at: dt.datetime
    end_at: dt.datetime
    start_minutes: int  # grid-relative, 0 = grid start hour local
    end_minutes: int
    duration: int


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    folded = "".join(char for char in decomposed if not unicodedata.combining(char))
    return SLUG_RE.sub("-", folded).strip("-")


def make_event_id(artist: str, day: int) -> str:
    return f"{slugify(artist)}-d{day}"


def _coerce_day(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        day = value
    elif isinstance(value, float) and value.is_integer():
        day = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        day = int(value.strip())
    else:
        return None
    return day if day >= 1 else None


def resolve_day(record: dict, strict: bool = False) -> int:
    """Festival day of a record: ``day``, then legacy ``dia``, then 1."""
    raw = record.get("day")
    if raw is None:
        raw = record.get("dia")
    if raw is None:
        if strict:
            raise InvalidEventRecord("Record has no day", record)
        return DEFAULT_DAY
    day = _coerce_day(raw)
    if day is None:
        if strict:
            raise InvalidEventRecord(f"Invalid day value: {raw!r}", record)
        logger.warning("Invalid day %r for %r, using day %d", raw, record.get("artist"), DEFAULT_DAY)
        return DEFAULT_DAY
    return day


def _required_text(record: dict, key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidEventRecord(f"Record is missing {key!r}", record)
    return value.strip()


def build_event(
    record: dict,
    strict: bool = False,
    utc_offset_hours: int = UTC_OFFSET_HOURS,
    grid_start_hour: int = GRID_START_HOUR,
) -> FestivalEvent:
    if not isinstance(record, dict):
        raise InvalidEventRecord("Record is not an object", record)
    artist = _required_text(record, "artist")
    stage = _required_text(record, "stage")
    day = resolve_day(record, strict=strict)

    start_at = parse_utc_timestamp(record.get("startAt"))
    end_at = parse_utc_timestamp(record.get("endAt"))
    if start_at is None or end_at is None:
        raise InvalidEventRecord(f"Unparseable timestamp for {artist!r}", record)

    start_minutes = grid_minutes_from_utc(start_at, utc_offset_hours, grid_start_hour)
    end_minutes = grid_minutes_from_utc(end_at, utc_offset_hours, grid_start_hour)
    duration = end_minutes - start_minutes
    if duration <= 0:
        raise InvalidEventRecord(
            f"Non-positive duration ({duration} min) for {artist!r}", record
        )

    return FestivalEvent(
        id=make_event_id(artist, day),
        artist=artist,
        day=day,
        stage=stage,
        start_at=start_at,
        end_at=end_at,
        start_minutes=start_minutes,
        end_minutes=end_minutes,
        duration=duration,
    )


def find_duplicate_ids(events: Iterable[FestivalEvent]) -> list[str]:
    counts = collections.Counter(event.id for event in events)
    return [event_id for event_id, count in counts.items() if count > 1]


def build_events(
    records: Iterable[dict],
    strict: bool = False,
    unique_ids: bool = False,
    utc_offset_hours: int = UTC_OFFSET_HOURS,
    grid_start_hour: int = GRID_START_HOUR,
) -> list[FestivalEvent]:
    """Build every record; lenient mode drops bad ones, strict mode raises."""
    events: list[FestivalEvent] = []
    for index, record in enumerate(records):
        try:
            event = build_event(
                record,
                strict=strict,
                utc_offset_hours=utc_offset_hours,
                grid_start_hour=grid_start_hour,
            )
        except InvalidEventRecord as exc:
            if strict:
                raise
            logger.warning("Skipping record %d: %s", index, exc)
            continue
        events.append(event)

    duplicates = find_duplicate_ids(events)
    if duplicates:
        if unique_ids:
            raise DuplicateEventIdError(duplicates)
        logger.warning("Colliding event ids: %s", ", ".join(duplicates))
    return events


def is_renderable(event: FestivalEvent) -> bool:
    if not isinstance(event.start_minutes, int) or not isinstance(event.end_minutes, int):
        return False
    return event.duration > 0 and event.end_minutes > event.start_minutes


def load_raw_events(path: Path) -> list[dict]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise InvalidEventRecord(f"Expected a JSON array of records in {path}")
    return data


def event_to_dict(event: FestivalEvent) -> dict:
    return {
        "id": event.id,
        "artist": event.artist,
        "day": event.day,
        "stage": event.stage,
        "startAt": to_utc(event.start_at).isoformat().replace("+00:00", "Z"),
        "endAt": to_utc(event.end_at).isoformat().replace("+00:00", "Z"),
        "startMinutes": event.start_minutes,
        "endMinutes": event.end_minutes,
        "duration": event.duration,
    }

"""Convert UTC instants into the festival grid's minute coordinates."""

from __future__ import annotations

import datetime as dt

GRID_START_HOUR = 14
GRID_START_MINUTES = GRID_START_HOUR * 60
UTC_OFFSET_HOURS = -3
MINUTES_PER_DAY = 24 * 60


def to_utc(instant: dt.datetime) -> dt.datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=dt.timezone.utc)
    return instant.astimezone(dt.timezone.utc)


def local_minutes_from_utc(
    instant: dt.datetime,
    utc_offset_hours: int = UTC_OFFSET_HOURS,
    grid_start_hour: int = GRID_START_HOUR,
) -> int:
    """Local clock minutes, with early-morning times pushed past 24:00.

    Anything before the grid start hour belongs to the previous festival
    night, so 01:00 comes back as 1500 ("25:00") and 14:00 stays 840.
    """
    utc = to_utc(instant)
    minutes = (utc.hour * 60 + utc.minute + utc_offset_hours * 60) % MINUTES_PER_DAY
    if minutes < grid_start_hour * 60:
        minutes += MINUTES_PER_DAY
    return minutes


def normalize_minutes(local_minutes: int, grid_start_hour: int = GRID_START_HOUR) -> int:
    return local_minutes - grid_start_hour * 60


def grid_minutes_from_utc(
    instant: dt.datetime,
    utc_offset_hours: int = UTC_OFFSET_HOURS,
    grid_start_hour: int = GRID_START_HOUR,
) -> int:
    local = local_minutes_from_utc(instant, utc_offset_hours, grid_start_hour)
    return normalize_minutes(local, grid_start_hour)


def format_grid_time(grid_minutes: int, grid_start_hour: int = GRID_START_HOUR) -> str:
    total = grid_minutes + grid_start_hour * 60
    hour = (total // 60) % 24
    minute = total % 60
    return f"{hour:02d}:{minute:02d}"


def event_local_time(instant: dt.datetime, utc_offset_hours: int = UTC_OFFSET_HOURS) -> str:
    utc = to_utc(instant)
    hour = (utc.hour + utc_offset_hours) % 24
    return f"{hour:02d}:{utc.minute:02d}"


def parse_utc_timestamp(value: object) -> dt.datetime | None:
    """Parse an ISO-8601 timestamp; None stands in for an invalid date."""
    if isinstance(value, dt.datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return to_utc(parsed)


def format_utc_basic(instant: dt.datetime) -> str:
    return to_utc(instant).strftime("%Y%m%dT%H%M%SZ")

"""Group festival events into per-day, per-stage schedules."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Iterable

from festival_events import FestivalEvent, is_renderable
from festival_time import UTC_OFFSET_HOURS, event_local_time
from selection_state import SelectionState, filter_active

STAGE_ORDER = [
    "Norte",
    "Sur",
    "Montaña",
    "Boomerang",
    "Paraguay",
    "La Casita del Blues",
    "La Plaza Electronic Stage",
    "Sorpresa",
]

DEFAULT_DAYS = [
    {"day": 1, "label": "Sábado 14", "date": "2026-02-14"},
    {"day": 2, "label": "Domingo 15", "date": "2026-02-15"},
]

# 14:00 to 24:00 for a day with nothing on it
DEFAULT_DAY_RANGE = (0, 600)


@dataclass
class StageColumn:
    name: str
    events: list[FestivalEvent] = field(default_factory=list)


@dataclass
class DaySchedule:
    day: int
    label: str
    date: str
    stages: list[StageColumn]
    start_minute: int
    end_minute: int

    @property
    def events(self) -> list[FestivalEvent]:
        return [event for stage in self.stages for event in stage.events]


def sort_stages(names: Iterable[str], stage_order: list[str] | None = None) -> list[str]:
    order = STAGE_ORDER if stage_order is None else stage_order
    rank = {name: idx for idx, name in enumerate(order)}
    unique = list(dict.fromkeys(names))
    # sorted() is stable, so unknown stages keep discovery order
    return sorted(unique, key=lambda name: rank.get(name, len(order)))


def floor_hour(minutes: int) -> int:
    return (minutes // 60) * 60


def ceil_hour(minutes: int) -> int:
    return -(-minutes // 60) * 60


def day_bounds(events: list[FestivalEvent]) -> tuple[int, int]:
    if not events:
        return DEFAULT_DAY_RANGE
    start = min(event.start_minutes for event in events)
    end = max(event.end_minutes for event in events)
    return floor_hour(start), ceil_hour(end)


def build_day_schedule(
    day_info: dict,
    events: list[FestivalEvent],
    stage_order: list[str] | None = None,
) -> DaySchedule:
    day = day_info["day"]
    day_events = [event for event in events if event.day == day and is_renderable(event)]
    stage_names = sort_stages((event.stage for event in day_events), stage_order)
    stages = [
        StageColumn(
            name=name,
            events=sorted(
                (event for event in day_events if event.stage == name),
                key=lambda e: e.start_minutes,
            ),
        )
        for name in stage_names
    ]
    start_minute, end_minute = day_bounds(day_events)
    return DaySchedule(
        day=day,
        label=day_info.get("label") or f"Día {day}",
        date=day_info.get("date") or "",
        stages=stages,
        start_minute=start_minute,
        end_minute=end_minute,
    )


def build_schedules(
    events: list[FestivalEvent],
    days: list[dict] | None = None,
    stage_order: list[str] | None = None,
) -> list[DaySchedule]:
    day_infos = DEFAULT_DAYS if days is None else days
    return [build_day_schedule(info, events, stage_order) for info in day_infos]


def find_schedule(schedules: list[DaySchedule], day: int) -> DaySchedule | None:
    for schedule in schedules:
        if schedule.day == day:
            return schedule
    return schedules[0] if schedules else None


def filter_schedule(schedule: DaySchedule, state: SelectionState) -> DaySchedule:
    """The "my agenda" view of a day; bounds stay those of the full day."""
    if not filter_active(state):
        return schedule
    stages = []
    for stage in schedule.stages:
        kept = [event for event in stage.events if event.id in state.selected_ids]
        if kept:
            stages.append(StageColumn(name=stage.name, events=kept))
    return dataclasses.replace(schedule, stages=stages)


def selected_events(
    events: Iterable[FestivalEvent], selected_ids: Iterable[str]
) -> list[FestivalEvent]:
    wanted = set(selected_ids)
    chosen = [event for event in events if event.id in wanted]
    return sorted(chosen, key=lambda e: e.start_at)


def group_events_by_hour(
    events: Iterable[FestivalEvent], utc_offset_hours: int = UTC_OFFSET_HOURS
) -> list[tuple[str, list[FestivalEvent]]]:
    groups: dict[str, list[FestivalEvent]] = {}
    for event in events:
        hour = event_local_time(event.start_at, utc_offset_hours).split(":")[0]
        groups.setdefault(f"{hour}:00", []).append(event)
    ordered = []
    for label, group in groups.items():
        group.sort(key=lambda e: e.start_minutes)
        ordered.append((label, group))
    ordered.sort(key=lambda item: item[1][0].start_minutes)
    return ordered

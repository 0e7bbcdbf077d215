"""Project grid minutes onto pixel geometry for the timetable."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from festival_events import FestivalEvent
from festival_schedule import DaySchedule
from festival_time import GRID_START_HOUR, format_grid_time

PIXELS_PER_MINUTE = 2.0
MIN_BLOCK_HEIGHT = 28
TIME_DETAIL_MIN_HEIGHT = 40


@dataclass
class BlockGeometry:
    event: FestivalEvent
    top: float
    height: float
    selected: bool = False

    @property
    def shows_time(self) -> bool:
        return self.height >= TIME_DETAIL_MIN_HEIGHT


@dataclass
class ColumnLayout:
    stage: str
    blocks: list[BlockGeometry] = field(default_factory=list)


@dataclass
class GridLayout:
    height: float
    gridlines: list[tuple[float, str]]  # (top, "HH:MM")
    columns: list[ColumnLayout]


def pixel_top(
    event: FestivalEvent,
    grid_start_minute: int,
    pixels_per_minute: float = PIXELS_PER_MINUTE,
) -> float:
    return (event.start_minutes - grid_start_minute) * pixels_per_minute


def pixel_height(
    event: FestivalEvent,
    pixels_per_minute: float = PIXELS_PER_MINUTE,
    min_block_height: float = MIN_BLOCK_HEIGHT,
) -> float:
    return max(event.duration * pixels_per_minute, min_block_height)


def grid_height(schedule: DaySchedule, pixels_per_minute: float = PIXELS_PER_MINUTE) -> float:
    return (schedule.end_minute - schedule.start_minute) * pixels_per_minute


def hour_marks(schedule: DaySchedule) -> list[int]:
    return list(range(schedule.start_minute, schedule.end_minute + 1, 60))


def hour_label(grid_minutes: int, grid_start_hour: int = GRID_START_HOUR) -> str:
    return format_grid_time(grid_minutes, grid_start_hour)


def project_day(
    schedule: DaySchedule,
    selected_ids: Iterable[str] = (),
    pixels_per_minute: float = PIXELS_PER_MINUTE,
    min_block_height: float = MIN_BLOCK_HEIGHT,
    grid_start_hour: int = GRID_START_HOUR,
) -> GridLayout:
    selected = set(selected_ids)
    gridlines = [
        (
            (minute - schedule.start_minute) * pixels_per_minute,
            hour_label(minute, grid_start_hour),
        )
        for minute in hour_marks(schedule)
    ]
    columns = []
    for stage in schedule.stages:
        blocks = [
            BlockGeometry(
                event=event,
                top=pixel_top(event, schedule.start_minute, pixels_per_minute),
                height=pixel_height(event, pixels_per_minute, min_block_height),
                selected=event.id in selected,
            )
            for event in stage.events
        ]
        columns.append(ColumnLayout(stage=stage.name, blocks=blocks))
    return GridLayout(
        height=grid_height(schedule, pixels_per_minute),
        gridlines=gridlines,
        columns=columns,
    )

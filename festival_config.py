"""Helpers for reading and normalizing festival configuration."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

from festival_schedule import DEFAULT_DAYS, STAGE_ORDER
from festival_time import GRID_START_HOUR, UTC_OFFSET_HOURS
from grid_layout import MIN_BLOCK_HEIGHT, PIXELS_PER_MINUTE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "festival_name": "Cosquín Rock 2026",
    "location": "Cosquín Rock, Córdoba, Argentina",
    "calendar_uid_domain": "cosquin-rock-lineup",
    "utc_offset_hours": UTC_OFFSET_HOURS,
    "grid_start_hour": GRID_START_HOUR,
    "days": DEFAULT_DAYS,
    "stage_order": STAGE_ORDER,
    "strict_ingestion": False,
    "unique_ids": False,
    "pixels_per_minute": PIXELS_PER_MINUTE,
    "min_block_height": MIN_BLOCK_HEIGHT,
    "share_title": "Mi agenda Cosquín Rock 2026",
    "share_text": "¡Mirá mi agenda para el Cosquín Rock 2026!",
}

TEXT_KEYS = (
    "festival_name",
    "location",
    "calendar_uid_domain",
    "share_title",
    "share_text",
)


def _normalize_days(days: list) -> list[dict]:
    normalized = []
    seen: set[int] = set()
    for item in days:
        if not isinstance(item, dict):
            continue
        try:
            day = int(item.get("day"))
        except (TypeError, ValueError):
            continue
        if day < 1 or day in seen:
            continue
        seen.add(day)
        normalized.append(
            {
                "day": day,
                "label": str(item.get("label") or f"Día {day}"),
                "date": str(item.get("date") or ""),
            }
        )
    return normalized


def normalize_config(data: dict | None) -> dict:
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        return config

    for key in TEXT_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            config[key] = value.strip()

    offset = data.get("utc_offset_hours")
    if offset is not None and not isinstance(offset, bool):
        try:
            offset = int(offset)
        except (TypeError, ValueError):
            offset = None
        if offset is not None and -12 <= offset <= 14:
            config["utc_offset_hours"] = offset

    start_hour = data.get("grid_start_hour")
    if start_hour is not None and not isinstance(start_hour, bool):
        try:
            start_hour = int(start_hour)
        except (TypeError, ValueError):
            start_hour = None
        if start_hour is not None and 0 <= start_hour <= 23:
            config["grid_start_hour"] = start_hour

    days = data.get("days")
    if isinstance(days, list):
        normalized_days = _normalize_days(days)
        if normalized_days:
            config["days"] = normalized_days

    stage_order = data.get("stage_order")
    if isinstance(stage_order, list):
        config["stage_order"] = list(dict.fromkeys(str(name) for name in stage_order if name))

    for key in ("strict_ingestion", "unique_ids"):
        value = data.get(key)
        if isinstance(value, bool):
            config[key] = value

    pixels = data.get("pixels_per_minute")
    if pixels is not None:
        try:
            pixels = float(pixels)
        except (TypeError, ValueError):
            pixels = None
        if pixels is not None and pixels > 0:
            config["pixels_per_minute"] = pixels

    min_height = data.get("min_block_height")
    if min_height is not None:
        try:
            config["min_block_height"] = max(0, int(min_height))
        except (TypeError, ValueError):
            pass

    return config


def load_config(path: Path | None) -> dict:
    if path is None or not path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable config file %s", path)
        return copy.deepcopy(DEFAULT_CONFIG)
    return normalize_config(data)


def save_config(path: Path, config: dict) -> None:
    normalized = normalize_config(config)
    path.write_text(json.dumps(normalized, indent=2, ensure_ascii=False), encoding="utf-8")


def get_time_settings(config: dict | None) -> tuple[int, int]:
    config = config or DEFAULT_CONFIG
    return config["utc_offset_hours"], config["grid_start_hour"]


def get_day_definitions(config: dict | None) -> list[dict]:
    config = config or DEFAULT_CONFIG
    return copy.deepcopy(config["days"])

#!/usr/bin/env python3
"""Validate a lineup dataset: report bad records and colliding event ids."""

from __future__ import annotations

import argparse
import json
from collections import defaultdict
from pathlib import Path

import festival_config
from festival_events import (
    FestivalEvent,
    InvalidEventRecord,
    build_event,
    find_duplicate_ids,
    load_raw_events,
)


def check_records(records: list[dict], config: dict, strict: bool) -> tuple[list[FestivalEvent], list[str]]:
    offset, start_hour = festival_config.get_time_settings(config)
    events = []
    problems: list[str] = []
    for index, record in enumerate(records):
        try:
            events.append(
                build_event(
                    record,
                    strict=strict,
                    utc_offset_hours=offset,
                    grid_start_hour=start_hour,
                )
            )
        except InvalidEventRecord as exc:
            problems.append(f"record {index}: {exc}")
    return events, problems


def describe_duplicates(events: list[FestivalEvent]) -> list[str]:
    by_id: dict[str, list[str]] = defaultdict(list)
    for event in events:
        by_id[event.id].append(f"{event.artist} @ {event.stage}")
    return [
        f"{event_id}: {'; '.join(by_id[event_id])}"
        for event_id in find_duplicate_ids(events)
    ]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check a lineup JSON file for invalid records and duplicate ids."
    )
    parser.add_argument("--data", type=Path, default=Path("data/lineup.json"))
    parser.add_argument("--config", type=Path, default=Path("festival.json"))
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Accept records without a day (defaulting to day 1)",
    )
    args = parser.parse_args()

    if not args.data.exists():
        raise SystemExit(f"Lineup data not found: {args.data}")
    config = festival_config.load_config(args.config)
    try:
        records = load_raw_events(args.data)
    except (json.JSONDecodeError, InvalidEventRecord) as exc:
        raise SystemExit(f"Cannot read {args.data}: {exc}")

    events, problems = check_records(records, config, strict=not args.lenient)
    duplicates = describe_duplicates(events)

    print(f"Records: {len(records)}")
    print(f"Valid events: {len(events)}")
    for problem in problems:
        print(f"Invalid {problem}")
    for duplicate in duplicates:
        print(f"Duplicate id {duplicate}")

    if problems or duplicates:
        raise SystemExit(1)
    print("Lineup OK")


if __name__ == "__main__":
    main()

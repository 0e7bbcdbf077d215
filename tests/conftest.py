"""Shared lineup fixtures."""

from __future__ import annotations

import pytest

from lineup_tool import Lineup, build_lineup


def make_record(artist: str, stage: str, start: str, end: str, day: int | None = 1) -> dict:
    record = {"artist": artist, "stage": stage, "startAt": start, "endAt": end}
    if day is not None:
        record["day"] = day
    return record


@pytest.fixture
def sample_records() -> list[dict]:
    return [
        make_record("Bandalos Chinos", "Norte", "2026-02-15T01:30:00Z", "2026-02-15T02:30:00Z"),
        make_record("Airbag", "Norte", "2026-02-15T03:15:00Z", "2026-02-15T04:45:00Z"),
        make_record("Conociendo Rusia", "Montaña", "2026-02-14T20:40:00Z", "2026-02-14T21:30:00Z"),
        make_record("Las Pelotas", "Norte", "2026-02-16T00:30:00Z", "2026-02-16T02:00:00Z", day=2),
        make_record("Nafta", "Boomerang", "2026-02-15T19:50:00Z", "2026-02-15T20:40:00Z", day=2),
    ]


@pytest.fixture
def lineup(sample_records: list[dict]) -> Lineup:
    return build_lineup(sample_records)

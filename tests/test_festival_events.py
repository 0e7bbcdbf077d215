import dataclasses
import datetime as dt
import json
import logging

import pytest

from festival_events import (
    DuplicateEventIdError,
    FestivalEvent,
    InvalidEventRecord,
    build_event,
    build_events,
    event_to_dict,
    find_duplicate_ids,
    is_renderable,
    load_raw_events,
    resolve_day,
    slugify,
)


def make_record(artist: str = "Bandalos Chinos", **overrides) -> dict:
    record = {
        "artist": artist,
        "day": 1,
        "stage": "Norte",
        "startAt": "2026-02-15T01:30:00Z",
        "endAt": "2026-02-15T02:30:00Z",
    }
    record.update(overrides)
    return record


def test_slugify_folds_accents_and_punctuation() -> None:
    assert slugify("Ciro y Los Persas") == "ciro-y-los-persas"
    assert slugify("Montaña Rusa!") == "montana-rusa"
    assert slugify("  --Él & Ella-- ") == "el-ella"
    assert slugify("Björk") == "bjork"


def test_build_event_normalizes_times_and_derives_id() -> None:
    event = build_event(make_record())
    assert event.id == "bandalos-chinos-d1"
    assert event.artist == "Bandalos Chinos"
    assert event.stage == "Norte"
    assert event.start_at == dt.datetime(2026, 2, 15, 1, 30, tzinfo=dt.timezone.utc)
    assert event.start_minutes == 510
    assert event.end_minutes == 570
    assert event.duration == 60


def test_events_are_immutable() -> None:
    event = build_event(make_record())
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.day = 2


def test_set_crossing_midnight_keeps_positive_duration() -> None:
    event = build_event(
        make_record(startAt="2026-02-15T02:30:00Z", endAt="2026-02-15T03:30:00Z")
    )
    assert event.start_minutes == 570
    assert event.end_minutes == 630
    assert event.duration == 60


def test_day_falls_back_to_legacy_field() -> None:
    record = make_record()
    del record["day"]
    record["dia"] = 2
    event = build_event(record)
    assert event.day == 2
    assert event.id == "bandalos-chinos-d2"


def test_missing_day_defaults_to_one_when_lenient() -> None:
    record = make_record()
    del record["day"]
    assert resolve_day(record) == 1
    with pytest.raises(InvalidEventRecord):
        resolve_day(record, strict=True)


def test_day_values_are_coerced() -> None:
    assert resolve_day({"day": "2"}) == 2
    assert resolve_day({"day": 2.0}) == 2
    assert resolve_day({"day": "sábado"}) == 1
    assert resolve_day({"day": True}) == 1
    with pytest.raises(InvalidEventRecord):
        resolve_day({"day": 0}, strict=True)


def test_malformed_timestamp_is_rejected() -> None:
    with pytest.raises(InvalidEventRecord):
        build_event(make_record(startAt="yesterday-ish"))


def test_non_positive_duration_is_rejected() -> None:
    with pytest.raises(InvalidEventRecord):
        build_event(make_record(startAt="2026-02-15T02:30:00Z", endAt="2026-02-15T01:30:00Z"))
    with pytest.raises(InvalidEventRecord):
        build_event(make_record(endAt="2026-02-15T01:30:00Z"))


def test_missing_artist_is_rejected() -> None:
    with pytest.raises(InvalidEventRecord):
        build_event(make_record(artist=""))


def test_lenient_build_skips_bad_records(caplog: pytest.LogCaptureFixture) -> None:
    records = [make_record(), make_record("Airbag", endAt="nope"), "not a record"]
    with caplog.at_level(logging.WARNING, logger="festival_events"):
        events = build_events(records)
    assert [event.id for event in events] == ["bandalos-chinos-d1"]
    assert "Skipping record 1" in caplog.text
    assert "Skipping record 2" in caplog.text


def test_strict_build_raises_on_first_bad_record() -> None:
    with pytest.raises(InvalidEventRecord):
        build_events([make_record(), make_record("Airbag", endAt="nope")], strict=True)


def test_colliding_ids_are_kept_unless_uniqueness_is_required() -> None:
    records = [make_record(), make_record("Bandalos  Chinos!", stage="Sur")]
    events = build_events(records)
    assert len(events) == 2
    assert find_duplicate_ids(events) == ["bandalos-chinos-d1"]

    with pytest.raises(DuplicateEventIdError) as excinfo:
        build_events(records, unique_ids=True)
    assert excinfo.value.duplicate_ids == ["bandalos-chinos-d1"]


def test_same_artist_on_different_days_does_not_collide() -> None:
    events = build_events([make_record(), make_record(day=2)])
    assert find_duplicate_ids(events) == []


def test_is_renderable_guards_hand_built_events() -> None:
    event = build_event(make_record())
    assert is_renderable(event)
    broken = dataclasses.replace(event, end_minutes=event.start_minutes, duration=0)
    assert not is_renderable(broken)


def test_load_raw_events(tmp_path) -> None:
    path = tmp_path / "lineup.json"
    path.write_text(json.dumps([make_record()]), encoding="utf-8")
    assert load_raw_events(path) == [make_record()]

    path.write_text(json.dumps({"artist": "x"}), encoding="utf-8")
    with pytest.raises(InvalidEventRecord):
        load_raw_events(path)


def test_event_to_dict() -> None:
    data = event_to_dict(build_event(make_record()))
    assert data["id"] == "bandalos-chinos-d1"
    assert data["startAt"] == "2026-02-15T01:30:00Z"
    assert data["endAt"] == "2026-02-15T02:30:00Z"
    assert data["startMinutes"] == 510
    assert data["duration"] == 60
    assert isinstance(build_event(make_record()), FestivalEvent)

import json
import sys

import pytest

import lineup_tool
from festival_config import load_config
from lineup_tool import (
    STATIC_LINKS,
    build_lineup,
    load_lineup,
    render_grid_html,
    render_site,
    render_timeline_html,
    schedules_to_json,
    transition_href,
    with_query,
)
from selection_state import SelectionState


def test_with_query() -> None:
    assert with_query("/day/1", SelectionState()) == "/day/1"
    state = SelectionState.from_ids({"b-d1", "a-d1"})
    assert with_query("/day/1", state) == "/day/1?ids=a-d1,b-d1"
    assert with_query("/list/1", SelectionState(), [("stage", "Montaña"), ("x", None)]) == "/list/1?stage=Monta%C3%B1a"


def test_blocks_link_to_the_toggled_selection(lineup) -> None:
    page = render_grid_html(lineup, SelectionState(), 1)
    assert 'href="/day/1?ids=bandalos-chinos-d1"' in page
    assert "Seleccioná los artistas" in page

    selected = SelectionState.from_ids({"bandalos-chinos-d1"})
    page = render_grid_html(lineup, selected, 1)
    assert "event-block--selected" in page
    assert 'href="/day/1"' in page
    assert 'href="/day/1?ids=airbag-d1,bandalos-chinos-d1"' in page
    assert "1 artista seleccionado" in page
    assert 'data-canonical="?ids=bandalos-chinos-d1"' in page


def test_share_button_carries_the_shared_url(lineup) -> None:
    page = render_grid_html(lineup, SelectionState.from_ids({"bandalos-chinos-d1"}), 1)
    assert 'data-copy="/?ids=bandalos-chinos-d1&amp;view=shared&amp;filter=selected"' in page
    assert "/api/calendar.ics?ids=bandalos-chinos-d1" in page
    assert "/api/agenda.pdf?ids=bandalos-chinos-d1" in page


def test_shared_view_is_read_only(lineup) -> None:
    state = SelectionState.from_ids({"airbag-d1"}, read_only=True)
    page = render_grid_html(lineup, state, 1)
    assert "Agenda compartida (1 artistas)" in page
    assert "event-block--readonly" in page
    assert 'aria-pressed="' not in page
    assert 'href="/day/1?ids=airbag-d1">Crear mi agenda' in page


def test_filter_hides_unselected_events(lineup) -> None:
    state = SelectionState.from_ids({"bandalos-chinos-d1"}, show_only_selected=True)
    page = render_grid_html(lineup, state, 1)
    assert "Bandalos Chinos" in page
    assert "Airbag" not in page
    assert "Conociendo Rusia" not in page


def test_filtered_day_without_picks_points_to_another_day(lineup) -> None:
    state = SelectionState.from_ids({"bandalos-chinos-d1"}, show_only_selected=True)
    page = render_grid_html(lineup, state, 2)
    assert "No hay artistas seleccionados este día" in page
    assert "Ir al Día 1" in page
    assert "Las Pelotas" not in page


def test_unknown_day_falls_back_to_the_first(lineup) -> None:
    page = render_grid_html(lineup, SelectionState(), 7)
    assert "<h1>Día 1</h1>" in page


def test_timeline_groups_by_hour_and_filters_by_stage(lineup) -> None:
    page = render_timeline_html(lineup, SelectionState(), 1)
    assert page.index("17:00") < page.index("Conociendo Rusia") < page.index("22:00")
    assert page.index("Bandalos Chinos") < page.index("Airbag")

    page = render_timeline_html(lineup, SelectionState(), 1, stage="Montaña")
    assert "Conociendo Rusia" in page
    assert "Bandalos Chinos" not in page

    page = render_timeline_html(lineup, SelectionState(), 1, stage="Nowhere")
    assert "Bandalos Chinos" in page


def test_timeline_reports_an_empty_filter(lineup) -> None:
    state = SelectionState.from_ids({"bandalos-chinos-d1"}, show_only_selected=True)
    page = render_timeline_html(lineup, state, 2)
    assert "No hay eventos para este filtro." in page
    assert "Las Pelotas" not in page

    page = render_timeline_html(lineup, SelectionState.from_ids({"bandalos-chinos-d1"}), 1)
    assert "1 artista en tu agenda" in page
    assert "timeline-card--selected" in page


def test_schedules_to_json(lineup) -> None:
    data = schedules_to_json(lineup)
    assert [day["day"] for day in data] == [1, 2]
    assert data[0]["startMinute"] == 180
    assert data[0]["endMinute"] == 720
    assert [stage["name"] for stage in data[1]["stages"]] == ["Norte", "Boomerang"]


def test_render_site(tmp_path, lineup) -> None:
    outputs = render_site(lineup, tmp_path)
    names = sorted(path.name for path in outputs)
    assert names == ["day-1.html", "day-2.html", "index.html", "lineup.json", "list-1.html", "list-2.html"]

    page = (tmp_path / "day-1.html").read_text(encoding="utf-8")
    assert "event-block--readonly" in page
    assert "<script>" not in page
    assert 'href="day-2.html"' in page

    state = SelectionState.from_ids({"airbag-d1"})
    outputs = render_site(lineup, tmp_path / "picked", state)
    assert tmp_path / "picked" / STATIC_LINKS.calendar in outputs


def test_load_lineup_errors(tmp_path) -> None:
    with pytest.raises(SystemExit):
        load_lineup(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_lineup(broken)

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps([{"artist": "X", "stage": "Norte", "startAt": "x", "endAt": "y"}]), encoding="utf-8")
    with pytest.raises(SystemExit):
        load_lineup(invalid, {"strict_ingestion": True})


def test_main_share_and_empty_export(tmp_path, sample_records, monkeypatch, capsys) -> None:
    data = tmp_path / "lineup.json"
    data.write_text(json.dumps(sample_records), encoding="utf-8")
    base = ["lineup-tool", "--data", str(data), "--config", str(tmp_path / "festival.json")]

    monkeypatch.setattr(sys, "argv", base + ["share", "--query", "ids=airbag-d1", "--base-url", "https://x.test/"])
    lineup_tool.main()
    assert capsys.readouterr().out.strip() == "https://x.test/?ids=airbag-d1&view=shared&filter=selected"

    monkeypatch.setattr(sys, "argv", base + ["ics", "--query", "ids=nope", "--out", str(tmp_path / "a.ics")])
    lineup_tool.main()
    assert "nothing to export" in capsys.readouterr().out
    assert not (tmp_path / "a.ics").exists()

    monkeypatch.setattr(sys, "argv", base + ["ics", "--query", "ids=airbag-d1", "--out", str(tmp_path / "a.ics")])
    lineup_tool.main()
    assert (tmp_path / "a.ics").read_bytes().count(b"BEGIN:VEVENT") == 1


def test_transition_href_follows_the_store() -> None:
    state = SelectionState.from_ids({"a-d1"})
    assert transition_href("/day/1", state, lambda store: store.toggle("b-d1")) == "/day/1?ids=a-d1,b-d1"
    assert transition_href("/day/1", state, lambda store: store.toggle("a-d1")) == "/day/1"
    shared = SelectionState.from_ids({"a-d1"}, read_only=True)
    assert transition_href("/day/1", shared, lambda store: store.toggle("b-d1")) == "/day/1?ids=a-d1&view=shared"
    assert (
        transition_href("/list/1", state, lambda store: store.set_show_only_selected(True), [("stage", "Sur")])
        == "/list/1?ids=a-d1&filter=selected&stage=Sur"
    )


def test_share_button_uses_configured_texts(sample_records) -> None:
    lineup = build_lineup(sample_records, {"share_title": "Mi Cosquín", "share_text": "Vamos & volvemos"})
    page = render_grid_html(lineup, SelectionState.from_ids({"airbag-d1"}), 1)
    assert 'data-share-title="Mi Cosquín"' in page
    assert 'data-share-text="Vamos &amp; volvemos"' in page
    assert 'data-share="/?ids=airbag-d1&amp;view=shared&amp;filter=selected"' in page


def test_summary_counts_only_known_events(lineup) -> None:
    state = SelectionState.from_ids({"airbag-d1", "gone-d1", "renamed-d2"})
    page = render_grid_html(lineup, state, 1)
    assert "Tu agenda (1)" in page
    assert page.count('class="selected-tag"') == 1


def test_main_writes_normalized_config(tmp_path, monkeypatch, capsys) -> None:
    source = tmp_path / "festival.json"
    source.write_text(json.dumps({"share_text": "Nos vemos", "grid_start_hour": 99}), encoding="utf-8")
    out = tmp_path / "normalized.json"
    argv = ["lineup-tool", "--data", str(tmp_path / "none.json"), "--config", str(source)]
    monkeypatch.setattr(sys, "argv", argv + ["config", "--out", str(out)])
    lineup_tool.main()
    assert "Wrote festival config" in capsys.readouterr().out
    written = load_config(out)
    assert written["share_text"] == "Nos vemos"
    assert written["grid_start_hour"] == 14

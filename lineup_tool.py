#!/usr/bin/env python3
"""Load a festival lineup and render the interactive timetable grid."""

from __future__ import annotations

import argparse
import html
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable
from urllib.parse import urlencode

import festival_config
from agenda_pdf import write_agenda_pdf
from calendar_export import google_calendar_url, write_ics
from festival_events import (
    DuplicateEventIdError,
    FestivalEvent,
    InvalidEventRecord,
    build_events,
    event_to_dict,
    load_raw_events,
)
from festival_schedule import (
    DaySchedule,
    build_schedules,
    filter_schedule,
    find_schedule,
    group_events_by_hour,
    selected_events,
)
from festival_time import event_local_time
from grid_layout import BlockGeometry, project_day
from selection_state import SelectionState, SelectionStore, filter_active
from url_state import decode_state, encode_state, share_url

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path("data/lineup.json")
DEFAULT_CONFIG_PATH = Path("festival.json")
LABEL_OFFSET = 8


@dataclass(frozen=True)
class Lineup:
    events: tuple[FestivalEvent, ...]
    schedules: tuple[DaySchedule, ...]
    config: dict = field(default_factory=dict)


@dataclass
class SiteLinks:
    day_page: str = "/day/{day}"
    list_page: str = "/list/{day}"
    calendar: str | None = "/api/calendar.ics"
    agenda_pdf: str | None = "/api/agenda.pdf"
    share_base: str = "/"
    interactive: bool = True


STATIC_LINKS = SiteLinks(
    day_page="day-{day}.html",
    list_page="list-{day}.html",
    calendar="agenda.ics",
    agenda_pdf=None,
    share_base="index.html",
    interactive=False,
)


def build_lineup(records: list[dict], config: dict | None = None) -> Lineup:
    config = festival_config.normalize_config(config)
    offset, start_hour = festival_config.get_time_settings(config)
    events = build_events(
        records,
        strict=config["strict_ingestion"],
        unique_ids=config["unique_ids"],
        utc_offset_hours=offset,
        grid_start_hour=start_hour,
    )
    schedules = build_schedules(
        events,
        days=festival_config.get_day_definitions(config),
        stage_order=config["stage_order"],
    )
    return Lineup(events=tuple(events), schedules=tuple(schedules), config=config)


def load_lineup(data_path: Path, config: dict | None = None) -> Lineup:
    if not data_path.exists():
        raise SystemExit(f"Lineup data not found: {data_path}")
    try:
        records = load_raw_events(data_path)
        lineup = build_lineup(records, config)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Lineup data is not valid JSON: {exc}")
    except (InvalidEventRecord, DuplicateEventIdError) as exc:
        raise SystemExit(f"Invalid lineup data: {exc}")
    logger.info("Loaded %d of %d records from %s", len(lineup.events), len(records), data_path)
    return lineup


def with_query(path: str, state: SelectionState, extra: Iterable[tuple[str, str]] = ()) -> str:
    query = encode_state(state)
    extra_query = urlencode([(key, value) for key, value in extra if value])
    query = "&".join(part for part in (query, extra_query) if part)
    return f"{path}?{query}" if query else path


def transition_href(
    page_path: str,
    state: SelectionState,
    change: Callable[[SelectionStore], object],
    extra: Iterable[tuple[str, str]] = (),
) -> str:
    """Link to the page showing the state ``change`` leaves behind."""
    store = SelectionStore(state)
    hrefs = [with_query(page_path, state, extra)]
    store.subscribe(lambda new_state: hrefs.append(with_query(page_path, new_state, extra)))
    change(store)
    return hrefs[-1]


BASE_CSS = """
@import url('https://fonts.googleapis.com/css2?family=Fraunces:wght@400;600&family=Space+Grotesk:wght@400;600&display=swap');
:root {
  --paper: #14131a;
  --ink: #f5f0e6;
  --accent: #c86b2d;
  --muted: #a39e96;
  --grid: rgba(245, 240, 230, 0.08);
  --event-bg: rgba(255, 253, 247, 0.06);
  --event-border: rgba(245, 240, 230, 0.2);
  --selected: #c86b2d;
}
* { box-sizing: border-box; }
body {
  margin: 0;
  background: #0a0a0f;
  color: var(--ink);
  font-family: 'Space Grotesk', 'Avenir Next', 'Segoe UI', sans-serif;
}
.page { max-width: 1400px; margin: 0 auto; padding: 24px; }
header h1 { font-family: 'Fraunces', 'Georgia', serif; font-size: 30px; margin: 0 0 4px; }
header .subtitle { font-size: 13px; letter-spacing: 1.6px; text-transform: uppercase; color: var(--muted); }
a { color: inherit; }
.day-tabs { display: flex; gap: 8px; margin: 18px 0; }
.day-tab {
  padding: 8px 14px;
  border-radius: 999px;
  border: 1px solid var(--event-border);
  text-decoration: none;
  font-size: 14px;
}
.day-tab[aria-selected="true"] { background: var(--accent); border-color: var(--accent); }
.action-panel, .action-panel-hint {
  display: flex;
  flex-wrap: wrap;
  align-items: center;
  gap: 12px;
  margin-bottom: 18px;
  font-size: 14px;
  color: var(--muted);
}
.btn {
  padding: 7px 12px;
  border-radius: 8px;
  border: 1px solid var(--event-border);
  text-decoration: none;
  color: var(--ink);
  background: transparent;
  font: inherit;
  cursor: pointer;
}
.btn--active { background: var(--accent); border-color: var(--accent); }
.timetable { display: flex; overflow-x: auto; }
.time-column { position: relative; width: 64px; flex-shrink: 0; margin-top: 48px; }
.time-label { position: absolute; right: 10px; font-size: 12px; color: var(--muted); }
.stage-column { min-width: 150px; flex: 1; }
.stage-header {
  height: 48px;
  display: flex;
  flex-direction: column;
  justify-content: center;
  padding: 0 8px;
}
.stage-label-small { font-size: 10px; text-transform: uppercase; color: var(--muted); letter-spacing: 1.4px; }
.stage-label-large { font-size: 15px; font-weight: 600; }
.stage-events { position: relative; border-left: 1px solid var(--grid); }
.grid-line { position: absolute; left: 0; right: 0; border-top: 1px solid var(--grid); }
.event-block {
  position: absolute;
  left: 4px;
  right: 4px;
  display: flex;
  flex-direction: column;
  padding: 6px 8px;
  border-radius: 8px;
  border: 1px solid var(--event-border);
  background: var(--event-bg);
  text-decoration: none;
  overflow: hidden;
}
.event-block--selected { border-color: var(--selected); background: rgba(200, 107, 45, 0.35); }
.event-block--readonly { cursor: default; }
.event-artist { font-size: 13px; font-weight: 600; }
.event-time { font-size: 11px; color: var(--muted); }
.empty-filtered-state { padding: 48px; text-align: center; color: var(--muted); }
.selected-summary { margin-top: 28px; }
.selected-tags { display: flex; flex-wrap: wrap; gap: 8px; }
.selected-tag { padding: 5px 10px; border-radius: 999px; border: 1px solid var(--selected); font-size: 13px; }
.selected-tag a { text-decoration: none; margin-left: 6px; }
.time-group__label { margin: 18px 0 8px; font-size: 13px; color: var(--muted); }
.timeline-card { display: block; padding: 10px 12px; margin-bottom: 8px; border-radius: 10px; border: 1px solid var(--event-border); text-decoration: none; }
.timeline-card--selected { border-color: var(--selected); }
.toast {
  position: fixed;
  bottom: 20px;
  left: 50%;
  transform: translateX(-50%);
  padding: 10px 16px;
  border-radius: 10px;
  background: #26242c;
  display: flex;
  gap: 12px;
  align-items: center;
}
.toast[hidden] { display: none; }
"""

PAGE_SCRIPT = """
(function () {
  var canonical = document.body.getAttribute("data-canonical");
  if (canonical !== null && window.location.search !== canonical) {
    history.replaceState(null, "", window.location.pathname + canonical + window.location.hash);
  }
  document.querySelectorAll("a[data-replace]").forEach(function (link) {
    link.addEventListener("click", function (ev) {
      ev.preventDefault();
      window.location.replace(link.href);
    });
  });
  var toast = document.getElementById("toast");
  function notify(message) {
    if (!toast) return;
    toast.querySelector(".toast-message").textContent = message;
    toast.hidden = false;
    setTimeout(function () { toast.hidden = true; }, 5000);
  }
  if (toast) {
    toast.querySelector(".toast-close").addEventListener("click", function () { toast.hidden = true; });
  }
  function fallbackCopy(text) {
    try {
      var ta = document.createElement("textarea");
      ta.value = text;
      document.body.appendChild(ta);
      ta.select();
      var ok = document.execCommand("copy");
      document.body.removeChild(ta);
      return ok;
    } catch (err) {
      return false;
    }
  }
  document.querySelectorAll("[data-share]").forEach(function (button) {
    if (!navigator.share) {
      button.hidden = true;
      return;
    }
    button.addEventListener("click", function () {
      navigator.share({
        title: button.getAttribute("data-share-title"),
        text: button.getAttribute("data-share-text"),
        url: new URL(button.getAttribute("data-share"), window.location.href).toString()
      }).catch(function () {});
    });
  });
  document.querySelectorAll("[data-copy]").forEach(function (button) {
    button.addEventListener("click", function () {
      var url = new URL(button.getAttribute("data-copy"), window.location.href).toString();
      var done = function () { notify("Enlace copiado. Podés compartirlo donde quieras."); };
      var failed = function () {
        if (fallbackCopy(url)) { done(); return; }
        notify("No se pudo copiar el enlace. Abrí el sitio en Chrome o Safari.");
      };
      if (navigator.clipboard && navigator.clipboard.writeText) {
        navigator.clipboard.writeText(url).then(done, failed);
      } else {
        failed();
      }
    });
  });
})();
"""


def page_head(title: str) -> list[str]:
    return [
        "<!DOCTYPE html>",
        "<html lang=\"es\">",
        "<head>",
        "<meta charset=\"utf-8\">",
        f"<title>{html.escape(title)}</title>",
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">",
        f"<style>{BASE_CSS}</style>",
        "</head>",
    ]


def page_tail(interactive: bool) -> list[str]:
    parts = []
    if interactive:
        parts.extend([
            "<div id=\"toast\" class=\"toast\" role=\"status\" hidden>",
            "<span class=\"toast-message\"></span>",
            "<button type=\"button\" class=\"btn toast-close\" aria-label=\"Cerrar notificación\">✕</button>",
            "</div>",
            f"<script>{PAGE_SCRIPT}</script>",
        ])
    parts.extend(["</div>", "</body>", "</html>"])
    return parts


def render_day_tabs(
    lineup: Lineup,
    active_day: int,
    state: SelectionState,
    page: str,
    links: SiteLinks,
) -> list[str]:
    parts = ["<nav class=\"day-tabs\" role=\"tablist\" aria-label=\"Días del festival\">"]
    for schedule in lineup.schedules:
        path = page.format(day=schedule.day)
        href = with_query(path, state) if links.interactive else path
        selected = "true" if schedule.day == active_day else "false"
        parts.append(
            f"<a class=\"day-tab\" role=\"tab\" aria-selected=\"{selected}\" "
            f"href=\"{html.escape(href)}\">Día {schedule.day} - {html.escape(schedule.label)}</a>"
        )
    parts.append("</nav>")
    return parts


def render_action_panel(
    lineup: Lineup,
    state: SelectionState,
    page_path: str,
    links: SiteLinks,
) -> list[str]:
    count = len(state.selected_ids)
    exports: list[str] = []
    if count:
        if links.interactive:
            share_href = html.escape(share_url(links.share_base, state.selected_ids))
            config = lineup.config or festival_config.normalize_config(None)
            exports.extend([
                f"<button type=\"button\" class=\"btn\" data-share=\"{share_href}\" "
                f"data-share-title=\"{html.escape(config['share_title'])}\" "
                f"data-share-text=\"{html.escape(config['share_text'])}\">Compartir</button>",
                f"<button type=\"button\" class=\"btn\" data-copy=\"{share_href}\">Copiar enlace</button>",
            ])
        id_query = encode_state(SelectionState(state.selected_ids))
        if links.calendar:
            href = f"{links.calendar}?{id_query}" if links.interactive else links.calendar
            exports.append(f"<a class=\"btn\" href=\"{html.escape(href)}\" download>Descargar archivo ICS</a>")
        if links.agenda_pdf:
            href = f"{links.agenda_pdf}?{id_query}" if links.interactive else links.agenda_pdf
            exports.append(f"<a class=\"btn\" href=\"{html.escape(href)}\" download>Descargar PDF</a>")

    if state.read_only:
        parts = [
            "<div class=\"action-panel\">",
            f"<span>Agenda compartida ({count} artistas)</span>",
            *exports,
        ]
        if links.interactive:
            href = transition_href(page_path, state, lambda store: store.set_read_only(False))
            parts.append(f"<a class=\"btn\" data-replace href=\"{html.escape(href)}\">Crear mi agenda</a>")
        parts.append("</div>")
        return parts

    if not count:
        return [
            "<div class=\"action-panel-hint\">",
            "<p>Seleccioná los artistas en la grilla para armar tu recorrido.</p>",
            "</div>",
        ]

    plural = "s" if count != 1 else ""
    parts = [
        "<div class=\"action-panel\">",
        f"<span>{count} artista{plural} seleccionado{plural}</span>",
    ]
    if links.interactive:
        showing_selected = filter_active(state)
        for label, value in (("Todos", False), ("Mi agenda", True)):
            href = transition_href(
                page_path, state, lambda store, value=value: store.set_show_only_selected(value)
            )
            active = " btn--active" if showing_selected == value else ""
            pressed = "true" if showing_selected == value else "false"
            parts.append(
                f"<a class=\"btn{active}\" data-replace aria-pressed=\"{pressed}\" "
                f"href=\"{html.escape(href)}\">{label}</a>"
            )
    parts.extend(exports)
    parts.append("</div>")
    return parts


def render_event_block(
    block: BlockGeometry,
    state: SelectionState,
    page_path: str,
    links: SiteLinks,
    offset: int,
) -> str:
    event = block.event
    start = event_local_time(event.start_at, offset)
    end = event_local_time(event.end_at, offset)
    classes = ["event-block"]
    if block.selected:
        classes.append("event-block--selected")
    label = f"{event.artist}, {start} a {end}, Escenario {event.stage}"
    if block.selected:
        label += ", seleccionado"
    time_html = f"<span class=\"event-time\">{start} - {end}</span>" if block.shows_time else ""
    style = f"top:{block.top:g}px; height:{block.height:g}px;"
    inner = f"<span class=\"event-artist\">{html.escape(event.artist)}</span>{time_html}"
    if state.read_only or not links.interactive:
        classes.append("event-block--readonly")
        return (
            f"<div class=\"{' '.join(classes)}\" style=\"{style}\" data-stage=\"{html.escape(event.stage)}\" "
            f"aria-label=\"{html.escape(label)}\">{inner}</div>"
        )
    href = transition_href(page_path, state, lambda store: store.toggle(event.id))
    return (
        f"<a class=\"{' '.join(classes)}\" style=\"{style}\" data-stage=\"{html.escape(event.stage)}\" "
        f"data-replace role=\"gridcell\" aria-pressed=\"{'true' if block.selected else 'false'}\" "
        f"aria-label=\"{html.escape(label)}\" href=\"{html.escape(href)}\">{inner}</a>"
    )


def render_selected_summary(
    lineup: Lineup,
    state: SelectionState,
    page_path: str,
    links: SiteLinks,
) -> list[str]:
    chosen = selected_events(lineup.events, state.selected_ids)
    if not chosen:
        return []
    parts = [
        "<section class=\"selected-summary\">",
        f"<h3>Tu agenda ({len(chosen)})</h3>",
        "<div class=\"selected-tags\">",
    ]
    for event in chosen:
        remove = ""
        if links.interactive and not state.read_only:
            href = transition_href(page_path, state, lambda store: store.toggle(event.id))
            remove = (
                f"<a data-replace href=\"{html.escape(href)}\" "
                f"aria-label=\"Quitar {html.escape(event.artist)}\">✕</a>"
            )
        gcal = html.escape(google_calendar_url(event, lineup.config))
        parts.append(
            f"<span class=\"selected-tag\" data-stage=\"{html.escape(event.stage)}\">"
            f"<a href=\"{gcal}\" target=\"_blank\" rel=\"noopener\">{html.escape(event.artist)}</a>{remove}</span>"
        )
    parts.extend(["</div>", "</section>"])
    return parts


def next_day(lineup: Lineup, day: int) -> int:
    days = [schedule.day for schedule in lineup.schedules]
    if day not in days:
        return days[0]
    return days[(days.index(day) + 1) % len(days)]


def render_grid_html(
    lineup: Lineup,
    state: SelectionState,
    day: int,
    links: SiteLinks | None = None,
) -> str:
    links = links or SiteLinks()
    config = lineup.config or festival_config.normalize_config(None)
    schedule = find_schedule(list(lineup.schedules), day)
    if schedule is None:
        return ""
    page_path = links.day_page.format(day=schedule.day)
    offset = config["utc_offset_hours"]
    visible = filter_schedule(schedule, state)
    layout = project_day(
        visible,
        state.selected_ids,
        pixels_per_minute=config["pixels_per_minute"],
        min_block_height=config["min_block_height"],
        grid_start_hour=config["grid_start_hour"],
    )
    canonical = with_query("", state)
    body_attr = f" data-canonical=\"{html.escape(canonical)}\"" if links.interactive else ""

    html_parts = page_head(f"{config['festival_name']} - Día {schedule.day}")
    html_parts.extend([
        f"<body{body_attr}>",
        "<div class=\"page\">",
        "<header>",
        f"<div class=\"subtitle\">{html.escape(config['festival_name'])}</div>",
        f"<h1>Día {schedule.day}</h1>",
        f"<div class=\"subtitle\">{html.escape(schedule.label)} · {html.escape(schedule.date)}</div>",
        "</header>",
    ])
    html_parts.extend(render_day_tabs(lineup, schedule.day, state, links.day_page, links))
    list_path = links.list_page.format(day=schedule.day)
    list_href = with_query(list_path, state) if links.interactive else list_path
    html_parts.append(f"<p><a class=\"btn\" href=\"{html.escape(list_href)}\">Ver timeline</a></p>")
    html_parts.extend(render_action_panel(lineup, state, page_path, links))

    if not visible.stages and filter_active(state):
        target = next_day(lineup, schedule.day)
        target_path = links.day_page.format(day=target)
        target_href = with_query(target_path, state) if links.interactive else target_path
        html_parts.extend([
            "<div class=\"empty-filtered-state\">",
            "<h3>No hay artistas seleccionados este día</h3>",
            f"<p>Tu agenda no tiene artistas del día {schedule.day}.</p>",
            f"<a class=\"btn\" href=\"{html.escape(target_href)}\">Ir al Día {target}</a>",
            "</div>",
        ])
    else:
        html_parts.extend([
            f"<div class=\"timetable\" role=\"grid\" aria-label=\"Grilla día {schedule.day}\">",
            f"<div class=\"time-column\" style=\"height:{layout.height:g}px;\">",
        ])
        for top, label in layout.gridlines:
            html_parts.append(
                f"<div class=\"time-label\" style=\"top:{top + LABEL_OFFSET:g}px;\">{label}</div>"
            )
        html_parts.append("</div>")
        for column in layout.columns:
            html_parts.extend([
                "<div class=\"stage-column\">",
                "<div class=\"stage-header\">",
                "<span class=\"stage-label-small\">Escenario</span>",
                f"<span class=\"stage-label-large\">{html.escape(column.stage)}</span>",
                "</div>",
                f"<div class=\"stage-events\" style=\"height:{layout.height:g}px;\">",
            ])
            for top, _label in layout.gridlines:
                html_parts.append(f"<div class=\"grid-line\" style=\"top:{top:g}px;\"></div>")
            for block in column.blocks:
                html_parts.append(render_event_block(block, state, page_path, links, offset))
            html_parts.extend(["</div>", "</div>"])
        html_parts.append("</div>")

    html_parts.extend(render_selected_summary(lineup, state, page_path, links))
    html_parts.extend(page_tail(links.interactive))
    return "\n".join(html_parts)


def render_timeline_html(
    lineup: Lineup,
    state: SelectionState,
    day: int,
    stage: str | None = None,
    links: SiteLinks | None = None,
) -> str:
    links = links or SiteLinks()
    config = lineup.config or festival_config.normalize_config(None)
    schedule = find_schedule(list(lineup.schedules), day)
    if schedule is None:
        return ""
    offset = config["utc_offset_hours"]
    page_path = links.list_page.format(day=schedule.day)
    visible = filter_schedule(schedule, state)
    stage_names = [column.name for column in visible.stages]
    if stage not in stage_names:
        stage = None
    events = [event for event in visible.events if stage is None or event.stage == stage]
    stage_param = [("stage", stage)] if stage else []
    canonical = with_query("", state, stage_param)
    body_attr = f" data-canonical=\"{html.escape(canonical)}\"" if links.interactive else ""

    html_parts = page_head(f"{config['festival_name']} - Día {schedule.day}")
    html_parts.extend([
        f"<body{body_attr}>",
        "<div class=\"page\">",
        "<header>",
        f"<div class=\"subtitle\">{html.escape(config['festival_name'])}</div>",
        f"<h1>Día {schedule.day}</h1>",
        f"<div class=\"subtitle\">{html.escape(schedule.label)}</div>",
        "</header>",
    ])
    html_parts.extend(render_day_tabs(lineup, schedule.day, state, links.list_page, links))
    grid_path = links.day_page.format(day=schedule.day)
    grid_href = with_query(grid_path, state) if links.interactive else grid_path
    html_parts.append(f"<p><a class=\"btn\" href=\"{html.escape(grid_href)}\">Ver grilla</a></p>")

    if links.interactive:
        chips = [("Todos", None)] + [(name, name) for name in stage_names]
        html_parts.append("<nav class=\"day-tabs\" aria-label=\"Escenarios\">")
        for label, value in chips:
            extra = [("stage", value)] if value else []
            href = with_query(page_path, state, extra)
            selected = "true" if value == stage else "false"
            html_parts.append(
                f"<a class=\"day-tab\" data-replace aria-selected=\"{selected}\" "
                f"href=\"{html.escape(href)}\">{html.escape(label)}</a>"
            )
        html_parts.append("</nav>")

    in_agenda = sum(1 for event in visible.events if event.id in state.selected_ids)
    if in_agenda:
        html_parts.append(f"<p>{in_agenda} artista{'s' if in_agenda != 1 else ''} en tu agenda</p>")

    for label, group in group_events_by_hour(events, offset):
        html_parts.append(f"<div class=\"time-group__label\">{label}</div>")
        for event in group:
            selected = event.id in state.selected_ids
            classes = "timeline-card timeline-card--selected" if selected else "timeline-card"
            text = (
                f"<strong>{html.escape(event.artist)}</strong> · "
                f"{event_local_time(event.start_at, offset)} - {event_local_time(event.end_at, offset)} · "
                f"{html.escape(event.stage)}"
            )
            if links.interactive and not state.read_only:
                href = transition_href(
                    page_path, state, lambda store: store.toggle(event.id), stage_param
                )
                html_parts.append(
                    f"<a class=\"{classes}\" data-replace aria-pressed=\"{'true' if selected else 'false'}\" "
                    f"href=\"{html.escape(href)}\">{text}</a>"
                )
            else:
                html_parts.append(f"<div class=\"{classes}\">{text}</div>")
    if not events:
        html_parts.append("<p class=\"empty-filtered-state\">No hay eventos para este filtro.</p>")

    html_parts.extend(page_tail(links.interactive))
    return "\n".join(html_parts)


def schedules_to_json(lineup: Lineup) -> list[dict]:
    return [
        {
            "day": schedule.day,
            "label": schedule.label,
            "date": schedule.date,
            "startMinute": schedule.start_minute,
            "endMinute": schedule.end_minute,
            "stages": [
                {"name": stage.name, "events": [event_to_dict(event) for event in stage.events]}
                for stage in schedule.stages
            ],
        }
        for schedule in lineup.schedules
    ]


def render_site(
    lineup: Lineup,
    outdir: Path,
    state: SelectionState | None = None,
) -> list[Path]:
    """Write a static snapshot of the grid for one selection state."""
    state = state or SelectionState()
    outdir.mkdir(parents=True, exist_ok=True)
    output_files: list[Path] = []

    for schedule in lineup.schedules:
        grid_path = outdir / STATIC_LINKS.day_page.format(day=schedule.day)
        grid_path.write_text(
            render_grid_html(lineup, state, schedule.day, STATIC_LINKS), encoding="utf-8"
        )
        list_path = outdir / STATIC_LINKS.list_page.format(day=schedule.day)
        list_path.write_text(
            render_timeline_html(lineup, state, schedule.day, links=STATIC_LINKS), encoding="utf-8"
        )
        output_files.extend([grid_path, list_path])

    chosen = selected_events(lineup.events, state.selected_ids)
    ics_path = write_ics(outdir / STATIC_LINKS.calendar, chosen, lineup.config)
    if ics_path:
        output_files.append(ics_path)

    data_path = outdir / "lineup.json"
    data_path.write_text(
        json.dumps(schedules_to_json(lineup), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    output_files.append(data_path)

    if lineup.schedules:
        index_path = outdir / "index.html"
        index_path.write_text(
            render_grid_html(lineup, state, lineup.schedules[0].day, STATIC_LINKS),
            encoding="utf-8",
        )
        output_files.append(index_path)
    return output_files


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a festival lineup as a timetable and export personal agendas."
    )
    parser.add_argument("--data", type=Path, default=DEFAULT_DATA_PATH, help="Lineup JSON")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Festival config JSON")
    parser.add_argument("--verbose", action="store_true", help="Log skipped records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render static timetable pages")
    render_parser.add_argument("--outdir", type=Path, default=Path("output"))
    render_parser.add_argument("--query", default="", help="Selection query string")

    ics_parser = subparsers.add_parser("ics", help="Export selected events as iCalendar")
    ics_parser.add_argument("--query", required=True, help="Selection query string")
    ics_parser.add_argument("--out", type=Path, default=Path("agenda.ics"))

    pdf_parser = subparsers.add_parser("pdf", help="Export selected events as a PDF agenda")
    pdf_parser.add_argument("--query", required=True, help="Selection query string")
    pdf_parser.add_argument("--out", type=Path, default=Path("agenda.pdf"))

    share_parser = subparsers.add_parser("share", help="Print the share link for a selection")
    share_parser.add_argument("--query", required=True, help="Selection query string")
    share_parser.add_argument("--base-url", default="http://127.0.0.1:8788/")

    config_parser = subparsers.add_parser("config", help="Write the normalized festival config")
    config_parser.add_argument("--out", type=Path, help="Destination (defaults to --config)")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = festival_config.load_config(args.config)

    if args.command == "config":
        out = args.out or args.config
        festival_config.save_config(out, config)
        print(f"Wrote festival config to {out}")
        return

    lineup = load_lineup(args.data, config)
    state = decode_state(args.query)
    chosen = selected_events(lineup.events, state.selected_ids)

    if args.command == "render":
        outputs = render_site(lineup, args.outdir, state)
        print(f"Rendered {len(outputs)} files in {args.outdir}")
        return

    if args.command == "share":
        print(share_url(args.base_url, state.selected_ids))
        return

    if not chosen:
        print("No selected events; nothing to export.")
        return

    if args.command == "ics":
        write_ics(args.out, chosen, lineup.config)
        print(f"Wrote {len(chosen)} events to {args.out}")
        return

    if args.command == "pdf":
        write_agenda_pdf(args.out, chosen, list(lineup.schedules), lineup.config)
        print(f"Wrote agenda with {len(chosen)} events to {args.out}")


if __name__ == "__main__":
    main()

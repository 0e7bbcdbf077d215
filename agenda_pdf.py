"""Render a personal agenda (the selected events) as a printable PDF."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from pathlib import Path

from fpdf import FPDF, XPos, YPos

from festival_config import DEFAULT_CONFIG
from festival_events import FestivalEvent
from festival_schedule import DaySchedule, sort_stages
from festival_time import event_local_time

STAGE_COLORS = {
    "Norte": (239, 68, 68),
    "Sur": (59, 130, 246),
    "Montaña": (16, 185, 129),
    "Boomerang": (245, 158, 11),
    "Paraguay": (168, 85, 247),
    "La Casita del Blues": (6, 182, 212),
    "La Plaza Electronic Stage": (236, 72, 153),
    "Sorpresa": (249, 115, 22),
}
DEFAULT_STAGE_COLOR = (107, 102, 95)


@dataclass
class AgendaConfig:
    page_size: str = "A4"
    margin: float = 14.0
    title_font_size: float = 18.0
    day_font_size: float = 13.0
    stage_font_size: float = 10.0
    body_font_size: float = 10.0
    row_height: float = 6.5
    accent_width: float = 1.6


def sanitize_text(value: str | None) -> str:
    if not value:
        return ""
    text = str(value)
    replacements = {
        "–": "-",
        "—": "-",
        "‘": "'",
        "’": "'",
        "“": "\"",
        "”": "\"",
        "®": "(R)",
        "¡": "",
    }
    for src, dest in replacements.items():
        text = text.replace(src, dest)
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    return " ".join(text.split())


def shorten_line(pdf: FPDF, text: str, max_width: float, suffix: str = "...") -> str:
    if pdf.get_string_width(text) <= max_width:
        return text
    trimmed = text
    while trimmed and pdf.get_string_width(trimmed + suffix) > max_width:
        trimmed = trimmed[:-1]
    if not trimmed:
        return suffix
    return trimmed.rstrip() + suffix


def group_by_day_and_stage(
    events: list[FestivalEvent], stage_order: list[str] | None = None
) -> dict[int, list[tuple[str, list[FestivalEvent]]]]:
    by_day: dict[int, dict[str, list[FestivalEvent]]] = {}
    for event in events:
        by_day.setdefault(event.day, {}).setdefault(event.stage, []).append(event)
    grouped: dict[int, list[tuple[str, list[FestivalEvent]]]] = {}
    for day in sorted(by_day):
        stages = by_day[day]
        grouped[day] = [
            (name, sorted(stages[name], key=lambda e: e.start_minutes))
            for name in sort_stages(stages.keys(), stage_order)
        ]
    return grouped


def ensure_room(pdf: FPDF, height: float, margin: float) -> None:
    if pdf.get_y() + height > pdf.h - margin:
        pdf.add_page()


def render_agenda(
    pdf: FPDF,
    events: list[FestivalEvent],
    schedules: list[DaySchedule],
    festival_config: dict | None = None,
    config: AgendaConfig | None = None,
) -> None:
    festival_config = festival_config or DEFAULT_CONFIG
    config = config or AgendaConfig()
    offset = festival_config["utc_offset_hours"]
    labels = {schedule.day: schedule.label for schedule in schedules}
    content_width = pdf.w - 2 * config.margin

    pdf.set_auto_page_break(auto=False, margin=0)
    pdf.set_margins(config.margin, config.margin, config.margin)
    pdf.add_page()
    pdf.set_font("Helvetica", style="B", size=config.title_font_size)
    pdf.cell(
        0,
        10,
        sanitize_text(festival_config["share_title"]),
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.set_font("Helvetica", size=config.body_font_size)
    pdf.set_text_color(107, 102, 95)
    count = len(events)
    pdf.cell(
        0,
        6,
        f"{count} artista{'s' if count != 1 else ''}",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.set_text_color(28, 27, 26)

    for day, stages in group_by_day_and_stage(events, festival_config["stage_order"]).items():
        ensure_room(pdf, 12 + config.row_height * 2, config.margin)
        pdf.ln(4)
        pdf.set_font("Helvetica", style="B", size=config.day_font_size)
        heading = f"Dia {day} - {labels.get(day, '')}".rstrip(" -")
        pdf.cell(0, 8, sanitize_text(heading), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        for stage, stage_events in stages:
            ensure_room(pdf, config.row_height * 2, config.margin)
            color = STAGE_COLORS.get(stage, DEFAULT_STAGE_COLOR)
            pdf.set_font("Helvetica", style="B", size=config.stage_font_size)
            pdf.set_text_color(*color)
            pdf.cell(
                0,
                config.row_height,
                sanitize_text(f"Escenario {stage}"),
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )
            pdf.set_text_color(28, 27, 26)
            pdf.set_font("Helvetica", size=config.body_font_size)
            for event in stage_events:
                ensure_room(pdf, config.row_height, config.margin)
                y = pdf.get_y()
                pdf.set_fill_color(*color)
                pdf.rect(config.margin, y + 0.8, config.accent_width, config.row_height - 1.6, style="F")
                time_range = (
                    f"{event_local_time(event.start_at, offset)} - "
                    f"{event_local_time(event.end_at, offset)}"
                )
                pdf.set_x(config.margin + config.accent_width + 2)
                pdf.cell(28, config.row_height, time_range)
                artist_width = content_width - config.accent_width - 2 - 28
                artist = shorten_line(pdf, sanitize_text(event.artist), artist_width)
                pdf.cell(artist_width, config.row_height, artist, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def write_agenda_pdf(
    path: Path,
    events: list[FestivalEvent],
    schedules: list[DaySchedule],
    festival_config: dict | None = None,
    config: AgendaConfig | None = None,
) -> Path | None:
    if not events:
        return None
    config = config or AgendaConfig()
    pdf = FPDF(orientation="P", unit="mm", format=config.page_size)
    render_agenda(pdf, events, schedules, festival_config, config)
    pdf.output(str(path))
    return path


def agenda_pdf_bytes(
    events: list[FestivalEvent],
    schedules: list[DaySchedule],
    festival_config: dict | None = None,
) -> bytes:
    config = AgendaConfig()
    pdf = FPDF(orientation="P", unit="mm", format=config.page_size)
    render_agenda(pdf, events, schedules, festival_config, config)
    return bytes(pdf.output())

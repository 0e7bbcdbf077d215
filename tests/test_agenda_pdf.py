from fpdf import FPDF

from agenda_pdf import (
    agenda_pdf_bytes,
    group_by_day_and_stage,
    sanitize_text,
    shorten_line,
    write_agenda_pdf,
)


def test_sanitize_text() -> None:
    assert sanitize_text("Montaña") == "Montana"
    assert sanitize_text("¡Mirá mi agenda!") == "Mira mi agenda!"
    assert sanitize_text("Fest® — 2026") == "Fest(R) - 2026"
    assert sanitize_text(None) == ""


def test_shorten_line_fits_width() -> None:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=10)
    text = "Los Fabulosos Cadillacs con invitados especiales"
    short = shorten_line(pdf, text, 30)
    assert short.endswith("...")
    assert pdf.get_string_width(short) <= 30
    assert shorten_line(pdf, "Airbag", 100) == "Airbag"


def test_group_by_day_and_stage(lineup) -> None:
    grouped = group_by_day_and_stage(list(lineup.events))
    assert list(grouped) == [1, 2]
    assert [stage for stage, _ in grouped[1]] == ["Norte", "Montaña"]
    assert [event.artist for event in grouped[1][0][1]] == ["Bandalos Chinos", "Airbag"]


def test_agenda_pdf_bytes(lineup) -> None:
    data = agenda_pdf_bytes(list(lineup.events), list(lineup.schedules))
    assert data.startswith(b"%PDF")


def test_write_agenda_pdf(tmp_path, lineup) -> None:
    assert write_agenda_pdf(tmp_path / "empty.pdf", [], list(lineup.schedules)) is None
    assert not (tmp_path / "empty.pdf").exists()

    path = write_agenda_pdf(tmp_path / "agenda.pdf", list(lineup.events[:2]), list(lineup.schedules))
    assert path.read_bytes().startswith(b"%PDF")

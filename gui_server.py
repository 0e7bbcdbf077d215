#!/usr/bin/env python3
"""Local server for browsing the lineup and building a shareable agenda."""

from __future__ import annotations

import argparse
import json
import logging
import re
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import festival_config
from agenda_pdf import agenda_pdf_bytes
from calendar_export import generate_ics
from festival_events import FestivalEvent
from festival_schedule import selected_events
from lineup_tool import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_DATA_PATH,
    Lineup,
    load_lineup,
    render_grid_html,
    render_timeline_html,
    schedules_to_json,
)
from url_state import decode_state, share_url

logger = logging.getLogger(__name__)

PAGE_RE = re.compile(r"^/(day|list)/(\d+)/?$")


class LineupHandler(BaseHTTPRequestHandler):
    def __init__(self, *args, lineup: Lineup, **kwargs):
        self.lineup = lineup
        super().__init__(*args, **kwargs)

    def log_message(self, format: str, *args) -> None:
        return

    def send_body(self, status: int, body: bytes, content_type: str, filename: str | None = None) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        if filename:
            self.send_header("Content-Disposition", f"attachment; filename=\"{filename}\"")
        self.end_headers()
        self.wfile.write(body)

    def send_json(self, status: int, payload: dict | list) -> None:
        body = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        self.send_body(status, body, "application/json")

    def send_html(self, content: str) -> None:
        self.send_body(200, content.encode("utf-8"), "text/html; charset=utf-8")

    def send_empty(self) -> None:
        self.send_response(204)
        self.end_headers()

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path == "/":
            self.handle_page("day", self.lineup.schedules[0].day, parsed.query)
            return
        match = PAGE_RE.match(parsed.path)
        if match:
            self.handle_page(match.group(1), int(match.group(2)), parsed.query)
            return
        if parsed.path == "/api/schedules":
            self.send_json(200, {"schedules": schedules_to_json(self.lineup)})
            return
        if parsed.path == "/api/calendar.ics":
            self.handle_calendar(parsed.query)
            return
        if parsed.path == "/api/agenda.pdf":
            self.handle_agenda_pdf(parsed.query)
            return
        if parsed.path == "/api/share":
            self.handle_share(parsed.query)
            return
        self.send_error(404, "Unknown endpoint")

    def handle_page(self, kind: str, day: int, query: str) -> None:
        state = decode_state(query)
        if kind == "list":
            stage = parse_qs(query).get("stage", [""])[0] or None
            self.send_html(render_timeline_html(self.lineup, state, day, stage))
            return
        self.send_html(render_grid_html(self.lineup, state, day))

    def chosen_events(self, query: str) -> list[FestivalEvent]:
        state = decode_state(query)
        return selected_events(self.lineup.events, state.selected_ids)

    def handle_calendar(self, query: str) -> None:
        chosen = self.chosen_events(query)
        if not chosen:
            self.send_empty()
            return
        body = generate_ics(chosen, self.lineup.config).encode("utf-8")
        self.send_body(200, body, "text/calendar; charset=utf-8", "agenda.ics")

    def handle_agenda_pdf(self, query: str) -> None:
        chosen = self.chosen_events(query)
        if not chosen:
            self.send_empty()
            return
        body = agenda_pdf_bytes(chosen, list(self.lineup.schedules), self.lineup.config)
        self.send_body(200, body, "application/pdf", "agenda.pdf")

    def handle_share(self, query: str) -> None:
        state = decode_state(query)
        host = self.headers.get("Host") or "%s:%s" % self.server.server_address[:2]
        url = share_url(f"http://{host}/", state.selected_ids)
        config = self.lineup.config or festival_config.normalize_config(None)
        self.send_json(
            200,
            {
                "url": url,
                "count": len(state.selected_ids),
                "title": config["share_title"],
                "text": config["share_text"],
            },
        )


def make_server(host: str, port: int, lineup: Lineup) -> ThreadingHTTPServer:
    if not lineup.schedules:
        raise SystemExit("No festival days configured")
    handler = lambda *args, **kwargs: LineupHandler(*args, lineup=lineup, **kwargs)
    return ThreadingHTTPServer((host, port), handler)


def run_server(host: str, port: int, data_path: Path, config_path: Path) -> None:
    config = festival_config.load_config(config_path)
    lineup = load_lineup(data_path, config)
    logger.info("Loaded %d events", len(lineup.events))
    server = make_server(host, port, lineup)
    print(f"Lineup running at http://{host}:{port}")
    server.serve_forever()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the lineup planner server.")
    parser.add_argument("--data", type=Path, default=DEFAULT_DATA_PATH)
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8788)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    run_server(args.host, args.port, args.data, args.config)


if __name__ == "__main__":
    main()

"""Query-string codec for SelectionState.

The URL is the only place a selection is persisted, so the encoding is
canonical: ``ids`` (sorted, comma-joined), ``view=shared`` and
``filter=selected``, each omitted when it carries no information. Decoding
is forgiving; anything unrecognized falls back to the empty, editable,
unfiltered state instead of failing.
"""

from __future__ import annotations

from typing import Iterable, Mapping
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from selection_state import SelectionState, filter_active

IDS_PARAM = "ids"
VIEW_PARAM = "view"
FILTER_PARAM = "filter"
SHARED_VIEW = "shared"
SELECTED_FILTER = "selected"
STATE_PARAMS = (IDS_PARAM, VIEW_PARAM, FILTER_PARAM)


def state_params(state: SelectionState) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    if state.selected_ids:
        params.append((IDS_PARAM, ",".join(sorted(state.selected_ids))))
    if state.read_only:
        params.append((VIEW_PARAM, SHARED_VIEW))
    if filter_active(state):
        params.append((FILTER_PARAM, SELECTED_FILTER))
    return params


def encode_state(state: SelectionState) -> str:
    return urlencode(state_params(state), safe=",")


def _first_value(params: Mapping, key: str) -> str:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_ids(value: str) -> frozenset[str]:
    return frozenset(token.strip() for token in value.split(",") if token.strip())


def decode_state(query: str | Mapping | None) -> SelectionState:
    if query is None:
        return SelectionState()
    if isinstance(query, str):
        params: Mapping = parse_qs(query.lstrip("?"), keep_blank_values=True)
    else:
        params = query
    return SelectionState(
        selected_ids=parse_ids(_first_value(params, IDS_PARAM)),
        read_only=_first_value(params, VIEW_PARAM) == SHARED_VIEW,
        show_only_selected=_first_value(params, FILTER_PARAM) == SELECTED_FILTER,
    )


def update_url(url: str, state: SelectionState) -> str:
    """Rewrite the state parameters of ``url``, keeping everything else."""
    parts = urlsplit(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in STATE_PARAMS
    ]
    query = urlencode(kept + state_params(state), safe=",")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def share_url(url: str, selected_ids: Iterable[str]) -> str:
    state = SelectionState.from_ids(selected_ids, read_only=True, show_only_selected=True)
    return update_url(url, state)

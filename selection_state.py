"""In-memory selection state: picked events plus the two view flags."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Callable, Iterable

Listener = Callable[["SelectionState"], None]


@dataclass(frozen=True)
class SelectionState:
    selected_ids: frozenset[str] = field(default_factory=frozenset)
    read_only: bool = False
    show_only_selected: bool = False

    @classmethod
    def from_ids(
        cls,
        ids: Iterable[str],
        read_only: bool = False,
        show_only_selected: bool = False,
    ) -> SelectionState:
        return cls(frozenset(ids), read_only, show_only_selected)


def filter_active(state: SelectionState) -> bool:
    """Filtering an empty selection would hide everything, so it never applies."""
    return state.show_only_selected and bool(state.selected_ids)


class SelectionStore:
    """Owns the current SelectionState; every change goes through here.

    Listeners run after the new state is in place, so anything that
    re-encodes the URL from them sees the mutation it is reacting to.
    """

    def __init__(self, state: SelectionState | None = None) -> None:
        self._state = state or SelectionState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SelectionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: SelectionState) -> bool:
        if state == self._state:
            return False
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return True

    def is_selected(self, event_id: str) -> bool:
        return event_id in self._state.selected_ids

    def toggle(self, event_id: str) -> bool:
        if self._state.read_only:
            return False
        ids = set(self._state.selected_ids)
        if event_id in ids:
            ids.remove(event_id)
        else:
            ids.add(event_id)
        return self._commit(dataclasses.replace(self._state, selected_ids=frozenset(ids)))

    def set_read_only(self, read_only: bool) -> bool:
        if read_only:
            raise ValueError("Read-only mode can only be entered from a shared URL")
        return self._commit(dataclasses.replace(self._state, read_only=False))

    def set_show_only_selected(self, show_only_selected: bool) -> bool:
        return self._commit(
            dataclasses.replace(self._state, show_only_selected=bool(show_only_selected))
        )

    def replace(self, state: SelectionState) -> bool:
        return self._commit(state)

"""
Enabled/disabled state of the scenario events.

Enable requests can come from outside the processing task (UI, API, toggle
actions). They are queued and only applied by ``apply_pending()``, which the
processor calls at the start of each pass, so the event set never changes in
the middle of a pass.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from loguru import logger

from ...core.constants import ToggleType
from .models import Event


class ScenarioState:
    def __init__(self, events: Iterable[Event]) -> None:
        # Stable priority order; declared order breaks ties
        indexed = list(enumerate(events))
        indexed.sort(key=lambda item: (item[1].priority, item[0]))
        self._events: List[Event] = [event for _, event in indexed]
        self._enabled: Dict[str, bool] = {event.id: event.enabled for event in self._events}
        self._initial = dict(self._enabled)
        self._pending: List[tuple] = []
        self._lock = threading.Lock()
        self._log = logger.bind(module="ScenarioState")

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def get_event(self, event_id: str) -> Optional[Event]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def is_enabled(self, event_id: str) -> bool:
        return self._enabled.get(event_id, False)

    def get_enabled_events(self) -> List[Event]:
        return [event for event in self._events if self._enabled[event.id]]

    def are_all_events_disabled(self) -> bool:
        return not any(self._enabled.values())

    def request_toggle(self, event_id: str, toggle: ToggleType) -> bool:
        """Queue an enable/disable/toggle of an event for the next pass.

        Returns False when the event is unknown.
        """
        if event_id not in self._enabled:
            self._log.warning("Toggle requested for unknown event: {}", event_id)
            return False
        with self._lock:
            self._pending.append((event_id, ToggleType(toggle)))
        return True

    def set_enabled(self, event_id: str, enabled: bool) -> bool:
        return self.request_toggle(event_id, ToggleType.ENABLE if enabled else ToggleType.DISABLE)

    def apply_pending(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
        for event_id, toggle in pending:
            if toggle == ToggleType.ENABLE:
                value = True
            elif toggle == ToggleType.DISABLE:
                value = False
            else:
                value = not self._enabled[event_id]
            if self._enabled[event_id] != value:
                self._log.debug("Event {} {}", event_id, "enabled" if value else "disabled")
            self._enabled[event_id] = value

    def reset(self) -> None:
        """Restore the declared enabled flags and drop pending toggles."""
        with self._lock:
            self._pending = []
        self._enabled = dict(self._initial)


__all__ = ["ScenarioState"]

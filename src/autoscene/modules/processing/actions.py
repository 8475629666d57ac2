"""
Action dispatch for matched events.

``toggle_event`` actions change the scenario event set and are handled here.
Everything else goes to the injected performer, which owns input injection.
"""
from __future__ import annotations

import inspect
import random
from dataclasses import replace
from typing import Any, Awaitable, Callable, List, Optional, Union

from loguru import logger

from ...core.constants import RANDOMIZATION_POSITION_MAX_OFFSET_PX, ActionType, ToggleType
from ..detection.types import Point
from ..scenario.models import Action
from ..scenario.state import ScenarioState


ActionPerformer = Callable[[List[Action], Optional[Point]], Union[None, Awaitable[None]]]

# Coordinate params jittered when randomizing, per action type
_POSITION_PARAMS = {
    ActionType.CLICK.value: (("x", "y"),),
    ActionType.SWIPE.value: (("from_x", "from_y"), ("to_x", "to_y")),
}


def _jitter(value: Any) -> Any:
    if not isinstance(value, int) or isinstance(value, bool):
        return value
    offset = RANDOMIZATION_POSITION_MAX_OFFSET_PX
    return max(0, value + random.randint(-offset, offset))


class ActionExecutor:
    def __init__(
        self,
        performer: ActionPerformer,
        scenario_state: ScenarioState,
        randomize: bool = False,
    ) -> None:
        self.performer = performer
        self.scenario_state = scenario_state
        self.randomize = randomize
        self._log = logger.bind(module="ActionExecutor")

    def _randomized(self, action: Action) -> Action:
        keys = _POSITION_PARAMS.get(action.type)
        if not keys:
            return action
        params = dict(action.params)
        for pair in keys:
            for key in pair:
                if key in params:
                    params[key] = _jitter(params[key])
        return replace(action, params=params)

    def _toggle(self, action: Action) -> None:
        event_id = action.params.get("event")
        raw = action.params.get("toggle", ToggleType.TOGGLE.value)
        try:
            toggle = ToggleType(raw)
        except ValueError:
            self._log.warning("Skipping toggle action {}: invalid toggle {!r}", action.name, raw)
            return
        self.scenario_state.request_toggle(event_id, toggle)

    async def execute_actions(self, actions: List[Action], position: Optional[Point]) -> None:
        forwarded: List[Action] = []
        for action in actions:
            if action.type == ActionType.TOGGLE_EVENT.value:
                self._toggle(action)
            elif self.randomize:
                forwarded.append(self._randomized(action))
            else:
                forwarded.append(action)

        if not forwarded:
            return
        self._log.debug("Dispatching {} action(s) at {}", len(forwarded), position)
        result = self.performer(forwarded, position)
        if inspect.isawaitable(result):
            await result


__all__ = ["ActionPerformer", "ActionExecutor"]

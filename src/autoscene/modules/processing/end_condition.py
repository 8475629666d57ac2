"""
End condition bookkeeping.

Counts the executions of the events referenced by the scenario end
conditions and requests the scenario stop once the end conditions, combined
with the scenario operator, are reached.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from loguru import logger

from ...core.constants import ConditionOperator
from ..scenario.models import EndCondition, Event


class EndConditionTracker:
    def __init__(
        self,
        end_conditions: Iterable[EndCondition],
        operator: ConditionOperator,
        on_stop_requested: Callable[[], None],
    ) -> None:
        self.end_conditions: List[EndCondition] = list(end_conditions)
        self.operator = ConditionOperator(operator)
        self.on_stop_requested = on_stop_requested
        self._counts: List[int] = [0] * len(self.end_conditions)
        self._completed = False
        self._log = logger.bind(module="EndConditionTracker")

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def counts(self) -> Dict[str, int]:
        """Current execution count per referenced event."""
        counts: Dict[str, int] = {}
        for end_condition, count in zip(self.end_conditions, self._counts):
            counts[end_condition.event_id] = count
        return counts

    def _is_reached(self, index: int) -> bool:
        return self._counts[index] >= self.end_conditions[index].executions

    def on_event_triggered(self, event: Event) -> bool:
        """Record an execution of ``event``.

        Returns True when the scenario must stop, in which case the stop
        callback has been called (only the first time).
        """
        if self._completed:
            return True
        if not self.end_conditions:
            return False

        for index, end_condition in enumerate(self.end_conditions):
            if end_condition.event_id == event.id:
                self._counts[index] += 1

        reached = [self._is_reached(i) for i in range(len(self.end_conditions))]
        if self.operator == ConditionOperator.AND:
            done = all(reached)
        else:
            done = any(reached)
        if not done:
            return False

        self._completed = True
        self._log.info("End conditions reached ({}): {}", self.operator.value, self.counts)
        self.on_stop_requested()
        return True

    def reset(self) -> None:
        """Restart counting, for a new run of the scenario."""
        self._counts = [0] * len(self.end_conditions)
        self._completed = False


__all__ = ["EndConditionTracker"]

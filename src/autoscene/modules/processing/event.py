"""
Event evaluation: combines the event conditions with its operator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...core.constants import ConditionOperator
from ..detection.types import DetectionResult
from ..scenario.models import Condition, Event
from .cancellation import checkpoint
from .condition import ConditionEvaluator
from .progress import NullProgressListener, ProgressListener


@dataclass(frozen=True)
class ProcessorResult:
    """Result of an event evaluation.

    Attributes:
        event_matched: True if the event conditions are fulfilled
        event: the evaluated event, None if evaluation was impossible
        condition: the condition that decided the result
        detection_result: the detection of that condition
    """
    event_matched: bool
    event: Optional[Event] = None
    condition: Optional[Condition] = None
    detection_result: Optional[DetectionResult] = None


class EventEvaluator:
    def __init__(
        self,
        condition_evaluator: ConditionEvaluator,
        progress: Optional[ProgressListener] = None,
    ) -> None:
        self.condition_evaluator = condition_evaluator
        self.progress = progress or NullProgressListener()

    async def evaluate(self, event: Event) -> ProcessorResult:
        """Verify the conditions of ``event`` on the current frame.

        Conditions are checked in order and the check stops as soon as the
        operator result is known: first unfulfilled condition for AND, first
        fulfilled one for OR.
        """
        conditions = event.conditions
        last_index = len(conditions) - 1

        for index, condition in enumerate(conditions):
            self.progress.on_condition_processing_started(condition)
            result = await self.condition_evaluator.evaluate(condition)
            if result is None:
                return ProcessorResult(False)
            self.progress.on_condition_processing_completed(result)

            fulfilled = result.is_detected == condition.should_be_detected
            if event.condition_operator == ConditionOperator.AND and not fulfilled:
                return ProcessorResult(False, event, condition, result)
            if event.condition_operator == ConditionOperator.OR and fulfilled:
                return ProcessorResult(True, event, condition, result)

            # All conditions fulfilled for AND, none for OR
            if index == last_index:
                return ProcessorResult(
                    event.condition_operator == ConditionOperator.AND,
                    event,
                    condition,
                    result,
                )

            await checkpoint()

        # No conditions
        return ProcessorResult(False)


__all__ = ["ProcessorResult", "EventEvaluator"]

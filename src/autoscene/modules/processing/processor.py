"""
Scenario processor: one detection pass per screen frame.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

import numpy as np
from loguru import logger

from ...core.constants import ConditionOperator
from ..detection.types import ImageDetector
from ..scenario.models import EndCondition, Event
from ..scenario.state import ScenarioState
from ..vision.utils import ImageLike, to_frame
from .actions import ActionExecutor, ActionPerformer
from .cancellation import checkpoint
from .condition import BitmapSupplier, ConditionEvaluator
from .end_condition import EndConditionTracker
from .event import EventEvaluator, ProcessorResult
from .progress import NullProgressListener, ProgressListener


class ScenarioProcessor:
    """Process screen frames and execute the first event detected on each.

    Args:
        image_detector: the detector for images
        detection_quality: the quality of the detection (longest frame side)
        randomize: jitter the action coordinates a bit
        events: the scenario events, in priority order
        bitmap_supplier: provides the condition templates
        action_performer: executes the actions of a detected event
        end_condition_operator: operator applied between the end conditions
        end_conditions: the scenario end conditions
        on_stop_requested: called when an end condition is reached or all
            events are disabled
        progress_listener: detection progress observer, optional
    """

    def __init__(
        self,
        image_detector: ImageDetector,
        detection_quality: int,
        randomize: bool,
        events: Iterable[Event],
        bitmap_supplier: BitmapSupplier,
        action_performer: ActionPerformer,
        end_condition_operator: ConditionOperator,
        end_conditions: Iterable[EndCondition],
        on_stop_requested: Callable[[], None],
        progress_listener: Optional[ProgressListener] = None,
    ) -> None:
        self.image_detector = image_detector
        self.detection_quality = detection_quality
        self.on_stop_requested = on_stop_requested
        self.progress = progress_listener or NullProgressListener()

        self.scenario_state = ScenarioState(events)
        self.action_executor = ActionExecutor(action_performer, self.scenario_state, randomize)
        self.end_condition_tracker = EndConditionTracker(
            end_conditions, end_condition_operator, on_stop_requested
        )
        self.event_evaluator = EventEvaluator(
            ConditionEvaluator(image_detector, bitmap_supplier),
            self.progress,
        )

        # Screen metrics must be computed on the first frame
        self._invalidate_screen_metrics = True
        # Kept to avoid allocating a new frame buffer every pass
        self._processed_frame: Optional[np.ndarray] = None
        self._log = logger.bind(module="ScenarioProcessor")

    def invalidate_screen_metrics(self) -> None:
        """Recompute the detector screen metrics at the next pass."""
        self._invalidate_screen_metrics = True

    def reset(self) -> None:
        """Prepare a new run: end condition counts and event states back to
        their initial values, screen metrics recomputed on the next frame."""
        self.end_condition_tracker.reset()
        self.scenario_state.reset()
        self._invalidate_screen_metrics = True

    def _prepare_frame(self, frame: ImageLike) -> None:
        self._processed_frame = to_frame(frame, self._processed_frame)
        if self._invalidate_screen_metrics:
            self.image_detector.set_screen_metrics(self._processed_frame, float(self.detection_quality))
            self._invalidate_screen_metrics = False
        self.image_detector.setup_detection(self._processed_frame)

    async def process(self, frame: ImageLike) -> Optional[ProcessorResult]:
        """Run one pass on ``frame``.

        Returns:
            the result of the event executed during this pass, None if no
            event was detected.
        """
        self.scenario_state.apply_pending()
        if self.scenario_state.are_all_events_disabled():
            self._log.info("All events are disabled, requesting stop")
            self.on_stop_requested()
            return None

        self.progress.on_image_processing_started()
        self._prepare_frame(frame)

        executed: Optional[ProcessorResult] = None
        for event in self.scenario_state.get_enabled_events():
            # Should have been rejected upstream
            if not event.conditions:
                continue

            self.progress.on_event_processing_started(event)
            result = await self.event_evaluator.evaluate(event)
            self.progress.on_event_processing_completed(result)

            if result.event_matched:
                position = result.detection_result.position if result.detection_result else None
                self._log.info("Event detected: {} at {}", event.name, position)
                await self.action_executor.execute_actions(event.actions, position)

                if self.end_condition_tracker.on_event_triggered(event):
                    return result

                executed = result
                break

            await checkpoint()

        self.progress.on_image_processing_completed()
        return executed


__all__ = ["ScenarioProcessor"]

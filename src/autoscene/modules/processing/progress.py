"""
Processing progress observers.

Observers are purely informational: nothing they do changes the outcome of a
pass. ``NullProgressListener`` is used when no observer is given.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..detection.types import DetectionResult
from ..scenario.models import Condition, Event

if TYPE_CHECKING:
    from .event import ProcessorResult


class ProgressListener:
    """Base observer, every hook is a no-op."""

    def on_image_processing_started(self) -> None:
        pass

    def on_event_processing_started(self, event: Event) -> None:
        pass

    def on_condition_processing_started(self, condition: Condition) -> None:
        pass

    def on_condition_processing_completed(self, result: DetectionResult) -> None:
        pass

    def on_event_processing_completed(self, result: "ProcessorResult") -> None:
        pass

    def on_image_processing_completed(self) -> None:
        pass


class NullProgressListener(ProgressListener):
    pass


class LoggingProgressListener(ProgressListener):
    """Traces the pass at DEBUG level."""

    def __init__(self) -> None:
        self._log = logger.bind(module="Progress")

    def on_image_processing_started(self) -> None:
        self._log.debug("frame processing started")

    def on_event_processing_started(self, event: Event) -> None:
        self._log.debug("event {} started", event.id)

    def on_condition_processing_started(self, condition: Condition) -> None:
        self._log.debug("condition {} started", condition.name)

    def on_condition_processing_completed(self, result: DetectionResult) -> None:
        self._log.debug(
            "condition completed: detected={} confidence={:.3f} position={}",
            result.is_detected,
            result.confidence,
            result.position,
        )

    def on_event_processing_completed(self, result: "ProcessorResult") -> None:
        event_id = result.event.id if result.event else None
        self._log.debug("event {} completed: matched={}", event_id, result.event_matched)

    def on_image_processing_completed(self) -> None:
        self._log.debug("frame processing completed")


__all__ = ["ProgressListener", "NullProgressListener", "LoggingProgressListener"]

"""
Single condition evaluation against the frame loaded in the detector.
"""
from __future__ import annotations

from typing import Awaitable, Callable, Dict, Optional

import numpy as np
from loguru import logger

from ...core.constants import DetectionType
from ..detection.types import DetectionResult, ImageDetector
from ..scenario.models import Condition


BitmapSupplier = Callable[[str, int, int], Awaitable[Optional[np.ndarray]]]


class UnknownDetectionTypeError(ValueError):
    """A condition carries a detection type no strategy handles."""


def _detect_exact(detector: ImageDetector, condition: Condition, bitmap: np.ndarray) -> DetectionResult:
    return detector.detect_in_area(bitmap, condition.area, condition.threshold)


def _detect_whole_screen(detector: ImageDetector, condition: Condition, bitmap: np.ndarray) -> DetectionResult:
    return detector.detect_on_screen(bitmap, condition.threshold)


_STRATEGIES: Dict[DetectionType, Callable[[ImageDetector, Condition, np.ndarray], DetectionResult]] = {
    DetectionType.EXACT: _detect_exact,
    DetectionType.WHOLE_SCREEN: _detect_whole_screen,
}

def _check_strategies(strategies: Dict[DetectionType, Callable]) -> None:
    missing = [t.value for t in DetectionType if t not in strategies]
    if missing:
        raise RuntimeError(f"missing detection strategy for: {missing}")


# Every detection type must have a strategy
_check_strategies(_STRATEGIES)


class ConditionEvaluator:
    def __init__(self, detector: ImageDetector, bitmap_supplier: BitmapSupplier) -> None:
        self.detector = detector
        self.bitmap_supplier = bitmap_supplier
        self._log = logger.bind(module="ConditionEvaluator")

    async def evaluate(self, condition: Condition) -> Optional[DetectionResult]:
        """Detect the condition on the current frame.

        Returns None when the condition cannot be evaluated (no template, or
        the template could not be supplied).

        Raises:
            UnknownDetectionTypeError: the condition detection type is invalid.
        """
        if not condition.path:
            self._log.debug("Condition {} has no template", condition.name)
            return None

        bitmap = await self.bitmap_supplier(condition.path, condition.area.width, condition.area.height)
        if bitmap is None:
            self._log.debug("Template unavailable for condition {}: {}", condition.name, condition.path)
            return None

        strategy = _STRATEGIES.get(condition.detection_type)
        if strategy is None:
            raise UnknownDetectionTypeError(
                f"Unexpected detection type {condition.detection_type!r} for condition {condition.name}"
            )
        return strategy(self.detector, condition, bitmap)


__all__ = ["BitmapSupplier", "ConditionEvaluator", "UnknownDetectionTypeError"]

"""
OpenCV implementation of the ImageDetector protocol.

The frame is downscaled so that its longest side is at most
``detection_quality`` pixels, converted to grayscale once per frame, and
templates are scaled by the same ratio before normalized template matching.
Positions are reported back in screen coordinates.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
from loguru import logger

from ..vision.template import best_match
from ..vision.utils import resize_to, scale, to_gray
from .types import Area, DetectionResult


def similarity_bound(threshold: int) -> float:
    """Convert a difference percentage (0-100) into a minimum match score."""
    return 1.0 - max(0, min(100, int(threshold))) / 100.0


class TemplateImageDetector:
    def __init__(self) -> None:
        self._ratio: float = 1.0
        self._screen_size: Optional[tuple] = None
        self._frame: Optional[np.ndarray] = None
        self._log = logger.bind(module="TemplateImageDetector")

    @property
    def scale_ratio(self) -> float:
        return self._ratio

    def set_screen_metrics(self, screen: np.ndarray, detection_quality: float) -> None:
        h, w = screen.shape[:2]
        longest = max(w, h)
        self._ratio = 1.0 if longest <= detection_quality else float(detection_quality) / longest
        self._screen_size = (w, h)
        self._log.info("Screen metrics set: {}x{} quality={} ratio={:.3f}", w, h, detection_quality, self._ratio)

    def setup_detection(self, screen: np.ndarray) -> None:
        if self._screen_size is None:
            raise RuntimeError("set_screen_metrics must be called before setup_detection")
        self._frame = scale(to_gray(screen), self._ratio)

    def _current_frame(self) -> np.ndarray:
        if self._frame is None:
            raise RuntimeError("setup_detection must be called before detecting")
        return self._frame

    def _to_screen(self, x: float, y: float) -> tuple:
        return (int(round(x / self._ratio)), int(round(y / self._ratio)))

    def detect_in_area(self, template: np.ndarray, area: Area, threshold: int) -> DetectionResult:
        frame = self._current_frame()
        fh, fw = frame.shape[:2]
        x1 = max(0, int(area.x * self._ratio))
        y1 = max(0, int(area.y * self._ratio))
        x2 = min(fw, int(round(area.right * self._ratio)))
        y2 = min(fh, int(round(area.bottom * self._ratio)))
        if x2 <= x1 or y2 <= y1:
            return DetectionResult(is_detected=False)

        roi = frame[y1:y2, x1:x2]
        tpl = scale(to_gray(template), self._ratio)
        th, tw = tpl.shape[:2]
        if th > roi.shape[0] or tw > roi.shape[1]:
            tpl = resize_to(tpl, min(tw, roi.shape[1]), min(th, roi.shape[0]))

        match = best_match(roi, tpl)
        cx, cy = match.center
        return DetectionResult(
            is_detected=match.score >= similarity_bound(threshold),
            position=self._to_screen(x1 + cx, y1 + cy),
            confidence=match.score,
        )

    def detect_on_screen(self, template: np.ndarray, threshold: int) -> DetectionResult:
        frame = self._current_frame()
        tpl = scale(to_gray(template), self._ratio)
        th, tw = tpl.shape[:2]
        if th > frame.shape[0] or tw > frame.shape[1]:
            return DetectionResult(is_detected=False)

        match = best_match(frame, tpl)
        cx, cy = match.center
        return DetectionResult(
            is_detected=match.score >= similarity_bound(threshold),
            position=self._to_screen(cx, cy),
            confidence=match.score,
        )


__all__ = ["TemplateImageDetector", "similarity_bound"]

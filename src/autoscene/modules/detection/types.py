"""
Detection types and the detector protocol used by the processing module.

The processing module only relies on ``ImageDetector``; any implementation
(OpenCV based, remote, fake) can be injected.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import numpy as np


Point = Tuple[int, int]


@dataclass(frozen=True)
class Area:
    """A rectangle on the screen, in screen pixels."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width // 2, self.y + self.height // 2)


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of one detector call. Never mutated after creation."""
    is_detected: bool
    position: Optional[Point] = None
    confidence: float = 0.0


class ImageDetector(Protocol):
    def set_screen_metrics(self, screen: np.ndarray, detection_quality: float) -> None:
        """Recompute the detection scale for the given screen size."""
        ...

    def setup_detection(self, screen: np.ndarray) -> None:
        """Load the frame every following detect call runs against."""
        ...

    def detect_in_area(self, template: np.ndarray, area: Area, threshold: int) -> DetectionResult:
        """Compare the template against ``area`` of the current frame."""
        ...

    def detect_on_screen(self, template: np.ndarray, threshold: int) -> DetectionResult:
        """Search the whole current frame for the template."""
        ...


__all__ = ["Point", "Area", "DetectionResult", "ImageDetector"]

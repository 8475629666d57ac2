"""
Template matching utilities.

Features:
- Best match location and score of a template inside an image
- Scores of flat images (nan) reported as 0
- Coordinates relative to the searched image (top-left origin), including
  the center of the matched template
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2  # type: ignore
import numpy as np

from .utils import ImageLike, load_image


@dataclass
class Match:
    x: int
    y: int
    w: int
    h: int
    score: float

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)


def _ensure_sizes(big: np.ndarray, small: np.ndarray) -> None:
    hb, wb = big.shape[:2]
    hs, ws = small.shape[:2]
    if hs > hb or ws > wb:
        raise ValueError(f"Template larger than image: template {ws}x{hs}, image {wb}x{hb}")


def best_match(
    image: ImageLike,
    template: ImageLike,
    *,
    method: int = cv2.TM_CCOEFF_NORMED,
) -> Match:
    """Return the best location of template in image, whatever its score."""
    img = load_image(image)
    tpl = load_image(template)
    _ensure_sizes(img, tpl)

    res = cv2.matchTemplate(img, tpl, method)
    min_val, max_val, min_loc, max_loc = cv2.minMaxLoc(res)

    if method in (cv2.TM_SQDIFF, cv2.TM_SQDIFF_NORMED):
        # lower is better
        score = 1.0 - float(min_val)
        x, y = min_loc
    else:
        score = float(max_val)
        x, y = max_loc

    # Flat images make TM_CCOEFF_NORMED return nan/inf
    if not np.isfinite(score):
        score = 0.0

    h, w = tpl.shape[:2]
    return Match(x=int(x), y=int(y), w=w, h=h, score=score)


__all__ = [
    "Match",
    "best_match",
]

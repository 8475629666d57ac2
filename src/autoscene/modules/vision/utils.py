"""
Vision utilities: image loading/decoding and conversion helpers.
"""
from __future__ import annotations

import os
from typing import Optional, Union

import cv2  # type: ignore
import numpy as np


ImageLike = Union[str, bytes, np.ndarray]


def load_image(img: ImageLike) -> np.ndarray:
    """Load an image into a BGR numpy array.

    - str: treated as a file path and loaded via cv2.imread
    - bytes: decoded via cv2.imdecode
    - np.ndarray: returned as-is (assumed BGR, BGRA or single-channel)
    """
    if isinstance(img, np.ndarray):
        return img
    if isinstance(img, (bytes, bytearray)):
        arr = np.frombuffer(img, dtype=np.uint8)
        mat = cv2.imdecode(arr, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError("Failed to decode image bytes")
        return mat
    if isinstance(img, str):
        if not os.path.isfile(img):
            raise FileNotFoundError(f"Image file not found: {img}")
        mat = cv2.imread(img, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to load image from path: {img}")
        return mat
    raise TypeError(f"Unsupported image type: {type(img)}")


def to_bgr(img: np.ndarray) -> np.ndarray:
    """Normalize gray / BGRA arrays to 3-channel BGR."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    return img


def to_gray(img: np.ndarray) -> np.ndarray:
    """Convert BGR image to grayscale (no-op if already single-channel)."""
    if img.ndim == 2:
        return img
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)


def to_frame(img: ImageLike, reuse: Optional[np.ndarray] = None) -> np.ndarray:
    """Convert a raw capture into a BGR frame owned by the caller.

    When ``reuse`` has the same shape and dtype as the converted capture the
    pixels are copied into it instead of allocating a new array.
    """
    mat = to_bgr(load_image(img))
    if reuse is not None and reuse.shape == mat.shape and reuse.dtype == mat.dtype:
        np.copyto(reuse, mat)
        return reuse
    return mat.copy() if mat is img else mat


def resize_to(img: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize to exactly width x height (no-op when already that size)."""
    h, w = img.shape[:2]
    if (w, h) == (width, height):
        return img
    interpolation = cv2.INTER_AREA if width * height < w * h else cv2.INTER_LINEAR
    return cv2.resize(img, (width, height), interpolation=interpolation)


def scale(img: np.ndarray, ratio: float) -> np.ndarray:
    """Scale both sides by ratio, keeping at least one pixel per side."""
    if ratio == 1.0:
        return img
    h, w = img.shape[:2]
    return resize_to(img, max(1, round(w * ratio)), max(1, round(h * ratio)))


__all__ = [
    "ImageLike",
    "load_image",
    "to_bgr",
    "to_gray",
    "to_frame",
    "resize_to",
    "scale",
]

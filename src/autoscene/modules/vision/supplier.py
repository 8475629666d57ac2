"""
Condition template supply.

Loads condition templates from a directory, resizes them to the size of the
condition area and keeps the most recently used ones in memory. Disk reads
are offloaded to the I/O pool so the processing task keeps yielding.
"""
from __future__ import annotations

import os
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Tuple

import cv2  # type: ignore
import numpy as np
from loguru import logger

from ...core.config import settings
from ...core.thread_pool import run_in_io
from .utils import resize_to


_CacheKey = Tuple[str, int, int]


class TemplateSupplier:
    """Async ``supply_bitmap(path, width, height)`` backed by image files.

    Missing or unreadable files yield ``None``, which the processing module
    treats as "condition cannot be evaluated" for the current frame.
    """

    def __init__(self, base_dir: Optional[str] = None, cache_size: Optional[int] = None) -> None:
        self._base_dir = Path(base_dir if base_dir is not None else settings.template_dir)
        self._cache_size = settings.template_cache_size if cache_size is None else cache_size
        self._cache: "OrderedDict[_CacheKey, np.ndarray]" = OrderedDict()
        self._log = logger.bind(module="TemplateSupplier")

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self._base_dir / candidate

    def clear(self) -> None:
        self._cache.clear()

    def _read(self, path: str, width: int, height: int) -> Optional[np.ndarray]:
        full_path = self.resolve(path)
        if not os.path.isfile(full_path):
            self._log.warning("Template not found: {}", full_path)
            return None
        mat = cv2.imread(str(full_path), cv2.IMREAD_COLOR)
        if mat is None:
            self._log.warning("Template could not be decoded: {}", full_path)
            return None
        return resize_to(mat, width, height)

    async def __call__(self, path: str, width: int, height: int) -> Optional[np.ndarray]:
        if width <= 0 or height <= 0:
            self._log.warning("Invalid template size {}x{} for {}", width, height, path)
            return None

        key = (path, width, height)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached

        bitmap = await run_in_io(self._read, path, width, height)
        if bitmap is not None and self._cache_size > 0:
            self._cache[key] = bitmap
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return bitmap


__all__ = ["TemplateSupplier"]

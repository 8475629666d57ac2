"""
Scenario runner: feeds frames from a frame source to a ScenarioProcessor.

The runner owns the processing task. Stop requests coming from the processor
(end conditions reached, all events disabled) end the loop at the next pass
boundary; ``stop()`` cancels the task, which is delivered at the next
cancellation point of the current pass.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger

from ...core.config import settings
from ...core.thread_pool import run_in_io
from ..detection.types import ImageDetector
from ..scenario.models import Scenario
from ..vision.utils import ImageLike, load_image
from .actions import ActionPerformer
from .condition import BitmapSupplier
from .processor import ScenarioProcessor
from .progress import ProgressListener


class FrameSourceError(Exception):
    """The frame source failed to provide a frame."""


class FrameSource(Protocol):
    async def next_frame(self) -> Optional[ImageLike]:
        """Return the next frame, or None once the source is exhausted."""
        ...


class DirectoryFrameSource:
    """Frames read from the image files of a directory, in name order."""

    _EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp"}

    def __init__(self, directory: str, *, loop: bool = False) -> None:
        self.directory = Path(directory)
        self.loop = loop
        self._files: List[Path] = sorted(
            p for p in self.directory.iterdir() if p.suffix.lower() in self._EXTENSIONS
        ) if self.directory.is_dir() else []
        self._index = 0

    @property
    def files(self) -> List[Path]:
        return list(self._files)

    async def next_frame(self) -> Optional[ImageLike]:
        if self._index >= len(self._files):
            if not self.loop or not self._files:
                return None
            self._index = 0
        path = self._files[self._index]
        self._index += 1
        if not os.path.isfile(path):
            raise FrameSourceError(f"frame file disappeared: {path}")
        try:
            return await run_in_io(load_image, str(path))
        except ValueError as e:
            raise FrameSourceError(str(e)) from e


class ScenarioRunner:
    def __init__(
        self,
        scenario: Scenario,
        detector: ImageDetector,
        bitmap_supplier: BitmapSupplier,
        action_performer: ActionPerformer,
        frame_source: FrameSource,
        *,
        progress_listener: Optional[ProgressListener] = None,
        frame_interval_ms: Optional[int] = None,
    ) -> None:
        self.scenario = scenario
        self.frame_source = frame_source
        self.frame_interval_ms = (
            settings.frame_interval_ms if frame_interval_ms is None else frame_interval_ms
        )
        self.processor = ScenarioProcessor(
            image_detector=detector,
            detection_quality=scenario.detection_quality,
            randomize=scenario.randomize,
            events=scenario.events,
            bitmap_supplier=bitmap_supplier,
            action_performer=action_performer,
            end_condition_operator=scenario.end_condition_operator,
            end_conditions=scenario.end_conditions,
            on_stop_requested=self._on_stop_requested,
            progress_listener=progress_listener,
        )
        self._stop_requested = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._has_run = False
        self._cancel_requested = False
        self.frames_processed = 0
        self.stop_reason: Optional[str] = None
        self.log = logger.bind(module="ScenarioRunner", scenario=scenario.name)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _on_stop_requested(self) -> None:
        if not self._stop_requested.is_set():
            self.stop_reason = "scenario"
            self._stop_requested.set()

    def invalidate_screen_metrics(self) -> None:
        """Forwarded to the processor; applied at the next pass."""
        self.processor.invalidate_screen_metrics()

    async def start(self) -> None:
        """Start a run. A restarted scenario begins from its initial state."""
        if self.running:
            return
        if self._has_run:
            self.processor.reset()
            self.frames_processed = 0
        self._has_run = True
        self._stop_requested.clear()
        self._cancel_requested = False
        self.stop_reason = None
        self._task = asyncio.create_task(self._loop())
        self.log.info("Scenario runner started")

    async def wait(self) -> None:
        """Wait for the run to end; re-raises a pass failure.

        Returns normally when the run was cancelled through ``stop()``. Any
        other cancellation, including the one of the waiting task, is raised.
        """
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not (self._cancel_requested and task.cancelled()):
                raise

    async def stop(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._cancel_requested = True
            self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
        self.log.info("Scenario runner stopped ({})", self.stop_reason)

    async def run(self) -> None:
        """Start and wait until the scenario ends."""
        await self.start()
        await self.wait()

    async def _loop(self) -> None:
        try:
            await self._run_frames()
        except asyncio.CancelledError:
            self.stop_reason = self.stop_reason or "cancelled"
            self.log.info("Scenario loop cancelled after {} frame(s)", self.frames_processed)
            raise

    async def _run_frames(self) -> None:
        while not self._stop_requested.is_set():
            try:
                frame = await self.frame_source.next_frame()
            except FrameSourceError as e:
                self.log.warning("Frame skipped: {}", e)
                await asyncio.sleep(self.frame_interval_ms / 1000.0)
                continue

            if frame is None:
                self.stop_reason = "frames exhausted"
                break

            try:
                await self.processor.process(frame)
            except Exception as e:
                self.stop_reason = "error"
                self.log.error("Frame processing failed: {}", e)
                raise
            self.frames_processed += 1

            if self._stop_requested.is_set():
                break
            await asyncio.sleep(self.frame_interval_ms / 1000.0)

        self.log.info(
            "Scenario loop ended after {} frame(s): {}",
            self.frames_processed,
            self.stop_reason,
        )


__all__ = [
    "FrameSource",
    "FrameSourceError",
    "DirectoryFrameSource",
    "ScenarioRunner",
]

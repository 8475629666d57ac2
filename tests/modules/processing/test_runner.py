import asyncio
from types import SimpleNamespace

import cv2
import numpy as np
import pytest

from autoscene.core.constants import ConditionOperator
from autoscene.core.thread_pool import shutdown_pools
from autoscene.modules.detection.types import Area, DetectionResult
from autoscene.modules.processing.condition import UnknownDetectionTypeError
from autoscene.modules.processing.runner import DirectoryFrameSource, FrameSourceError, ScenarioRunner
from autoscene.modules.scenario.models import Action, Condition, EndCondition, Event, Scenario


@pytest.fixture(autouse=True)
def _reset_pools():
    shutdown_pools()
    yield
    shutdown_pools()


class _AlwaysDetector:
    def __init__(self):
        self.metrics = 0
        self.passes = 0

    def set_screen_metrics(self, screen, detection_quality):
        self.metrics += 1

    def setup_detection(self, screen):
        self.passes += 1

    def detect_in_area(self, template, area, threshold):
        return DetectionResult(is_detected=True, position=(1, 1), confidence=1.0)

    def detect_on_screen(self, template, threshold):
        return DetectionResult(is_detected=True, position=(1, 1), confidence=1.0)


async def _supply(path, width, height):
    return SimpleNamespace(path=path)


class _ListSource:
    def __init__(self, frames, *, endless=False):
        self.frames = list(frames)
        self.endless = endless
        self.served = 0

    async def next_frame(self):
        self.served += 1
        if self.endless:
            return np.zeros((4, 4, 3), dtype=np.uint8)
        if not self.frames:
            return None
        frame = self.frames.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return frame


def _scenario(end_conditions=(), detection_type="exact"):
    event = Event(
        id="e1",
        name="e1",
        conditions=[Condition(name="c", path="c.png", area=Area(0, 0, 2, 2), detection_type=detection_type)],
        actions=[Action(name="tap", type="click", params={"x": 1, "y": 1})],
    )
    return Scenario(
        name="test",
        events=[event],
        end_conditions=list(end_conditions),
        end_condition_operator=ConditionOperator.AND,
    )


def _frames(count):
    return [np.zeros((4, 4, 3), dtype=np.uint8) for _ in range(count)]


@pytest.mark.asyncio
async def test_run_ends_when_end_condition_is_reached():
    performed = []
    source = _ListSource(_frames(10))
    runner = ScenarioRunner(
        _scenario([EndCondition("e1", 3)]),
        _AlwaysDetector(),
        _supply,
        lambda actions, position: performed.append(position),
        source,
        frame_interval_ms=0,
    )

    await runner.run()

    assert runner.stop_reason == "scenario"
    assert runner.frames_processed == 3
    assert len(performed) == 3
    assert source.served == 3
    assert runner.running is False


@pytest.mark.asyncio
async def test_run_ends_when_frames_are_exhausted():
    runner = ScenarioRunner(_scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource(_frames(2)), frame_interval_ms=0)

    await runner.run()

    assert runner.stop_reason == "frames exhausted"
    assert runner.frames_processed == 2


@pytest.mark.asyncio
async def test_frame_source_errors_are_skipped():
    frames = [FrameSourceError("capture failed")] + _frames(1)
    runner = ScenarioRunner(_scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource(frames), frame_interval_ms=0)

    await runner.run()

    assert runner.frames_processed == 1


@pytest.mark.asyncio
async def test_stop_cancels_running_scenario():
    runner = ScenarioRunner(
        _scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource([], endless=True), frame_interval_ms=1
    )

    await runner.start()
    await asyncio.sleep(0.02)
    assert runner.running is True
    await runner.stop()

    assert runner.running is False
    assert runner.stop_reason == "cancelled"
    assert runner.frames_processed > 0


@pytest.mark.asyncio
async def test_pass_failure_is_raised_from_wait():
    runner = ScenarioRunner(
        _scenario(detection_type="fuzzy"), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource(_frames(1)), frame_interval_ms=0
    )

    with pytest.raises(UnknownDetectionTypeError):
        await runner.run()
    assert runner.stop_reason == "error"


@pytest.mark.asyncio
async def test_invalidate_screen_metrics_is_forwarded():
    detector = _AlwaysDetector()
    runner = ScenarioRunner(_scenario(), detector, _supply, lambda a, p: None, _ListSource(_frames(2)), frame_interval_ms=0)

    runner.invalidate_screen_metrics()
    await runner.run()

    assert detector.metrics == 1
    assert detector.passes == 2


@pytest.mark.asyncio
async def test_directory_frame_source_reads_in_name_order(tmp_path):
    for name, value in (("b.png", 20), ("a.png", 10), ("notes.txt", None)):
        if value is None:
            (tmp_path / name).write_text("skip me", encoding="utf-8")
        else:
            cv2.imwrite(str(tmp_path / name), np.full((3, 3, 3), value, dtype=np.uint8))

    source = DirectoryFrameSource(str(tmp_path))

    assert [p.name for p in source.files] == ["a.png", "b.png"]
    first = await source.next_frame()
    second = await source.next_frame()
    assert int(first[0, 0, 0]) == 10
    assert int(second[0, 0, 0]) == 20
    assert await source.next_frame() is None


@pytest.mark.asyncio
async def test_directory_frame_source_loops(tmp_path):
    cv2.imwrite(str(tmp_path / "only.png"), np.zeros((2, 2, 3), dtype=np.uint8))
    source = DirectoryFrameSource(str(tmp_path), loop=True)

    for _ in range(3):
        assert await source.next_frame() is not None


@pytest.mark.asyncio
async def test_restarted_runner_counts_end_conditions_again():
    performed = []
    source = _ListSource([], endless=True)
    runner = ScenarioRunner(
        _scenario([EndCondition("e1", 2)]),
        _AlwaysDetector(),
        _supply,
        lambda actions, position: performed.append(position),
        source,
        frame_interval_ms=0,
    )

    await runner.run()
    assert runner.stop_reason == "scenario"
    assert runner.frames_processed == 2

    await asyncio.wait_for(runner.run(), timeout=2)

    assert runner.stop_reason == "scenario"
    assert runner.frames_processed == 2
    assert len(performed) == 4
    assert runner.processor.end_condition_tracker.counts == {"e1": 2}
    assert runner.running is False


@pytest.mark.asyncio
async def test_restart_restores_declared_event_states():
    runner = ScenarioRunner(_scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource(_frames(1)), frame_interval_ms=0)
    await runner.run()
    runner.processor.scenario_state.set_enabled("e1", False)
    runner.processor.scenario_state.apply_pending()

    runner.frame_source = _ListSource(_frames(1))
    await runner.run()

    assert runner.stop_reason == "frames exhausted"
    assert runner.frames_processed == 1
    assert runner.processor.scenario_state.is_enabled("e1") is True


@pytest.mark.asyncio
async def test_cancelling_the_caller_of_run_propagates():
    runner = ScenarioRunner(
        _scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource([], endless=True), frame_interval_ms=1
    )

    outer = asyncio.create_task(runner.run())
    await asyncio.sleep(0.02)
    outer.cancel()

    with pytest.raises(asyncio.CancelledError):
        await outer
    assert outer.cancelled() is True
    assert runner.running is False
    assert runner.stop_reason == "cancelled"


@pytest.mark.asyncio
async def test_wait_returns_after_stop_from_another_task():
    runner = ScenarioRunner(
        _scenario(), _AlwaysDetector(), _supply, lambda a, p: None, _ListSource([], endless=True), frame_interval_ms=1
    )

    waiter = asyncio.create_task(runner.run())
    await asyncio.sleep(0.02)
    await runner.stop()
    await waiter

    assert waiter.cancelled() is False
    assert runner.stop_reason == "cancelled"

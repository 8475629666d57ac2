from types import SimpleNamespace

import pytest

from autoscene.core.constants import ConditionOperator, DetectionType
from autoscene.modules.detection.types import Area, DetectionResult
from autoscene.modules.processing.condition import ConditionEvaluator
from autoscene.modules.processing.event import EventEvaluator, ProcessorResult
from autoscene.modules.processing.progress import ProgressListener
from autoscene.modules.scenario.models import Condition, Event


class _ScriptedDetector:
    """Answers with a fixed detection per template path and records calls."""

    def __init__(self, detected):
        self.detected = detected
        self.calls = []

    def _result(self, template):
        self.calls.append(template.path)
        return DetectionResult(is_detected=self.detected[template.path], position=(1, 2), confidence=0.9)

    def detect_in_area(self, template, area, threshold):
        return self._result(template)

    def detect_on_screen(self, template, threshold):
        return self._result(template)


async def _supply(path, width, height):
    if path == "missing.png":
        return None
    return SimpleNamespace(path=path, size=(width, height))


def _cond(path, should_be_detected=True):
    return Condition(
        name=path,
        path=path,
        area=Area(0, 0, 10, 10),
        detection_type=DetectionType.EXACT,
        should_be_detected=should_be_detected,
    )


def _event(operator, *conditions):
    return Event(id="e", name="e", conditions=list(conditions), condition_operator=operator)


def _evaluator(detected, progress=None):
    detector = _ScriptedDetector(detected)
    return EventEvaluator(ConditionEvaluator(detector, _supply), progress), detector


@pytest.mark.asyncio
async def test_and_matches_when_presence_and_absence_are_both_fulfilled():
    evaluator, detector = _evaluator({"c1.png": True, "c2.png": False})
    c1 = _cond("c1.png", should_be_detected=True)
    c2 = _cond("c2.png", should_be_detected=False)
    event = _event(ConditionOperator.AND, c1, c2)

    result = await evaluator.evaluate(event)

    assert result.event_matched is True
    assert result.event is event
    assert result.condition is c2
    assert detector.calls == ["c1.png", "c2.png"]


@pytest.mark.asyncio
async def test_and_short_circuits_on_first_unfulfilled_condition():
    evaluator, detector = _evaluator({"c1.png": True, "c2.png": False, "c3.png": True})
    c2 = _cond("c2.png")
    event = _event(ConditionOperator.AND, _cond("c1.png"), c2, _cond("c3.png"))

    result = await evaluator.evaluate(event)

    assert result.event_matched is False
    assert result.condition is c2
    assert result.detection_result.is_detected is False
    assert detector.calls == ["c1.png", "c2.png"]


@pytest.mark.asyncio
async def test_or_short_circuits_on_first_fulfilled_condition():
    evaluator, detector = _evaluator({"c1.png": False, "c2.png": True, "c3.png": True})
    c2 = _cond("c2.png")
    event = _event(ConditionOperator.OR, _cond("c1.png"), c2, _cond("c3.png"))

    result = await evaluator.evaluate(event)

    assert result.event_matched is True
    assert result.condition is c2
    assert detector.calls == ["c1.png", "c2.png"]


@pytest.mark.asyncio
async def test_or_without_fulfilled_condition_reports_last_condition():
    evaluator, detector = _evaluator({"c1.png": False, "c2.png": True})
    c2 = _cond("c2.png", should_be_detected=False)
    event = _event(ConditionOperator.OR, _cond("c1.png"), c2)

    result = await evaluator.evaluate(event)

    assert result.event_matched is False
    assert result.event is event
    assert result.condition is c2
    assert detector.calls == ["c1.png", "c2.png"]


@pytest.mark.asyncio
async def test_absence_condition_matches_when_not_detected():
    evaluator, _ = _evaluator({"c1.png": False})
    event = _event(ConditionOperator.AND, _cond("c1.png", should_be_detected=False))

    result = await evaluator.evaluate(event)

    assert result.event_matched is True


@pytest.mark.asyncio
async def test_unavailable_template_aborts_event_without_details():
    evaluator, detector = _evaluator({"c1.png": True, "c2.png": True})
    event = _event(ConditionOperator.OR, _cond("missing.png"), _cond("c1.png"))

    result = await evaluator.evaluate(event)

    assert result == ProcessorResult(False)
    assert result.event is None and result.condition is None and result.detection_result is None
    assert detector.calls == []


@pytest.mark.asyncio
async def test_condition_without_template_is_never_detected():
    evaluator, detector = _evaluator({})
    condition = Condition(name="no template", path=None, area=Area(0, 0, 5, 5), should_be_detected=False)
    event = _event(ConditionOperator.AND, condition)

    result = await evaluator.evaluate(event)

    assert result.event_matched is False
    assert result.event is None
    assert detector.calls == []


@pytest.mark.asyncio
async def test_event_without_conditions_is_not_matched():
    evaluator, detector = _evaluator({})

    result = await evaluator.evaluate(_event(ConditionOperator.AND))

    assert result == ProcessorResult(False)
    assert detector.calls == []


@pytest.mark.asyncio
async def test_progress_brackets_each_evaluated_condition():
    calls = []

    class _Recorder(ProgressListener):
        def on_condition_processing_started(self, condition):
            calls.append(("started", condition.path))

        def on_condition_processing_completed(self, result):
            calls.append(("completed", result.is_detected))

    evaluator, _ = _evaluator({"c1.png": True, "c2.png": True}, progress=_Recorder())
    await evaluator.evaluate(_event(ConditionOperator.AND, _cond("c1.png"), _cond("c2.png")))

    assert calls == [
        ("started", "c1.png"),
        ("completed", True),
        ("started", "c2.png"),
        ("completed", True),
    ]

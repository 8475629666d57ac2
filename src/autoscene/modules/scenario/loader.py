"""
YAML scenario loader

Parses a scenario file, validates it with pydantic and builds the domain
models used by the processing module. Event priority is the declared order.

Example::

    name: daily
    end_condition_operator: OR
    events:
      - id: close_popup
        operator: AND
        conditions:
          - path: popup_close.png
            area: [840, 60, 48, 48]
            threshold: 5
        actions:
          - type: click
            params: {x: 864, y: 84}
    end_conditions:
      - event: close_popup
        executions: 3
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ...core.config import settings
from ...core.constants import (
    DEFAULT_CONDITION_THRESHOLD,
    MAX_DETECTION_QUALITY,
    MIN_DETECTION_QUALITY,
    ActionType,
    ConditionOperator,
    DetectionType,
    ToggleType,
)
from ..detection.types import Area
from .models import Action, Condition, EndCondition, Event, Scenario


class ScenarioLoadError(Exception):
    """The scenario file is missing, unreadable or invalid."""


class ConditionConfig(BaseModel):
    name: str = ""
    path: Optional[str] = None
    area: List[int]
    detection_type: DetectionType = DetectionType.EXACT
    threshold: int = Field(default=DEFAULT_CONDITION_THRESHOLD, ge=0, le=100)
    should_be_detected: bool = True

    @field_validator("area")
    @classmethod
    def _check_area(cls, value: List[int]) -> List[int]:
        if len(value) != 4:
            raise ValueError("area must be [x, y, width, height]")
        if value[2] <= 0 or value[3] <= 0:
            raise ValueError("area width and height must be positive")
        return value


class ActionConfig(BaseModel):
    name: str = ""
    type: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_toggle(self) -> "ActionConfig":
        if self.type == ActionType.TOGGLE_EVENT.value:
            if not self.params.get("event"):
                raise ValueError("toggle_event action requires params.event")
            ToggleType(self.params.get("toggle", ToggleType.TOGGLE.value))
        return self


class EventConfig(BaseModel):
    id: str
    name: str = ""
    operator: ConditionOperator = ConditionOperator.AND
    enabled: bool = True
    conditions: List[ConditionConfig] = Field(default_factory=list)
    actions: List[ActionConfig] = Field(default_factory=list)


class EndConditionConfig(BaseModel):
    event: str
    executions: int = Field(ge=1)


class ScenarioConfig(BaseModel):
    name: str
    detection_quality: int = Field(
        default_factory=lambda: settings.detection_quality,
        ge=MIN_DETECTION_QUALITY,
        le=MAX_DETECTION_QUALITY,
    )
    randomize: bool = Field(default_factory=lambda: settings.randomize_actions)
    end_condition_operator: ConditionOperator = ConditionOperator.AND
    events: List[EventConfig] = Field(default_factory=list)
    end_conditions: List[EndConditionConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> "ScenarioConfig":
        ids = [event.id for event in self.events]
        duplicates = sorted({event_id for event_id in ids if ids.count(event_id) > 1})
        if duplicates:
            raise ValueError(f"duplicated event ids: {duplicates}")
        known = set(ids)
        for end_condition in self.end_conditions:
            if end_condition.event not in known:
                raise ValueError(f"end condition references unknown event: {end_condition.event}")
        for event in self.events:
            for action in event.actions:
                if action.type == ActionType.TOGGLE_EVENT.value and action.params["event"] not in known:
                    raise ValueError(
                        f"event {event.id}: toggle action references unknown event: {action.params['event']}"
                    )
        return self


def _build_condition(index: int, cfg: ConditionConfig) -> Condition:
    return Condition(
        name=cfg.name or f"condition_{index}",
        path=cfg.path or None,
        area=Area(*cfg.area),
        detection_type=cfg.detection_type,
        threshold=cfg.threshold,
        should_be_detected=cfg.should_be_detected,
    )


def _build_event(priority: int, cfg: EventConfig) -> Event:
    return Event(
        id=cfg.id,
        name=cfg.name or cfg.id,
        conditions=[_build_condition(i, c) for i, c in enumerate(cfg.conditions)],
        actions=[Action(name=a.name or a.type, type=a.type, params=dict(a.params)) for a in cfg.actions],
        condition_operator=cfg.operator,
        enabled=cfg.enabled,
        priority=priority,
    )


def build_scenario(cfg: ScenarioConfig) -> Scenario:
    return Scenario(
        name=cfg.name,
        events=[_build_event(i, e) for i, e in enumerate(cfg.events)],
        end_conditions=[EndCondition(event_id=e.event, executions=e.executions) for e in cfg.end_conditions],
        end_condition_operator=cfg.end_condition_operator,
        detection_quality=cfg.detection_quality,
        randomize=cfg.randomize,
    )


def load_scenario_dict(data: Dict[str, Any]) -> Scenario:
    """Validate a parsed scenario mapping and build the Scenario."""
    if not isinstance(data, dict):
        raise ScenarioLoadError("scenario must be a mapping")
    try:
        cfg = ScenarioConfig.model_validate(data)
    except ValidationError as e:
        raise ScenarioLoadError(f"invalid scenario: {e}") from e

    scenario = build_scenario(cfg)
    empty = [event.id for event in scenario.events if not event.conditions]
    if empty:
        logger.warning("Events without conditions will never be processed: {}", empty)
    return scenario


def load_scenario(path: Union[str, Path]) -> Scenario:
    """Load a scenario YAML file."""
    file_path = Path(path)
    if not file_path.exists():
        raise ScenarioLoadError(f"scenario file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ScenarioLoadError(f"YAML parse error in {file_path}: {e}") from e

    scenario = load_scenario_dict(data)
    logger.info(
        "Scenario loaded: {} ({} events, {} end conditions)",
        scenario.name,
        len(scenario.events),
        len(scenario.end_conditions),
    )
    return scenario


__all__ = [
    "ScenarioLoadError",
    "ScenarioConfig",
    "build_scenario",
    "load_scenario",
    "load_scenario_dict",
]

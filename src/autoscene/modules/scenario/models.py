"""
Scenario domain models.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...core.constants import (
    DEFAULT_CONDITION_THRESHOLD,
    ConditionOperator,
    DetectionType,
)
from ..detection.types import Area


@dataclass(frozen=True)
class Condition:
    """A visual check on the current frame.

    Attributes:
        name: display name (logs)
        path: template identifier handed to the template supplier, None when unset
        area: where the template was captured; its size is the template size
        detection_type: EXACT searches only ``area``, WHOLE_SCREEN the full frame
        threshold: tolerated difference in percent (0-100)
        should_be_detected: False turns the condition into an absence check
    """
    name: str
    path: Optional[str]
    area: Area
    detection_type: DetectionType = DetectionType.EXACT
    threshold: int = DEFAULT_CONDITION_THRESHOLD
    should_be_detected: bool = True


@dataclass(frozen=True)
class Action:
    """Opaque action payload; only the action performer interprets it."""
    name: str
    type: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Event:
    id: str
    name: str
    conditions: List[Condition] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    condition_operator: ConditionOperator = ConditionOperator.AND
    enabled: bool = True
    priority: int = 0


@dataclass(frozen=True)
class EndCondition:
    """Stop the scenario once ``event_id`` has been triggered ``executions`` times."""
    event_id: str
    executions: int


@dataclass
class Scenario:
    name: str
    events: List[Event] = field(default_factory=list)
    end_conditions: List[EndCondition] = field(default_factory=list)
    end_condition_operator: ConditionOperator = ConditionOperator.AND
    detection_quality: int = 600
    randomize: bool = False

    def get_event(self, event_id: str) -> Optional[Event]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None


__all__ = ["Condition", "Action", "Event", "EndCondition", "Scenario"]

from .models import Action, Condition, EndCondition, Event, Scenario
from .state import ScenarioState
from .loader import ScenarioLoadError, load_scenario, load_scenario_dict

__all__ = [
    "Action",
    "Condition",
    "EndCondition",
    "Event",
    "Scenario",
    "ScenarioState",
    "ScenarioLoadError",
    "load_scenario",
    "load_scenario_dict",
]

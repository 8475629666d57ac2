from .actions import ActionExecutor, ActionPerformer
from .cancellation import checkpoint
from .condition import BitmapSupplier, ConditionEvaluator, UnknownDetectionTypeError
from .end_condition import EndConditionTracker
from .event import EventEvaluator, ProcessorResult
from .processor import ScenarioProcessor
from .progress import LoggingProgressListener, NullProgressListener, ProgressListener
from .runner import DirectoryFrameSource, FrameSource, FrameSourceError, ScenarioRunner

__all__ = [
    "ActionExecutor",
    "ActionPerformer",
    "checkpoint",
    "BitmapSupplier",
    "ConditionEvaluator",
    "UnknownDetectionTypeError",
    "EndConditionTracker",
    "EventEvaluator",
    "ProcessorResult",
    "ScenarioProcessor",
    "ProgressListener",
    "NullProgressListener",
    "LoggingProgressListener",
    "FrameSource",
    "FrameSourceError",
    "DirectoryFrameSource",
    "ScenarioRunner",
]

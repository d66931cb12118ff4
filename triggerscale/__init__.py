from . import logger
from . import sources
from . import auto_scaling
from . import manager

from .config import EngineConfig, load_config, parse_scalable_object, parse_trigger
from .errors import (
    AdapterUnavailable,
    AllTriggersUnavailable,
    ExecutorFailure,
    InvalidConfiguration,
    TriggerScaleError,
    UnknownScalableObject,
)
from .executor import CallbackExecutor, InMemoryExecutor, ScalingExecutor
from .manager import ScaleManager
from .models import CooldownState, ScalableObject, ScaleDecision, TickRecord, TriggerSpec

__all__ = [
    "logger",
    "sources",
    "auto_scaling",
    "manager",
    "EngineConfig",
    "load_config",
    "parse_scalable_object",
    "parse_trigger",
    "AdapterUnavailable",
    "AllTriggersUnavailable",
    "ExecutorFailure",
    "InvalidConfiguration",
    "TriggerScaleError",
    "UnknownScalableObject",
    "CallbackExecutor",
    "InMemoryExecutor",
    "ScalingExecutor",
    "ScaleManager",
    "CooldownState",
    "ScalableObject",
    "ScaleDecision",
    "TickRecord",
    "TriggerSpec",
]

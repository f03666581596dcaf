from .loader import load_plan
from .types import (
    Condition,
    ConditionKind,
    ConfigError,
    PlanConfig,
    TaskConfig,
    TaskKind,
)

__all__ = [
    "load_plan",
    "PlanConfig",
    "TaskConfig",
    "TaskKind",
    "Condition",
    "ConditionKind",
    "ConfigError",
]

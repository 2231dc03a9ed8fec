"""Builder 模块：配件选择、兼容性检查与配置指标"""

from .compatibility import evaluate, estimate_power_draw
from .metrics import compute_metrics, performance_tier
from .selection import select_component
from .finalize import can_finalize, finalize
from .steps import StepOrchestrator

__all__ = [
    "evaluate",
    "estimate_power_draw",
    "compute_metrics",
    "performance_tier",
    "select_component",
    "can_finalize",
    "finalize",
    "StepOrchestrator",
]

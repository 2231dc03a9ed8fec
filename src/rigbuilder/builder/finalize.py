"""下单前校验"""

from __future__ import annotations

from typing import List

from ..errors import BuildNotFinalizable
from ..schemas import REQUIRED_SLOTS, BuildConfig, Component, FinalizeResult
from .compatibility import evaluate


def can_finalize(config: BuildConfig) -> FinalizeResult:
    """检查配置能否进入结算

    先检查必需配件（列出全部缺失项），再检查兼容性错误；警告不阻断。
    """
    missing = config.missing(REQUIRED_SLOTS)
    if missing:
        return FinalizeResult(ok=False, reason="missingRequired", missing_slots=missing)

    errors = [issue for issue in evaluate(config) if issue.type == "error"]
    if errors:
        return FinalizeResult(ok=False, reason="errors", issues=errors)

    return FinalizeResult(ok=True)


def finalize(config: BuildConfig) -> List[Component]:
    result = can_finalize(config)
    if not result.ok:
        raise BuildNotFinalizable(result)
    return config.selected()

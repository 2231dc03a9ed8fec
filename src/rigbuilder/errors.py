"""配置器异常 - Configurator errors

兼容性问题是数据（CompatibilityIssue），不是异常；这里只放必须大声失败的情况。
Compatibility issues are data, not exceptions. Only hard failures live here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import FinalizeResult


class UnknownSlot(ValueError):
    def __init__(self, slot: str):
        super().__init__(f"unknown slot: {slot!r}")
        self.slot = slot


class SlotMismatch(ValueError):
    """配件放错插槽 - component placed in a slot its subCategory does not match"""

    def __init__(self, slot: str, sub_category: str, component_id: str = ""):
        super().__init__(
            f"component {component_id or '?'} has subCategory {sub_category!r}, cannot occupy slot {slot!r}"
        )
        self.slot = slot
        self.sub_category = sub_category
        self.component_id = component_id


class BuildNotFound(KeyError):
    def __init__(self, build_id: str):
        super().__init__(build_id)
        self.build_id = build_id

    def __str__(self) -> str:
        return f"saved build not found: {self.build_id}"


class CorruptBuildRecord(Exception):
    """持久化数据不符合 SavedBuild 结构"""

    def __init__(self, scope: str, detail: str, build_id: str | None = None):
        where = f"{scope}/{build_id}" if build_id else scope
        super().__init__(f"corrupt saved build record ({where}): {detail}")
        self.scope = scope
        self.build_id = build_id
        self.detail = detail


class BuildNotFinalizable(Exception):
    def __init__(self, result: "FinalizeResult"):
        if result.reason == "missingRequired":
            detail = "missing required slots: " + ", ".join(result.missing_slots)
        else:
            detail = "; ".join(issue.message for issue in result.issues)
        super().__init__(f"build cannot be finalized ({result.reason}): {detail}")
        self.result = result

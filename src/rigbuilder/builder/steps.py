"""
装机步骤导航 - Build Step Navigation

按固定插槽顺序推进向导步骤，与兼容性无关。
Walks the wizard through the fixed slot order. Not a compatibility concern.
"""

from __future__ import annotations

from ..schemas import SLOT_ORDER


class StepOrchestrator:
    """
    步骤编排器 - Step Orchestrator

    current_step 始终位于 0..len(SLOT_ORDER)-1 之间，越界操作会被钳制。
    current_step always stays within 0..len(SLOT_ORDER)-1; out-of-range moves clamp.
    """

    def __init__(self, start: int = 0):
        self._last = len(SLOT_ORDER) - 1
        self.current_step = self._clamp(start)

    def _clamp(self, index: int) -> int:
        return max(0, min(self._last, index))

    @property
    def current_slot(self) -> str:
        return SLOT_ORDER[self.current_step]

    @property
    def is_first(self) -> bool:
        return self.current_step == 0

    @property
    def is_last(self) -> bool:
        return self.current_step == self._last

    def next(self) -> int:
        self.current_step = self._clamp(self.current_step + 1)
        return self.current_step

    def previous(self) -> int:
        self.current_step = self._clamp(self.current_step - 1)
        return self.current_step

    def go_to(self, index: int) -> int:
        self.current_step = self._clamp(index)
        return self.current_step

    def reset(self) -> int:
        return self.go_to(0)

"""配件选择：唯一的配置变更入口"""

from __future__ import annotations

from typing import Optional

from ..errors import SlotMismatch, UnknownSlot
from ..schemas import SLOT_ORDER, BuildConfig, Component


def select_component(
    config: BuildConfig,
    slot: str,
    component: Optional[Component],
) -> BuildConfig:
    """在指定插槽放入配件（或清空），返回新的配置快照

    Args:
        config: 当前配置，不会被修改
        slot: 插槽名
        component: 配件；None 表示清空该插槽

    Raises:
        UnknownSlot: 插槽名不在 SLOT_ORDER 中
        SlotMismatch: 配件的 subCategory 与插槽不符
    """
    if slot not in SLOT_ORDER:
        raise UnknownSlot(slot)
    if component is not None and component.sub_category != slot:
        raise SlotMismatch(slot, component.sub_category, component.id)
    return config.model_copy(update={slot: component})

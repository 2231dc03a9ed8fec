"""配件目录（只读）"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from ..schemas import Component

logger = logging.getLogger(__name__)


class Catalog:
    """配件目录

    接受 {"products": [...]} 或裸数组格式的 JSON。
    """

    def __init__(self, components: Iterable[Component] = ()):
        self._components: List[Component] = list(components)

    @classmethod
    def from_json(cls, data_path: Path) -> "Catalog":
        with data_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("products", [])
        catalog = cls(Component.model_validate(item) for item in raw)
        logger.info("catalog loaded from %s: %d components", data_path, len(catalog._components))
        return catalog

    def all_components(self) -> List[Component]:
        return list(self._components)

    def by_slot(self, slot: str) -> List[Component]:
        return [c for c in self._components if c.sub_category == slot]

    def find_by_id(self, component_id: str) -> Component | None:
        for component in self._components:
            if component.id == component_id:
                return component
        return None

from __future__ import annotations

from typing import List, Optional, Protocol

from langchain_core.tools import ToolException, tool
from pydantic import BaseModel, Field

from .builder.compatibility import evaluate
from .builder.finalize import can_finalize
from .builder.metrics import compute_metrics
from .builder.selection import select_component
from .errors import SlotMismatch
from .schemas import SLOT_ORDER, BuildConfig, Component


class CatalogProtocol(Protocol):
    def all_components(self) -> List[Component]: ...
    def by_slot(self, slot: str) -> List[Component]: ...
    def find_by_id(self, component_id: str) -> Component | None: ...


class BuildSelectionInput(BaseModel):
    cpu_id: Optional[str] = Field(default=None, description="Catalog id of the selected CPU")
    motherboard_id: Optional[str] = None
    ram_id: Optional[str] = None
    gpu_id: Optional[str] = None
    storage_id: Optional[str] = None
    case_id: Optional[str] = None
    psu_id: Optional[str] = None


class Toolset:
    def __init__(self, catalog: CatalogProtocol):
        self.catalog = catalog

    def build_config(self, ids: dict) -> BuildConfig:
        """Resolve catalog ids into a BuildConfig; unknown ids leave the slot empty, a part in the wrong slot is a tool error."""
        config = BuildConfig.empty()
        for slot in SLOT_ORDER:
            component_id = ids.get(f"{slot}_id")
            component = self.catalog.find_by_id(component_id) if component_id else None
            if component is None:
                continue
            try:
                config = select_component(config, slot, component)
            except SlotMismatch as err:
                raise ToolException(str(err)) from err
        return config

    def register(self):
        toolset = self

        @tool("check_compatibility", args_schema=BuildSelectionInput)
        def check_compatibility(
            cpu_id: Optional[str] = None,
            motherboard_id: Optional[str] = None,
            ram_id: Optional[str] = None,
            gpu_id: Optional[str] = None,
            storage_id: Optional[str] = None,
            case_id: Optional[str] = None,
            psu_id: Optional[str] = None,
        ) -> List[dict]:
            """Check the selected parts for socket, memory, power, form factor and GPU clearance problems."""
            config = toolset.build_config(locals())
            return [issue.model_dump() for issue in evaluate(config)]

        @tool("build_metrics", args_schema=BuildSelectionInput)
        def build_metrics(
            cpu_id: Optional[str] = None,
            motherboard_id: Optional[str] = None,
            ram_id: Optional[str] = None,
            gpu_id: Optional[str] = None,
            storage_id: Optional[str] = None,
            case_id: Optional[str] = None,
            psu_id: Optional[str] = None,
        ) -> dict:
            """Total price, a price-based performance score and the estimated power draw of the selection."""
            return compute_metrics(toolset.build_config(locals())).model_dump()

        @tool("check_finalize", args_schema=BuildSelectionInput)
        def check_finalize(
            cpu_id: Optional[str] = None,
            motherboard_id: Optional[str] = None,
            ram_id: Optional[str] = None,
            gpu_id: Optional[str] = None,
            storage_id: Optional[str] = None,
            case_id: Optional[str] = None,
            psu_id: Optional[str] = None,
        ) -> dict:
            """Report whether the selection may proceed to checkout, listing missing slots or blocking errors."""
            return can_finalize(toolset.build_config(locals())).model_dump()

        return {
            "check_compatibility": check_compatibility,
            "build_metrics": build_metrics,
            "check_finalize": check_finalize,
        }

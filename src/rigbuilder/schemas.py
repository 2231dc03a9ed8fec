from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Slot = Literal["cpu", "motherboard", "ram", "gpu", "storage", "case", "psu"]

SLOT_ORDER: tuple[str, ...] = ("cpu", "motherboard", "ram", "gpu", "storage", "case", "psu")

# 机箱可选 - case is optional at checkout
REQUIRED_SLOTS: tuple[str, ...] = ("cpu", "motherboard", "ram", "gpu", "storage", "psu")

MetaValue = Union[int, float, str, List[str], None]


class Component(BaseModel):
    """目录中的配件，加载后不可变"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="唯一标识")
    title: str = Field(description="产品名称")
    category: str = Field(default="", description="目录大类")
    sub_category: str = Field(alias="subCategory", description="插槽名 cpu/motherboard/...")
    brand: str = Field(default="", description="品牌")
    price: float = Field(default=0, ge=0, description="价格")
    image: str = Field(default="", description="图片地址")
    meta: Dict[str, MetaValue] = Field(default_factory=dict, description="按插槽区分的规格参数")


class BuildConfig(BaseModel):
    """装机配置快照：每个插槽一个配件或 None"""

    model_config = ConfigDict(frozen=True)

    cpu: Optional[Component] = None
    motherboard: Optional[Component] = None
    ram: Optional[Component] = None
    gpu: Optional[Component] = None
    storage: Optional[Component] = None
    case: Optional[Component] = None
    psu: Optional[Component] = None

    @model_validator(mode="after")
    def _check_taxonomy(self) -> "BuildConfig":
        for slot in SLOT_ORDER:
            component = getattr(self, slot)
            if component is not None and component.sub_category != slot:
                raise ValueError(
                    f"component {component.id} has subCategory {component.sub_category!r}, "
                    f"cannot occupy slot {slot!r}"
                )
        return self

    @classmethod
    def empty(cls) -> "BuildConfig":
        return cls()

    def get(self, slot: str) -> Optional[Component]:
        return getattr(self, slot)

    def selected(self) -> List[Component]:
        """按插槽顺序返回已选配件"""
        return [c for c in (getattr(self, slot) for slot in SLOT_ORDER) if c is not None]

    def missing(self, slots=SLOT_ORDER) -> List[str]:
        return [slot for slot in slots if getattr(self, slot) is None]


class CompatibilityIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error", "warning"]
    message: str
    slots: List[str] = Field(default_factory=list)


class BuildMetrics(BaseModel):
    total_price: float = 0
    performance_score: int = 0
    performance_tier: Literal["entry", "mid", "high", "enthusiast"] = "entry"
    estimated_power: float = 0


class FinalizeResult(BaseModel):
    ok: bool
    reason: Optional[Literal["errors", "missingRequired"]] = None
    issues: List[CompatibilityIssue] = Field(default_factory=list)
    missing_slots: List[str] = Field(default_factory=list)


class SavedBuild(BaseModel):
    """已保存的命名配置，创建后不可变"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    config: BuildConfig
    total_price: float = Field(alias="totalPrice", ge=0)
    created_at: datetime = Field(alias="createdAt")


class SaveBuildRequest(BaseModel):
    name: str
    config: BuildConfig = Field(default_factory=BuildConfig)


class EvaluationResponse(BaseModel):
    issues: List[CompatibilityIssue] = Field(default_factory=list)
    metrics: BuildMetrics
    finalize: FinalizeResult

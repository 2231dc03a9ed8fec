import os
from pathlib import Path

import pytest

# keep the module-level app off the on-disk sqlite store
os.environ.setdefault("BUILD_STORE", "memory")

from rigbuilder.data.catalog import Catalog
from rigbuilder.schemas import BuildConfig, Component

ROOT = Path(__file__).resolve().parents[1]


def make_component(slot: str, cid: str | None = None, price: float = 0, **meta) -> Component:
    return Component(
        id=cid or f"{slot}-test",
        title=f"Test {slot}",
        category="pc-components",
        subCategory=slot,
        brand="Generic",
        price=price,
        image="",
        meta=meta,
    )


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_json(ROOT / "data" / "pc-components.json")


@pytest.fixture
def compatible_config(catalog) -> BuildConfig:
    return BuildConfig(
        cpu=catalog.find_by_id("cpu-r5-7600"),
        motherboard=catalog.find_by_id("mb-b650-atx"),
        ram=catalog.find_by_id("ram-ddr5-32-6000"),
        gpu=catalog.find_by_id("gpu-rtx4070s"),
        storage=catalog.find_by_id("ssd-980pro-1tb"),
        case=catalog.find_by_id("case-lancool-216"),
        psu=catalog.find_by_id("psu-750-gold"),
    )

"""Data 模块：配件目录与已保存配置仓库"""

from .catalog import Catalog
from .builds import (
    BuildRepository,
    BuildStore,
    JsonFileBuildStore,
    MemoryBuildStore,
    RedisBuildStore,
    SQLiteBuildStore,
    build_store,
)

__all__ = [
    "Catalog",
    "BuildRepository",
    "BuildStore",
    "JsonFileBuildStore",
    "MemoryBuildStore",
    "RedisBuildStore",
    "SQLiteBuildStore",
    "build_store",
]

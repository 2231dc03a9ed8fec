from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .builder.compatibility import evaluate
from .builder.finalize import can_finalize, finalize
from .builder.metrics import compute_metrics
from .builder.selection import select_component
from .builder.steps import StepOrchestrator
from .data.builds import BuildRepository, BuildStore
from .schemas import (
    BuildConfig,
    BuildMetrics,
    CompatibilityIssue,
    Component,
    FinalizeResult,
    SavedBuild,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildSnapshot:
    config: BuildConfig
    issues: List[CompatibilityIssue] = field(default_factory=list)
    metrics: BuildMetrics = field(default_factory=BuildMetrics)
    finalize: FinalizeResult = field(default_factory=lambda: FinalizeResult(ok=False))

    @property
    def has_errors(self) -> bool:
        return any(issue.type == "error" for issue in self.issues)


def snapshot(config: BuildConfig) -> BuildSnapshot:
    """对整份配置重新运行全部检查与指标计算"""
    return BuildSnapshot(
        config=config,
        issues=evaluate(config),
        metrics=compute_metrics(config),
        finalize=can_finalize(config),
    )


class RepositoryPool:
    """按 scope 提供仓库，同一 scope 的写操作经由固定数量的条带锁串行

    仓库每次读写都会重新读取存储，因此不做缓存；锁按 scope 哈希到
    lock_stripes 把锁之一，任意多的 scope 也不会让内存增长。
    """

    def __init__(self, store: BuildStore, lock_stripes: int = 64):
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be positive")
        self.store = store
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(lock_stripes)]

    def lock_for(self, scope: str) -> threading.Lock:
        return self._locks[hash(scope) % len(self._locks)]

    def get(self, scope: str) -> BuildRepository:
        return BuildRepository(self.store, scope)


class ConfiguratorService:
    """单个编辑会话：当前配置 + 步骤导航 + 已保存配置仓库"""

    def __init__(self, repository: BuildRepository, config: Optional[BuildConfig] = None):
        self.repository = repository
        self.config = config or BuildConfig.empty()
        self.steps = StepOrchestrator()

    def current(self) -> BuildSnapshot:
        return snapshot(self.config)

    def select(self, slot: str, component: Optional[Component]) -> BuildSnapshot:
        self.config = select_component(self.config, slot, component)
        return snapshot(self.config)

    def save_build(self, name: str) -> SavedBuild:
        return self.repository.save(name, self.config)

    def load_build(self, build_id: str) -> BuildSnapshot:
        saved = self.repository.load(build_id)
        self.config = saved.config
        self.steps.reset()
        logger.info("loaded build %s into session", build_id)
        return snapshot(self.config)

    def delete_build(self, build_id: str) -> None:
        self.repository.delete(build_id)

    def saved_builds(self) -> List[SavedBuild]:
        return self.repository.list()

    def checkout(self) -> List[Component]:
        return finalize(self.config)

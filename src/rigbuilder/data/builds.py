"""已保存配置的仓库与存储后端"""

from __future__ import annotations

import json
import logging
import os
import re
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Literal, Optional, Protocol

from pydantic import ValidationError

try:
    from redis import Redis
except Exception:  # pragma: no cover - optional dependency at runtime
    Redis = None

from ..builder.metrics import compute_metrics
from ..errors import BuildNotFound, CorruptBuildRecord
from ..schemas import BuildConfig, SavedBuild

logger = logging.getLogger(__name__)

StoreKind = Literal["memory", "json", "sqlite", "redis"]


class BuildStore(Protocol):
    """按 scope（如店铺 slug）存取整份 JSON 文档"""

    def read(self, scope: str) -> Optional[str]: ...
    def write(self, scope: str, payload: str) -> None: ...


class MemoryBuildStore:
    def __init__(self):
        self._docs: Dict[str, str] = {}

    def read(self, scope: str) -> Optional[str]:
        return self._docs.get(scope)

    def write(self, scope: str, payload: str) -> None:
        self._docs[scope] = payload


_SAFE_SCOPE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


class JsonFileBuildStore:
    """每个 scope 一个 pc-builds-<scope>.json 文件"""

    def __init__(self, directory: Path):
        self.directory = directory

    def _path(self, scope: str) -> Path:
        if not _SAFE_SCOPE.match(scope):
            raise ValueError(f"invalid build scope: {scope!r}")
        return self.directory / f"pc-builds-{scope}.json"

    def read(self, scope: str) -> Optional[str]:
        path = self._path(scope)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, scope: str, payload: str) -> None:
        path = self._path(scope)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)


class SQLiteBuildStore:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_table()

    def _init_table(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS saved_builds (
                    scope TEXT PRIMARY KEY,
                    builds_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()

    def read(self, scope: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT builds_json FROM saved_builds WHERE scope = ?",
                (scope,),
            ).fetchone()
        if row is None:
            return None
        return row[0]

    def write(self, scope: str, payload: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO saved_builds (scope, builds_json, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(scope) DO UPDATE SET
                    builds_json = excluded.builds_json,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (scope, payload),
            )
            conn.commit()


class RedisBuildStore:
    def __init__(self, redis_url: str | None = None, client=None):
        if client is None:
            if Redis is None:
                raise RuntimeError("build_store=redis requires 'redis' package installed.")
            if not redis_url:
                raise ValueError("build_store=redis requires redis_url.")
            client = Redis.from_url(redis_url, decode_responses=True)
            # startup connectivity check for fail-fast behavior
            client.ping()
        self._client = client

    @staticmethod
    def _key(scope: str) -> str:
        return f"rigbuilder:builds:{scope}"

    def read(self, scope: str) -> Optional[str]:
        payload = self._client.get(self._key(scope))
        if payload is None:
            return None
        if isinstance(payload, bytes):
            return payload.decode("utf-8")
        return payload

    def write(self, scope: str, payload: str) -> None:
        self._client.set(self._key(scope), payload)


def build_store(
    kind: str,
    *,
    db_path: Path | None = None,
    json_dir: Path | None = None,
    redis_url: str | None = None,
) -> BuildStore:
    if kind == "memory":
        return MemoryBuildStore()
    if kind == "json":
        if json_dir is None:
            raise ValueError("build_store=json requires json_dir.")
        return JsonFileBuildStore(json_dir)
    if kind == "redis":
        return RedisBuildStore(redis_url)
    if kind == "sqlite":
        if db_path is None:
            raise ValueError("build_store=sqlite requires db_path.")
        return SQLiteBuildStore(db_path)
    raise ValueError(f"unknown build store: {kind!r}")


class BuildRepository:
    """命名配置仓库

    内存列表与持久化数据同步写入：先写存储，成功后才更新内存，
    存储异常原样抛给调用方。每次读写前都从存储重新加载，
    多个仓库实例共享同一 scope 时不会互相覆盖。
    """

    def __init__(self, store: BuildStore, scope: str):
        self.store = store
        self.scope = scope
        self._records: List[dict] = []
        self._lock = threading.RLock()
        self.reload()

    def reload(self) -> None:
        with self._lock:
            payload = self.store.read(self.scope)
            if payload is None or not payload.strip():
                self._records = []
                return
            try:
                data = json.loads(payload)
            except json.JSONDecodeError as err:
                raise CorruptBuildRecord(self.scope, f"invalid JSON: {err}") from err
            if not isinstance(data, list):
                raise CorruptBuildRecord(self.scope, f"expected a JSON array, got {type(data).__name__}")
            self._records = data

    def _write(self, records: List[dict]) -> None:
        self.store.write(self.scope, json.dumps(records, ensure_ascii=False))

    def _index_of(self, build_id: str) -> int | None:
        for idx, raw in enumerate(self._records):
            if isinstance(raw, dict) and raw.get("id") == build_id:
                return idx
        return None

    def _validate(self, raw, build_id: str | None = None) -> SavedBuild:
        try:
            return SavedBuild.model_validate(raw)
        except ValidationError as err:
            logger.warning("corrupt saved build in scope %s: %s", self.scope, err)
            raise CorruptBuildRecord(self.scope, str(err), build_id) from err

    def save(self, name: str, config: BuildConfig) -> SavedBuild:
        name = (name or "").strip()
        if not name:
            raise ValueError("build name must not be blank")

        build = SavedBuild(
            id=uuid.uuid4().hex,
            name=name,
            config=config.model_copy(deep=True),
            total_price=compute_metrics(config).total_price,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self.reload()
            records = self._records + [build.model_dump(mode="json", by_alias=True)]
            self._write(records)
            self._records = records
        logger.info("saved build %s (%s) in scope %s", build.id, name, self.scope)
        return build

    def load(self, build_id: str) -> SavedBuild:
        with self._lock:
            self.reload()
            idx = self._index_of(build_id)
            if idx is None:
                raise BuildNotFound(build_id)
            raw = self._records[idx]
        return self._validate(raw, build_id)

    def delete(self, build_id: str) -> None:
        with self._lock:
            self.reload()
            idx = self._index_of(build_id)
            if idx is None:
                return
            self._validate(self._records[idx], build_id)
            records = self._records[:idx] + self._records[idx + 1:]
            self._write(records)
            self._records = records
        logger.info("deleted build %s from scope %s", build_id, self.scope)

    def list(self) -> List[SavedBuild]:
        with self._lock:
            self.reload()
            records = self._records
        return [self._validate(raw, raw.get("id") if isinstance(raw, dict) else None) for raw in records]

    def __len__(self) -> int:
        return len(self._records)

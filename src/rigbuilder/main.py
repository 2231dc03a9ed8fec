from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .data.builds import BuildStore, build_store
from .data.catalog import Catalog
from .errors import BuildNotFound, CorruptBuildRecord
from .schemas import SLOT_ORDER, BuildConfig, EvaluationResponse, SaveBuildRequest
from .service import RepositoryPool, snapshot

ROOT = Path(__file__).resolve().parents[2]

load_dotenv(ROOT / ".env")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return default
    path = Path(raw.strip())
    return path if path.is_absolute() else ROOT / path


BUILD_STORE = os.getenv("BUILD_STORE", "sqlite").strip().lower()
BUILD_DB_PATH = _env_path("BUILD_DB_PATH", ROOT / "data" / "builds.db")
BUILD_JSON_DIR = _env_path("BUILD_JSON_DIR", ROOT / "data" / "builds")
BUILD_REDIS_URL = os.getenv("BUILD_REDIS_URL", "redis://127.0.0.1:6379/0").strip()
CATALOG_PATH = _env_path("CATALOG_PATH", ROOT / "data" / "pc-components.json")


def _bootstrap_store() -> BuildStore:
    kind = BUILD_STORE if BUILD_STORE in {"memory", "json", "sqlite", "redis"} else "sqlite"
    if kind != BUILD_STORE:
        logger.warning("unknown BUILD_STORE=%r, falling back to sqlite", BUILD_STORE)
    return build_store(
        kind,
        db_path=BUILD_DB_PATH,
        json_dir=BUILD_JSON_DIR,
        redis_url=BUILD_REDIS_URL,
    )


def _bootstrap_catalog() -> Catalog:
    if not CATALOG_PATH.exists():
        raise RuntimeError(f"required catalog file missing: {CATALOG_PATH}")
    return Catalog.from_json(CATALOG_PATH)


def create_app(catalog: Catalog, store: BuildStore) -> FastAPI:
    pool = RepositoryPool(store)

    app = FastAPI(title="RigBuilder")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.catalog = catalog
    app.state.repositories = pool

    def _repo(scope: str):
        try:
            return pool.get(scope)
        except CorruptBuildRecord as err:
            raise HTTPException(status_code=500, detail=str(err))
        except ValueError as err:
            raise HTTPException(status_code=400, detail=str(err))

    @app.get("/api/parts")
    def list_parts(slot: Optional[str] = None):
        if slot is None:
            parts = catalog.all_components()
        elif slot in SLOT_ORDER:
            parts = catalog.by_slot(slot)
        else:
            raise HTTPException(status_code=400, detail=f"unknown slot: {slot}")
        return [p.model_dump(mode="json", by_alias=True) for p in parts]

    @app.post("/api/builds/evaluate")
    def evaluate_build(config: BuildConfig):
        result = snapshot(config)
        response = EvaluationResponse(issues=result.issues, metrics=result.metrics, finalize=result.finalize)
        return response.model_dump(mode="json")

    @app.get("/api/stores/{scope}/builds")
    def list_builds(scope: str):
        repo = _repo(scope)
        try:
            builds = repo.list()
        except CorruptBuildRecord as err:
            raise HTTPException(status_code=500, detail=str(err))
        return [b.model_dump(mode="json", by_alias=True) for b in builds]

    @app.post("/api/stores/{scope}/builds", status_code=201)
    def save_build(scope: str, payload: SaveBuildRequest):
        repo = _repo(scope)
        with pool.lock_for(scope):
            try:
                build = repo.save(payload.name, payload.config)
            except ValueError as err:
                raise HTTPException(status_code=400, detail=str(err))
            except CorruptBuildRecord as err:
                raise HTTPException(status_code=500, detail=str(err))
        return build.model_dump(mode="json", by_alias=True)

    @app.get("/api/stores/{scope}/builds/{build_id}")
    def load_build(scope: str, build_id: str):
        repo = _repo(scope)
        try:
            build = repo.load(build_id)
        except BuildNotFound as err:
            raise HTTPException(status_code=404, detail=str(err))
        except CorruptBuildRecord as err:
            raise HTTPException(status_code=500, detail=str(err))
        return build.model_dump(mode="json", by_alias=True)

    @app.delete("/api/stores/{scope}/builds/{build_id}", status_code=204)
    def delete_build(scope: str, build_id: str):
        repo = _repo(scope)
        with pool.lock_for(scope):
            try:
                repo.delete(build_id)
            except CorruptBuildRecord as err:
                raise HTTPException(status_code=500, detail=str(err))
        return None

    return app


app = create_app(_bootstrap_catalog(), _bootstrap_store())

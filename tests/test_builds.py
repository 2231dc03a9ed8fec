import json
import sqlite3

import pytest

from conftest import make_component
from rigbuilder.data.builds import (
    BuildRepository,
    JsonFileBuildStore,
    MemoryBuildStore,
    RedisBuildStore,
    SQLiteBuildStore,
    build_store,
)
from rigbuilder.errors import BuildNotFound, CorruptBuildRecord
from rigbuilder.schemas import BuildConfig


class FlakyStore(MemoryBuildStore):
    def __init__(self, fail=True):
        super().__init__()
        self.fail = fail

    def write(self, scope, payload):
        if self.fail:
            raise OSError("quota exceeded")
        super().write(scope, payload)


class FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


def test_save_then_load_round_trip(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")

    saved = repo.save("Gaming rig", compatible_config)
    loaded = repo.load(saved.id)

    assert loaded.config == compatible_config
    assert loaded.name == "Gaming rig"
    assert loaded.total_price == sum(c.price for c in compatible_config.selected())
    assert loaded.created_at.tzinfo is not None


def test_round_trip_of_partial_build():
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    config = BuildConfig(case=make_component("case", formFactor=["ATX"], maxGpuLength=320))

    assert repo.load(repo.save("case only", config).id).config == config


def test_save_assigns_unique_ids(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    ids = {repo.save(f"build {n}", compatible_config).id for n in range(20)}
    assert len(ids) == 20


def test_save_rejects_blank_name(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    with pytest.raises(ValueError):
        repo.save("   ", compatible_config)
    assert repo.list() == []


def test_list_keeps_insertion_order(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    for name in ("first", "second", "third"):
        repo.save(name, compatible_config)
    assert [b.name for b in repo.list()] == ["first", "second", "third"]


def test_failed_write_leaves_no_partial_state(compatible_config):
    repo = BuildRepository(FlakyStore(), "demo-store")
    with pytest.raises(OSError):
        repo.save("never stored", compatible_config)
    assert repo.list() == []
    assert len(repo) == 0


def test_failed_delete_keeps_entry(compatible_config):
    store = FlakyStore(fail=False)
    repo = BuildRepository(store, "demo-store")
    saved = repo.save("keep me", compatible_config)
    store.fail = True

    with pytest.raises(OSError):
        repo.delete(saved.id)
    assert [b.id for b in repo.list()] == [saved.id]


def test_loaded_config_is_independent_copy(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    saved = repo.save("original", compatible_config)

    first = repo.load(saved.id)
    first.config.cpu.meta["socket"] = "LGA1700"

    assert repo.load(saved.id).config.cpu.meta["socket"] == "AM5"
    assert compatible_config.cpu.meta["socket"] == "AM5"


def test_saved_build_does_not_share_state_with_live_config():
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    live = BuildConfig(cpu=make_component("cpu", socket="AM5"))
    saved = repo.save("snapshot", live)

    live.cpu.meta["socket"] = "AM4"

    assert saved.config.cpu.meta["socket"] == "AM5"
    assert repo.load(saved.id).config.cpu.meta["socket"] == "AM5"


def test_delete_removes_entry_from_store(compatible_config):
    store = MemoryBuildStore()
    repo = BuildRepository(store, "demo-store")
    keep = repo.save("keep", compatible_config)
    drop = repo.save("drop", compatible_config)

    repo.delete(drop.id)

    assert [b.id for b in repo.list()] == [keep.id]
    assert [b["id"] for b in json.loads(store.read("demo-store"))] == [keep.id]
    with pytest.raises(BuildNotFound):
        repo.load(drop.id)


def test_delete_unknown_id_is_noop(compatible_config):
    repo = BuildRepository(MemoryBuildStore(), "demo-store")
    repo.save("only", compatible_config)
    repo.delete("missing")
    assert len(repo.list()) == 1


def test_scopes_are_isolated(compatible_config):
    store = MemoryBuildStore()
    BuildRepository(store, "store-a").save("a", compatible_config)
    assert BuildRepository(store, "store-b").list() == []


def test_persisted_format_uses_camel_case_keys(compatible_config):
    store = MemoryBuildStore()
    BuildRepository(store, "demo-store").save("rig", compatible_config)

    record = json.loads(store.read("demo-store"))[0]

    assert {"id", "name", "config", "totalPrice", "createdAt"} <= set(record)
    assert record["config"]["cpu"]["subCategory"] == "cpu"


def test_non_array_payload_is_corrupt():
    store = MemoryBuildStore()
    store.write("demo-store", json.dumps({"builds": []}))
    with pytest.raises(CorruptBuildRecord):
        BuildRepository(store, "demo-store")


def test_invalid_json_payload_is_corrupt():
    store = MemoryBuildStore()
    store.write("demo-store", "{not json")
    with pytest.raises(CorruptBuildRecord):
        BuildRepository(store, "demo-store")


def test_corrupt_record_fails_load_and_delete():
    store = MemoryBuildStore()
    store.write("demo-store", json.dumps([{"id": "bad", "name": "broken", "config": {}}]))
    repo = BuildRepository(store, "demo-store")

    with pytest.raises(CorruptBuildRecord):
        repo.load("bad")
    with pytest.raises(CorruptBuildRecord):
        repo.delete("bad")
    with pytest.raises(CorruptBuildRecord):
        repo.list()


def test_record_with_part_in_wrong_slot_is_corrupt(compatible_config):
    store = MemoryBuildStore()
    saved = BuildRepository(store, "demo-store").save("rig", compatible_config)
    records = json.loads(store.read("demo-store"))
    records[0]["config"]["gpu"] = records[0]["config"]["cpu"]
    store.write("demo-store", json.dumps(records))

    with pytest.raises(CorruptBuildRecord):
        BuildRepository(store, "demo-store").load(saved.id)


def test_json_file_store_persists_across_instances(tmp_path, compatible_config):
    saved = BuildRepository(JsonFileBuildStore(tmp_path), "demo-store").save("rig", compatible_config)

    assert (tmp_path / "pc-builds-demo-store.json").exists()
    reopened = BuildRepository(JsonFileBuildStore(tmp_path), "demo-store")
    assert reopened.load(saved.id).config == compatible_config


def test_json_file_store_rejects_path_like_scope(tmp_path):
    with pytest.raises(ValueError):
        BuildRepository(JsonFileBuildStore(tmp_path), "../escape")


def test_sqlite_store_persists_across_instances(tmp_path, compatible_config):
    db_path = tmp_path / "builds.db"
    saved = BuildRepository(SQLiteBuildStore(db_path), "demo-store").save("rig", compatible_config)
    BuildRepository(SQLiteBuildStore(db_path), "other-store").save("other", compatible_config)

    reopened = BuildRepository(SQLiteBuildStore(db_path), "demo-store")
    assert [b.id for b in reopened.list()] == [saved.id]

    with sqlite3.connect(db_path) as conn:
        count = conn.execute("SELECT COUNT(*) FROM saved_builds").fetchone()[0]
    assert count == 2


def test_repositories_sharing_a_store_keep_each_others_saves(tmp_path, compatible_config):
    store = SQLiteBuildStore(tmp_path / "builds.db")
    first = BuildRepository(store, "shop")
    second = BuildRepository(store, "shop")

    a = first.save("from worker a", compatible_config)
    b = second.save("from worker b", compatible_config)

    assert [x.name for x in BuildRepository(store, "shop").list()] == ["from worker a", "from worker b"]
    assert first.load(b.id).name == "from worker b"
    assert [x.id for x in second.list()] == [a.id, b.id]


def test_delete_through_one_repository_keeps_newer_save_from_another(compatible_config):
    store = MemoryBuildStore()
    first = BuildRepository(store, "shop")
    second = BuildRepository(store, "shop")
    old = first.save("old", compatible_config)
    new = second.save("new", compatible_config)

    first.delete(old.id)

    assert [x.id for x in BuildRepository(store, "shop").list()] == [new.id]


def test_redis_store_uses_scoped_key(compatible_config):
    client = FakeRedis()
    saved = BuildRepository(RedisBuildStore(client=client), "demo-store").save("rig", compatible_config)

    assert list(client.data) == ["rigbuilder:builds:demo-store"]
    reopened = BuildRepository(RedisBuildStore(client=client), "demo-store")
    assert reopened.load(saved.id).name == "rig"


def test_build_store_factory(tmp_path):
    assert isinstance(build_store("memory"), MemoryBuildStore)
    assert isinstance(build_store("json", json_dir=tmp_path), JsonFileBuildStore)
    assert isinstance(build_store("sqlite", db_path=tmp_path / "b.db"), SQLiteBuildStore)
    with pytest.raises(ValueError):
        build_store("sqlite")
    with pytest.raises(ValueError):
        build_store("postgres")

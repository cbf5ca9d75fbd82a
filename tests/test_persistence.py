"""Tests for tracker/persistence.py — file store, adapter, flush ordering."""

import asyncio
import json
import logging
from datetime import date

import pytest

from tracker.errors import LoadError, SaveError
from tracker.models import AppStore, TodoItem
from tracker.persistence import FlushQueue, JsonFileStore, PersistenceAdapter
from tracker.state import StateStore, open_state_store


class RecordingStore:
    """In-memory KeyValueStore that records every save, with a delay."""

    def __init__(self, delay: float = 0.0, fail: bool = False) -> None:
        self.data = {}
        self.saves = []
        self.delay = delay
        self.fail = fail

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def save(self):
        await asyncio.sleep(self.delay)
        if self.fail:
            raise SaveError("disk full")
        self.saves.append(json.loads(json.dumps(self.data)))


# ── JsonFileStore ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_json_file_store_missing_file_is_empty(tmp_path):
    kv = JsonFileStore(tmp_path / "none.json")
    assert await kv.get("settings") is None


@pytest.mark.asyncio
async def test_json_file_store_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "store.json"
    kv = JsonFileStore(path)
    await kv.set("todos", [{"id": "t1"}])
    await kv.save()
    assert json.loads(path.read_text(encoding="utf-8")) == {"todos": [{"id": "t1"}]}
    assert await JsonFileStore(path).get("todos") == [{"id": "t1"}]
    assert not list(path.parent.glob("*.tmp"))


@pytest.mark.asyncio
async def test_json_file_store_keeps_unknown_keys(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"extra": 1}), encoding="utf-8")
    kv = JsonFileStore(path)
    await kv.set("todos", [])
    await kv.save()
    assert json.loads(path.read_text(encoding="utf-8")) == {"extra": 1, "todos": []}


@pytest.mark.asyncio
async def test_json_file_store_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LoadError):
        await JsonFileStore(path).get("settings")


@pytest.mark.asyncio
async def test_json_file_store_non_object(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(LoadError, match="JSON object"):
        await JsonFileStore(path).get("settings")


@pytest.mark.asyncio
async def test_json_file_store_write_failure(tmp_path):
    path = tmp_path / "store.json"
    path.mkdir()
    kv = JsonFileStore(path)
    await kv.set("todos", [])
    with pytest.raises(SaveError):
        await kv.save()


# ── PersistenceAdapter ────────────────────────────────────────


@pytest.mark.asyncio
async def test_adapter_load_workspace(workspace):
    store = await PersistenceAdapter(JsonFileStore(workspace / "writing-tracker.json")).load()
    assert store.settings.unit_type == "characters"
    assert store.writing_data["2026-02-10"].total == 1500
    assert [t.id for t in store.todos] == ["t1", "t2"]
    assert [c.name for c in store.categories] == ["Novel", "Comics"]


@pytest.mark.asyncio
async def test_adapter_absent_keys_use_defaults():
    kv = RecordingStore()
    kv.data = {"categories": [{"id": "c1", "name": "Novel", "color": "#000000"}]}
    store = await PersistenceAdapter(kv).load()
    assert store.settings.thresholds.level4 == 5000
    assert store.writing_data == {}
    assert store.todos == []
    assert store.categories[0].name == "Novel"


@pytest.mark.asyncio
async def test_adapter_corrupt_key_fails_whole_load():
    kv = RecordingStore()
    kv.data = {"settings": {"unitType": "cuts"}, "todos": {"not": "a list"}}
    with pytest.raises(LoadError) as exc:
        await PersistenceAdapter(kv).load()
    assert exc.value.key == "todos"


@pytest.mark.asyncio
async def test_adapter_malformed_item_fails_load():
    kv = RecordingStore()
    kv.data = {"writingData": {"2026-02-10": {"entries": [{"amount": "lots"}]}}}
    with pytest.raises(LoadError) as exc:
        await PersistenceAdapter(kv).load()
    assert exc.value.key == "writingData"


@pytest.mark.asyncio
async def test_adapter_flush_writes_four_keys():
    kv = RecordingStore()
    store = AppStore(todos=[TodoItem(id="t1", title="A")])
    await PersistenceAdapter(kv).flush(store)
    assert set(kv.saves[0]) == {"settings", "writingData", "todos", "categories"}
    assert kv.saves[0]["todos"][0]["id"] == "t1"


# ── StateStore.load ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_load_from_workspace(workspace):
    store = open_state_store(workspace)
    await store.load()
    assert store.is_loaded
    assert store.get_day("2026-02-10").total == 1500
    assert store.find_category("c2").name == "Comics"


@pytest.mark.asyncio
async def test_load_corrupt_todos_falls_back_to_defaults(workspace, caplog):
    path = workspace / "writing-tracker.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    data["todos"] = "garbage"
    path.write_text(json.dumps(data), encoding="utf-8")

    store = open_state_store(workspace)
    with caplog.at_level(logging.WARNING, logger="tracker.state"):
        await store.load()
    assert store.is_loaded
    assert store.writing_data == {}
    assert store.todos == []
    assert store.categories == []
    assert store.settings.unit_type == "characters"
    assert "starting from defaults" in caplog.text


@pytest.mark.asyncio
async def test_load_unparseable_file_falls_back(workspace):
    (workspace / "writing-tracker.json").write_text("{{{", encoding="utf-8")
    store = open_state_store(workspace)
    await store.load()
    assert store.is_loaded
    assert store.todos == []


@pytest.mark.asyncio
async def test_load_missing_file(tmp_path):
    store = open_state_store(tmp_path)
    await store.load()
    assert store.is_loaded
    assert store.writing_data == {}


@pytest.mark.asyncio
async def test_state_survives_restart(workspace):
    store = open_state_store(workspace)
    await store.load()
    entry = store.add_writing_entry("2026-02-11", 800, "scene 2")
    store.toggle_todo("t1")
    await store.close()

    reopened = open_state_store(workspace)
    await reopened.load()
    assert reopened.get_day("2026-02-11").entries[0].id == entry.id
    assert reopened.get_day("2026-02-10").total == 1500
    assert reopened.find_todo("t1").completed is True


# ── FlushQueue ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_flushes_apply_latest_state_last():
    kv = RecordingStore(delay=0.01)
    store = StateStore(PersistenceAdapter(kv), today=lambda: "2026-02-11")
    for n in range(1, 6):
        store.add_writing_entry("2026-02-11", n, "")
        await asyncio.sleep(0)
    await store.close()

    assert kv.saves[-1]["writingData"]["2026-02-11"]["total"] == 15
    totals = [s["writingData"]["2026-02-11"]["total"] for s in kv.saves]
    assert totals == sorted(totals)
    assert len(kv.saves) < 5


@pytest.mark.asyncio
async def test_burst_of_mutations_coalesces():
    kv = RecordingStore()
    store = StateStore(PersistenceAdapter(kv), today=lambda: "2026-02-11")
    store.add_category("A", "#000000")
    store.add_category("B", "#000000")
    store.add_category("C", "#000000")
    await store.close()
    assert len(kv.saves) == 1
    assert [c["name"] for c in kv.saves[0]["categories"]] == ["A", "B", "C"]
    assert store.flushes.issued == store.flushes.completed == 3


@pytest.mark.asyncio
async def test_save_failure_is_logged_and_state_kept(caplog):
    kv = RecordingStore(fail=True)
    store = StateStore(PersistenceAdapter(kv), today=lambda: "2026-02-11")
    with caplog.at_level(logging.ERROR, logger="tracker.persistence"):
        store.add_todo("A", "2026-02-12", "c1")
        await store.close()
    assert len(store.todos) == 1
    assert not store.flushes.pending
    assert "disk full" in caplog.text


@pytest.mark.asyncio
async def test_save_waits_for_write():
    kv = RecordingStore(delay=0.01)
    store = StateStore(PersistenceAdapter(kv), today=lambda: "2026-02-11")
    await store.save()
    assert len(kv.saves) == 1
    assert kv.saves[0]["settings"]["unitType"] == "characters"


def test_request_without_loop_flushes_inline():
    kv = RecordingStore()
    queue = FlushQueue(PersistenceAdapter(kv), AppStore)
    queue.request()
    assert len(kv.saves) == 1
    assert not queue.pending


@pytest.mark.asyncio
async def test_json_file_store_unencodable_value(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"todos": []}), encoding="utf-8")
    kv = JsonFileStore(path)
    await kv.set("todos", [{"tags": {"a", "b"}}])
    with pytest.raises(SaveError, match="encode"):
        await kv.save()
    assert json.loads(path.read_text(encoding="utf-8")) == {"todos": []}
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.asyncio
async def test_unencodable_state_is_logged_not_raised(store, store_file, caplog):
    category = store.add_category("Novel", "#8b5cf6")
    category.color = date(2026, 2, 11)
    store.update_category(category.id, "Novel", category.color)
    with caplog.at_level(logging.ERROR, logger="tracker.persistence"):
        await store.close()
    assert not store.flushes.pending
    assert "Failed to save state" in caplog.text
    assert store.find_category(category.id).name == "Novel"

    category.color = "#8b5cf6"
    await store.save()
    assert json.loads(store_file.read_text(encoding="utf-8"))["categories"][0]["color"] == "#8b5cf6"

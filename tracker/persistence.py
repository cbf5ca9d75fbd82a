"""Persistence for the writing tracker.

Three layers, leaf first:

- JsonFileStore: the key-value storage engine (get/set/save over one
  JSON file on disk).
- PersistenceAdapter: maps the AppStore aggregate onto four named keys.
- FlushQueue: runs fire-and-forget flushes one at a time, always writing
  the state as it is when the write starts.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Protocol

from tracker.errors import LoadError, SaveError
from tracker.fileio import read_json, write_json_atomic
from tracker.models import AppSettings, AppStore, Category, TodoItem

logger = logging.getLogger(__name__)

KEY_SETTINGS = "settings"
KEY_WRITING_DATA = "writingData"
KEY_TODOS = "todos"
KEY_CATEGORIES = "categories"
STORE_KEYS = (KEY_SETTINGS, KEY_WRITING_DATA, KEY_TODOS, KEY_CATEGORIES)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def save(self) -> None: ...


class JsonFileStore:
    """Named-key store backed by a single JSON object on disk.

    The file is read lazily on the first get(). save() replaces the
    whole file atomically.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: dict[str, Any] | None = None

    def _ensure_loaded(self) -> dict[str, Any]:
        if self._data is None:
            try:
                data = read_json(self.path)
            except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
                raise LoadError(f"Cannot read {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise LoadError(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
            self._data = data
        return self._data

    async def get(self, key: str) -> Any:
        return self._ensure_loaded().get(key)

    async def set(self, key: str, value: Any) -> None:
        if self._data is None:
            try:
                self._ensure_loaded()
            except LoadError:
                # Unreadable file gets replaced on the next save.
                self._data = {}
        self._data[key] = value

    async def save(self) -> None:
        payload = dict(self._data or {})
        try:
            await asyncio.to_thread(write_json_atomic, self.path, payload)
        except OSError as e:
            raise SaveError(f"Cannot write {self.path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise SaveError(f"Cannot encode state for {self.path}: {e}") from e


# ── Adapter ───────────────────────────────────────────────────


def _decode(key: str, value: Any, expected: type, build: Callable[[Any], Any]) -> Any:
    if not isinstance(value, expected):
        raise LoadError(
            f"Stored {key!r} should be a {expected.__name__}, got {type(value).__name__}",
            key=key,
        )
    try:
        return build(value)
    except (TypeError, ValueError, AttributeError) as e:
        raise LoadError(f"Stored {key!r} is malformed: {e}", key=key) from e


class PersistenceAdapter:
    """Loads and flushes the whole AppStore through a KeyValueStore.

    Any failure on any key fails the whole load; the caller substitutes
    defaults for the entire aggregate.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    async def load(self) -> AppStore:
        store = AppStore()
        settings = await self.kv.get(KEY_SETTINGS)
        if settings is not None:
            store.settings = _decode(KEY_SETTINGS, settings, dict, AppSettings.from_dict)
        writing_data = await self.kv.get(KEY_WRITING_DATA)
        if writing_data is not None:
            store.writing_data = _decode(
                KEY_WRITING_DATA, writing_data, dict, AppStore.writing_data_from_dict
            )
        todos = await self.kv.get(KEY_TODOS)
        if todos is not None:
            store.todos = _decode(
                KEY_TODOS, todos, list, lambda v: [TodoItem.from_dict(t) for t in v]
            )
        categories = await self.kv.get(KEY_CATEGORIES)
        if categories is not None:
            store.categories = _decode(
                KEY_CATEGORIES, categories, list, lambda v: [Category.from_dict(c) for c in v]
            )
        return store

    async def flush(self, store: AppStore) -> None:
        # Serialize before the first await so later mutations cannot leak in.
        payload = store.to_dict()
        for key in STORE_KEYS:
            await self.kv.set(key, payload[key])
        await self.kv.save()


# ── Flush queue ───────────────────────────────────────────────


class FlushQueue:
    """Serializes fire-and-forget flushes of the current state.

    Each request() bumps the issued counter. A single drain task keeps
    flushing while completed < issued, taking a fresh snapshot for every
    pass, so an earlier write can never land after a later one and bursts
    of requests coalesce into as few writes as possible.
    """

    def __init__(self, adapter: PersistenceAdapter, snapshot: Callable[[], AppStore]) -> None:
        self.adapter = adapter
        self.snapshot = snapshot
        self.issued = 0
        self.completed = 0
        self.writes = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self.completed < self.issued

    def request(self) -> None:
        self.issued += 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: plain synchronous caller, flush inline.
            asyncio.run(self._drain())
            return
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self.completed < self.issued:
            target = self.issued
            try:
                await self.adapter.flush(self.snapshot())
                self.writes += 1
                logger.debug("Flushed state (requests %d..%d)", self.completed + 1, target)
            except SaveError as e:
                logger.error("Failed to save state: %s", e)
            self.completed = target

    async def wait(self) -> None:
        """Wait until every issued flush has completed."""
        while self.pending:
            if self._task is None or self._task.done():
                self._task = asyncio.get_running_loop().create_task(self._drain())
            await asyncio.shield(self._task)

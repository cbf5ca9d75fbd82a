"""Application state store for the writing tracker.

StateStore owns the in-memory AppStore. Every mutation applies its change
synchronously, so callers see the new state immediately, then asks the
FlushQueue to persist the full aggregate in the background. Documented
no-ops (unknown id, missing date, category limit) change nothing and do
not flush.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable

from tracker.errors import LoadError
from tracker.models import (
    MAX_CATEGORIES,
    MEMO_MAX_LENGTH,
    PRESET_COLORS,
    AppSettings,
    AppStore,
    Category,
    DayData,
    ThresholdSettings,
    TodoItem,
    WritingEntry,
)
from tracker.persistence import FlushQueue, JsonFileStore, PersistenceAdapter
from tracker.workspace import now_ms, store_path, today_str, workspace_root

logger = logging.getLogger(__name__)

# Accepted snake_case spellings for update_todo(); camelCase keys pass through.
_TODO_FIELD_ALIASES = {
    "category_id": "categoryId",
    "completed_at": "completedAt",
    "created_at": "createdAt",
}


def _new_id() -> str:
    return str(uuid.uuid4())


class StateStore:
    """Single-writer authoritative state plus all mutations.

    Usage:
        store = open_state_store()
        await store.load()
        store.add_writing_entry("2026-02-11", 1200, "chapter 3")
        await store.close()
    """

    preset_colors = PRESET_COLORS

    def __init__(
        self,
        adapter: PersistenceAdapter,
        *,
        today: Callable[[], str] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.adapter = adapter
        self.data = AppStore()
        self.is_loaded = False
        self._today = today or today_str
        self._clock = clock or now_ms
        self.flushes = FlushQueue(adapter, lambda: self.data)

    # ── Read access ───────────────────────────────────────────

    @property
    def settings(self) -> AppSettings:
        return self.data.settings

    @property
    def writing_data(self) -> dict[str, DayData]:
        return self.data.writing_data

    @property
    def todos(self) -> list[TodoItem]:
        return self.data.todos

    @property
    def categories(self) -> list[Category]:
        return self.data.categories

    def get_day(self, date: str) -> DayData | None:
        return self.data.writing_data.get(date)

    def find_todo(self, todo_id: str) -> TodoItem | None:
        for t in self.data.todos:
            if t.id == todo_id:
                return t
        return None

    def find_category(self, category_id: str) -> Category | None:
        for c in self.data.categories:
            if c.id == category_id:
                return c
        return None

    # ── Lifecycle ─────────────────────────────────────────────

    async def load(self) -> None:
        """Populate state from storage, falling back to defaults on any error."""
        try:
            self.data = await self.adapter.load()
        except LoadError as e:
            logger.warning("Could not load saved state, starting from defaults: %s", e)
            self.data = AppStore()
        self.is_loaded = True

    async def save(self) -> None:
        """Flush the current state and wait for it to reach storage."""
        self.flushes.request()
        await self.flushes.wait()

    async def close(self) -> None:
        await self.flushes.wait()

    def _changed(self) -> None:
        self.flushes.request()

    # ── Settings ──────────────────────────────────────────────

    def update_unit_type(self, unit_type: str) -> None:
        settings = self.data.settings
        settings.previous_unit_type = settings.unit_type
        settings.unit_type = unit_type
        settings.unit_changed_at = self._today()
        self._changed()

    def update_thresholds(self, thresholds: ThresholdSettings) -> None:
        self.data.settings.thresholds = thresholds
        self._changed()

    # ── Writing entries ───────────────────────────────────────

    def add_writing_entry(self, date: str, amount: int, memo: str = "") -> WritingEntry:
        entry = WritingEntry(
            id=_new_id(),
            date=date,
            amount=amount,
            memo=memo[:MEMO_MAX_LENGTH],
            created_at=self._clock(),
        )
        day = self.data.writing_data.get(date)
        if day is None:
            day = DayData(date=date)
            self.data.writing_data[date] = day
        day.entries.append(entry)
        self._changed()
        return entry

    def update_writing_entry(self, date: str, entry_id: str, amount: int, memo: str) -> None:
        day = self.data.writing_data.get(date)
        if day is None:
            return
        entry = day.find_entry(entry_id)
        if entry is None:
            return
        entry.amount = amount
        entry.memo = memo[:MEMO_MAX_LENGTH]
        self._changed()

    def delete_writing_entry(self, date: str, entry_id: str) -> None:
        day = self.data.writing_data.get(date)
        if day is None:
            return
        remaining = [e for e in day.entries if e.id != entry_id]
        if len(remaining) == len(day.entries):
            return
        day.entries = remaining
        self._changed()

    # ── To-dos ────────────────────────────────────────────────

    def add_todo(self, title: str, date: str, category_id: str) -> TodoItem:
        todo = TodoItem(
            id=_new_id(),
            title=title,
            date=date,
            category_id=category_id,
            completed=False,
            completed_at=None,
            created_at=self._clock(),
        )
        self.data.todos.append(todo)
        self._changed()
        return todo

    def update_todo(self, todo_id: str, updates: dict[str, Any]) -> None:
        """Merge *updates* into the matching to-do in place. The id never changes.

        Values that cannot be coerced to the field types leave the to-do
        untouched.
        """
        todo = self.find_todo(todo_id)
        if todo is None:
            return
        merged = todo.to_dict()
        for key, value in updates.items():
            merged[_TODO_FIELD_ALIASES.get(key, key)] = value
        merged["id"] = todo.id
        try:
            updated = TodoItem.from_dict(merged)
        except (TypeError, ValueError) as e:
            logger.info("Ignoring invalid update for to-do %s: %s", todo_id, e)
            return
        for f in fields(TodoItem):
            setattr(todo, f.name, getattr(updated, f.name))
        self._changed()

    def delete_todo(self, todo_id: str) -> None:
        remaining = [t for t in self.data.todos if t.id != todo_id]
        if len(remaining) == len(self.data.todos):
            return
        self.data.todos = remaining
        self._changed()

    def toggle_todo(self, todo_id: str) -> None:
        todo = self.find_todo(todo_id)
        if todo is None:
            return
        todo.completed = not todo.completed
        todo.completed_at = self._today() if todo.completed else None
        self._changed()

    # ── Categories ────────────────────────────────────────────

    def add_category(self, name: str, color: str) -> Category | None:
        if len(self.data.categories) >= MAX_CATEGORIES:
            logger.info("Category limit (%d) reached, not adding %r", MAX_CATEGORIES, name)
            return None
        category = Category(id=_new_id(), name=name, color=color)
        self.data.categories.append(category)
        self._changed()
        return category

    def update_category(self, category_id: str, name: str, color: str) -> None:
        category = self.find_category(category_id)
        if category is None:
            return
        category.name = name
        category.color = color
        self._changed()

    def delete_category(self, category_id: str) -> None:
        # To-dos that reference the category are left as they are.
        remaining = [c for c in self.data.categories if c.id != category_id]
        if len(remaining) == len(self.data.categories):
            return
        self.data.categories = remaining
        self._changed()


def open_state_store(root: Path | None = None, **kwargs: Any) -> StateStore:
    """Build a StateStore backed by the JSON store file under *root*."""
    if root is None:
        root = workspace_root()
    kwargs.setdefault("today", lambda: today_str(root))
    adapter = PersistenceAdapter(JsonFileStore(store_path(root)))
    return StateStore(adapter, **kwargs)

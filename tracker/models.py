"""Typed dataclasses for the writing tracker data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


UNIT_CHARACTERS = "characters"
UNIT_CUTS = "cuts"
VALID_UNIT_TYPES = {UNIT_CHARACTERS, UNIT_CUTS}

MEMO_MAX_LENGTH = 20
MAX_CATEGORIES = 20

PRESET_COLORS = [
    "#ef4444", "#f97316", "#eab308", "#22c55e", "#14b8a6",
    "#3b82f6", "#8b5cf6", "#ec4899", "#6b7280", "#000000",
]


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


# ── Writing ───────────────────────────────────────────────────


@dataclass
class WritingEntry:
    id: str = ""
    date: str = ""  # YYYY-MM-DD
    amount: int = 0
    memo: str = ""
    created_at: int = 0  # epoch ms

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WritingEntry:
        return cls(
            id=str(d.get("id", "")),
            date=str(d.get("date", "")),
            amount=int(d.get("amount", 0)),
            memo=str(d.get("memo", "")),
            created_at=int(d.get("createdAt", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "amount": self.amount,
            "memo": self.memo,
            "createdAt": self.created_at,
        }


@dataclass
class DayData:
    """All entries recorded for one date.

    ``total`` is derived from the entries on every access; a persisted
    total is ignored on load.
    """

    date: str = ""
    entries: list[WritingEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(e.amount for e in self.entries)

    def find_entry(self, entry_id: str) -> WritingEntry | None:
        for e in self.entries:
            if e.id == entry_id:
                return e
        return None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DayData:
        return cls(
            date=str(d.get("date", "")),
            entries=[WritingEntry.from_dict(e) for e in (d.get("entries") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "entries": [e.to_dict() for e in self.entries],
            "total": self.total,
        }


# ── Settings ──────────────────────────────────────────────────


@dataclass
class ThresholdSettings:
    level1: int = 100
    level2: int = 500
    level3: int = 1000
    level4: int = 5000

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ThresholdSettings:
        if not d:
            return cls()
        return cls(
            level1=int(d.get("level1", 100)),
            level2=int(d.get("level2", 500)),
            level3=int(d.get("level3", 1000)),
            level4=int(d.get("level4", 5000)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "level1": self.level1,
            "level2": self.level2,
            "level3": self.level3,
            "level4": self.level4,
        }


@dataclass
class AppSettings:
    unit_type: str = UNIT_CHARACTERS
    thresholds: ThresholdSettings = field(default_factory=ThresholdSettings)
    unit_changed_at: str | None = None  # YYYY-MM-DD
    previous_unit_type: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AppSettings:
        if not d:
            return cls()
        return cls(
            unit_type=str(d.get("unitType", UNIT_CHARACTERS)),
            thresholds=ThresholdSettings.from_dict(d.get("thresholds") or {}),
            unit_changed_at=_optional_str(d.get("unitChangedAt")),
            previous_unit_type=_optional_str(d.get("previousUnitType")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "unitType": self.unit_type,
            "thresholds": self.thresholds.to_dict(),
            "unitChangedAt": self.unit_changed_at,
            "previousUnitType": self.previous_unit_type,
        }


# ── To-dos ────────────────────────────────────────────────────


@dataclass
class Category:
    id: str = ""
    name: str = ""
    color: str = PRESET_COLORS[0]

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Category:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            color=str(d.get("color", PRESET_COLORS[0])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass
class TodoItem:
    id: str = ""
    title: str = ""
    date: str = ""  # YYYY-MM-DD
    category_id: str = ""
    completed: bool = False
    completed_at: str | None = None  # YYYY-MM-DD
    created_at: int = 0  # epoch ms

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TodoItem:
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            date=str(d.get("date", "")),
            category_id=str(d.get("categoryId", "")),
            completed=bool(d.get("completed", False)),
            completed_at=_optional_str(d.get("completedAt")),
            created_at=int(d.get("createdAt", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "categoryId": self.category_id,
            "completed": self.completed,
            "completedAt": self.completed_at,
            "createdAt": self.created_at,
        }


# ── Aggregate ─────────────────────────────────────────────────


@dataclass
class AppStore:
    settings: AppSettings = field(default_factory=AppSettings)
    writing_data: dict[str, DayData] = field(default_factory=dict)
    todos: list[TodoItem] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)

    @staticmethod
    def writing_data_from_dict(d: dict[str, Any]) -> dict[str, DayData]:
        days = {}
        for key, day in d.items():
            data = DayData.from_dict(day)
            data.date = data.date or key
            days[key] = data
        return days

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AppStore:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            settings=AppSettings.from_dict(d.get("settings") or {}),
            writing_data=cls.writing_data_from_dict(d.get("writingData") or {}),
            todos=[TodoItem.from_dict(t) for t in (d.get("todos") or [])],
            categories=[Category.from_dict(c) for c in (d.get("categories") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "writingData": {k: v.to_dict() for k, v in self.writing_data.items()},
            "todos": [t.to_dict() for t in self.todos],
            "categories": [c.to_dict() for c in self.categories],
        }

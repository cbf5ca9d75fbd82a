"""Shared test fixtures for writing tracker tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml

from tracker.persistence import JsonFileStore, PersistenceAdapter
from tracker.state import StateStore

TODAY = "2026-02-11"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary data root with config and a saved store."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    config = {"timezone": "UTC", "store_file": "writing-tracker.json"}
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    saved = {
        "settings": {
            "unitType": "characters",
            "thresholds": {"level1": 100, "level2": 500, "level3": 1000, "level4": 5000},
            "unitChangedAt": None,
            "previousUnitType": None,
        },
        "writingData": {
            "2026-02-10": {
                "date": "2026-02-10",
                "entries": [
                    {"id": "e1", "date": "2026-02-10", "amount": 1200, "memo": "chapter 3", "createdAt": 1770700000000},
                    {"id": "e2", "date": "2026-02-10", "amount": 300, "memo": "", "createdAt": 1770710000000},
                ],
                "total": 1500,
            },
        },
        "todos": [
            {"id": "t1", "title": "Outline chapter 4", "date": "2026-02-12", "categoryId": "c1",
             "completed": False, "completedAt": None, "createdAt": 1770700000000},
            {"id": "t2", "title": "Submit draft", "date": "2026-02-09", "categoryId": "c2",
             "completed": True, "completedAt": "2026-02-09", "createdAt": 1770600000000},
        ],
        "categories": [
            {"id": "c1", "name": "Novel", "color": "#8b5cf6"},
            {"id": "c2", "name": "Comics", "color": "#22c55e"},
        ],
    }
    (root / "writing-tracker.json").write_text(json.dumps(saved, indent=2), encoding="utf-8")

    os.environ["WRITING_TRACKER_ROOT"] = str(root)
    yield root
    if "WRITING_TRACKER_ROOT" in os.environ:
        del os.environ["WRITING_TRACKER_ROOT"]


class FakeClock:
    def __init__(self, today: str = TODAY, ms: int = 1770800000000) -> None:
        self.today = today
        self.ms = ms

    def date(self) -> str:
        return self.today

    def now(self) -> int:
        self.ms += 1
        return self.ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


@pytest.fixture
def store(store_file: Path, clock: FakeClock) -> StateStore:
    """An empty StateStore writing to a fresh file."""
    adapter = PersistenceAdapter(JsonFileStore(store_file))
    s = StateStore(adapter, today=clock.date, clock=clock.now)
    s.is_loaded = True
    return s

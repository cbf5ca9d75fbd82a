"""Data root, config, timezone and path helpers for the writing tracker."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from tracker.fileio import read_yaml

logger = logging.getLogger(__name__)

DEFAULT_STORE_FILE = "writing-tracker.json"


def workspace_root() -> Path:
    """Get the data root directory (holds config.yaml and the store file)."""
    return Path(
        os.environ.get("WRITING_TRACKER_ROOT", str(Path.home() / "writing-tracker"))
    ).expanduser().resolve()


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def load_config(root: Path | None = None) -> dict[str, Any]:
    """Load config.yaml, returning an empty dict if missing or unreadable."""
    try:
        return read_yaml(config_path(root))
    except Exception as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path(root), e)
        return {}


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the configured timezone, defaulting to UTC."""
    config = load_config(root)
    if "timezone" in config:
        try:
            return ZoneInfo(str(config["timezone"]))
        except Exception:
            logger.warning("Unknown timezone %r, using UTC", config["timezone"])
    return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the configured timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz).date().isoformat()


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def store_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    name = load_config(root).get("store_file") or DEFAULT_STORE_FILE
    return root / str(name)

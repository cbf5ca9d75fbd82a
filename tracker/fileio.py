"""File helpers for the tracker's config and store files."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """Contents of *path* as UTF-8, or "" when the file does not exist."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> Any:
    """Decoded JSON value of *path*; {} for a missing or blank file.

    The top-level value is returned as-is (callers check its type).
    Malformed JSON raises json.JSONDecodeError.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    return json.loads(text)


def read_yaml(path: Path) -> dict[str, Any]:
    """Mapping loaded from a YAML config file; {} unless the top level is a mapping."""
    text = read_text(path)
    if not text.strip():
        return {}
    loaded = yaml.safe_load(text)
    return loaded if isinstance(loaded, dict) else {}


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace *path* with *data* as JSON, all or nothing.

    The payload is encoded before anything touches disk, written to a
    locked sibling temp file, fsynced, then renamed over *path*.
    Encoding errors raise TypeError / ValueError with *path* untouched.
    """
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

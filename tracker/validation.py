"""Advisory input checks for UI callers.

StateStore stays lenient and never calls these; a form or command layer
runs them before invoking a mutation. Each check returns a list of errors
(empty if valid).
"""

from __future__ import annotations

import re
from datetime import date

from tracker.errors import TrackerValidationError
from tracker.models import VALID_UNIT_TYPES, ThresholdSettings

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def validate_amount(amount: object) -> list[str]:
    if isinstance(amount, bool) or not isinstance(amount, int):
        return ["amount must be an integer"]
    if amount <= 0:
        return ["amount must be positive"]
    return []


def parse_amount(text: str) -> int | None:
    """Parse a typed amount like '1200'; None unless a positive integer."""
    text = text.strip().replace(",", "")
    if not text.isdecimal():
        return None
    value = int(text)
    return value if value > 0 else None


def validate_thresholds(thresholds: ThresholdSettings) -> list[str]:
    errors = []
    levels = [thresholds.level1, thresholds.level2, thresholds.level3, thresholds.level4]
    for i, value in enumerate(levels, start=1):
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"level{i} must be an integer")
        elif value < 0:
            errors.append(f"level{i} must not be negative")
    if errors:
        return errors
    for i in range(1, 4):
        if levels[i - 1] >= levels[i]:
            errors.append(f"level{i} must be lower than level{i + 1}")
    return errors


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return len(value) == 10


def validate_todo_input(title: str, date_str: str, category_id: str) -> list[str]:
    errors = []
    if not title.strip():
        errors.append("title is required")
    if not _is_iso_date(date_str):
        errors.append(f"Invalid date: {date_str!r}")
    if not category_id:
        errors.append("category is required")
    return errors


def validate_category_input(name: str, color: str) -> list[str]:
    errors = []
    if not name.strip():
        errors.append("name is required")
    if not _HEX_COLOR.match(color):
        errors.append(f"Invalid color: {color!r}")
    return errors


def validate_unit_type(unit_type: str) -> list[str]:
    if unit_type not in VALID_UNIT_TYPES:
        return [f"Invalid unit type: {unit_type}"]
    return []


def ensure_valid(errors: list[str]) -> None:
    """Raise TrackerValidationError if any check failed."""
    if errors:
        raise TrackerValidationError(errors)

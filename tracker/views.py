"""Derived views over the tracker state.

Pure functions consumed by whatever renders the heat-map and the to-do
calendar. Nothing here mutates state.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from tracker.models import Category, DayData, ThresholdSettings, TodoItem


# ── Heat-map ──────────────────────────────────────────────────


def activity_level(total: int, thresholds: ThresholdSettings) -> int:
    """Band a day's total into 0..5. 0 means nothing was written."""
    if total == 0:
        return 0
    if total < thresholds.level1:
        return 1
    if total < thresholds.level2:
        return 2
    if total < thresholds.level3:
        return 3
    if total < thresholds.level4:
        return 4
    return 5


def day_total(writing_data: dict[str, DayData], day: str) -> int:
    data = writing_data.get(day)
    return data.total if data else 0


@dataclass
class HeatmapCell:
    date: str
    total: int
    level: int
    is_today: bool = False


def _months_before(d: date, months: int) -> date:
    """Same day *months* earlier, clamped to the end of a shorter month."""
    index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    next_month = date(year + (month == 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(d.day, last_day))


def heatmap_weeks(
    writing_data: dict[str, DayData],
    thresholds: ThresholdSettings,
    today: str,
    months: int = 6,
) -> list[list[HeatmapCell]]:
    """Build the heat-map grid ending today.

    Starts on the Sunday on or before the date *months* back and groups
    days into weeks of seven; the final week stops at today.
    """
    end = date.fromisoformat(today)
    start = _months_before(end, months)
    start -= timedelta(days=(start.weekday() + 1) % 7)

    weeks: list[list[HeatmapCell]] = []
    week: list[HeatmapCell] = []
    current = start
    while current <= end:
        key = current.isoformat()
        total = day_total(writing_data, key)
        week.append(HeatmapCell(
            date=key,
            total=total,
            level=activity_level(total, thresholds),
            is_today=current == end,
        ))
        if len(week) == 7:
            weeks.append(week)
            week = []
        current += timedelta(days=1)
    if week:
        weeks.append(week)
    return weeks


def month_labels(weeks: list[list[HeatmapCell]]) -> list[tuple[int, str]]:
    """(week index, "Jan") for each week whose first day enters a new month."""
    labels = []
    last_month = None
    for i, week in enumerate(weeks):
        if not week:
            continue
        first = date.fromisoformat(week[0].date)
        if first.month != last_month:
            labels.append((i, first.strftime("%b")))
            last_month = first.month
    return labels


# ── To-dos ────────────────────────────────────────────────────


def sorted_todos(todos: Iterable[TodoItem]) -> list[TodoItem]:
    """List order: open items first, then by category, then by date."""
    return sorted(todos, key=lambda t: (t.completed, t.category_id, t.date))


def todos_completed_on(todos: Iterable[TodoItem], day: str) -> list[TodoItem]:
    return [t for t in todos if t.completed and t.completed_at == day]


def completed_by_date(todos: Iterable[TodoItem]) -> dict[str, list[TodoItem]]:
    buckets: dict[str, list[TodoItem]] = defaultdict(list)
    for t in todos:
        if t.completed and t.completed_at:
            buckets[t.completed_at].append(t)
    return dict(buckets)


def category_for(categories: Iterable[Category], category_id: str) -> Category | None:
    """Look up a to-do's category; None when the reference dangles."""
    for c in categories:
        if c.id == category_id:
            return c
    return None

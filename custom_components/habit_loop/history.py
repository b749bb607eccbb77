"""Day snapshots and the bounded history ledger.

The ledger maps date-keys to DaySummary values.  Storage order carries no
meaning; every reader sorts keys itself.
"""
from __future__ import annotations

import math
from collections.abc import Iterable

from .const import DEFAULT_HISTORY_DAYS
from .models import DaySummary, Habit, HistoryMap


def summarize(habits: Iterable[Habit]) -> DaySummary:
    """Reduce the habit list to a completion snapshot."""
    habits = list(habits)
    done_ids = tuple(habit.id for habit in habits if habit.done)
    return DaySummary(total=len(habits), done=len(done_ids), done_ids=done_ids)


def upsert(history: HistoryMap, key: str, summary: DaySummary) -> HistoryMap:
    """Return a new ledger with *key* set to *summary*."""
    return {**history, key: summary}


def prune(history: HistoryMap, max_entries: int = DEFAULT_HISTORY_DAYS) -> HistoryMap:
    """Keep only the *max_entries* most recent days."""
    newest_first = sorted(history.items(), key=lambda item: item[0], reverse=True)
    return dict(newest_first[:max_entries])


def is_perfect_day(summary: DaySummary | None) -> bool:
    """A day with at least one habit, all of them done."""
    if summary is None:
        return False
    return summary.total > 0 and summary.done >= summary.total


def completion_percent(done: int, total: int) -> int:
    """Percentage rounded half up; 0 when there is nothing to complete."""
    if total == 0:
        return 0
    return math.floor(done / total * 100 + 0.5)

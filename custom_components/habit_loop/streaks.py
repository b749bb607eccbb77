"""Streak calculations over the history ledger."""
from __future__ import annotations

from .dates import is_immediate_predecessor, previous_key
from .history import is_perfect_day
from .models import HistoryMap


def current_streak(history: HistoryMap, today: str) -> int:
    """Count consecutive perfect days ending at *today* (inclusive).

    Returns 0 when *today* has no entry yet.
    """
    if today not in history:
        return 0

    streak = 0
    cursor = today
    while is_perfect_day(history.get(cursor)):
        streak += 1
        prev = previous_key(cursor)
        # previous_key saturates at date.min
        if prev == cursor or prev not in history:
            break
        cursor = prev
    return streak


def best_streak(history: HistoryMap) -> int:
    """Return the longest run of consecutive perfect days anywhere in history.

    Adjacency is checked against the previous *stored* key, so a day with no
    entry breaks a run just like an imperfect one.
    """
    keys = sorted(history)
    best = 0
    run = 0

    for index, key in enumerate(keys):
        if not is_perfect_day(history[key]):
            run = 0
            continue

        if run > 0 and is_immediate_predecessor(key, keys[index - 1]):
            run += 1
        else:
            run = 1
        best = max(best, run)

    return best

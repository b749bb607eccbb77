"""Day rollover for the Habit Loop integration.

When the local date moves past ``last_date`` the ending day is frozen into
the history ledger and every habit starts the new day undone.  This is the
only place ``done`` flags are ever reset.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from .const import DEFAULT_HISTORY_DAYS
from .history import prune, summarize, upsert
from .models import PersistedState

_LOGGER = logging.getLogger(__name__)


def ensure_today(
    state: PersistedState,
    today: str,
    max_entries: int = DEFAULT_HISTORY_DAYS,
) -> bool:
    """Roll *state* over to *today* if needed. Returns True if it rolled.

    Calling it again on the same day is a no-op.
    """
    if state.last_date == today:
        return False

    ended = state.last_date
    summary = summarize(state.habits)
    state.history = prune(upsert(state.history, ended, summary), max_entries)
    state.habits = [replace(habit, done=False) for habit in state.habits]
    state.last_date = today

    _LOGGER.debug(
        "Finalized %s (%d/%d done), now tracking %s",
        ended, summary.done, summary.total, today,
    )
    return True

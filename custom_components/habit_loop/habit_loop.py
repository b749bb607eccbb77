"""Habit store for the Habit Loop integration.

HabitLoop owns the in-memory state and:
  - Loads and migrates stored data once on init()
  - Rolls the day over at local midnight and on Home Assistant start
  - Recomputes today's history entry and persists after every change
  - Fires a habit_loop.updated event whenever it persists
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from homeassistant.const import EVENT_HOMEASSISTANT_STARTED
from homeassistant.core import CALLBACK_TYPE, Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_change
from homeassistant.util import dt as dt_util

from . import rollover
from .const import (
    ATTR_BEST_STREAK,
    ATTR_COMPLETION_RATE,
    ATTR_CURRENT_STREAK,
    ATTR_DONE,
    ATTR_LAST_DATE,
    ATTR_TOTAL,
    DEFAULT_HISTORY_DAYS,
    DEFAULT_STARTER_HABITS,
    EVENT_HABIT_LOOP_UPDATED,
)
from .dates import key_of, label_from_key, today_key, weekday_label
from .history import completion_percent, prune, summarize, upsert
from .migration import load_state
from .models import Habit, HistoryMap, PersistedState
from .store import KeyValueStore, save_state
from .streaks import best_streak, current_streak

_LOGGER = logging.getLogger(__name__)


class HabitLoop:
    """Holds the habit list and day history for one Home Assistant instance."""

    def __init__(
        self,
        hass: HomeAssistant,
        storage: KeyValueStore,
        *,
        starter_habits: Sequence[str] = DEFAULT_STARTER_HABITS,
        history_days: int = DEFAULT_HISTORY_DAYS,
    ) -> None:
        self.hass = hass
        self._storage = storage
        self._history_days = history_days
        self._default_habits: list[Habit] = [
            Habit(id=index, name=name) for index, name in enumerate(starter_habits, start=1)
        ]
        # Placeholder until init() loads the stored state
        self._state = PersistedState(
            last_date=today_key(),
            habits=[Habit(id=h.id, name=h.name) for h in self._default_habits],
        )
        self._ready = False
        self._listeners: list[CALLBACK_TYPE] = []

    # ── State ───────────────────────────────────────────────────────

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def last_date(self) -> str:
        return self._state.last_date

    @property
    def habits(self) -> list[Habit]:
        return [replace(habit) for habit in self._state.habits]

    @property
    def history(self) -> HistoryMap:
        return dict(self._state.history)

    @property
    def history_days(self) -> int:
        return self._history_days

    def get_habit(self, habit_id: int) -> Habit | None:
        """Get a copy of a habit by ID."""
        habit = self._find_habit(habit_id)
        return replace(habit) if habit is not None else None

    # ── Derived views ───────────────────────────────────────────────

    @property
    def total_count(self) -> int:
        return len(self._state.habits)

    @property
    def done_count(self) -> int:
        return sum(1 for habit in self._state.habits if habit.done)

    @property
    def completion_rate(self) -> int:
        return completion_percent(self.done_count, self.total_count)

    @property
    def current_streak(self) -> int:
        return current_streak(self._state.history, today_key())

    @property
    def best_streak(self) -> int:
        return best_streak(self._state.history)

    @property
    def weekly_summary(self) -> list[dict[str, Any]]:
        """Completion rate for each day of the current Monday-to-Sunday week.

        Anchored to the wall-clock today, not last_date.
        """
        today = dt_util.now().date()
        monday = today - timedelta(days=today.weekday())
        result: list[dict[str, Any]] = []
        for offset in range(7):
            day = monday + timedelta(days=offset)
            summary = self._state.history.get(key_of(day))
            rate = completion_percent(summary.done, summary.total) if summary else 0
            result.append({"label": weekday_label(day), "rate": rate})
        return result

    @property
    def history_items(self) -> list[dict[str, Any]]:
        """One row per history entry, newest first."""
        return [
            {
                "date": key,
                "label": label_from_key(key),
                "total": summary.total,
                "done": summary.done,
                "rate": completion_percent(summary.done, summary.total),
            }
            for key, summary in sorted(self._state.history.items(), reverse=True)
        ]

    def summary(self) -> dict[str, Any]:
        """Headline figures, also used as the update event payload."""
        return {
            ATTR_LAST_DATE: self._state.last_date,
            ATTR_TOTAL: self.total_count,
            ATTR_DONE: self.done_count,
            ATTR_COMPLETION_RATE: self.completion_rate,
            ATTR_CURRENT_STREAK: self.current_streak,
            ATTR_BEST_STREAK: self.best_streak,
        }

    # ── Lifecycle ───────────────────────────────────────────────────

    @callback
    def init(self) -> None:
        """Load stored data, roll the day over and persist. Runs once."""
        if self._ready:
            return

        result = load_state(
            self._storage,
            today=today_key(),
            default_habits=self._default_habits,
        )
        state = result.state
        state.history = prune(state.history, self._history_days)
        self._state = state

        self.ensure_today()

        self._update_today_history()
        self._save()

        self._ready = True
        _LOGGER.debug(
            "Habit loop ready (%s data, %d habits, %d history days)",
            result.variant, len(state.habits), len(state.history),
        )

    @callback
    def ensure_today(self) -> bool:
        """Finalize the previous day if the date has changed."""
        previous = self._state.last_date
        if not rollover.ensure_today(self._state, today_key(), self._history_days):
            return False

        _LOGGER.info("Day rolled over from %s to %s", previous, self._state.last_date)
        self._update_today_history()
        self._save()
        return True

    @callback
    def async_setup_listeners(self) -> None:
        """Re-check the date at local midnight and once Home Assistant has started."""

        @callback
        def _handle_midnight(now: datetime) -> None:
            self.ensure_today()

        @callback
        def _handle_started(event: Event) -> None:
            self.ensure_today()

        self._listeners.append(
            async_track_time_change(self.hass, _handle_midnight, hour=0, minute=0, second=0)
        )
        self._listeners.append(
            self.hass.bus.async_listen(EVENT_HOMEASSISTANT_STARTED, _handle_started)
        )

    @callback
    def async_remove_listeners(self) -> None:
        """Remove all registered listeners."""
        for unsub in self._listeners:
            unsub()
        self._listeners.clear()

    # ── Actions ─────────────────────────────────────────────────────

    @callback
    def add_habit(self, name: str) -> Habit | None:
        """Append a new habit. Blank names are ignored."""
        name = name.strip()
        if not name:
            return None
        next_id = max((habit.id for habit in self._state.habits), default=0) + 1
        habit = Habit(id=next_id, name=name)
        self._state.habits = [*self._state.habits, habit]
        self._on_habits_changed()
        return replace(habit)

    @callback
    def toggle_habit(self, habit_id: int) -> bool:
        habit = self._find_habit(habit_id)
        if habit is None:
            return False
        habit.done = not habit.done
        self._on_habits_changed()
        return True

    @callback
    def remove_habit(self, habit_id: int) -> bool:
        remaining = [habit for habit in self._state.habits if habit.id != habit_id]
        if len(remaining) == len(self._state.habits):
            return False
        self._state.habits = remaining
        self._on_habits_changed()
        return True

    @callback
    def rename_habit(self, habit_id: int, name: str) -> bool:
        name = name.strip()
        habit = self._find_habit(habit_id)
        if not name or habit is None:
            return False
        habit.name = name
        self._on_habits_changed()
        return True

    # ── Internal helpers ────────────────────────────────────────────

    def _on_habits_changed(self) -> None:
        # Placeholder habits must never overwrite stored data
        if not self._ready:
            return
        self._update_today_history()
        self._save()

    def _update_today_history(self) -> None:
        """Re-derive today's entry from the current habit list."""
        self._state.history = prune(
            upsert(self._state.history, today_key(), summarize(self._state.habits)),
            self._history_days,
        )

    def _save(self) -> None:
        save_state(self._storage, self._state, self._history_days)
        self.hass.bus.async_fire(EVENT_HABIT_LOOP_UPDATED, self.summary())
        _LOGGER.debug("Fired event %s", EVENT_HABIT_LOOP_UPDATED)

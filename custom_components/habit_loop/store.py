"""Persistent key-value store for the Habit Loop integration.

Habit data is kept as raw JSON strings under fixed keys, so payloads written
by any past release can be read back and migrated verbatim.  The strings
live inside Home Assistant's built-in Store helper (.storage/habit_loop).
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from homeassistant.core import HomeAssistant
from homeassistant.helpers.json import json_dumps
from homeassistant.helpers.storage import Store

from .const import (
    DEFAULT_HISTORY_DAYS,
    KEY_HABITS,
    KEY_HISTORY_LEGACY,
    STORAGE_KEY,
    STORAGE_SAVE_DELAY,
    STORAGE_VERSION,
)
from .history import prune
from .models import PersistedState, history_to_dict

_LOGGER = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Synchronous string key-value contract used by the loader and writer."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class HabitLoopStorage:
    """KeyValueStore backed by a Home Assistant Store."""

    def __init__(self, hass: HomeAssistant) -> None:
        self._hass = hass
        self._store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._data: dict[str, Any] = {"entries": {}}

    async def async_load(self) -> None:
        """Load stored data."""
        stored = await self._store.async_load()
        if stored and isinstance(stored, dict) and isinstance(stored.get("entries"), dict):
            self._data = stored
        else:
            self._data = {"entries": {}}
        _LOGGER.debug("Loaded store with %d keys", len(self._data["entries"]))

    def get(self, key: str) -> str | None:
        value = self._data["entries"].get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Set a raw value in memory and schedule a write to disk."""
        self._data["entries"][key] = value
        self._store.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    def _data_to_save(self) -> dict[str, Any]:
        return self._data

    async def async_flush(self) -> None:
        """Write current data to disk immediately."""
        await self._store.async_save(self._data)

    async def async_remove(self) -> None:
        """Remove the store file entirely."""
        await self._store.async_remove()
        self._data = {"entries": {}}


def save_state(
    storage: KeyValueStore,
    state: PersistedState,
    max_entries: int = DEFAULT_HISTORY_DAYS,
) -> PersistedState:
    """Write *state* to the primary key and mirror its history to the legacy key.

    History is pruned first and the pruned state is returned.  The two writes
    are independent; the legacy key is never read as authoritative when the
    primary payload carries its own history.
    """
    state.history = prune(state.history, max_entries)
    storage.set(KEY_HABITS, json_dumps(state.to_dict()))
    storage.set(KEY_HISTORY_LEGACY, json_dumps(history_to_dict(state.history)))
    return state

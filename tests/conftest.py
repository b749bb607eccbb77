"""Shared fixtures for the Habit Loop integration test suite.

Provides a lightweight mock HomeAssistant object, an in-memory key-value
store, and builders for stored payloads of each schema version.
"""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_components.habit_loop.const import KEY_HABITS, KEY_HISTORY_LEGACY


# ── Mock HomeAssistant fixture ──────────────────────────────────────


class MockBus:
    """Minimal mock for hass.bus — captures fired events and listeners."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []
        self.listeners: dict[str, list[Any]] = {}
        self.once_listeners: dict[str, list[Any]] = {}

    def async_fire(self, event_type: str, event_data: dict | None = None):
        self.events.append((event_type, event_data or {}))

    def async_listen(self, event_type: str, cb):
        self.listeners.setdefault(event_type, []).append(cb)
        return MagicMock()

    def async_listen_once(self, event_type: str, cb):
        self.once_listeners.setdefault(event_type, []).append(cb)
        return MagicMock()

    def events_of(self, event_type: str) -> list[dict]:
        return [data for etype, data in self.events if etype == event_type]

    def clear(self):
        self.events.clear()


class MockHass:
    """Lightweight mock HomeAssistant object for testing."""

    def __init__(self):
        self.bus = MockBus()
        self.data: dict[str, Any] = {}
        self.services = MagicMock()
        self.services.has_service = MagicMock(return_value=False)


@pytest.fixture
def hass():
    """Return a mock HomeAssistant instance."""
    return MockHass()


# ── In-memory key-value store ───────────────────────────────────────


class MemoryStorage:
    """Dict-backed KeyValueStore that records every write."""

    def __init__(self, entries: dict[str, str] | None = None):
        self.entries: dict[str, str] = dict(entries or {})
        self.writes: list[str] = []

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def set(self, key: str, value: str) -> None:
        self.entries[key] = value
        self.writes.append(key)

    def load(self, key: str) -> Any:
        """Decode a stored value for assertions."""
        return json.loads(self.entries[key])


@pytest.fixture
def storage():
    return MemoryStorage()


# ── Stored payload builders ─────────────────────────────────────────


def v1_payload() -> list[dict[str, Any]]:
    """Oldest schema: a bare habit list, no date."""
    return [
        {"id": 1, "name": "Stretch", "done": True},
        {"id": 2, "name": "Water", "done": False},
    ]


def v2_payload(last_date: str = "2024/01/02") -> dict[str, Any]:
    """Intermediate schema: habits with a date, history kept separately."""
    return {
        "lastDate": last_date,
        "habits": [
            {"id": 1, "name": "Stretch", "done": True},
            {"id": 2, "name": "Water", "done": True},
        ],
    }


def v3_payload(last_date: str = "2024/01/03") -> dict[str, Any]:
    """Current schema."""
    return {
        "version": 3,
        "lastDate": last_date,
        "habits": [
            {"id": 1, "name": "Stretch", "done": True},
            {"id": 4, "name": "Read", "done": False},
        ],
        "history": {
            "2024/01/02": {"total": 2, "done": 2, "doneIds": [1, 4]},
            "2024/01/03": {"total": 2, "done": 1, "doneIds": [1]},
        },
    }


def legacy_history_payload() -> dict[str, Any]:
    return {
        "2023/12/30": {"total": 3, "done": 3},
        "2023/12/31": {"total": 3, "done": 1, "doneIds": [2]},
    }


def stored(primary: Any = None, legacy: Any = None) -> MemoryStorage:
    """Build a MemoryStorage holding JSON-encoded payloads."""
    entries: dict[str, str] = {}
    if primary is not None:
        entries[KEY_HABITS] = primary if isinstance(primary, str) else json.dumps(primary)
    if legacy is not None:
        entries[KEY_HISTORY_LEGACY] = legacy if isinstance(legacy, str) else json.dumps(legacy)
    return MemoryStorage(entries)

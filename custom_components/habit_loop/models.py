"""Data model for the Habit Loop integration.

The ``to_dict`` methods produce the exact persisted wire shape (camelCase
keys, as written by earlier releases).  The ``from_dict`` constructors are
lenient: anything unexpected is coerced to a safe value instead of raising,
because stored data may come from any past schema.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .const import SCHEMA_VERSION

HistoryMap = dict[str, "DaySummary"]


def coerce_int(value: Any, default: int = 0) -> int:
    """Coerce a stored number to int, falling back to *default*."""
    if value is None:
        return default
    try:
        if isinstance(value, str):
            return int(float(value))
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass(slots=True)
class Habit:
    id: int
    name: str
    done: bool = False

    @classmethod
    def from_dict(cls, data: Any, position: int, *, keep_done: bool = True) -> Habit:
        """Build a habit from a stored element at 1-based *position*."""
        if not isinstance(data, dict):
            return cls(id=position, name="", done=False)
        raw_name = data.get("name")
        return cls(
            id=coerce_int(data.get("id"), position),
            name="" if raw_name is None else str(raw_name),
            done=bool(data.get("done", False)) if keep_done else False,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "done": self.done}


@dataclass(frozen=True, slots=True)
class DaySummary:
    """Completion snapshot for one calendar day."""

    total: int
    done: int
    done_ids: tuple[int, ...] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DaySummary:
        if not isinstance(data, dict):
            return cls(total=0, done=0)
        raw_ids = data.get("doneIds")
        done_ids = (
            tuple(coerce_int(i) for i in raw_ids) if isinstance(raw_ids, list) else None
        )
        return cls(
            total=coerce_int(data.get("total")),
            done=coerce_int(data.get("done")),
            done_ids=done_ids,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"total": self.total, "done": self.done}
        if self.done_ids is not None:
            data["doneIds"] = list(self.done_ids)
        return data


def history_from_dict(data: Any) -> HistoryMap:
    """Decode a stored history object; non-objects become an empty ledger."""
    if not isinstance(data, dict):
        return {}
    return {str(key): DaySummary.from_dict(value) for key, value in data.items()}


def history_to_dict(history: HistoryMap) -> dict[str, Any]:
    return {key: summary.to_dict() for key, summary in history.items()}


@dataclass(slots=True)
class PersistedState:
    """Current (version 3) persisted shape.

    ``last_date`` is the day for which the ``done`` flags in ``habits`` are
    valid.
    """

    last_date: str
    habits: list[Habit] = field(default_factory=list)
    history: HistoryMap = field(default_factory=dict)
    version: int = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "lastDate": self.last_date,
            "habits": [habit.to_dict() for habit in self.habits],
            "history": history_to_dict(self.history),
        }

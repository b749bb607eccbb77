"""Load stored habit data of any past schema and upgrade it to version 3.

Stored shapes, oldest first:

  v1  a bare list of habits with no date at all
  v2  ``{lastDate, habits}``, with history kept under a separate legacy key
  v3  ``{version: 3, lastDate, habits, history}``

Decoders are tried in a fixed order (v1, v3, v2) and the first match wins.
Nothing in here raises: unreadable or unrecognised data falls back to the
starter habits, and history falls back to whatever the legacy key holds.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from homeassistant.util.json import json_loads

from .const import KEY_HABITS, KEY_HISTORY_LEGACY, SCHEMA_VERSION, SchemaVariant
from .models import Habit, HistoryMap, PersistedState, history_from_dict
from .store import KeyValueStore

_LOGGER = logging.getLogger(__name__)

_MISSING = object()


@dataclass(slots=True)
class MigrationResult:
    variant: SchemaVariant
    state: PersistedState


@dataclass(slots=True)
class _DecodeContext:
    today: str
    legacy_history: HistoryMap


def _parse(raw: str | None, what: str) -> Any:
    """Parse a raw JSON payload, returning _MISSING when unusable."""
    if not raw:
        return _MISSING
    try:
        return json_loads(raw)
    except ValueError as err:
        _LOGGER.debug("Ignoring unreadable %s payload: %s", what, err)
        return _MISSING


def parse_legacy_history(raw: str | None) -> HistoryMap:
    """Decode the legacy history key; anything but an object yields {}."""
    return history_from_dict(_parse(raw, "legacy history"))


def _has_current_shape(parsed: Any) -> bool:
    return (
        isinstance(parsed, dict)
        and isinstance(parsed.get("lastDate"), str)
        and isinstance(parsed.get("habits"), list)
    )


def _decode_habits(items: list[Any], *, keep_done: bool) -> list[Habit]:
    return [
        Habit.from_dict(item, position, keep_done=keep_done)
        for position, item in enumerate(items, start=1)
    ]


def _decode_v1(parsed: Any, ctx: _DecodeContext) -> PersistedState | None:
    if not isinstance(parsed, list):
        return None
    # v1 stored no date, so its done flags cannot be trusted for any day.
    return PersistedState(
        last_date=ctx.today,
        habits=_decode_habits(parsed, keep_done=False),
        history=ctx.legacy_history,
    )


def _decode_v3(parsed: Any, ctx: _DecodeContext) -> PersistedState | None:
    if not _has_current_shape(parsed):
        return None
    version = parsed.get("version")
    if isinstance(version, bool) or version != SCHEMA_VERSION:
        return None
    embedded = parsed.get("history")
    return PersistedState(
        last_date=parsed["lastDate"],
        habits=_decode_habits(parsed["habits"], keep_done=True),
        history=history_from_dict(embedded) if isinstance(embedded, dict) else ctx.legacy_history,
    )


def _decode_v2(parsed: Any, ctx: _DecodeContext) -> PersistedState | None:
    if not _has_current_shape(parsed):
        return None
    # Any embedded history predates v3 and is ignored.
    return PersistedState(
        last_date=parsed["lastDate"],
        habits=_decode_habits(parsed["habits"], keep_done=True),
        history=ctx.legacy_history,
    )


_DECODERS: tuple[
    tuple[SchemaVariant, Callable[[Any, _DecodeContext], PersistedState | None]], ...
] = (
    (SchemaVariant.V1, _decode_v1),
    (SchemaVariant.V3, _decode_v3),
    (SchemaVariant.V2, _decode_v2),
)


def migrate(
    primary_raw: str | None,
    legacy_raw: str | None,
    *,
    today: str,
    default_habits: Sequence[Habit],
) -> MigrationResult:
    """Turn raw stored payloads into a current-schema state."""
    ctx = _DecodeContext(today=today, legacy_history=parse_legacy_history(legacy_raw))

    parsed = _parse(primary_raw, "habit")
    if parsed is not _MISSING:
        for variant, decoder in _DECODERS:
            state = decoder(parsed, ctx)
            if state is not None:
                _LOGGER.debug(
                    "Loaded %s habit data: %d habits, %d history days",
                    variant, len(state.habits), len(state.history),
                )
                return MigrationResult(variant=variant, state=state)

    _LOGGER.debug("No usable habit data stored, starting from defaults")
    return MigrationResult(
        variant=SchemaVariant.DEFAULT,
        state=PersistedState(
            last_date=today,
            habits=[Habit(id=h.id, name=h.name, done=h.done) for h in default_habits],
            history=ctx.legacy_history,
        ),
    )


def load_state(
    storage: KeyValueStore,
    *,
    today: str,
    default_habits: Sequence[Habit],
) -> MigrationResult:
    """Read both keys from *storage* and migrate them."""
    return migrate(
        storage.get(KEY_HABITS),
        storage.get(KEY_HISTORY_LEGACY),
        today=today,
        default_habits=default_habits,
    )

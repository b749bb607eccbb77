"""The Habit Loop integration."""
from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.const import EVENT_HOMEASSISTANT_STOP
from homeassistant.core import Event, HomeAssistant, ServiceCall, callback
from homeassistant.helpers import config_validation as cv

from .const import (
    ATTR_HABIT_ID,
    ATTR_NAME,
    CONF_HISTORY_DAYS,
    CONF_STARTER_HABITS,
    DEFAULT_HISTORY_DAYS,
    DEFAULT_STARTER_HABITS,
    DOMAIN,
    MAX_HISTORY_DAYS,
    SERVICE_ADD_HABIT,
    SERVICE_ENSURE_TODAY,
    SERVICE_REMOVE_HABIT,
    SERVICE_RENAME_HABIT,
    SERVICE_TOGGLE_HABIT,
)
from .habit_loop import HabitLoop
from .store import HabitLoopStorage

_LOGGER = logging.getLogger(__name__)

# ── YAML Schema ─────────────────────────────────────────────────────

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional(
                    CONF_STARTER_HABITS, default=list(DEFAULT_STARTER_HABITS)
                ): vol.All(cv.ensure_list, [vol.All(cv.string, vol.Strip, vol.Length(min=1))]),
                vol.Optional(CONF_HISTORY_DAYS, default=DEFAULT_HISTORY_DAYS): vol.All(
                    vol.Coerce(int), vol.Range(min=1, max=MAX_HISTORY_DAYS)
                ),
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)

HABIT_ID_SCHEMA = vol.Schema({vol.Required(ATTR_HABIT_ID): vol.Coerce(int)})

ADD_HABIT_SCHEMA = vol.Schema({vol.Required(ATTR_NAME): cv.string})

RENAME_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_HABIT_ID): vol.Coerce(int),
        vol.Required(ATTR_NAME): cv.string,
    }
)


# ── Setup ───────────────────────────────────────────────────────────


async def async_setup(hass: HomeAssistant, config: dict[str, Any]) -> bool:
    """Set up Habit Loop from YAML configuration."""
    if DOMAIN not in config:
        return True

    conf = config[DOMAIN]

    storage = HabitLoopStorage(hass)
    await storage.async_load()

    habit_loop = HabitLoop(
        hass,
        storage,
        starter_habits=conf[CONF_STARTER_HABITS],
        history_days=conf[CONF_HISTORY_DAYS],
    )
    habit_loop.init()
    habit_loop.async_setup_listeners()

    hass.data[DOMAIN] = {
        "habit_loop": habit_loop,
        "storage": storage,
    }

    _async_setup_services(hass, habit_loop)

    async def _async_shutdown(event: Event) -> None:
        habit_loop.async_remove_listeners()
        await storage.async_flush()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_shutdown)

    return True


# ── Services ────────────────────────────────────────────────────────


@callback
def _async_setup_services(hass: HomeAssistant, habit_loop: HabitLoop) -> None:
    """Set up Habit Loop services."""
    if hass.services.has_service(DOMAIN, SERVICE_ADD_HABIT):
        return  # Already registered

    async def handle_add_habit(call: ServiceCall) -> None:
        if habit_loop.add_habit(call.data[ATTR_NAME]) is None:
            _LOGGER.warning("Ignoring habit with a blank name")

    async def handle_toggle_habit(call: ServiceCall) -> None:
        habit_id = call.data[ATTR_HABIT_ID]
        if not habit_loop.toggle_habit(habit_id):
            _LOGGER.warning("Habit not found: %s", habit_id)

    async def handle_remove_habit(call: ServiceCall) -> None:
        habit_id = call.data[ATTR_HABIT_ID]
        if not habit_loop.remove_habit(habit_id):
            _LOGGER.warning("Habit not found: %s", habit_id)

    async def handle_rename_habit(call: ServiceCall) -> None:
        habit_id = call.data[ATTR_HABIT_ID]
        if not habit_loop.rename_habit(habit_id, call.data[ATTR_NAME]):
            _LOGGER.warning("Could not rename habit %s", habit_id)

    async def handle_ensure_today(call: ServiceCall) -> None:
        habit_loop.ensure_today()

    hass.services.async_register(
        DOMAIN, SERVICE_ADD_HABIT, handle_add_habit, schema=ADD_HABIT_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_TOGGLE_HABIT, handle_toggle_habit, schema=HABIT_ID_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_REMOVE_HABIT, handle_remove_habit, schema=HABIT_ID_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_RENAME_HABIT, handle_rename_habit, schema=RENAME_HABIT_SCHEMA
    )
    hass.services.async_register(DOMAIN, SERVICE_ENSURE_TODAY, handle_ensure_today)

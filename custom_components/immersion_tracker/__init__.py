# File: __init__.py
"""Initialization file for the Immersion Tracker integration.

Handles setting up the integration: loading the persisted state, creating
the coordinator that owns it, and registering the services.

Key Features:
- Config entry setup and unload support.
- Local calendar taken from the Home Assistant timezone.
- Storage removal when the entry is deleted.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import ImmersionTrackerCoordinator
from .services import async_setup_services, async_unload_services
from .store import ImmersionTrackerStore
from .utils import dt_utils


def _set_local_timezone(hass: HomeAssistant) -> None:
    """Point the calendar helpers at the Home Assistant timezone."""
    tz = dt_util.get_time_zone(hass.config.time_zone) or dt_util.DEFAULT_TIME_ZONE
    dt_utils.set_default_timezone(tz)
    const.LOGGER.debug("DEBUG: Local calendar timezone set to %s", tz)


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry when its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info(
        "INFO: Starting setup for Immersion Tracker entry: %s", entry.entry_id
    )

    # Must run before anything asks for "today"
    _set_local_timezone(hass)

    store = ImmersionTrackerStore(hass, const.STORAGE_KEY)
    state = await store.async_load()

    coordinator = ImmersionTrackerCoordinator(hass, entry, store, state)

    # Perform the first refresh to compute the initial snapshot.
    await coordinator.async_config_entry_first_refresh()

    @callback
    def _async_publish_snapshot() -> None:
        hass.bus.async_fire(const.EVENT_SNAPSHOT_UPDATED, dict(coordinator.data))

    # The coordinator only polls while it has a listener
    entry.async_on_unload(coordinator.async_add_listener(_async_publish_snapshot))

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    async_setup_services(hass)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info(
        "INFO: Immersion Tracker setup complete for entry: %s", entry.entry_id
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Immersion Tracker entry: %s", entry.entry_id)

    hass.data[const.DOMAIN].pop(entry.entry_id, None)
    if not hass.data[const.DOMAIN]:
        await async_unload_services(hass)

    return True


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing Immersion Tracker entry: %s", entry.entry_id)

    # The entry is already unloaded here, so use a fresh store handle
    store = ImmersionTrackerStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

    const.LOGGER.info(
        "INFO: Immersion Tracker entry data cleared: %s", entry.entry_id
    )

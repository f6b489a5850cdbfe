# File: store.py
"""Handles persistent data storage for the Immersion Tracker integration.

Uses Home Assistant's Storage helper to load and save the tracker state
(goal configuration, daily and weekly entries, best-streak metadata) so it
survives restarts. Loading and saving are two separate, explicitly invoked
operations; nothing is written implicitly when the state changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .migration import get_default_structure, migrate

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .type_defs import PersistedState


class ImmersionTrackerStore:
    """Handles persistent storage operations for Immersion Tracker data.

    Thin wrapper around Home Assistant's Store API. Every loaded payload is
    passed through `migrate()`, so callers always receive a valid state.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store[dict[str, Any]] = Store(
            hass, const.STORAGE_VERSION, storage_key
        )

    async def async_load(self) -> PersistedState:
        """Load state from storage.

        Returns the default structure when nothing is stored. Malformed
        payloads are repaired by migrate(); unreadable storage is logged and
        treated as empty.
        """
        const.LOGGER.debug("DEBUG: ImmersionTrackerStore: Loading data from storage")
        try:
            existing_data = await self._store.async_load()
        except (OSError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to read storage %s: %s. Starting from defaults",
                self._store.path,
                err,
            )
            existing_data = None

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            return get_default_structure()

        state = migrate(existing_data)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "entries": len(state[const.DATA_ENTRIES]),
                "weekly": len(state[const.DATA_WEEKLY]),
                "best_streak": state[const.DATA_META][const.DATA_META_BEST_STREAK],
            },
        )
        return state

    async def async_save(self, state: PersistedState) -> bool:
        """Save state to storage.

        Best-effort: errors are logged, never raised.

        Returns:
            True if the write succeeded.
        """
        try:
            await self._store.async_save(dict(state))
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s. "
                "Data contains types that cannot be converted to JSON",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s. "
                "Data structure may be corrupted",
                err,
            )
        else:
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
            return True
        return False

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )

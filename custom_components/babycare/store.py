# File: store.py
"""Handles persistent data storage for the BabyCare integration.

Uses Home Assistant's Storage helper to save and load children and their
vaccination completion records, so the state is preserved across restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .type_defs import BabyCareData

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class BabyCareStore:
    """Handles persistent storage operations for BabyCare data.

    Thin wrapper around Home Assistant's Store API. Children are keyed by
    internal_id; completion records by child internal_id and dose id.
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
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> BabyCareData:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
            },
            const.DATA_CHILDREN: {},
            const.DATA_VACCINATIONS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Files written
        before a bucket existed get that bucket added.
        """
        const.LOGGER.debug("DEBUG: BabyCareStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = BabyCareStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in BabyCareStore.get_default_structure().items():
            if key not in self._data:
                const.LOGGER.debug("DEBUG: Adding missing storage bucket '%s'", key)
                self._data[key] = default

        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "children": len(self._data.get(const.DATA_CHILDREN, {})),
                "vaccinations": len(self._data.get(const.DATA_VACCINATIONS, {})),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        const.LOGGER.debug(
            "DEBUG: Store set_data called with %s children",
            len(new_data.get(const.DATA_CHILDREN, {})),
        )
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Errors are logged, never raised:
            OSError: file system issues prevent saving.
            TypeError: data contains non-serializable types.
            ValueError: data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning("WARNING: Clearing all BabyCare data and resetting storage")
        self._data = BabyCareStore.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        await self.async_clear_data()

        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )

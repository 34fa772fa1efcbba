# File: __init__.py
"""Initialization file for the BabyCare integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization for data synchronization.
- Storage management for persistent data handling.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import BabyCareDataCoordinator
from .services import async_setup_services, async_unload_services
from .store import BabyCareStore


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for BabyCare entry: %s", entry.entry_id)

    # Must be done before anything computes "today"
    const.set_default_timezone(hass)

    store = BabyCareStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    coordinator = BabyCareDataCoordinator(hass, entry, store)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise ConfigEntryNotReady from e

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    const.LOGGER.info("INFO: BabyCare setup complete for entry: %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading BabyCare entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing BabyCare entry: %s", entry.entry_id)

    if const.DOMAIN in hass.data and entry.entry_id in hass.data[const.DOMAIN]:
        store: BabyCareStore = hass.data[const.DOMAIN][entry.entry_id][const.STORE]
        await store.async_delete_storage()
    else:
        # Entry already unloaded, remove the file directly
        await BabyCareStore(hass, const.STORAGE_KEY).async_delete_storage()

    const.LOGGER.info("INFO: BabyCare entry data cleared: %s", entry.entry_id)

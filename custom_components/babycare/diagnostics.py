"""Diagnostics support for BabyCare integration.

The config entry diagnostics return the raw storage data, identical to the
babycare_data file. Device diagnostics return one child's classified schedule.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntry

from . import bc_helpers as bh
from . import const
from .coordinator import BabyCareDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: BabyCareDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    return coordinator.store.data


async def async_get_device_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry, device: DeviceEntry
) -> dict[str, Any]:
    """Return diagnostics for a child device."""
    coordinator: BabyCareDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    child_id = None
    for identifier in device.identifiers:
        if identifier[0] == const.DOMAIN:
            child_id = identifier[1]
            break

    if not child_id:
        return {"error": "Could not determine child_id from device identifiers"}

    child_data = coordinator.children_data.get(child_id)
    if not child_data:
        return {"error": f"Child data not found for child_id: {child_id}"}

    return {
        "child_id": child_id,
        "child_data": child_data,
        "completions": coordinator.get_child_completions(child_id),
        "schedule": bh.schedule_view_to_dict(coordinator, child_id),
    }

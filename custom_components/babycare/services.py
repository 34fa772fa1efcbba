# File: services.py
"""Defines custom services for the BabyCare integration.

These services allow vaccination tracking through scripts or automations.
Children are addressed by name; vaccinations by their stable dose id
("dtap-1") and date groups by their display key ("March 1, 2024").
"""

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import bc_helpers as bh
from . import const
from .coordinator import BabyCareDataCoordinator

# --- Service Schemas ---
MARK_VACCINATION_COMPLETED_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_VACCINE_ID): cv.string,
        vol.Optional(const.FIELD_NOTES): cv.string,
        vol.Optional(const.FIELD_COMPLETED_DATE): cv.date,
    }
)

CLEAR_VACCINATION_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_VACCINE_ID): cv.string,
    }
)

TOGGLE_VACCINATION_GROUP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
        vol.Required(const.FIELD_DATE_KEY): cv.string,
    }
)

SET_CHILD_AGE_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required(const.FIELD_CHILD_NAME): cv.string,
            vol.Optional(const.FIELD_AGE): cv.string,
            vol.Optional(const.FIELD_BIRTH_DATE): cv.date,
        }
    ),
    cv.has_at_least_one_key(const.FIELD_AGE, const.FIELD_BIRTH_DATE),
)

GET_VACCINATION_SCHEDULE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_NAME): cv.string,
    }
)


def _get_coordinator_or_raise(
    hass: HomeAssistant, service_label: str
) -> BabyCareDataCoordinator:
    coordinator = bh.get_babycare_coordinator(hass)
    if not coordinator:
        const.LOGGER.warning("WARNING: %s: %s", service_label, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return coordinator


def _get_child_id_or_raise(
    coordinator: BabyCareDataCoordinator, child_name: str, service_label: str
) -> str:
    child_id = bh.get_child_id_by_name(coordinator, child_name)
    if not child_id:
        message = const.ERROR_CHILD_NOT_FOUND_FMT.format(child_name)
        const.LOGGER.warning("WARNING: %s: %s", service_label, message)
        raise HomeAssistantError(message)
    return child_id


def async_setup_services(hass: HomeAssistant):
    """Register BabyCare services."""

    async def handle_mark_vaccination_completed(call: ServiceCall):
        """Handle marking a scheduled dose as completed."""
        coordinator = _get_coordinator_or_raise(hass, "Mark Vaccination Completed")
        child_name = call.data[const.FIELD_CHILD_NAME]
        vaccine_id = call.data[const.FIELD_VACCINE_ID]
        child_id = _get_child_id_or_raise(
            coordinator, child_name, "Mark Vaccination Completed"
        )

        try:
            coordinator.mark_vaccination_completed(
                child_id,
                vaccine_id,
                notes=call.data.get(const.FIELD_NOTES),
                completed_date=call.data.get(const.FIELD_COMPLETED_DATE),
            )
        except ValueError as err:
            const.LOGGER.warning("WARNING: Mark Vaccination Completed: %s", err)
            raise HomeAssistantError(
                const.ERROR_VACCINE_NOT_FOUND_FMT.format(vaccine_id, child_name)
            ) from err

        await coordinator.async_request_refresh()

    async def handle_clear_vaccination_completion(call: ServiceCall):
        """Handle removing a dose's completion record."""
        coordinator = _get_coordinator_or_raise(hass, "Clear Vaccination Completion")
        child_name = call.data[const.FIELD_CHILD_NAME]
        vaccine_id = call.data[const.FIELD_VACCINE_ID]
        child_id = _get_child_id_or_raise(
            coordinator, child_name, "Clear Vaccination Completion"
        )

        if vaccine_id not in {entry.id for entry in coordinator.get_schedule(child_id)}:
            message = const.ERROR_VACCINE_NOT_FOUND_FMT.format(vaccine_id, child_name)
            const.LOGGER.warning("WARNING: Clear Vaccination Completion: %s", message)
            raise HomeAssistantError(message)

        coordinator.clear_vaccination_completion(child_id, vaccine_id)
        await coordinator.async_request_refresh()

    async def handle_toggle_vaccination_group(call: ServiceCall):
        """Handle expanding or collapsing a date group."""
        coordinator = _get_coordinator_or_raise(hass, "Toggle Vaccination Group")
        child_name = call.data[const.FIELD_CHILD_NAME]
        date_key = call.data[const.FIELD_DATE_KEY]
        child_id = _get_child_id_or_raise(
            coordinator, child_name, "Toggle Vaccination Group"
        )

        try:
            collapsed = coordinator.toggle_date_group(child_id, date_key)
        except ValueError as err:
            const.LOGGER.warning("WARNING: Toggle Vaccination Group: %s", err)
            raise HomeAssistantError(
                const.ERROR_DATE_GROUP_NOT_FOUND_FMT.format(date_key, child_name)
            ) from err

        const.LOGGER.debug(
            "DEBUG: Group '%s' for child '%s' is now %s",
            date_key,
            child_name,
            "collapsed" if collapsed else "expanded",
        )

    async def handle_set_child_age(call: ServiceCall):
        """Handle changing a child's age or birth date."""
        coordinator = _get_coordinator_or_raise(hass, "Set Child Age")
        child_name = call.data[const.FIELD_CHILD_NAME]
        child_id = _get_child_id_or_raise(coordinator, child_name, "Set Child Age")

        update: dict[str, Any] = {}
        if const.FIELD_AGE in call.data:
            update[const.DATA_CHILD_AGE] = call.data[const.FIELD_AGE]
        birth_date = call.data.get(const.FIELD_BIRTH_DATE)
        update[const.DATA_CHILD_BIRTH_DATE] = (
            birth_date.isoformat() if birth_date else None
        )

        coordinator.update_child(child_id, update)
        const.LOGGER.info(
            "INFO: Child '%s' birth date set to %s",
            child_name,
            coordinator.children_data[child_id][const.DATA_CHILD_BIRTH_DATE],
        )
        await coordinator.async_request_refresh()

    async def handle_get_vaccination_schedule(call: ServiceCall) -> ServiceResponse:
        """Return the classified schedule for a child."""
        coordinator = _get_coordinator_or_raise(hass, "Get Vaccination Schedule")
        child_name = call.data[const.FIELD_CHILD_NAME]
        child_id = _get_child_id_or_raise(
            coordinator, child_name, "Get Vaccination Schedule"
        )
        return bh.schedule_view_to_dict(coordinator, child_id)

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_MARK_VACCINATION_COMPLETED,
        handle_mark_vaccination_completed,
        schema=MARK_VACCINATION_COMPLETED_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CLEAR_VACCINATION_COMPLETION,
        handle_clear_vaccination_completion,
        schema=CLEAR_VACCINATION_COMPLETION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_TOGGLE_VACCINATION_GROUP,
        handle_toggle_vaccination_group,
        schema=TOGGLE_VACCINATION_GROUP_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_CHILD_AGE,
        handle_set_child_age,
        schema=SET_CHILD_AGE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_VACCINATION_SCHEDULE,
        handle_get_vaccination_schedule,
        schema=GET_VACCINATION_SCHEDULE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    const.LOGGER.info("INFO: BabyCare services have been registered successfully")


async def async_unload_services(hass: HomeAssistant):
    """Unregister BabyCare services when unloading the integration."""
    for service in const.SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: BabyCare services have been unregistered")

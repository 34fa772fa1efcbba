# File: bc_helpers.py
"""BabyCare helper functions and shared logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from . import const
from .engines import DateGroup, ScheduleView, VaccinationEngine, VaccinationEntry

if TYPE_CHECKING:
    from .coordinator import BabyCareDataCoordinator  # Used for type checking only


# -------- Get Coordinator --------
def get_first_babycare_entry(hass: HomeAssistant) -> Optional[str]:
    """Retrieve the first BabyCare config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def get_babycare_coordinator(
    hass: HomeAssistant,
) -> Optional[BabyCareDataCoordinator]:
    """Retrieve BabyCare coordinator from hass.data."""
    entry_id = get_first_babycare_entry(hass)
    if not entry_id:
        return None

    data = hass.data[const.DOMAIN].get(entry_id)
    if not data or const.COORDINATOR not in data:
        return None

    return data[const.COORDINATOR]


# -------- Lookups --------
def get_child_id_by_name(
    coordinator: BabyCareDataCoordinator, child_name: str
) -> Optional[str]:
    """Retrieve the child_id for a given child_name."""
    for child_id, child_info in coordinator.children_data.items():
        if child_info.get(const.DATA_CHILD_NAME) == child_name:
            return child_id
    return None


# -------- Devices --------
def create_child_device_info(
    child_id: str, child_name: str, config_entry: ConfigEntry
) -> DeviceInfo:
    """Create device info for a child profile.

    Every entity of a child attaches to this device.
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, child_id)},
        name=f"{child_name} ({config_entry.title})",
        manufacturer=const.DEVICE_MANUFACTURER,
        model=const.DEVICE_MODEL_CHILD,
        entry_type=DeviceEntryType.SERVICE,
    )


# -------- Serialization --------
def entry_to_dict(
    entry: VaccinationEntry,
    status: str,
    completions: dict[str, Any],
) -> dict[str, Any]:
    """Serialize a scheduled dose for attributes and service responses."""
    record = completions.get(entry.id) or {}
    return {
        const.ATTR_DOSE_ID: entry.id,
        const.ATTR_DOSE_VACCINE: entry.vaccine_name,
        const.ATTR_DOSE_LABEL: entry.dose_label,
        const.ATTR_DOSE_SCHEDULED_DATE: entry.scheduled_date.isoformat(),
        const.ATTR_DOSE_AGE: VaccinationEngine.format_age_at_dose(entry),
        const.ATTR_DOSE_NOTES: entry.notes,
        const.ATTR_DOSE_STATUS: status,
        const.ATTR_DOSE_COMPLETED_DATE: record.get(
            const.DATA_COMPLETION_COMPLETED_DATE
        ),
        const.ATTR_DOSE_COMPLETION_NOTES: record.get(const.DATA_COMPLETION_NOTES),
    }


def group_to_dict(
    group: DateGroup,
    view: ScheduleView,
    completions: dict[str, Any],
    collapse_state: dict[str, bool],
) -> dict[str, Any]:
    """Serialize a date group with its doses."""
    return {
        const.ATTR_GROUP_DATE_KEY: group.date_key,
        const.ATTR_GROUP_DATE: group.date.isoformat(),
        const.ATTR_GROUP_STATUS: group.status,
        const.ATTR_GROUP_COLLAPSED: collapse_state.get(group.date_key, True),
        const.ATTR_GROUP_COMPLETED_COUNT: group.completed_count,
        const.ATTR_GROUP_TOTAL_COUNT: group.total_count,
        const.ATTR_DOSES: [
            entry_to_dict(entry, view.entry_statuses[entry.id], completions)
            for entry in group.entries
        ],
    }


def schedule_view_to_dict(
    coordinator: BabyCareDataCoordinator, child_id: str
) -> dict[str, Any]:
    """Build the full schedule payload for one child."""
    view = coordinator.get_schedule_view(child_id)
    completions = coordinator.get_child_completions(child_id)
    collapse_state = coordinator.get_collapse_state(child_id)
    child_info = coordinator.children_data[child_id]

    return {
        const.ATTR_CHILD_NAME: child_info.get(const.DATA_CHILD_NAME),
        const.ATTR_BIRTH_DATE: child_info.get(const.DATA_CHILD_BIRTH_DATE),
        const.ATTR_BIRTH_DATE_ESTIMATED: child_info.get(
            const.DATA_CHILD_BIRTH_DATE_ESTIMATED, False
        ),
        const.ATTR_CURRENT_RELEVANT_DATE: view.relevant.current,
        const.ATTR_NEXT_RELEVANT_DATE: view.relevant.next,
        const.ATTR_PROGRESS: {
            const.ATTR_TOTAL: view.progress.total,
            const.ATTR_COMPLETED: view.progress.completed,
            const.ATTR_PERCENTAGE: view.progress.percentage,
        },
        const.ATTR_GROUPS: [
            group_to_dict(group, view, completions, collapse_state)
            for group in view.groups
        ],
        const.ATTR_DUE_THIS_MONTH: [
            entry_to_dict(entry, view.entry_statuses[entry.id], completions)
            for entry in view.due_this_month
        ],
        const.ATTR_OVERDUE: [
            entry_to_dict(entry, view.entry_statuses[entry.id], completions)
            for entry in view.overdue
        ],
    }

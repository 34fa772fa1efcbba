# File: sensor.py
"""Sensors for the BabyCare integration.

Sensors Defined in This File (3), one set per child:

01. ChildVaccinationProgressSensor
02. ChildNextVaccinationSensor
03. ChildVaccinationsDueSensor
"""

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant

from . import bc_helpers as bh
from . import const
from .coordinator import BabyCareDataCoordinator
from .entity import BabyCareCoordinatorEntity


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
):
    """Set up sensors for BabyCare integration."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    coordinator: BabyCareDataCoordinator = data[const.COORDINATOR]

    entities = []
    for child_id, child_info in coordinator.children_data.items():
        child_name = child_info.get(const.DATA_CHILD_NAME)
        if not child_name:
            const.LOGGER.error(
                "ERROR: Child ID '%s' has no name, skipping its sensors", child_id
            )
            continue

        entities.append(
            ChildVaccinationProgressSensor(coordinator, entry, child_id, child_name)
        )
        entities.append(
            ChildNextVaccinationSensor(coordinator, entry, child_id, child_name)
        )
        entities.append(
            ChildVaccinationsDueSensor(coordinator, entry, child_id, child_name)
        )

    async_add_entities(entities)


# ------------------------------------------------------------------------------------------
class ChildVaccinationProgressSensor(BabyCareCoordinatorEntity, SensorEntity):
    """Share of a child's scheduled doses that are completed, in percent."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_VACCINATION_PROGRESS
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: BabyCareDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(
            coordinator,
            entry,
            child_id,
            child_name,
            const.SENSOR_UID_SUFFIX_VACCINATION_PROGRESS,
        )

    @property
    def native_value(self) -> Any:
        """Return the completion percentage."""
        if not self.available:
            return None
        return self.coordinator.get_schedule_view(self._child_id).progress.percentage

    @property
    def icon(self) -> str:
        """Checked badge once every dose is done."""
        if self.native_value == 100:
            return const.ICON_VACCINATION_DONE
        return const.ICON_VACCINATION

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose completed and total counts."""
        if not self.available:
            return {}
        progress = self.coordinator.get_schedule_view(self._child_id).progress
        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_TOTAL: progress.total,
            const.ATTR_COMPLETED: progress.completed,
        }


# ------------------------------------------------------------------------------------------
class ChildNextVaccinationSensor(BabyCareCoordinatorEntity, SensorEntity):
    """The date group a caregiver should look at now.

    State is the display key of the current relevant date group
    ("March 1, 2024"), or unknown once every dose is completed. Attributes
    carry the doses of that group, the next relevant group and the collapse
    flags of every group.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_NEXT_VACCINATION
    _attr_icon = const.ICON_VACCINATION

    def __init__(
        self,
        coordinator: BabyCareDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(
            coordinator,
            entry,
            child_id,
            child_name,
            const.SENSOR_UID_SUFFIX_NEXT_VACCINATION,
        )

    @property
    def native_value(self) -> Any:
        """Return the current relevant date key."""
        if not self.available:
            return None
        return self.coordinator.get_schedule_view(self._child_id).relevant.current

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the current group's doses and the collapse flags."""
        if not self.available:
            return {}

        view = self.coordinator.get_schedule_view(self._child_id)
        completions = self.coordinator.get_child_completions(self._child_id)
        child_info = self.coordinator.children_data[self._child_id]
        current_group = view.get_group(view.relevant.current)

        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_BIRTH_DATE: child_info.get(const.DATA_CHILD_BIRTH_DATE),
            const.ATTR_BIRTH_DATE_ESTIMATED: child_info.get(
                const.DATA_CHILD_BIRTH_DATE_ESTIMATED, False
            ),
            const.ATTR_NEXT_RELEVANT_DATE: view.relevant.next,
            const.ATTR_GROUP_STATUS: current_group.status if current_group else None,
            const.ATTR_DOSES: [
                bh.entry_to_dict(entry, view.entry_statuses[entry.id], completions)
                for entry in (current_group.entries if current_group else ())
            ],
            const.ATTR_COLLAPSED_GROUPS: dict(
                self.coordinator.get_collapse_state(self._child_id)
            ),
        }


# ------------------------------------------------------------------------------------------
class ChildVaccinationsDueSensor(BabyCareCoordinatorEntity, SensorEntity):
    """Number of doses scheduled this month and not yet completed.

    Attributes list those doses plus every dose left open from before this month.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_VACCINATIONS_DUE
    _attr_icon = const.ICON_VACCINATION
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: BabyCareDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
    ):
        """Initialize the sensor."""
        super().__init__(
            coordinator,
            entry,
            child_id,
            child_name,
            const.SENSOR_UID_SUFFIX_VACCINATIONS_DUE,
        )

    @property
    def native_value(self) -> Any:
        """Return how many doses are due this month."""
        if not self.available:
            return None
        return len(self.coordinator.get_schedule_view(self._child_id).due_this_month)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the due and overdue dose lists."""
        if not self.available:
            return {}

        view = self.coordinator.get_schedule_view(self._child_id)
        completions = self.coordinator.get_child_completions(self._child_id)
        return {
            const.ATTR_CHILD_NAME: self._child_name,
            const.ATTR_DUE_THIS_MONTH: [
                bh.entry_to_dict(entry, view.entry_statuses[entry.id], completions)
                for entry in view.due_this_month
            ],
            const.ATTR_OVERDUE: [
                bh.entry_to_dict(entry, view.entry_statuses[entry.id], completions)
                for entry in view.overdue
            ],
        }

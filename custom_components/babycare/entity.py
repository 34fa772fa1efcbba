"""Base entity classes for BabyCare integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import bc_helpers as bh
from . import const
from .coordinator import BabyCareDataCoordinator


class BabyCareCoordinatorEntity(CoordinatorEntity[BabyCareDataCoordinator]):
    """Base entity for per-child BabyCare entities with typed coordinator access."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: BabyCareDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
        uid_suffix: str,
    ) -> None:
        """Attach the entity to the child's device."""
        super().__init__(coordinator)
        self._entry = entry
        self._child_id = child_id
        self._child_name = child_name
        self._attr_unique_id = f"{entry.entry_id}_{child_id}{uid_suffix}"
        self._attr_translation_placeholders = {
            const.TRANS_KEY_ATTR_CHILD_NAME: child_name
        }
        self._attr_device_info = bh.create_child_device_info(
            child_id, child_name, entry
        )

    @property
    def coordinator(self) -> BabyCareDataCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: BabyCareDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)

    @property
    def available(self) -> bool:
        """Entities go unavailable once their child is deleted."""
        return super().available and self._child_id in self.coordinator.children_data

# File: coordinator.py
"""Coordinator for the BabyCare integration.

Owns the children, their generated vaccination schedules, completion records
and per-child collapse state. Entities and services read schedule views from
here; all mutations persist through the store.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .engines import ScheduleView, VaccinationEngine, VaccinationEntry
from .store import BabyCareStore
from .type_defs import ChildCompletions, ChildData, ChildId
from .utils import dt_utils


class BabyCareDataCoordinator(DataUpdateCoordinator):
    """Coordinator for BabyCare integration.

    Manages data primarily using internal_id for children.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: BabyCareStore,
    ):
        """Initialize the BabyCareDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.config_entry = config_entry
        self.store = store
        self._data: dict[str, Any] = {}

        # Derived, not persisted
        self._schedules: dict[str, tuple[str, list[VaccinationEntry]]] = {}
        self._collapse_state: dict[str, dict[str, bool]] = {}
        self._current_relevant: dict[str, str | None] = {}
        self._user_toggled: dict[str, set[str]] = {}

    # -------------------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------------------

    async def async_config_entry_first_refresh(self):
        """Load from storage, then run the first refresh."""
        stored_data = self.store.data
        if stored_data:
            self._data = stored_data
        else:
            self._data = BabyCareStore.get_default_structure()

        for bucket in (const.DATA_CHILDREN, const.DATA_VACCINATIONS):
            if not isinstance(self._data.get(bucket), dict):
                self._data[bucket] = {}

        # Children saved without a birth date get one estimated now
        needs_persist = False
        for child_id, child_info in self.children_data.items():
            if not dt_utils.dt_parse_date(child_info.get(const.DATA_CHILD_BIRTH_DATE)):
                const.LOGGER.warning(
                    "WARNING: Child '%s' has no valid birth date, estimating from age",
                    child_info.get(const.DATA_CHILD_NAME, child_id),
                )
                self._apply_birth_date(child_info)
                needs_persist = True

        if needs_persist:
            self._persist()

        await super().async_config_entry_first_refresh()

    async def _async_update_data(self):
        """Periodic update.

        Statuses depend on today's date, so a refresh re-derives the relevant
        groups. Collapse flags the user toggled are left as they are.
        """
        try:
            today = dt_utils.dt_today_local()
            for child_id in list(self.children_data):
                self._sync_collapse_state(child_id, today, follow_relevant=False)
            return self._data
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating BabyCare data: {err}") from err

    # -------------------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------------------

    @property
    def children_data(self) -> dict[ChildId, ChildData]:
        """Return the children data."""
        return self._data.get(const.DATA_CHILDREN, {})

    @property
    def vaccinations_data(self) -> dict[ChildId, ChildCompletions]:
        """Return completion records keyed by child id."""
        return self._data.get(const.DATA_VACCINATIONS, {})

    def get_child_completions(self, child_id: str) -> ChildCompletions:
        """Return the completion records for one child (empty if none)."""
        return self.vaccinations_data.get(child_id, {})

    # -------------------------------------------------------------------------------------
    # Children
    # -------------------------------------------------------------------------------------

    @staticmethod
    def _apply_birth_date(child_info: dict[str, Any]) -> None:
        """Resolve and store ``birth_date`` on a child record.

        An explicit birth date wins. Otherwise it is estimated from the age text.
        """
        explicit = dt_utils.dt_parse_date(child_info.get(const.DATA_CHILD_BIRTH_DATE))
        if explicit is not None and not child_info.get(
            const.DATA_CHILD_BIRTH_DATE_ESTIMATED, False
        ):
            child_info[const.DATA_CHILD_BIRTH_DATE] = explicit.isoformat()
            child_info[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] = False
            return

        estimated = VaccinationEngine.estimate_birth_date(
            child_info.get(const.DATA_CHILD_AGE), dt_utils.dt_today_local()
        )
        child_info[const.DATA_CHILD_BIRTH_DATE] = estimated.isoformat()
        child_info[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] = True

    def _create_child(self, child_id: str, child_data: dict[str, Any]):
        child_info: dict[str, Any] = {
            const.DATA_CHILD_INTERNAL_ID: child_id,
            const.DATA_CHILD_NAME: child_data.get(const.DATA_CHILD_NAME, const.CONF_EMPTY),
            const.DATA_CHILD_AGE: child_data.get(const.DATA_CHILD_AGE) or const.CONF_EMPTY,
            const.DATA_CHILD_BIRTH_DATE: child_data.get(const.DATA_CHILD_BIRTH_DATE),
            const.DATA_CHILD_BIRTH_DATE_ESTIMATED: False,
        }
        self._apply_birth_date(child_info)
        self._data[const.DATA_CHILDREN][child_id] = child_info
        self._data[const.DATA_VACCINATIONS].setdefault(child_id, {})

        const.LOGGER.debug(
            "DEBUG: Child Added - '%s', ID '%s', birth date %s (estimated: %s)",
            child_info[const.DATA_CHILD_NAME],
            child_id,
            child_info[const.DATA_CHILD_BIRTH_DATE],
            child_info[const.DATA_CHILD_BIRTH_DATE_ESTIMATED],
        )

    def _update_child(self, child_id: str, child_data: dict[str, Any]):
        """Update an existing child, only updating fields present in child_data.

        The birth date is re-resolved only for a new explicit birth date, a
        changed age text, or a cleared explicit birth date. An estimated
        birth date with an unchanged age is kept as stored.
        """
        child_info = self.children_data[child_id]
        if const.DATA_CHILD_NAME in child_data:
            child_info[const.DATA_CHILD_NAME] = child_data[const.DATA_CHILD_NAME]

        explicit = dt_utils.dt_parse_date(child_data.get(const.DATA_CHILD_BIRTH_DATE))
        age_changed = False
        if const.DATA_CHILD_AGE in child_data:
            new_age = child_data[const.DATA_CHILD_AGE] or const.CONF_EMPTY
            age_changed = new_age != child_info.get(const.DATA_CHILD_AGE, const.CONF_EMPTY)
            child_info[const.DATA_CHILD_AGE] = new_age

        birth_date_cleared = (
            const.DATA_CHILD_BIRTH_DATE in child_data
            and explicit is None
            and not child_info.get(const.DATA_CHILD_BIRTH_DATE_ESTIMATED, False)
        )

        if explicit is not None or age_changed or birth_date_cleared:
            child_info[const.DATA_CHILD_BIRTH_DATE] = (
                explicit.isoformat() if explicit is not None else None
            )
            child_info[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] = False
            self._apply_birth_date(child_info)

        const.LOGGER.debug(
            "DEBUG: Child Updated - '%s', ID '%s'",
            child_info.get(const.DATA_CHILD_NAME, const.CONF_EMPTY),
            child_id,
        )

    def create_child(self, child_id: str, child_data: dict[str, Any]) -> None:
        """Add a child to storage."""
        if child_id in self.children_data:
            raise ValueError(f"Child {child_id} already exists")
        self._create_child(child_id, child_data)
        self._persist()
        self.async_update_listeners()

    def update_child(self, child_id: str, child_data: dict[str, Any]) -> None:
        """Update a child in storage.

        Changing the age or birth date regenerates the schedule.
        """
        if child_id not in self.children_data:
            raise ValueError(f"Child {child_id} not found")
        self._update_child(child_id, child_data)
        self._sync_collapse_state(child_id, dt_utils.dt_today_local())
        self._persist()
        self.async_update_listeners()

    def delete_child(self, child_id: str) -> None:
        """Delete a child, their completion records and their entities."""
        if child_id not in self.children_data:
            raise ValueError(f"Child {child_id} not found")

        child_name = self.children_data[child_id].get(const.DATA_CHILD_NAME, child_id)
        del self._data[const.DATA_CHILDREN][child_id]
        self._data[const.DATA_VACCINATIONS].pop(child_id, None)
        self._schedules.pop(child_id, None)
        self._collapse_state.pop(child_id, None)
        self._current_relevant.pop(child_id, None)
        self._user_toggled.pop(child_id, None)

        self._remove_entities_in_ha(child_id)

        self._persist()
        self.async_update_listeners()
        const.LOGGER.info("INFO: Deleted child '%s' (ID: %s)", child_name, child_id)

    def _remove_entities_in_ha(self, child_id: str):
        """Remove all platform entities whose unique_id references the given child_id."""
        ent_reg = er.async_get(self.hass)
        for entity_entry in list(ent_reg.entities.values()):
            if entity_entry.config_entry_id != self.config_entry.entry_id:
                continue
            if str(child_id) in str(entity_entry.unique_id):
                ent_reg.async_remove(entity_entry.entity_id)
                const.LOGGER.debug(
                    "DEBUG: Auto-removed entity '%s' with UID '%s'",
                    entity_entry.entity_id,
                    entity_entry.unique_id,
                )

    # -------------------------------------------------------------------------------------
    # Schedules
    # -------------------------------------------------------------------------------------

    def get_schedule(self, child_id: str) -> list[VaccinationEntry]:
        """Return the generated schedule for a child.

        Cached per child and regenerated when the stored birth date changes.
        """
        child_info = self.children_data.get(child_id)
        if child_info is None:
            raise ValueError(f"Child {child_id} not found")

        birth_date = child_info.get(const.DATA_CHILD_BIRTH_DATE) or const.CONF_EMPTY
        cached = self._schedules.get(child_id)
        if cached is not None and cached[0] == birth_date:
            return cached[1]

        schedule = VaccinationEngine.generate_schedule(birth_date)
        self._schedules[child_id] = (birth_date, schedule)
        const.LOGGER.debug(
            "DEBUG: Generated %s scheduled doses for child '%s' born %s",
            len(schedule),
            child_info.get(const.DATA_CHILD_NAME, child_id),
            birth_date,
        )
        return schedule

    def get_schedule_view(self, child_id: str, today: date | None = None) -> ScheduleView:
        """Return the classified schedule view for a child."""
        today = today or dt_utils.dt_today_local()
        return VaccinationEngine.build_schedule_view(
            self.get_schedule(child_id), self.get_child_completions(child_id), today
        )

    # -------------------------------------------------------------------------------------
    # Collapse state
    # -------------------------------------------------------------------------------------

    def get_collapse_state(self, child_id: str) -> dict[str, bool]:
        """Return collapse flags for a child, initialising them on first use."""
        if child_id not in self._collapse_state:
            self._sync_collapse_state(child_id, dt_utils.dt_today_local())
        return self._collapse_state.get(child_id, {})

    def _sync_collapse_state(
        self, child_id: str, today: date, follow_relevant: bool = True
    ) -> None:
        """Bring a child's collapse flags in line with the current schedule view.

        After a completion or child change the expansion follows the relevant
        group. A plain refresh keeps every flag the user toggled.
        """
        view = self.get_schedule_view(child_id, today)
        keys = [group.date_key for group in view.groups]
        new_current = view.relevant.current

        toggled = self._user_toggled.get(child_id)
        if toggled:
            toggled.intersection_update(keys)

        if child_id not in self._collapse_state:
            self._collapse_state[child_id] = VaccinationEngine.initial_collapse_state(
                keys, new_current
            )
        elif follow_relevant:
            self._collapse_state[child_id] = VaccinationEngine.reconcile_collapse_state(
                self._collapse_state[child_id],
                self._current_relevant.get(child_id),
                new_current,
                keys,
            )
        else:
            self._collapse_state[child_id] = VaccinationEngine.refresh_collapse_state(
                self._collapse_state[child_id],
                toggled or (),
                new_current,
                keys,
            )
        self._current_relevant[child_id] = new_current

    def toggle_date_group(self, child_id: str, date_key: str) -> bool:
        """Flip one date group's collapse flag. Returns the new flag."""
        if child_id not in self.children_data:
            raise ValueError(f"Child {child_id} not found")

        state = self.get_collapse_state(child_id)
        if date_key not in state:
            raise ValueError(f"Date group {date_key} not found")

        self._collapse_state[child_id] = VaccinationEngine.toggle_collapse(
            state, date_key
        )
        self._user_toggled.setdefault(child_id, set()).add(date_key)
        self.async_update_listeners()
        return self._collapse_state[child_id][date_key]

    # -------------------------------------------------------------------------------------
    # Completions
    # -------------------------------------------------------------------------------------

    def mark_vaccination_completed(
        self,
        child_id: str,
        vaccination_id: str,
        notes: str | None = None,
        completed_date: date | None = None,
    ) -> None:
        """Record a dose as completed. A second call overwrites the first."""
        if child_id not in self.children_data:
            raise ValueError(f"Child {child_id} not found")
        if vaccination_id not in {entry.id for entry in self.get_schedule(child_id)}:
            raise ValueError(f"Vaccination {vaccination_id} not found")

        # Make sure the pre-completion relevant group is known before it moves
        self.get_collapse_state(child_id)

        completed_on = completed_date or dt_utils.dt_today_local()
        record: dict[str, Any] = {
            const.DATA_COMPLETION_COMPLETED_DATE: completed_on.isoformat()
        }
        if notes:
            record[const.DATA_COMPLETION_NOTES] = notes

        self._data[const.DATA_VACCINATIONS].setdefault(child_id, {})[
            vaccination_id
        ] = record

        self._sync_collapse_state(child_id, dt_utils.dt_today_local())
        self._persist()
        self.async_update_listeners()
        const.LOGGER.info(
            "INFO: Vaccination '%s' marked completed for child '%s' on %s",
            vaccination_id,
            self.children_data[child_id].get(const.DATA_CHILD_NAME, child_id),
            completed_on.isoformat(),
        )

    def clear_vaccination_completion(self, child_id: str, vaccination_id: str) -> None:
        """Remove a completion record, along with its date and notes."""
        if child_id not in self.children_data:
            raise ValueError(f"Child {child_id} not found")

        self.get_collapse_state(child_id)
        removed = self._data[const.DATA_VACCINATIONS].get(child_id, {}).pop(
            vaccination_id, None
        )
        if removed is None:
            const.LOGGER.debug(
                "DEBUG: Vaccination '%s' was not completed for child '%s'",
                vaccination_id,
                child_id,
            )
            return

        self._sync_collapse_state(child_id, dt_utils.dt_today_local())
        self._persist()
        self.async_update_listeners()
        const.LOGGER.info(
            "INFO: Vaccination '%s' completion cleared for child '%s'",
            vaccination_id,
            self.children_data[child_id].get(const.DATA_CHILD_NAME, child_id),
        )

    # -------------------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------------------

    def _persist(self):
        """Save to persistent storage."""
        self.store.set_data(self._data)
        self.hass.add_job(self.store.async_save)

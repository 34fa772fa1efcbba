# pyright: reportIncompatibleVariableOverride=false
"""Calendar platform for BabyCare integration.

Provides a read-only calendar per child with one all-day event for every
vaccination date group.
"""

import datetime

from homeassistant.components.calendar import CalendarEntity, CalendarEvent
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import BabyCareDataCoordinator
from .engines import DateGroup, ScheduleView, VaccinationEngine
from .entity import BabyCareCoordinatorEntity

# Set to 0 (unlimited) for coordinator-based entities that don't poll
PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the BabyCare calendar platform."""
    coordinator: BabyCareDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    calendar_show_period_days = entry.options.get(
        const.CONF_CALENDAR_SHOW_PERIOD, const.DEFAULT_CALENDAR_SHOW_PERIOD
    )
    calendar_duration = datetime.timedelta(days=calendar_show_period_days)

    entities = []
    for child_id, child_info in coordinator.children_data.items():
        child_name = child_info.get(const.DATA_CHILD_NAME)
        if not child_name:
            continue
        entities.append(
            ChildVaccinationCalendar(
                coordinator, entry, child_id, child_name, calendar_duration
            )
        )
    async_add_entities(entities)


class ChildVaccinationCalendar(BabyCareCoordinatorEntity, CalendarEntity):
    """Calendar entity with a child's vaccination date groups."""

    _attr_translation_key = const.TRANS_KEY_CALENDAR_VACCINATIONS
    _attr_icon = const.ICON_CALENDAR

    def __init__(
        self,
        coordinator: BabyCareDataCoordinator,
        entry: ConfigEntry,
        child_id: str,
        child_name: str,
        calendar_duration: datetime.timedelta,
    ):
        """Initialize the calendar entity.

        Args:
            coordinator: BabyCareDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            child_id: Internal id of the child.
            child_name: Display name of the child.
            calendar_duration: How far before and after today events are listed.
        """
        super().__init__(
            coordinator,
            entry,
            child_id,
            child_name,
            const.CALENDAR_UID_SUFFIX_VACCINATIONS,
        )
        self._calendar_duration = calendar_duration

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[CalendarEvent]:
        """Return date-group events overlapping [start_date, end_date]."""
        local_tz = dt_util.get_time_zone(self.hass.config.time_zone)
        if start_date.tzinfo is None:
            start_date = start_date.replace(tzinfo=local_tz)
        if end_date.tzinfo is None:
            end_date = end_date.replace(tzinfo=local_tz)

        return [
            event
            for event in self._generate_all_events()
            if self._event_overlaps_window(event, start_date, end_date)
        ]

    async def async_create_event(self, **kwargs) -> None:
        """Create a new event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_CREATE_NOT_SUPPORTED,
        )

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Delete an event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_DELETE_NOT_SUPPORTED,
        )

    async def async_update_event(
        self,
        uid: str,
        event: dict,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Update an event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_UPDATE_NOT_SUPPORTED,
        )

    def _as_local_datetime(self, value: datetime.date) -> datetime.datetime:
        if isinstance(value, datetime.datetime):
            return value
        tz = dt_util.get_time_zone(self.hass.config.time_zone)
        return datetime.datetime.combine(value, datetime.time.min, tzinfo=tz)

    def _event_overlaps_window(
        self,
        event: CalendarEvent,
        window_start: datetime.datetime,
        window_end: datetime.datetime,
    ) -> bool:
        """Check if event overlaps [window_start, window_end]."""
        sdt = self._as_local_datetime(event.start)
        edt = self._as_local_datetime(event.end)
        return (edt > window_start) and (sdt < window_end)

    def _group_to_event(self, group: DateGroup, view: ScheduleView) -> CalendarEvent:
        """One all-day event per date group."""
        vaccines = ", ".join(entry.vaccine_name for entry in group.entries)
        description = "\n".join(
            f"{entry.vaccine_name} - {entry.dose_label} "
            f"({view.entry_statuses[entry.id]})"
            for entry in group.entries
        )
        age = VaccinationEngine.format_age_at_dose(group.entries[0])
        return CalendarEvent(
            summary=f"{self._child_name}: {vaccines}",
            start=group.date,
            end=group.date + datetime.timedelta(days=1),
            description=f"{age}\n{description}",
            uid=f"{self._child_id}_{group.date.isoformat()}",
        )

    def _generate_all_events(self) -> list[CalendarEvent]:
        """Build events for groups within the configured show period of today."""
        if not self.available:
            return []

        view = self.coordinator.get_schedule_view(self._child_id)
        earliest = view.today - self._calendar_duration
        latest = view.today + self._calendar_duration
        return [
            self._group_to_event(group, view)
            for group in view.groups
            if earliest <= group.date <= latest
        ]

    @property
    def event(self) -> CalendarEvent | None:
        """Return today's vaccination event, if any."""
        today = dt_util.as_local(dt_util.now()).date()
        for calendar_event in self._generate_all_events():
            if calendar_event.start <= today < calendar_event.end:
                return calendar_event
        return None

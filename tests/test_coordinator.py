"""Tests for BabyCareDataCoordinator child, completion and collapse handling."""

# pylint: disable=protected-access  # Tests inspect stored data directly
# pylint: disable=unused-argument  # Fixtures needed for setup only

from datetime import date
from typing import Any

from freezegun import freeze_time
import pytest
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.babycare import const
from tests.conftest import (
    TEST_CHILD_ID,
    TEST_NOW,
    async_refresh_today,
    get_coordinator,
    setup_integration,
)

TWO_MONTH_IDS = ["dtap-1", "hib-1", "ipv-1", "pcv13-1", "rv-1"]


@freeze_time(TEST_NOW)
async def test_first_refresh_loads_children(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Stored children and their schedules are available after setup."""
    coordinator = await async_refresh_today(hass, init_integration)

    assert list(coordinator.children_data) == [TEST_CHILD_ID]
    assert len(coordinator.get_schedule(TEST_CHILD_ID)) == 24

    view = coordinator.get_schedule_view(TEST_CHILD_ID)
    assert view.today == date(2024, 3, 1)
    assert view.relevant.current == "March 1, 2024"
    assert view.relevant.next == "May 1, 2024"


@freeze_time(TEST_NOW)
async def test_first_refresh_estimates_missing_birth_date(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_storage_data: dict[str, Any],
) -> None:
    """Children stored with only an age get an estimated birth date."""
    child = mock_storage_data[const.DATA_CHILDREN][TEST_CHILD_ID]
    child[const.DATA_CHILD_AGE] = "2 months"
    child[const.DATA_CHILD_BIRTH_DATE] = None

    await setup_integration(hass, mock_config_entry, mock_storage_data)
    coordinator = get_coordinator(hass, mock_config_entry)

    stored = coordinator.children_data[TEST_CHILD_ID]
    assert stored[const.DATA_CHILD_BIRTH_DATE] == "2024-01-01"
    assert stored[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True


async def test_setup_with_empty_storage(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """A fresh install has no children and no completions."""
    await setup_integration(hass, mock_config_entry, None)
    coordinator = get_coordinator(hass, mock_config_entry)

    assert coordinator.children_data == {}
    assert coordinator.vaccinations_data == {}


@freeze_time(TEST_NOW)
async def test_initial_collapse_state(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Only the current relevant group starts expanded."""
    coordinator = await async_refresh_today(hass, init_integration)

    state = coordinator.get_collapse_state(TEST_CHILD_ID)
    assert len(state) == 7
    assert [key for key, collapsed in state.items() if not collapsed] == [
        "March 1, 2024"
    ]


@freeze_time(TEST_NOW)
async def test_mark_vaccination_completed(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Completions are stored with today's date and optional notes."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "dtap-1", notes="Left thigh")
    await hass.async_block_till_done()

    assert coordinator.get_child_completions(TEST_CHILD_ID)["dtap-1"] == {
        const.DATA_COMPLETION_COMPLETED_DATE: "2024-03-01",
        const.DATA_COMPLETION_NOTES: "Left thigh",
    }
    progress = coordinator.get_schedule_view(TEST_CHILD_ID).progress
    assert (progress.completed, progress.total, progress.percentage) == (1, 24, 4)


@freeze_time(TEST_NOW)
async def test_mark_vaccination_completed_with_date(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """An explicit completion date is kept; marking twice overwrites."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "hepb-1", notes="first")
    coordinator.mark_vaccination_completed(
        TEST_CHILD_ID, "hepb-1", completed_date=date(2024, 1, 2)
    )

    assert coordinator.get_child_completions(TEST_CHILD_ID)["hepb-1"] == {
        const.DATA_COMPLETION_COMPLETED_DATE: "2024-01-02"
    }


async def test_mark_unknown_vaccination_raises(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Only ids from the child's schedule can be completed."""
    coordinator = get_coordinator(hass, init_integration)

    with pytest.raises(ValueError):
        coordinator.mark_vaccination_completed(TEST_CHILD_ID, "bcg-1")
    with pytest.raises(ValueError):
        coordinator.mark_vaccination_completed("missing-child", "dtap-1")


@freeze_time(TEST_NOW)
async def test_completing_current_group_moves_expansion(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Finishing the current group collapses it and expands the next one."""
    coordinator = await async_refresh_today(hass, init_integration)

    for dose_id in TWO_MONTH_IDS:
        coordinator.mark_vaccination_completed(TEST_CHILD_ID, dose_id)

    view = coordinator.get_schedule_view(TEST_CHILD_ID)
    assert view.relevant.current == "May 1, 2024"
    assert view.get_group("March 1, 2024").status == (
        const.VACCINATION_STATUS_COMPLETED
    )

    state = coordinator.get_collapse_state(TEST_CHILD_ID)
    assert state["March 1, 2024"] is True
    assert state["May 1, 2024"] is False


@freeze_time(TEST_NOW)
async def test_user_collapse_flags_survive_refresh(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A refresh with the same current group keeps toggled flags."""
    coordinator = await async_refresh_today(hass, init_integration)

    assert coordinator.toggle_date_group(TEST_CHILD_ID, "January 1, 2024") is False
    await coordinator.async_refresh()

    assert coordinator.get_collapse_state(TEST_CHILD_ID)["January 1, 2024"] is False


@freeze_time(TEST_NOW)
async def test_day_rollover_keeps_user_expanded_group(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A refresh on a new day does not collapse a group the user opened."""
    coordinator = await async_refresh_today(hass, init_integration)

    # Collapse and reopen the current group by hand
    assert coordinator.toggle_date_group(TEST_CHILD_ID, "March 1, 2024") is True
    assert coordinator.toggle_date_group(TEST_CHILD_ID, "March 1, 2024") is False

    with freeze_time("2024-03-02 20:00:00"):
        await coordinator.async_refresh()
        assert coordinator.get_schedule_view(TEST_CHILD_ID).relevant.current == (
            "May 1, 2024"
        )

    state = coordinator.get_collapse_state(TEST_CHILD_ID)
    assert state["March 1, 2024"] is False
    assert state["May 1, 2024"] is False
    assert state["January 1, 2024"] is True


async def test_toggle_unknown_group_raises(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Toggling needs an existing child and date group."""
    coordinator = get_coordinator(hass, init_integration)

    with pytest.raises(ValueError):
        coordinator.toggle_date_group(TEST_CHILD_ID, "March 2, 1999")
    with pytest.raises(ValueError):
        coordinator.toggle_date_group("missing-child", "March 1, 2024")


@freeze_time(TEST_NOW)
async def test_clear_vaccination_completion(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Clearing removes the record; clearing again is a no-op."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "rv-1", notes="oral")
    coordinator.clear_vaccination_completion(TEST_CHILD_ID, "rv-1")
    coordinator.clear_vaccination_completion(TEST_CHILD_ID, "rv-1")

    assert "rv-1" not in coordinator.get_child_completions(TEST_CHILD_ID)
    assert coordinator.get_schedule_view(TEST_CHILD_ID).progress.completed == 0


@freeze_time(TEST_NOW)
async def test_update_child_birth_date_regenerates_schedule(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A new birth date shifts every scheduled dose."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.update_child(
        TEST_CHILD_ID, {const.DATA_CHILD_BIRTH_DATE: "2024-01-15"}
    )

    schedule = coordinator.get_schedule(TEST_CHILD_ID)
    assert schedule[0].id == "hepb-1"
    assert schedule[0].scheduled_date == date(2024, 1, 15)
    assert coordinator.get_schedule_view(TEST_CHILD_ID).relevant.current == (
        "March 15, 2024"
    )
    state = coordinator.get_collapse_state(TEST_CHILD_ID)
    assert state["March 15, 2024"] is False
    assert "March 1, 2024" not in state


@freeze_time(TEST_NOW)
async def test_update_child_age_estimates_birth_date(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """An age without a birth date is estimated from today."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.update_child(TEST_CHILD_ID, {const.DATA_CHILD_AGE: "10 days"})

    child = coordinator.children_data[TEST_CHILD_ID]
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2024-02-20"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True


@freeze_time(TEST_NOW)
async def test_update_child_same_age_keeps_estimate(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Resubmitting the same age does not move an estimated birth date."""
    coordinator = await async_refresh_today(hass, init_integration)
    coordinator.update_child(TEST_CHILD_ID, {const.DATA_CHILD_AGE: "10 days"})

    with freeze_time("2024-04-20 19:00:00"):
        coordinator.update_child(
            TEST_CHILD_ID,
            {
                const.DATA_CHILD_NAME: "Ava Rose",
                const.DATA_CHILD_AGE: "10 days",
                const.DATA_CHILD_BIRTH_DATE: None,
            },
        )

    child = coordinator.children_data[TEST_CHILD_ID]
    assert child[const.DATA_CHILD_NAME] == "Ava Rose"
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2024-02-20"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True


@freeze_time(TEST_NOW)
async def test_update_child_cleared_birth_date_estimates(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Clearing an explicit birth date falls back to the age text."""
    coordinator = await async_refresh_today(hass, init_integration)
    coordinator.update_child(TEST_CHILD_ID, {const.DATA_CHILD_AGE: "1 month"})
    coordinator.update_child(
        TEST_CHILD_ID, {const.DATA_CHILD_BIRTH_DATE: "2024-01-10"}
    )

    coordinator.update_child(
        TEST_CHILD_ID,
        {const.DATA_CHILD_AGE: "1 month", const.DATA_CHILD_BIRTH_DATE: None},
    )

    child = coordinator.children_data[TEST_CHILD_ID]
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2024-02-01"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True


async def test_update_unknown_child_raises(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Updating a child that does not exist raises."""
    coordinator = get_coordinator(hass, init_integration)

    with pytest.raises(ValueError):
        coordinator.update_child("missing-child", {const.DATA_CHILD_NAME: "X"})


@freeze_time(TEST_NOW)
async def test_create_child(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """New children get a resolved birth date and an empty completion bucket."""
    coordinator = await async_refresh_today(hass, init_integration)

    coordinator.create_child(
        "child-noah",
        {const.DATA_CHILD_NAME: "Noah", const.DATA_CHILD_AGE: "1 year"},
    )

    child = coordinator.children_data["child-noah"]
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2023-03-01"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True
    assert coordinator.get_child_completions("child-noah") == {}

    with pytest.raises(ValueError):
        coordinator.create_child("child-noah", {const.DATA_CHILD_NAME: "Noah"})


async def test_delete_child_removes_data_and_entities(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Deleting a child drops completions and registry entities."""
    coordinator = get_coordinator(hass, init_integration)
    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "hepb-1")

    ent_reg = er.async_get(hass)
    assert [
        entry
        for entry in ent_reg.entities.values()
        if TEST_CHILD_ID in entry.unique_id
    ]

    coordinator.delete_child(TEST_CHILD_ID)
    await hass.async_block_till_done()

    assert TEST_CHILD_ID not in coordinator.children_data
    assert TEST_CHILD_ID not in coordinator.vaccinations_data
    assert not [
        entry
        for entry in ent_reg.entities.values()
        if TEST_CHILD_ID in entry.unique_id
    ]
    with pytest.raises(ValueError):
        coordinator.delete_child(TEST_CHILD_ID)


async def test_changes_are_persisted(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Mutations are written back through the store."""
    coordinator = get_coordinator(hass, init_integration)

    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "hepb-1", notes="saved")
    await hass.async_block_till_done()

    stored = coordinator.store.data[const.DATA_VACCINATIONS][TEST_CHILD_ID]
    assert stored["hepb-1"][const.DATA_COMPLETION_NOTES] == "saved"

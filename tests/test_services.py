"""Tests for BabyCare services."""

# pylint: disable=unused-argument  # Fixtures needed for setup only

from freezegun import freeze_time
import pytest
import voluptuous as vol
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.babycare import const
from tests.conftest import (
    TEST_CHILD_ID,
    TEST_CHILD_NAME,
    TEST_NOW,
    async_refresh_today,
    get_coordinator,
)


async def _call(hass: HomeAssistant, service: str, data: dict, **kwargs):
    return await hass.services.async_call(
        const.DOMAIN, service, data, blocking=True, **kwargs
    )


async def test_services_registered(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Every service is registered after setup."""
    for service in const.SERVICES:
        assert hass.services.has_service(const.DOMAIN, service)


@freeze_time(TEST_NOW)
async def test_mark_vaccination_completed(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Marking stores the date and notes for the dose."""
    coordinator = await async_refresh_today(hass, init_integration)

    await _call(
        hass,
        const.SERVICE_MARK_VACCINATION_COMPLETED,
        {
            const.FIELD_CHILD_NAME: TEST_CHILD_NAME,
            const.FIELD_VACCINE_ID: "dtap-1",
            const.FIELD_NOTES: "Left thigh",
            const.FIELD_COMPLETED_DATE: "2024-02-28",
        },
    )

    assert coordinator.get_child_completions(TEST_CHILD_ID)["dtap-1"] == {
        const.DATA_COMPLETION_COMPLETED_DATE: "2024-02-28",
        const.DATA_COMPLETION_NOTES: "Left thigh",
    }


async def test_mark_vaccination_unknown_child(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unknown children are reported as errors."""
    with pytest.raises(HomeAssistantError, match="Child 'Zed' not found"):
        await _call(
            hass,
            const.SERVICE_MARK_VACCINATION_COMPLETED,
            {const.FIELD_CHILD_NAME: "Zed", const.FIELD_VACCINE_ID: "dtap-1"},
        )


async def test_mark_vaccination_unknown_vaccine(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Dose ids outside the schedule are reported as errors."""
    with pytest.raises(HomeAssistantError, match="bcg-1"):
        await _call(
            hass,
            const.SERVICE_MARK_VACCINATION_COMPLETED,
            {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_VACCINE_ID: "bcg-1"},
        )


async def test_clear_vaccination_completion(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Clearing removes the completion record."""
    coordinator = get_coordinator(hass, init_integration)
    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "hepb-1")

    await _call(
        hass,
        const.SERVICE_CLEAR_VACCINATION_COMPLETION,
        {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_VACCINE_ID: "hepb-1"},
    )

    assert "hepb-1" not in coordinator.get_child_completions(TEST_CHILD_ID)

    with pytest.raises(HomeAssistantError):
        await _call(
            hass,
            const.SERVICE_CLEAR_VACCINATION_COMPLETION,
            {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_VACCINE_ID: "nope"},
        )


@freeze_time(TEST_NOW)
async def test_toggle_vaccination_group(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Toggling flips one group's collapse flag."""
    coordinator = await async_refresh_today(hass, init_integration)

    await _call(
        hass,
        const.SERVICE_TOGGLE_VACCINATION_GROUP,
        {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_DATE_KEY: "March 1, 2024"},
    )
    assert coordinator.get_collapse_state(TEST_CHILD_ID)["March 1, 2024"] is True

    with pytest.raises(HomeAssistantError):
        await _call(
            hass,
            const.SERVICE_TOGGLE_VACCINATION_GROUP,
            {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_DATE_KEY: "Someday"},
        )


@freeze_time(TEST_NOW)
async def test_set_child_age(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Age text and birth dates both reset the schedule."""
    coordinator = await async_refresh_today(hass, init_integration)

    await _call(
        hass,
        const.SERVICE_SET_CHILD_AGE,
        {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_AGE: "1 month"},
    )
    child = coordinator.children_data[TEST_CHILD_ID]
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2024-02-01"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is True

    await _call(
        hass,
        const.SERVICE_SET_CHILD_AGE,
        {const.FIELD_CHILD_NAME: TEST_CHILD_NAME, const.FIELD_BIRTH_DATE: "2023-12-25"},
    )
    child = coordinator.children_data[TEST_CHILD_ID]
    assert child[const.DATA_CHILD_BIRTH_DATE] == "2023-12-25"
    assert child[const.DATA_CHILD_BIRTH_DATE_ESTIMATED] is False


async def test_set_child_age_requires_age_or_birth_date(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Calling without age and birth date fails validation."""
    with pytest.raises((vol.Invalid, HomeAssistantError)):
        await _call(
            hass,
            const.SERVICE_SET_CHILD_AGE,
            {const.FIELD_CHILD_NAME: TEST_CHILD_NAME},
        )


@freeze_time(TEST_NOW)
async def test_get_vaccination_schedule(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The schedule response carries groups, pointers and progress."""
    coordinator = await async_refresh_today(hass, init_integration)
    coordinator.mark_vaccination_completed(TEST_CHILD_ID, "hepb-1", notes="day one")

    response = await _call(
        hass,
        const.SERVICE_GET_VACCINATION_SCHEDULE,
        {const.FIELD_CHILD_NAME: TEST_CHILD_NAME},
        return_response=True,
    )

    assert response[const.ATTR_CHILD_NAME] == TEST_CHILD_NAME
    assert response[const.ATTR_CURRENT_RELEVANT_DATE] == "March 1, 2024"
    assert response[const.ATTR_NEXT_RELEVANT_DATE] == "May 1, 2024"
    assert response[const.ATTR_PROGRESS] == {
        const.ATTR_TOTAL: 24,
        const.ATTR_COMPLETED: 1,
        const.ATTR_PERCENTAGE: 4,
    }

    groups = response[const.ATTR_GROUPS]
    assert [group[const.ATTR_GROUP_DATE] for group in groups][:3] == [
        "2024-01-01",
        "2024-02-01",
        "2024-03-01",
    ]
    first = groups[0]
    assert first[const.ATTR_GROUP_STATUS] == const.VACCINATION_STATUS_COMPLETED
    assert first[const.ATTR_GROUP_COLLAPSED] is True
    assert first[const.ATTR_DOSES][0][const.ATTR_DOSE_AGE] == "At birth"
    assert first[const.ATTR_DOSES][0][const.ATTR_DOSE_COMPLETION_NOTES] == "day one"
    assert groups[2][const.ATTR_GROUP_COLLAPSED] is False
    assert len(response[const.ATTR_DUE_THIS_MONTH]) == 5
    assert [d[const.ATTR_DOSE_ID] for d in response[const.ATTR_OVERDUE]] == ["hepb-2"]


async def test_services_removed_on_unload(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unloading the only entry removes the services."""
    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    for service in const.SERVICES:
        assert not hass.services.has_service(const.DOMAIN, service)

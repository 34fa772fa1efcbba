"""Shared fixtures for BabyCare tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.babycare.const import (
    CONF_CALENDAR_SHOW_PERIOD,
    CONF_UPDATE_INTERVAL,
    COORDINATOR,
    DATA_CHILD_AGE,
    DATA_CHILD_BIRTH_DATE,
    DATA_CHILD_BIRTH_DATE_ESTIMATED,
    DATA_CHILD_INTERNAL_ID,
    DATA_CHILD_NAME,
    DATA_CHILDREN,
    DATA_META,
    DATA_META_SCHEMA_VERSION,
    DATA_VACCINATIONS,
    DEFAULT_CALENDAR_SHOW_PERIOD,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
    SCHEMA_VERSION,
)

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

TEST_CHILD_ID = "child-ava"
TEST_CHILD_NAME = "Ava"
TEST_BIRTH_DATE = "2024-01-01"

# 20:00 UTC is noon of the same day in the test timezone (US/Pacific)
TEST_NOW = "2024-03-01 20:00:00"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="BabyCare",
        data={},
        options={
            CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
            CONF_CALENDAR_SHOW_PERIOD: DEFAULT_CALENDAR_SHOW_PERIOD,
        },
        entry_id="test_entry_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return storage data with one child born 2024-01-01."""
    return {
        DATA_META: {DATA_META_SCHEMA_VERSION: SCHEMA_VERSION},
        DATA_CHILDREN: {
            TEST_CHILD_ID: {
                DATA_CHILD_INTERNAL_ID: TEST_CHILD_ID,
                DATA_CHILD_NAME: TEST_CHILD_NAME,
                DATA_CHILD_AGE: "",
                DATA_CHILD_BIRTH_DATE: TEST_BIRTH_DATE,
                DATA_CHILD_BIRTH_DATE_ESTIMATED: False,
            }
        },
        DATA_VACCINATIONS: {TEST_CHILD_ID: {}},
    }


async def setup_integration(
    hass: HomeAssistant,
    config_entry: MockConfigEntry,
    storage_data: dict[str, Any] | None,
) -> MockConfigEntry:
    """Set up the BabyCare integration with the given storage contents."""
    config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=storage_data,
    ):
        assert await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

    return config_entry


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the BabyCare integration for testing with mocked storage."""
    return await setup_integration(hass, mock_config_entry, mock_storage_data)


def get_coordinator(hass: HomeAssistant, entry: MockConfigEntry) -> Any:
    """Return the coordinator of a loaded entry."""
    return hass.data[DOMAIN][entry.entry_id][COORDINATOR]


def get_entity_id(hass: HomeAssistant, platform: str, uid_suffix: str) -> str:
    """Look up the entity id of the test child's entity by unique id suffix."""
    entity_id = er.async_get(hass).async_get_entity_id(
        platform, DOMAIN, f"test_entry_id_{TEST_CHILD_ID}{uid_suffix}"
    )
    assert entity_id is not None
    return entity_id


async def async_refresh_today(hass: HomeAssistant, entry: MockConfigEntry) -> Any:
    """Refresh the coordinator so derived state follows a frozen clock."""
    coordinator = get_coordinator(hass, entry)
    await coordinator.async_refresh()
    await hass.async_block_till_done()
    return coordinator

"""Shared fixtures for Immersion Tracker tests."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.immersion_tracker import const
from tests.helpers import make_complete_entry, make_incomplete_entry

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def default_goals() -> dict[str, dict[str, Any]]:
    """Return a fresh copy of the default goals."""
    return copy.deepcopy(const.DEFAULT_GOALS)


@pytest.fixture
def complete_entry() -> dict[str, Any]:
    """Return a DailyEntry meeting the default goals."""
    return make_complete_entry()


@pytest.fixture
def incomplete_entry() -> dict[str, Any]:
    """Return a DailyEntry missing one Japanese card."""
    return make_incomplete_entry()


# =============================================================================
# Home Assistant fixtures
# =============================================================================


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.IMMERSION_TRACKER_TITLE,
        data={const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL},
        entry_id="test_entry_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return stored state with two complete days."""
    return {
        const.DATA_CONFIG: {
            const.DATA_CONFIG_GOALS: copy.deepcopy(const.DEFAULT_GOALS),
            const.DATA_CONFIG_WEEKLY: dict(const.DEFAULT_WEEKLY_CONFIG),
            const.DATA_CONFIG_UI: {},
        },
        const.DATA_ENTRIES: {
            "2025-08-18": make_complete_entry(),
            "2025-08-19": make_complete_entry(),
        },
        const.DATA_WEEKLY: {},
        const.DATA_META: {
            const.DATA_META_BEST_STREAK: 2,
            const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
        },
    }


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Immersion Tracker integration with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry

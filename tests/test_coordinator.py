"""Test Magic Blue coordinator."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from homeassistant.core import HomeAssistant

from custom_components.magic_blue_bulb.bulb import MagicBlueBulb
from custom_components.magic_blue_bulb.connection import ConnectionState
from custom_components.magic_blue_bulb.coordinator import MagicBlueDataUpdateCoordinator


@pytest.fixture
async def bulb(identity, mock_establish_connection):
    """Return an unbound bulb."""
    bulb = MagicBlueBulb(identity, "Test Bulb")
    yield bulb
    await bulb.async_shutdown()


class TestCoordinatorInitialization:
    """Tests for coordinator initialization."""

    async def test_initialization(self, hass: HomeAssistant, bulb) -> None:
        """Test the coordinator is push only."""
        coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")

        assert coordinator.bulb is bulb
        assert coordinator.device_name == "Test Bulb"
        assert coordinator.name == "Magic Blue Test Bulb"
        assert coordinator.update_interval is None

    async def test_registers_update_callback(self, hass: HomeAssistant) -> None:
        """Test the coordinator subscribes to bulb updates."""
        bulb = MagicMock()

        coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")

        bulb.set_update_callback.assert_called_once_with(coordinator._handle_push_update)


class TestData:
    """Tests for published data."""

    async def test_first_refresh_publishes_snapshot(self, hass: HomeAssistant, bulb) -> None:
        """Test the refresh returns the current state without device I/O."""
        coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")

        data = await coordinator._async_update_data()

        assert data == {
            "is_on": True,
            "hue": 0,
            "saturation": 0,
            "lightness": 100,
            "rgb_color": (255, 255, 255),
            "color_pending": False,
            "connection_state": ConnectionState.UNBOUND,
        }

    async def test_push_update_sets_data(
        self, hass: HomeAssistant, bulb, mock_ble_device
    ) -> None:
        """Test bulb changes are pushed to listeners."""
        coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")
        listener = MagicMock()
        remove = coordinator.async_add_listener(listener)

        bulb.connection.bind(mock_ble_device)

        assert coordinator.data["connection_state"] is ConnectionState.DISCONNECTED
        listener.assert_called()
        remove()

    async def test_deferred_color_is_published(self, hass: HomeAssistant, bulb) -> None:
        """Test a color stored while off shows up as pending."""
        coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")
        bulb._state.on = False

        await bulb.set_hue(200)

        assert coordinator.data["hue"] == 200
        assert coordinator.data["color_pending"] is True


async def test_async_shutdown_removes_callback(hass: HomeAssistant) -> None:
    """Test shutdown stops receiving pushes."""
    bulb = MagicMock()
    coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, "Test Bulb")

    await coordinator.async_shutdown()

    bulb.remove_update_callback.assert_called_once_with(coordinator._handle_push_update)

"""Fixtures for Magic Blue Bulb tests."""
from __future__ import annotations

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.service import BleakGATTService, BleakGATTServiceCollection
from homeassistant.const import CONF_MAC, CONF_NAME

from custom_components.magic_blue_bulb.models import DeviceIdentity

TEST_MAC = "AA:BB:CC:DD:EE:FF"

FFE5 = "0000ffe5-0000-1000-8000-00805f9b34fb"
FFE9 = "0000ffe9-0000-1000-8000-00805f9b34fb"
FFE0 = "0000ffe0-0000-1000-8000-00805f9b34fb"
FFE4 = "0000ffe4-0000-1000-8000-00805f9b34fb"


def bluez_services(
    layout: list[tuple[int, str, list[tuple[int, str, list[str]]]]] | None = None,
) -> BleakGATTServiceCollection:
    """Build a service collection numbered the way BlueZ numbers it.

    Each characteristic carries its declaration handle, one below the ATT
    value handle the bulb protocol writes to. The default layout is a v6
    bulb: ffe9 at declaration 0x0B, value 0x0C.
    """
    if layout is None:
        layout = [
            (0x000A, FFE5, [(0x000B, FFE9, ["write-without-response", "write"])]),
            (0x000D, FFE0, [(0x000E, FFE4, ["notify"])]),
        ]
    services = BleakGATTServiceCollection()
    for service_handle, service_uuid, chars in layout:
        service = BleakGATTService(None, service_handle, service_uuid)
        services.add_service(service)
        for char_handle, char_uuid, properties in chars:
            services.add_characteristic(
                BleakGATTCharacteristic(
                    None, char_handle, char_uuid, properties, lambda: 20, service
                )
            )
    return services


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations for all tests."""
    yield


@pytest.fixture
def mock_config_entry_data() -> dict:
    """Return mock config entry data."""
    return {
        CONF_MAC: TEST_MAC,
        CONF_NAME: "Test Bulb",
    }


@pytest.fixture
def identity() -> DeviceIdentity:
    """Return the identity of the test bulb (v6, handle 0x0C)."""
    return DeviceIdentity.from_config({CONF_MAC: TEST_MAC})


@pytest.fixture
def mock_ble_device() -> MagicMock:
    """Create a mock BLE device."""
    device = MagicMock()
    device.address = TEST_MAC
    device.name = "LEDBLE-44"
    return device


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a connected mock BleakClient."""
    client = MagicMock()
    client.is_connected = True
    client.services = bluez_services()
    client.write_gatt_char = AsyncMock()
    client.disconnect = AsyncMock()
    return client


@pytest.fixture
def write_char(mock_client: MagicMock) -> BleakGATTCharacteristic:
    """Return the characteristic the test bulb is written through."""
    return mock_client.services.get_characteristic(0x000B)


@pytest.fixture
def make_services():
    """Return the BlueZ-shaped service collection builder."""
    return bluez_services


@pytest.fixture
def mock_establish_connection(mock_client: MagicMock) -> Generator[AsyncMock, None, None]:
    """Mock bleak_retry_connector.establish_connection."""
    with patch(
        "custom_components.magic_blue_bulb.connection.establish_connection",
        new_callable=AsyncMock,
        return_value=mock_client,
    ) as mock:
        yield mock


@pytest.fixture
def make_service_info():
    """Return a factory for mock BluetoothServiceInfoBleak objects."""

    def _make(address: str = TEST_MAC, name: str = "LEDBLE-44") -> MagicMock:
        info = MagicMock()
        info.address = address
        info.name = name
        info.rssi = -60
        info.service_uuids = []
        info.device = MagicMock()
        info.device.address = address
        info.device.name = name
        return info

    return _make

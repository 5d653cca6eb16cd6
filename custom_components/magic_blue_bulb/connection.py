"""Connection lifecycle for a single Magic Blue bulb.

The connection is reactive: nothing reconnects in the background. A dropped
link stays down until the next write asks for it through ensure_connected(),
which keeps the radio quiet while the bulb is switched off at the wall or out
of range.

States:
- unbound:      no peripheral matched yet (or released on shutdown)
- disconnected: bound, no live link
- connecting:   one establish_connection call in progress
- connected:    link up
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

from bleak import BleakClient
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.service import BleakGATTServiceCollection
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from .const import DEFAULT_CONNECT_ATTEMPTS, LOGGER, WRITE_CHAR_UUIDS
from .exceptions import (
    MagicBlueConnectionError,
    MagicBlueUnboundDeviceError,
    MagicBlueWriteError,
)
from .models import DeviceIdentity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class ConnectionState(StrEnum):
    """Connection state of a bulb."""

    UNBOUND = "unbound"
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class BulbConnection:
    """Owns the bound peripheral and its BLE link."""

    def __init__(
        self,
        identity: DeviceIdentity,
        hass: HomeAssistant | None = None,
        max_attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    ) -> None:
        """Initialize the connection.

        Args:
            identity: Identity of the bulb this connection serves
            hass: Home Assistant instance, used to pick the best adapter
            max_attempts: Retries bleak-retry-connector makes inside one
                connect attempt
        """
        self._identity = identity
        self._hass = hass
        self._max_attempts = max_attempts
        self._ble_device: BLEDevice | None = None
        self._client: BleakClient | None = None
        self._write_char: BleakGATTCharacteristic | None = None
        self._connecting = False
        self._connect_lock = asyncio.Lock()
        self._listeners: list[Callable[[], None]] = []

        self._connect_count = 0
        self._reconnect_count = 0
        self._last_error: str | None = None

    @property
    def identity(self) -> DeviceIdentity:
        """Return the identity of the bulb."""
        return self._identity

    @property
    def state(self) -> ConnectionState:
        """Return the current connection state."""
        if self._ble_device is None:
            return ConnectionState.UNBOUND
        if self._connecting:
            return ConnectionState.CONNECTING
        if self._client is not None and self._client.is_connected:
            return ConnectionState.CONNECTED
        return ConnectionState.DISCONNECTED

    @property
    def is_bound(self) -> bool:
        """Return True once a peripheral has been matched."""
        return self._ble_device is not None

    @property
    def is_connected(self) -> bool:
        """Return True if the link is up."""
        return self.state is ConnectionState.CONNECTED

    @property
    def ble_device(self) -> BLEDevice | None:
        """Return the bound peripheral."""
        return self._ble_device

    @property
    def connect_count(self) -> int:
        """Return the number of successful connects."""
        return self._connect_count

    @property
    def reconnect_count(self) -> int:
        """Return the number of successful connects after the first one."""
        return self._reconnect_count

    @property
    def last_error(self) -> str | None:
        """Return the last connect error message."""
        return self._last_error

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a state change listener, returning its remover."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def bind(self, device: BLEDevice) -> bool:
        """Bind the discovered peripheral.

        Binding happens once. A different peripheral offered later is
        ignored.

        Returns:
            True if the device is (now) the bound peripheral.
        """
        if not self._identity.matches(device.address):
            LOGGER.warning(
                "Refusing to bind %s to bulb %s",
                device.address,
                self._identity.address,
            )
            return False

        if self._ble_device is not None:
            self.update_ble_device(device)
            return True

        self._ble_device = device
        LOGGER.info("Bound bulb %s (%s)", self._identity.address, device.name)
        self._notify()
        return True

    def update_ble_device(self, device: BLEDevice) -> None:
        """Refresh the transport reference of the bound peripheral.

        Called when a better adapter (e.g. a closer proxy) sees the bulb.
        """
        if self._ble_device is None or not self._identity.matches(device.address):
            return
        self._ble_device = device
        LOGGER.debug("Updated BLE device reference for %s", self._identity.address)

    def _get_ble_device(self) -> BLEDevice:
        """Return the freshest device reference on each connect retry."""
        if self._hass is not None:
            from homeassistant.components import bluetooth

            fresh = bluetooth.async_ble_device_from_address(
                self._hass, self._identity.address, connectable=True
            )
            if fresh is not None:
                self._ble_device = fresh
        if self._ble_device is None:
            raise MagicBlueUnboundDeviceError(self._identity.address)
        return self._ble_device

    def _on_disconnect(self, client: BleakClient) -> None:
        """Handle the transport reporting a dropped link."""
        if client is not self._client:
            return
        LOGGER.debug("Disconnected from %s", self._identity.address)
        self._client = None
        self._write_char = None
        self._notify()

    async def ensure_connected(self) -> BleakClient:
        """Return a connected client, connecting once if needed.

        Raises:
            MagicBlueUnboundDeviceError: If no peripheral is bound yet
            MagicBlueConnectionError: If the connect attempt failed
        """
        if self._ble_device is None:
            raise MagicBlueUnboundDeviceError(self._identity.address)
        if self._client is not None and self._client.is_connected:
            return self._client

        async with self._connect_lock:
            # Someone else may have connected (or released) while we waited
            if self._ble_device is None:
                raise MagicBlueUnboundDeviceError(self._identity.address)
            if self._client is not None and self._client.is_connected:
                return self._client

            reconnect = self._connect_count > 0
            if reconnect:
                LOGGER.info(
                    "Lost connection to %s, attempting reconnect",
                    self._identity.address,
                )
            else:
                LOGGER.info("Connecting to %s", self._identity.address)

            self._connecting = True
            self._notify()
            try:
                client = await establish_connection(
                    BleakClientWithServiceCache,
                    self._ble_device,
                    self._identity.address,
                    disconnected_callback=self._on_disconnect,
                    max_attempts=self._max_attempts,
                    ble_device_callback=self._get_ble_device,
                )
            except MagicBlueUnboundDeviceError:
                # Released while connecting
                raise
            except (BleakError, TimeoutError, OSError) as err:
                LOGGER.error(
                    "Failed to connect to %s: %s (type: %s)",
                    self._identity.address,
                    err,
                    type(err).__name__,
                )
                raise self._connect_failed(err) from err
            except Exception as err:
                LOGGER.error(
                    "Unexpected error connecting to %s: %s (type: %s)",
                    self._identity.address,
                    err,
                    type(err).__name__,
                )
                raise self._connect_failed(err) from err
            else:
                self._connecting = False
                self._client = client
                self._write_char = None
                self._connect_count += 1
                if reconnect:
                    self._reconnect_count += 1
                self._last_error = None
                LOGGER.info("Connected to %s", self._identity.address)
                self._notify()
            finally:
                if self._connecting:
                    self._connecting = False
                    self._notify()
            return client

    def _connect_failed(self, err: Exception) -> MagicBlueConnectionError:
        self._connecting = False
        self._last_error = str(err)
        self._notify()
        return MagicBlueConnectionError(self._identity.address, str(err))

    def write_characteristic(self, client: BleakClient) -> BleakGATTCharacteristic:
        """Return the characteristic frames are written to on this link.

        The configured handle is the ATT value handle. Backends number a
        characteristic either by that value handle or by its declaration
        handle one below it, so both are accepted. The lookup is cached
        until the link changes.

        Raises:
            MagicBlueWriteError: If the bulb offers no matching characteristic
        """
        if client is self._client and self._write_char is not None:
            return self._write_char

        handle = self._identity.write_handle
        char = find_write_characteristic(client.services, handle)
        if char is None:
            LOGGER.error(
                "No write characteristic for handle 0x%04X on %s",
                handle,
                self._identity.address,
            )
            raise MagicBlueWriteError(
                self._identity.address,
                f"no write characteristic for handle 0x{handle:04X}",
            )
        LOGGER.debug(
            "Using characteristic %s (handle 0x%04X) of %s",
            char.uuid,
            char.handle,
            self._identity.address,
        )
        if client is self._client:
            self._write_char = char
        return char

    async def disconnect(self) -> None:
        """Close the link if it is up."""
        client = self._client
        self._client = None
        self._write_char = None
        if client is None:
            return

        if client.is_connected:
            try:
                await client.disconnect()
                LOGGER.info("Disconnected from %s", self._identity.address)
            except BleakError as err:
                LOGGER.debug("BleakError during disconnect: %s", err)
            except TimeoutError as err:
                LOGGER.debug("Timeout during disconnect: %s", err)
            except OSError as err:
                LOGGER.debug("OS error during disconnect: %s", err)
        self._notify()

    async def release(self) -> None:
        """Disconnect and drop the binding (shutdown)."""
        await self.disconnect()
        if self._ble_device is not None:
            self._ble_device = None
            LOGGER.debug("Released bulb %s", self._identity.address)
            self._notify()


def _is_writable(char: BleakGATTCharacteristic) -> bool:
    return "write-without-response" in char.properties or "write" in char.properties


def find_write_characteristic(
    services: BleakGATTServiceCollection, handle: int
) -> BleakGATTCharacteristic | None:
    """Find the characteristic behind an ATT value handle.

    Falls back to the known write characteristic UUIDs when no writable
    characteristic sits at the handle.
    """
    writable = [char for char in services.characteristics.values() if _is_writable(char)]
    for char in writable:
        if char.handle == handle:
            return char
    for char in writable:
        # BlueZ numbers characteristics by their declaration handle
        if char.handle + 1 == handle:
            return char
    for uuid in WRITE_CHAR_UUIDS:
        for char in writable:
            if char.uuid.lower() == uuid:
                return char
    return None

"""Bulb discovery for Magic Blue bulbs.

One discovery service exists per Home Assistant instance. It owns the single
advertisement subscription shared by every configured bulb and resolves one
future per device identity, exactly once. The subscription is only held
while at least one bulb is still waiting for its match.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable

from bleak.backends.device import BLEDevice

from homeassistant.components import bluetooth
from homeassistant.components.bluetooth import (
    BluetoothChange,
    BluetoothScanningMode,
    BluetoothServiceInfoBleak,
)
from homeassistant.core import HomeAssistant, callback

from .const import DOMAIN, LOGGER
from .models import DeviceIdentity

DATA_DISCOVERY = "discovery"


class MagicBlueDiscovery:
    """Shared advertisement watcher binding bulbs to peripherals."""

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the discovery service."""
        self._hass = hass
        self._observers: dict[str, tuple[DeviceIdentity, asyncio.Future[BLEDevice]]] = {}
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_scanning(self) -> bool:
        """Return True while the advertisement subscription is held."""
        return self._unsubscribe is not None

    @property
    def pending(self) -> list[str]:
        """Return the addresses still waiting for a match."""
        return [identity.address for identity, _ in self._observers.values()]

    @callback
    def observe_match(self, identity: DeviceIdentity) -> asyncio.Future[BLEDevice]:
        """Return a future resolved with the peripheral matching identity.

        Observing an identity that is already being watched returns the same
        future.
        """
        key = identity.address
        if key in self._observers:
            return self._observers[key][1]

        future: asyncio.Future[BLEDevice] = self._hass.loop.create_future()
        self._observers[key] = (identity, future)

        # The host may have seen the bulb before we started looking
        for service_info in bluetooth.async_discovered_service_info(
            self._hass, connectable=True
        ):
            if identity.matches(service_info.address):
                self._async_resolve(key, service_info)
                return future

        self._async_start()
        return future

    @callback
    def cancel(self, identity: DeviceIdentity) -> None:
        """Stop waiting for identity."""
        entry = self._observers.pop(identity.address, None)
        if entry is not None and not entry[1].done():
            entry[1].cancel()
        self._async_stop_if_idle()

    @callback
    def async_stop(self) -> None:
        """Drop every observer and the advertisement subscription."""
        for _, future in self._observers.values():
            if not future.done():
                future.cancel()
        self._observers.clear()
        self._async_stop_if_idle()

    @callback
    def _async_start(self) -> None:
        """Subscribe to advertisements if not already subscribed."""
        if self._unsubscribe is not None:
            return

        if not bluetooth.async_scanner_count(self._hass, connectable=True):
            LOGGER.warning(
                "No connectable Bluetooth adapter is available yet, "
                "waiting for one to power on"
            )

        self._unsubscribe = bluetooth.async_register_callback(
            self._hass,
            self._async_on_advertisement,
            {"connectable": True},
            BluetoothScanningMode.ACTIVE,
        )
        LOGGER.debug("Started scanning for %s", ", ".join(self.pending))

    @callback
    def _async_stop_if_idle(self) -> None:
        """Unsubscribe once nobody is waiting anymore."""
        if self._observers or self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        LOGGER.debug("Stopped scanning, all bulbs bound")

    @callback
    def _async_on_advertisement(
        self,
        service_info: BluetoothServiceInfoBleak,
        change: BluetoothChange,
    ) -> None:
        """Handle an advertisement from any connectable device."""
        for key, (identity, _) in list(self._observers.items()):
            if identity.matches(service_info.address):
                self._async_resolve(key, service_info)

    @callback
    def _async_resolve(self, key: str, service_info: BluetoothServiceInfoBleak) -> None:
        """Resolve the observer for key with the advertised device."""
        identity, future = self._observers.pop(key)
        LOGGER.info(
            "Found Magic Blue bulb %s (name: %s, RSSI: %s)",
            identity.address,
            service_info.name,
            service_info.rssi,
        )
        if not future.done():
            future.set_result(service_info.device)
        self._async_stop_if_idle()


@callback
def async_get_discovery(hass: HomeAssistant) -> MagicBlueDiscovery:
    """Return the discovery service shared by all config entries."""
    domain_data: dict = hass.data.setdefault(DOMAIN, {})
    if DATA_DISCOVERY not in domain_data:
        domain_data[DATA_DISCOVERY] = MagicBlueDiscovery(hass)
    return domain_data[DATA_DISCOVERY]

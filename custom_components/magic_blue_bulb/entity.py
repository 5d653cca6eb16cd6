"""Base entity for Magic Blue bulbs."""
from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_NAME
from homeassistant.helpers.device_registry import (
    CONNECTION_BLUETOOTH,
    DeviceInfo,
    format_mac,
)
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CONF_MANUFACTURER,
    CONF_MODEL,
    CONF_SERIAL,
    DEFAULT_MANUFACTURER,
    DEFAULT_MODEL,
    DEFAULT_NAME,
    DEFAULT_SERIAL,
    DOMAIN,
    VERSION,
)
from .coordinator import MagicBlueDataUpdateCoordinator


class MagicBlueEntity(CoordinatorEntity[MagicBlueDataUpdateCoordinator]):
    """Entity attached to the device of one bulb."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: MagicBlueDataUpdateCoordinator,
        entry: ConfigEntry,
        key: str | None = None,
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._bulb = coordinator.bulb
        mac = format_mac(self._bulb.identity.address)
        self._attr_unique_id = mac if key is None else f"{mac}_{key}"

        settings = {**entry.data, **entry.options}
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, mac)},
            name=entry.data.get(CONF_NAME, DEFAULT_NAME),
            manufacturer=settings.get(CONF_MANUFACTURER) or DEFAULT_MANUFACTURER,
            model=settings.get(CONF_MODEL) or DEFAULT_MODEL,
            serial_number=settings.get(CONF_SERIAL) or DEFAULT_SERIAL,
            sw_version=VERSION,
            connections={(CONNECTION_BLUETOOTH, mac)},
        )

"""Binary sensor platform for Magic Blue bulbs."""
from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import MagicBlueConfigEntry
from .connection import ConnectionState
from .coordinator import MagicBlueDataUpdateCoordinator
from .entity import MagicBlueEntity

BINARY_SENSOR_DESCRIPTIONS: tuple[BinarySensorEntityDescription, ...] = (
    BinarySensorEntityDescription(
        key="connected",
        translation_key="connected",
        device_class=BinarySensorDeviceClass.CONNECTIVITY,
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
    BinarySensorEntityDescription(
        key="bound",
        translation_key="bound",
        device_class=BinarySensorDeviceClass.CONNECTIVITY,
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: MagicBlueConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Magic Blue binary sensors from a config entry."""
    coordinator = entry.runtime_data.coordinator
    async_add_entities(
        MagicBlueBinarySensor(coordinator, entry, description)
        for description in BINARY_SENSOR_DESCRIPTIONS
    )


class MagicBlueBinarySensor(MagicBlueEntity, BinarySensorEntity):
    """Representation of a Magic Blue connectivity sensor."""

    def __init__(
        self,
        coordinator: MagicBlueDataUpdateCoordinator,
        entry: ConfigEntry,
        description: BinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator, entry, description.key)
        self.entity_description = description

    @property
    def is_on(self) -> bool | None:
        """Return True if the binary sensor is on."""
        state = self._bulb.connection_state
        if self.entity_description.key == "connected":
            return state is ConnectionState.CONNECTED
        if self.entity_description.key == "bound":
            return state is not ConnectionState.UNBOUND
        return None

    @property
    def available(self) -> bool:
        """Connectivity sensors are always available."""
        return True

"""Light platform for Magic Blue bulbs."""
from __future__ import annotations

from typing import Any

from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_HS_COLOR,
    ColorMode,
    LightEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import MagicBlueConfigEntry
from .const import LOGGER
from .coordinator import MagicBlueDataUpdateCoordinator
from .entity import MagicBlueEntity

# Writes are serialized (and superseded) by the bulb's write coordinator
PARALLEL_UPDATES = 0


def brightness_to_lightness(brightness: int) -> int:
    """Map Home Assistant brightness (0-255) to lightness (0-100)."""
    return max(0, min(100, round(brightness * 100 / 255)))


def lightness_to_brightness(lightness: float) -> int:
    """Map lightness (0-100) to Home Assistant brightness (0-255)."""
    return max(0, min(255, round(lightness * 255 / 100)))


async def async_setup_entry(
    hass: HomeAssistant,
    entry: MagicBlueConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Magic Blue light from a config entry."""
    LOGGER.debug("Setting up Magic Blue light entity")
    coordinator = entry.runtime_data.coordinator
    async_add_entities([MagicBlueLight(coordinator, entry)])


class MagicBlueLight(MagicBlueEntity, LightEntity):
    """Representation of a Magic Blue bulb.

    The bulb has no way to report its state, so everything shown here is the
    last requested value.
    """

    _attr_name = None
    _attr_assumed_state = True
    _attr_color_mode = ColorMode.HS
    _attr_supported_color_modes = {ColorMode.HS}

    def __init__(
        self,
        coordinator: MagicBlueDataUpdateCoordinator,
        entry: ConfigEntry,
    ) -> None:
        """Initialize the light."""
        super().__init__(coordinator, entry)

    @property
    def is_on(self) -> bool:
        """Return True if light is on."""
        return self._bulb.is_on

    @property
    def brightness(self) -> int:
        """Return the brightness (0-255)."""
        return lightness_to_brightness(self._bulb.brightness)

    @property
    def hs_color(self) -> tuple[float, float]:
        """Return the hue and saturation."""
        return (self._bulb.hue, self._bulb.saturation)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the connection state and the RGB value the bulb is given."""
        return {
            "connection_state": str(self._bulb.connection_state),
            "device_rgb": self._bulb.rgb_color,
        }

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn on the light, applying color and brightness if given."""
        LOGGER.debug("Turn on %s with kwargs: %s", self._bulb.identity.address, kwargs)

        hue = saturation = lightness = None
        if ATTR_HS_COLOR in kwargs:
            hue, saturation = kwargs[ATTR_HS_COLOR]
        if ATTR_BRIGHTNESS in kwargs:
            lightness = brightness_to_lightness(kwargs[ATTR_BRIGHTNESS])
        has_color = any(value is not None for value in (hue, saturation, lightness))

        if self._bulb.is_on:
            if has_color:
                await self._bulb.set_color(hue, saturation, lightness)
            else:
                await self._bulb.turn_on()
            return

        # Off: store the color first so power-on applies it in one go
        if has_color:
            await self._bulb.set_color(hue, saturation, lightness)
        await self._bulb.turn_on()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn off the light."""
        await self._bulb.turn_off()

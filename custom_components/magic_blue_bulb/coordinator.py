"""DataUpdateCoordinator for Magic Blue bulbs.

The bulb never reports its state, so there is nothing to poll. The
coordinator only distributes snapshots pushed by MagicBlueBulb whenever the
requested state or the connection state changes.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import LOGGER

if TYPE_CHECKING:
    from .bulb import MagicBlueBulb


class MagicBlueDataUpdateCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Push-only coordinator for one bulb."""

    def __init__(
        self,
        hass: HomeAssistant,
        bulb: MagicBlueBulb,
        name: str,
    ) -> None:
        """Initialize the coordinator.

        Args:
            hass: Home Assistant instance
            bulb: Bulb controller whose state is distributed
            name: Device name for logging
        """
        super().__init__(
            hass,
            LOGGER,
            name=f"Magic Blue {name}",
            update_interval=None,
        )
        self.bulb = bulb
        self.device_name = name

        self.bulb.set_update_callback(self._handle_push_update)

    @callback
    def _handle_push_update(self) -> None:
        """Publish the bulb's current snapshot to listeners."""
        self.async_set_updated_data(self._get_current_data())

    def _get_current_data(self) -> dict[str, Any]:
        """Return the current bulb state as a dictionary."""
        state = self.bulb.state
        return {
            "is_on": state.on,
            "hue": state.hue,
            "saturation": state.saturation,
            "lightness": state.lightness,
            "rgb_color": self.bulb.rgb_color,
            "color_pending": self.bulb.color_pending,
            "connection_state": self.bulb.connection_state,
        }

    async def _async_update_data(self) -> dict[str, Any]:
        """Return the current snapshot (no device I/O)."""
        return self._get_current_data()

    async def async_shutdown(self) -> None:
        """Stop receiving pushes from the bulb."""
        self.bulb.remove_update_callback(self._handle_push_update)
        await super().async_shutdown()

"""Magic Blue bulb controller.

MagicBlueBulb is what the light entity talks to. It keeps the last requested
on/hue/saturation/lightness, turns changes into protocol frames and hands
them to the write coordinator.

Color changes made while the bulb is off are only stored. They are flushed
with one color frame right after the next successful power-on.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from bleak.backends.device import BLEDevice

from .color import hsl_to_rgb
from .connection import BulbConnection, ConnectionState
from .const import DEFAULT_CONNECT_ATTEMPTS, LOGGER
from .models import BulbState, DeviceIdentity
from .protocol import encode_color, encode_power
from .write_coordinator import WriteCoordinator, WriteKind, WriteOutcome

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .discovery import MagicBlueDiscovery


class MagicBlueBulb:
    """Representation of one Magic Blue bulb."""

    def __init__(
        self,
        identity: DeviceIdentity,
        name: str,
        hass: HomeAssistant | None = None,
        max_attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    ) -> None:
        """Initialize the bulb.

        Args:
            identity: Validated identity of the bulb
            name: Display name, used in logs
            hass: Home Assistant instance for adapter selection
            max_attempts: Retries inside one connect attempt
        """
        self._identity = identity
        self._name = name
        self._state = BulbState()
        self._color_pending = False
        self._connection = BulbConnection(identity, hass, max_attempts)
        self._writer = WriteCoordinator(self._connection)
        self._discovery: MagicBlueDiscovery | None = None
        self._update_callbacks: list[Callable[[], None]] = []
        self._remove_connection_listener = self._connection.add_listener(
            self._trigger_update
        )

    @property
    def identity(self) -> DeviceIdentity:
        """Return the identity of the bulb."""
        return self._identity

    @property
    def name(self) -> str:
        """Return the display name."""
        return self._name

    @property
    def connection(self) -> BulbConnection:
        """Return the connection manager."""
        return self._connection

    @property
    def writer(self) -> WriteCoordinator:
        """Return the write coordinator."""
        return self._writer

    @property
    def connection_state(self) -> ConnectionState:
        """Return the connection state."""
        return self._connection.state

    @property
    def state(self) -> BulbState:
        """Return a read-only snapshot of the requested state."""
        return self._state.snapshot()

    @property
    def is_on(self) -> bool:
        """Return the last requested power state that was sent."""
        return self._state.on

    @property
    def hue(self) -> float:
        """Return the last requested hue."""
        return self._state.hue

    @property
    def saturation(self) -> float:
        """Return the last requested saturation."""
        return self._state.saturation

    @property
    def brightness(self) -> float:
        """Return the last requested lightness."""
        return self._state.lightness

    @property
    def rgb_color(self) -> tuple[int, int, int]:
        """Return the RGB color the requested state maps to."""
        return hsl_to_rgb(self._state.hue, self._state.saturation, self._state.lightness)

    @property
    def color_pending(self) -> bool:
        """Return True if color values changed while the bulb was off."""
        return self._color_pending

    def set_update_callback(self, callback: Callable[[], None] | None) -> None:
        """Register a callback for state updates."""
        if callback is None:
            return
        if callback not in self._update_callbacks:
            self._update_callbacks.append(callback)

    def remove_update_callback(self, callback: Callable[[], None]) -> None:
        """Remove a state update callback."""
        if callback in self._update_callbacks:
            self._update_callbacks.remove(callback)

    def _trigger_update(self) -> None:
        for callback in list(self._update_callbacks):
            callback()

    def update_ble_device(self, device: BLEDevice) -> None:
        """Pass a fresher device reference to the connection."""
        self._connection.update_ble_device(device)

    async def async_bind(self, discovery: MagicBlueDiscovery) -> None:
        """Wait for the bulb to be discovered and bind it."""
        self._discovery = discovery
        LOGGER.debug("Waiting for %s (%s) to advertise", self._name, self._identity.address)
        device = await discovery.observe_match(self._identity)
        self._connection.bind(device)

    async def turn_on(self) -> None:
        """Turn the bulb on, then apply colors changed while it was off."""
        await self._set_power(True)

    async def turn_off(self) -> None:
        """Turn the bulb off."""
        await self._set_power(False)

    async def _set_power(self, on: bool) -> None:
        LOGGER.debug("Setting power of %s to %s", self._identity.address, on)
        outcome = await self._writer.submit(WriteKind.POWER, encode_power(on))
        if outcome is WriteOutcome.SUPERSEDED:
            return

        self._state.on = on
        self._trigger_update()
        if on and self._color_pending:
            LOGGER.debug("Applying color stored while %s was off", self._identity.address)
            await self._write_color()

    async def set_hue(self, hue: float) -> None:
        """Set the hue (0-360)."""
        await self.set_color(hue=hue)

    async def set_saturation(self, saturation: float) -> None:
        """Set the saturation (0-100)."""
        await self.set_color(saturation=saturation)

    async def set_brightness(self, brightness: float) -> None:
        """Set the brightness, i.e. HSL lightness (0-100)."""
        await self.set_color(lightness=brightness)

    async def set_color(
        self,
        hue: float | None = None,
        saturation: float | None = None,
        lightness: float | None = None,
    ) -> None:
        """Update any of hue, saturation and lightness at once.

        The state changes immediately. A single color frame follows if the
        bulb is on; otherwise the values wait for the next power-on.

        Raises:
            ValueError: If a value is out of range
        """
        if hue is not None and not 0 <= hue <= 360:
            raise ValueError(f"hue must be between 0 and 360, got {hue}")
        if saturation is not None and not 0 <= saturation <= 100:
            raise ValueError(f"saturation must be between 0 and 100, got {saturation}")
        if lightness is not None and not 0 <= lightness <= 100:
            raise ValueError(f"lightness must be between 0 and 100, got {lightness}")

        if hue is not None:
            self._state.hue = hue
        if saturation is not None:
            self._state.saturation = saturation
        if lightness is not None:
            self._state.lightness = lightness
        LOGGER.debug(
            "Color of %s -> H=%s S=%s L=%s",
            self._identity.address,
            self._state.hue,
            self._state.saturation,
            self._state.lightness,
        )
        self._trigger_update()

        if not self._state.on:
            self._color_pending = True
            return
        await self._write_color()

    async def _write_color(self) -> None:
        red, green, blue = self.rgb_color
        frame = encode_color(red, green, blue, self._identity.generation)
        self._color_pending = False
        try:
            await self._writer.submit(WriteKind.COLOR, frame)
        except Exception:
            self._color_pending = True
            raise

    async def async_shutdown(self) -> None:
        """Stop discovery, cancel queued writes and release the bulb."""
        if self._discovery is not None:
            self._discovery.cancel(self._identity)
            self._discovery = None
        await self._writer.async_shutdown()
        await self._connection.release()
        self._remove_connection_listener()

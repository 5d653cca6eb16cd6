"""Data model for Magic Blue bulbs."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
import re
from typing import Any

from homeassistant.const import CONF_MAC

from .const import (
    CONF_GENERATION,
    CONF_HANDLE,
    DEFAULT_HUE,
    DEFAULT_LIGHTNESS,
    DEFAULT_SATURATION,
    MAX_HANDLE,
)
from .exceptions import MagicBlueConfigurationError
from .protocol import ProtocolGeneration, get_generation

_MAC_RE = re.compile(r"^[0-9a-f]{2}([:-]?)(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}$", re.IGNORECASE)


def is_valid_mac(mac: str) -> bool:
    """Validate MAC address format (colon, dash or no separators)."""
    if not isinstance(mac, str):
        return False
    return _MAC_RE.match(mac.strip()) is not None


def _compact(address: str) -> str:
    """Lowercase an address and strip its separators."""
    return address.lower().replace(":", "").replace("-", "")


@dataclass
class BulbState:
    """Last requested state of a bulb.

    Values are optimistic: they hold what was asked for, whether or not the
    radio write for it went through.
    """

    on: bool = True
    hue: float = DEFAULT_HUE
    saturation: float = DEFAULT_SATURATION
    lightness: float = DEFAULT_LIGHTNESS

    def snapshot(self) -> BulbState:
        """Return a detached copy for readers."""
        return replace(self)

    def as_dict(self) -> dict[str, Any]:
        """Return the state as a plain dict."""
        return {
            "on": self.on,
            "hue": self.hue,
            "saturation": self.saturation,
            "lightness": self.lightness,
        }


@dataclass(frozen=True)
class DeviceIdentity:
    """Immutable identity of one configured bulb."""

    mac_or_id: str
    write_handle: int
    generation: ProtocolGeneration = field(default_factory=lambda: get_generation(None))

    @classmethod
    def from_config(
        cls,
        data: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> DeviceIdentity:
        """Build an identity from config entry data and options.

        Options take precedence over data for the handle and generation.

        Raises:
            MagicBlueConfigurationError: If the address, handle or generation
                is malformed
        """
        merged: dict[str, Any] = {**data, **(options or {})}

        mac = merged.get(CONF_MAC)
        if not is_valid_mac(mac):
            raise MagicBlueConfigurationError(CONF_MAC, str(mac))

        try:
            generation = get_generation(merged.get(CONF_GENERATION))
        except ValueError:
            raise MagicBlueConfigurationError(
                CONF_GENERATION, str(merged.get(CONF_GENERATION))
            ) from None

        handle = merged.get(CONF_HANDLE)
        if handle is None:
            handle = generation.handle
        elif (
            isinstance(handle, bool)
            or not isinstance(handle, int)
            or not 0 < handle <= MAX_HANDLE
        ):
            raise MagicBlueConfigurationError(CONF_HANDLE, str(handle))

        return cls(
            mac_or_id=mac.strip().lower(),
            write_handle=handle,
            generation=generation,
        )

    @property
    def address(self) -> str:
        """Return the address in Home Assistant's upper-case colon form."""
        compact = _compact(self.mac_or_id)
        return ":".join(compact[i : i + 2] for i in range(0, 12, 2)).upper()

    def matches(self, address: str | None) -> bool:
        """Return True if a transport address or id designates this bulb."""
        if not address:
            return False
        return _compact(address) == _compact(self.mac_or_id)

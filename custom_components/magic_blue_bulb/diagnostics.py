"""Diagnostics support for Magic Blue bulbs."""
from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.const import CONF_MAC
from homeassistant.core import HomeAssistant

from . import MagicBlueConfigEntry
from .const import DOMAIN, VERSION
from .discovery import DATA_DISCOVERY

TO_REDACT = {CONF_MAC}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: MagicBlueConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    bulb = entry.runtime_data.bulb
    connection = bulb.connection
    writer = bulb.writer
    discovery = hass.data.get(DOMAIN, {}).get(DATA_DISCOVERY)

    return {
        "integration_version": VERSION,
        "config_entry": async_redact_data(entry.as_dict(), TO_REDACT),
        "device_state": {
            **bulb.state.as_dict(),
            "rgb_color": bulb.rgb_color,
            "color_pending": bulb.color_pending,
        },
        "protocol": {
            "generation": bulb.identity.generation.key,
            "write_handle": f"0x{bulb.identity.write_handle:04X}",
            "color_frame_length": bulb.identity.generation.color_frame_length,
        },
        "connection": {
            "state": str(connection.state),
            "connect_count": connection.connect_count,
            "reconnect_count": connection.reconnect_count,
            "last_error": connection.last_error,
        },
        "writes": {
            "frames_sent": writer.frames_sent,
            "frames_superseded": writer.frames_superseded,
            "frames_repeated": writer.frames_repeated,
            "write_failures": writer.write_failures,
            "pending": [str(kind) for kind in writer.pending_kinds],
        },
        "discovery": {
            "scanning": discovery.is_scanning if discovery else False,
            "waiting": len(discovery.pending) if discovery else 0,
        },
    }

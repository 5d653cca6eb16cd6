"""The Magic Blue Bulb integration."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_NAME, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers import device_registry as dr, issue_registry as ir

from .bulb import MagicBlueBulb
from .const import (
    CONF_CONNECT_ATTEMPTS,
    DEFAULT_CONNECT_ATTEMPTS,
    DEFAULT_NAME,
    DOMAIN,
    LOGGER,
)
from .coordinator import MagicBlueDataUpdateCoordinator
from .discovery import DATA_DISCOVERY, async_get_discovery
from .exceptions import MagicBlueConfigurationError
from .models import DeviceIdentity


@dataclass
class MagicBlueRuntimeData:
    """Runtime data for a Magic Blue config entry."""

    bulb: MagicBlueBulb
    coordinator: MagicBlueDataUpdateCoordinator


if TYPE_CHECKING:
    MagicBlueConfigEntry = ConfigEntry[MagicBlueRuntimeData]
else:
    MagicBlueConfigEntry = ConfigEntry

PLATFORMS: list[Platform] = [
    Platform.LIGHT,
    Platform.BINARY_SENSOR,
]


async def async_setup_entry(hass: HomeAssistant, entry: MagicBlueConfigEntry) -> bool:
    """Set up a Magic Blue bulb from a config entry."""
    name = entry.data.get(CONF_NAME, DEFAULT_NAME)

    try:
        identity = DeviceIdentity.from_config(entry.data, entry.options)
    except MagicBlueConfigurationError as err:
        LOGGER.error("Invalid configuration for %s: %s", name, err.translation_placeholders)
        ir.async_create_issue(
            hass,
            DOMAIN,
            f"invalid_configuration_{entry.entry_id}",
            is_fixable=False,
            is_persistent=False,
            severity=ir.IssueSeverity.ERROR,
            translation_key="invalid_configuration",
            translation_placeholders={"name": name, **err.translation_placeholders},
        )
        raise ConfigEntryError(f"Invalid configuration for {name}") from err

    ir.async_delete_issue(hass, DOMAIN, f"invalid_configuration_{entry.entry_id}")
    LOGGER.debug(
        "Setting up %s (%s, handle 0x%04X, generation %s)",
        name,
        identity.address,
        identity.write_handle,
        identity.generation.key,
    )

    bulb = MagicBlueBulb(
        identity,
        name,
        hass,
        entry.options.get(CONF_CONNECT_ATTEMPTS, DEFAULT_CONNECT_ATTEMPTS),
    )
    coordinator = MagicBlueDataUpdateCoordinator(hass, bulb, name)
    entry.runtime_data = MagicBlueRuntimeData(bulb=bulb, coordinator=coordinator)

    await coordinator.async_config_entry_first_refresh()
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    # Binding waits for the bulb to advertise; never block setup on it
    entry.async_create_background_task(
        hass,
        bulb.async_bind(async_get_discovery(hass)),
        f"magic_blue_bind_{identity.address}",
    )
    return True


async def _async_update_listener(hass: HomeAssistant, entry: MagicBlueConfigEntry) -> None:
    """Reload the entry when its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: MagicBlueConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        await entry.runtime_data.coordinator.async_shutdown()
        await entry.runtime_data.bulb.async_shutdown()

        discovery = hass.data.get(DOMAIN, {}).get(DATA_DISCOVERY)
        if discovery is not None and not discovery.pending:
            discovery.async_stop()
            hass.data[DOMAIN].pop(DATA_DISCOVERY)
    return unload_ok


async def async_remove_config_entry_device(
    hass: HomeAssistant,
    config_entry: MagicBlueConfigEntry,
    device_entry: dr.DeviceEntry,
) -> bool:
    """Allow removing the device; each entry owns exactly one bulb."""
    LOGGER.info(
        "Allowing removal of device %s from config entry %s",
        device_entry.id,
        config_entry.entry_id,
    )
    return True

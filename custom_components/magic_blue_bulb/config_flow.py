"""Config flow for Magic Blue Bulb integration."""
from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.components.bluetooth import (
    BluetoothServiceInfoBleak,
    async_discovered_service_info,
)
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_MAC, CONF_NAME
from homeassistant.core import callback
from homeassistant.helpers.device_registry import format_mac

from .const import (
    CONF_CONNECT_ATTEMPTS,
    CONF_GENERATION,
    CONF_HANDLE,
    CONF_MANUFACTURER,
    CONF_MODEL,
    CONF_SERIAL,
    DEFAULT_CONNECT_ATTEMPTS,
    DEFAULT_GENERATION,
    DEFAULT_MANUFACTURER,
    DEFAULT_MODEL,
    DEFAULT_NAME,
    DEFAULT_SERIAL,
    DEVICE_NAME_PREFIXES,
    DOMAIN,
    LOGGER,
    MAX_CONNECT_ATTEMPTS,
    MAX_HANDLE,
    SERVICE_UUID,
)
from .models import is_valid_mac
from .protocol import GENERATIONS

MANUAL_MAC = "manual"


def is_magic_blue(info: BluetoothServiceInfoBleak) -> bool:
    """Return True if an advertisement looks like a Magic Blue bulb."""
    if SERVICE_UUID in (info.service_uuids or []):
        return True
    return bool(info.name) and info.name.lower().startswith(DEVICE_NAME_PREFIXES)


class MagicBlueConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Magic Blue bulbs.

    The bulb cannot be read, so there is no connection test: an entry is
    created as soon as the address is known and binding happens at setup.
    """

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: ConfigEntry,
    ) -> OptionsFlow:
        """Create the options flow."""
        return MagicBlueOptionsFlowHandler(config_entry)

    def __init__(self) -> None:
        """Initialize the config flow."""
        self._mac: str | None = None
        self._name: str | None = None
        self._discovered_devices: dict[str, BluetoothServiceInfoBleak] = {}

    async def async_step_bluetooth(
        self, discovery_info: BluetoothServiceInfoBleak
    ) -> ConfigFlowResult:
        """Handle Bluetooth discovery."""
        LOGGER.debug(
            "Bluetooth discovery: %s (%s) RSSI: %s",
            discovery_info.name,
            discovery_info.address,
            discovery_info.rssi,
        )

        await self.async_set_unique_id(format_mac(discovery_info.address))
        self._abort_if_unique_id_configured()

        self._mac = discovery_info.address
        self._name = discovery_info.name or f"{DEFAULT_NAME} {discovery_info.address[-8:]}"

        self.context["title_placeholders"] = {"name": self._name}
        return await self.async_step_bluetooth_confirm()

    async def async_step_bluetooth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Confirm Bluetooth discovery."""
        if user_input is not None:
            if user_input.get(CONF_NAME):
                self._name = user_input[CONF_NAME]
            return self._async_create_bulb_entry()

        return self.async_show_form(
            step_id="bluetooth_confirm",
            data_schema=vol.Schema(
                {vol.Optional(CONF_NAME, default=self._name): str}
            ),
            description_placeholders={"name": self._name},
        )

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Pick a discovered bulb or fall back to manual entry."""
        if user_input is not None:
            if user_input[CONF_MAC] == MANUAL_MAC:
                return await self.async_step_manual()

            self._mac = user_input[CONF_MAC]
            self._name = user_input[CONF_NAME]
            await self.async_set_unique_id(format_mac(self._mac))
            self._abort_if_unique_id_configured()
            return self._async_create_bulb_entry()

        configured_macs = self._async_current_ids(include_ignore=False)
        self._discovered_devices = {
            info.address: info
            for info in async_discovered_service_info(self.hass, connectable=True)
            if is_magic_blue(info) and format_mac(info.address) not in configured_macs
        }
        LOGGER.debug("Found %d unconfigured bulbs", len(self._discovered_devices))

        if not self._discovered_devices:
            return await self.async_step_manual()

        device_options = {}
        for addr, info in self._discovered_devices.items():
            rssi_str = f" ({info.rssi} dBm)" if info.rssi else ""
            device_options[addr] = f"{info.name or addr}{rssi_str}"
        device_options[MANUAL_MAC] = "Enter MAC address manually"

        first_device = next(iter(self._discovered_devices.values()))
        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_MAC): vol.In(device_options),
                    vol.Required(CONF_NAME, default=first_device.name or DEFAULT_NAME): str,
                }
            ),
        )

    async def async_step_manual(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle manual MAC entry."""
        errors: dict[str, str] = {}

        if user_input is not None:
            mac = user_input[CONF_MAC].strip()
            if not is_valid_mac(mac):
                errors[CONF_MAC] = "invalid_mac"
            else:
                self._mac = mac.upper()
                self._name = user_input[CONF_NAME]
                await self.async_set_unique_id(format_mac(self._mac))
                self._abort_if_unique_id_configured()
                return self._async_create_bulb_entry()

        return self.async_show_form(
            step_id="manual",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_MAC): str,
                    vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                }
            ),
            errors=errors,
        )

    async def async_step_reconfigure(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Rename a configured bulb."""
        entry = self._get_reconfigure_entry()

        if user_input is not None:
            return self.async_update_reload_and_abort(
                entry,
                data={**entry.data, CONF_NAME: user_input[CONF_NAME]},
            )

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_NAME, default=entry.data.get(CONF_NAME, DEFAULT_NAME)
                    ): str,
                }
            ),
            description_placeholders={"mac": entry.data.get(CONF_MAC)},
        )

    @callback
    def _async_create_bulb_entry(self) -> ConfigFlowResult:
        LOGGER.info("Adding Magic Blue bulb %s (%s)", self._name, self._mac)
        return self.async_create_entry(
            title=self._name or DEFAULT_NAME,
            data={
                CONF_MAC: self._mac,
                CONF_NAME: self._name,
            },
        )


class MagicBlueOptionsFlowHandler(OptionsFlow):
    """Handle options flow for Magic Blue bulbs."""

    def __init__(self, config_entry: ConfigEntry) -> None:
        """Initialize options flow."""
        self._config_entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current_options = self._config_entry.options
        handle = current_options.get(CONF_HANDLE)
        handle_key = (
            vol.Optional(CONF_HANDLE, description={"suggested_value": handle})
            if handle is not None
            else vol.Optional(CONF_HANDLE)
        )

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_GENERATION,
                        default=current_options.get(CONF_GENERATION, DEFAULT_GENERATION),
                    ): vol.In(list(GENERATIONS)),
                    handle_key: vol.All(
                        vol.Coerce(int), vol.Range(min=1, max=MAX_HANDLE)
                    ),
                    vol.Optional(
                        CONF_MANUFACTURER,
                        default=current_options.get(CONF_MANUFACTURER, DEFAULT_MANUFACTURER),
                    ): str,
                    vol.Optional(
                        CONF_MODEL,
                        default=current_options.get(CONF_MODEL, DEFAULT_MODEL),
                    ): str,
                    vol.Optional(
                        CONF_SERIAL,
                        default=current_options.get(CONF_SERIAL, DEFAULT_SERIAL),
                    ): str,
                    vol.Optional(
                        CONF_CONNECT_ATTEMPTS,
                        default=current_options.get(
                            CONF_CONNECT_ATTEMPTS, DEFAULT_CONNECT_ATTEMPTS
                        ),
                    ): vol.All(
                        vol.Coerce(int), vol.Range(min=1, max=MAX_CONNECT_ATTEMPTS)
                    ),
                }
            ),
        )

"""Exceptions for the Magic Blue Bulb integration.

Every error carries a translation key from strings.json so that failures
surfaced through a light service call are shown localized.
"""
from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError

from .const import DOMAIN


class MagicBlueError(HomeAssistantError):
    """Base exception for Magic Blue errors."""

    def __init__(
        self,
        translation_key: str,
        translation_placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize MagicBlueError with translation support.

        Args:
            translation_key: Key in strings.json exceptions section
            translation_placeholders: Values to substitute in the message
        """
        super().__init__(
            translation_domain=DOMAIN,
            translation_key=translation_key,
            translation_placeholders=translation_placeholders or {},
        )


class MagicBlueConfigurationError(MagicBlueError):
    """Error when the configured device identity is malformed."""

    def __init__(self, field: str, value: str) -> None:
        """Initialize configuration error.

        Args:
            field: Name of the offending configuration field
            value: The rejected value
        """
        super().__init__(
            translation_key="invalid_configuration",
            translation_placeholders={"field": field, "value": value},
        )


class MagicBlueUnboundDeviceError(MagicBlueError):
    """Error when a write is requested before the bulb was discovered."""

    def __init__(self, mac: str) -> None:
        """Initialize unbound device error."""
        super().__init__(
            translation_key="device_unbound",
            translation_placeholders={"mac": mac},
        )


class MagicBlueConnectionError(MagicBlueError):
    """Error when a connect attempt fails."""

    def __init__(self, mac: str, error: str = "") -> None:
        """Initialize connection error.

        Args:
            mac: Address of the bulb
            error: Original transport error message
        """
        super().__init__(
            translation_key="connection_failed",
            translation_placeholders={"mac": mac, "error": error},
        )


class MagicBlueWriteError(MagicBlueError):
    """Error when a write fails after a successful connect."""

    def __init__(self, mac: str, error: str = "") -> None:
        """Initialize write error."""
        super().__init__(
            translation_key="write_failed",
            translation_placeholders={"mac": mac, "error": error},
        )

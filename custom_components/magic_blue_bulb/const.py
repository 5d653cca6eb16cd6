"""Constants for the Magic Blue Bulb integration."""
from __future__ import annotations

import logging
from typing import Final

DOMAIN: Final = "magic_blue_bulb"
VERSION: Final = "1.0.0"
LOGGER = logging.getLogger(__package__)

# Config entry keys (data)
CONF_HANDLE: Final = "handle"
CONF_GENERATION: Final = "generation"
CONF_MANUFACTURER: Final = "manufacturer"
CONF_MODEL: Final = "model"
CONF_SERIAL: Final = "serial"
CONF_CONNECT_ATTEMPTS: Final = "connect_attempts"

# Accessory information shown when the user does not override it
DEFAULT_NAME: Final = "Magic Blue"
DEFAULT_MANUFACTURER: Final = "Light"
DEFAULT_MODEL: Final = "Magic Blue"
DEFAULT_SERIAL: Final = "5D4989E80E44"

# One establish_connection call per connect attempt; the retry count inside it
# is only raised by the user through the options flow
DEFAULT_CONNECT_ATTEMPTS: Final = 1
MAX_CONNECT_ATTEMPTS: Final = 5

# GATT service the bulbs advertise; the write characteristic (ffe9) lives in it
SERVICE_UUID: Final = "0000ffe5-0000-1000-8000-00805f9b34fb"
# Write characteristics, used when the configured handle matches nothing
WRITE_CHAR_UUIDS: Final[tuple[str, ...]] = (
    "0000ffe9-0000-1000-8000-00805f9b34fb",
    "0000ffd9-0000-1000-8000-00805f9b34fb",
)
DEVICE_NAME_PREFIXES: Final[tuple[str, ...]] = ("ledble", "magic", "triones")

# Protocol generations (key -> default GATT write handle)
GENERATION_V6: Final = "v6"
GENERATION_V9: Final = "v9"
GENERATION_TRIONES: Final = "triones"
DEFAULT_GENERATION: Final = GENERATION_V6

HANDLE_V6: Final = 0x000C
HANDLE_V9: Final = 0x000B
HANDLE_TRIONES: Final = 0x0007
MAX_HANDLE: Final = 0xFFFF

# Power frame: [0xCC, on/off, 0x33]
CMD_POWER: Final = 0xCC
POWER_ON: Final = 0x23
POWER_OFF: Final = 0x24
POWER_TRAILER: Final = 0x33

# Color frame: [0x56, r, g, b, ...suffix]
CMD_COLOR: Final = 0x56
COLOR_SUFFIX: Final[tuple[int, ...]] = (0x00, 0xF0, 0xAA, 0x3B, 0x07, 0x00, 0x01)
COLOR_SUFFIX_SHORT: Final[tuple[int, ...]] = (0x00, 0xF0, 0xAA)

# Initial optimistic state: on, plain white
DEFAULT_HUE: Final = 0
DEFAULT_SATURATION: Final = 0
DEFAULT_LIGHTNESS: Final = 100

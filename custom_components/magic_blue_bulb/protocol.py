"""Magic Blue wire protocol.

All commands are fixed-length frames written without response to a single
GATT handle. The bulb never acknowledges them.

Frames:
- Power: [0xCC, 0x23 (on) / 0x24 (off), 0x33]
- Color: [0x56, R, G, B, ...suffix]

The color suffix and the GATT handle depend on the hardware generation:
- v6:      handle 0x000C, suffix 00 F0 AA 3B 07 00 01 (11-byte frame)
- v9:      handle 0x000B, same suffix
- triones: handle 0x0007, suffix 00 F0 AA (7-byte frame)
"""
from __future__ import annotations

from dataclasses import dataclass

from .const import (
    CMD_COLOR,
    CMD_POWER,
    COLOR_SUFFIX,
    COLOR_SUFFIX_SHORT,
    DEFAULT_GENERATION,
    GENERATION_TRIONES,
    GENERATION_V6,
    GENERATION_V9,
    HANDLE_TRIONES,
    HANDLE_V6,
    HANDLE_V9,
    POWER_OFF,
    POWER_ON,
    POWER_TRAILER,
)


@dataclass(frozen=True)
class ProtocolGeneration:
    """Per-generation protocol parameters."""

    key: str
    handle: int
    color_suffix: tuple[int, ...]

    @property
    def color_frame_length(self) -> int:
        """Return the total length of a color frame."""
        return 4 + len(self.color_suffix)


GENERATIONS: dict[str, ProtocolGeneration] = {
    GENERATION_V6: ProtocolGeneration(GENERATION_V6, HANDLE_V6, COLOR_SUFFIX),
    GENERATION_V9: ProtocolGeneration(GENERATION_V9, HANDLE_V9, COLOR_SUFFIX),
    GENERATION_TRIONES: ProtocolGeneration(
        GENERATION_TRIONES, HANDLE_TRIONES, COLOR_SUFFIX_SHORT
    ),
}


def get_generation(key: str | None) -> ProtocolGeneration:
    """Look up a protocol generation, defaulting to v6."""
    if key is None:
        key = DEFAULT_GENERATION
    try:
        return GENERATIONS[key]
    except KeyError:
        raise ValueError(f"Unknown protocol generation: {key}") from None


def encode_power(on: bool) -> bytes:
    """Build a power frame."""
    return bytes([CMD_POWER, POWER_ON if on else POWER_OFF, POWER_TRAILER])


def encode_color(
    red: int,
    green: int,
    blue: int,
    generation: ProtocolGeneration | None = None,
) -> bytes:
    """Build a color frame.

    Args:
        red: Red channel (0-255)
        green: Green channel (0-255)
        blue: Blue channel (0-255)
        generation: Hardware generation, defaults to v6 (11-byte frame)

    Raises:
        ValueError: If a channel is not an integer in 0-255
    """
    for name, value in (("red", red), ("green", green), ("blue", blue)):
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 255:
            raise ValueError(f"{name} channel must be an integer 0-255, got {value!r}")

    if generation is None:
        generation = GENERATIONS[DEFAULT_GENERATION]
    return bytes([CMD_COLOR, red, green, blue, *generation.color_suffix])

"""HSL <-> RGB conversion for Magic Blue bulbs.

Home Assistant models the bulb with hue/saturation/brightness while the wire
protocol only carries RGB. Brightness is treated as HSL lightness, which is
what the vendor app does.
"""
from __future__ import annotations

import colorsys
import math


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


def _to_channel(value: float) -> int:
    """Scale a 0..1 component to 0..255, rounding halves up."""
    return max(0, min(255, math.floor(value * 255 + 0.5)))


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """Convert an HSL color to RGB.

    Args:
        hue: Hue in degrees (0-360, 360 wraps to 0)
        saturation: Saturation in percent (0-100)
        lightness: Lightness in percent (0-100)

    Returns:
        Tuple of (red, green, blue), each 0-255.
    """
    _check_range("hue", hue, 0, 360)
    _check_range("saturation", saturation, 0, 100)
    _check_range("lightness", lightness, 0, 100)

    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360, lightness / 100, saturation / 100)
    return _to_channel(r), _to_channel(g), _to_channel(b)


def rgb_to_hsl(red: int, green: int, blue: int) -> tuple[int, int, int]:
    """Convert an RGB color to HSL.

    Components are truncated toward zero, so converting back and forth is
    only stable to within one unit per component.

    Returns:
        Tuple of (hue 0-359, saturation 0-100, lightness 0-100).
    """
    for name, value in (("red", red), ("green", green), ("blue", blue)):
        _check_range(name, value, 0, 255)

    hue, lightness, saturation = colorsys.rgb_to_hls(red / 255, green / 255, blue / 255)
    return int(hue * 360) % 360, int(saturation * 100), int(lightness * 100)

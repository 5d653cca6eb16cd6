"""Test the Magic Blue wire protocol."""
import pytest

from custom_components.magic_blue_bulb.const import (
    GENERATION_TRIONES,
    GENERATION_V6,
    GENERATION_V9,
)
from custom_components.magic_blue_bulb.protocol import (
    GENERATIONS,
    encode_color,
    encode_power,
    get_generation,
)


def test_encode_power_on() -> None:
    """Test the power on frame."""
    assert encode_power(True) == bytes([0xCC, 0x23, 0x33])


def test_encode_power_off() -> None:
    """Test the power off frame."""
    assert encode_power(False) == bytes([0xCC, 0x24, 0x33])


class TestEncodeColor:
    """Tests for encode_color."""

    def test_default_generation_frame(self) -> None:
        """Test the 11-byte frame used by v6 bulbs."""
        frame = encode_color(255, 0, 0)

        assert frame == bytes.fromhex("56ff000000f0aa3b070001")
        assert len(frame) == 11

    def test_channels_in_order(self) -> None:
        """Test channels land at bytes 1-3."""
        frame = encode_color(0x12, 0x34, 0x56)

        assert frame[0] == 0x56
        assert frame[1:4] == bytes([0x12, 0x34, 0x56])

    def test_v9_uses_long_suffix(self) -> None:
        """Test v9 bulbs share the v6 frame layout."""
        frame = encode_color(1, 2, 3, get_generation(GENERATION_V9))

        assert frame == bytes.fromhex("56010203" "00f0aa3b070001")

    def test_triones_uses_short_suffix(self) -> None:
        """Test Triones bulbs use a 7-byte frame."""
        frame = encode_color(0, 255, 0, get_generation(GENERATION_TRIONES))

        assert frame == bytes.fromhex("5600ff0000f0aa")
        assert len(frame) == 7

    @pytest.mark.parametrize(
        "rgb",
        [(256, 0, 0), (0, -1, 0), (0, 0, 1.5), (True, 0, 0), (0, "1", 0)],
    )
    def test_invalid_channel_raises(self, rgb) -> None:
        """Test channels must be integers 0-255."""
        with pytest.raises(ValueError):
            encode_color(*rgb)


class TestGenerations:
    """Tests for protocol generation lookup."""

    def test_default_is_v6(self) -> None:
        """Test None selects the v6 generation."""
        generation = get_generation(None)

        assert generation.key == GENERATION_V6
        assert generation.handle == 0x0C
        assert generation.color_frame_length == 11

    def test_handles(self) -> None:
        """Test the default write handle of each generation."""
        assert GENERATIONS[GENERATION_V6].handle == 0x0C
        assert GENERATIONS[GENERATION_V9].handle == 0x0B
        assert GENERATIONS[GENERATION_TRIONES].handle == 0x07

    def test_unknown_generation_raises(self) -> None:
        """Test unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown protocol generation"):
            get_generation("v12")

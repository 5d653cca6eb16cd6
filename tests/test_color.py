"""Test Magic Blue HSL/RGB conversion."""
import pytest

from custom_components.magic_blue_bulb.color import hsl_to_rgb, rgb_to_hsl


class TestHslToRgb:
    """Tests for hsl_to_rgb."""

    @pytest.mark.parametrize(
        ("hsl", "rgb"),
        [
            ((0, 100, 50), (255, 0, 0)),
            ((60, 100, 50), (255, 255, 0)),
            ((120, 100, 50), (0, 255, 0)),
            ((180, 100, 50), (0, 255, 255)),
            ((240, 100, 50), (0, 0, 255)),
            ((300, 100, 50), (255, 0, 255)),
        ],
    )
    def test_primary_and_secondary_colors(self, hsl, rgb) -> None:
        """Test fully saturated colors at half lightness."""
        assert hsl_to_rgb(*hsl) == rgb

    def test_white(self) -> None:
        """Test full lightness is white regardless of hue."""
        assert hsl_to_rgb(0, 0, 100) == (255, 255, 255)
        assert hsl_to_rgb(200, 100, 100) == (255, 255, 255)

    def test_black(self) -> None:
        """Test zero lightness is black."""
        assert hsl_to_rgb(0, 0, 0) == (0, 0, 0)
        assert hsl_to_rgb(120, 100, 0) == (0, 0, 0)

    def test_gray_rounds_half_up(self) -> None:
        """Test 127.5 rounds up to 128."""
        assert hsl_to_rgb(0, 0, 50) == (128, 128, 128)

    def test_hue_360_wraps_to_red(self) -> None:
        """Test hue 360 is the same as hue 0."""
        assert hsl_to_rgb(360, 100, 50) == hsl_to_rgb(0, 100, 50)

    def test_pastel(self) -> None:
        """Test a light, partially saturated color."""
        assert hsl_to_rgb(0, 100, 75) == (255, 128, 128)

    @pytest.mark.parametrize(
        "hsl",
        [(-1, 50, 50), (361, 50, 50), (0, -1, 50), (0, 101, 50), (0, 50, -1), (0, 50, 101)],
    )
    def test_out_of_range_raises(self, hsl) -> None:
        """Test out of range components are rejected."""
        with pytest.raises(ValueError):
            hsl_to_rgb(*hsl)


class TestRgbToHsl:
    """Tests for rgb_to_hsl."""

    @pytest.mark.parametrize(
        ("rgb", "hsl"),
        [
            ((255, 0, 0), (0, 100, 50)),
            ((0, 255, 0), (120, 100, 50)),
            ((0, 0, 255), (240, 100, 50)),
            ((255, 255, 255), (0, 0, 100)),
            ((0, 0, 0), (0, 0, 0)),
        ],
    )
    def test_known_colors(self, rgb, hsl) -> None:
        """Test conversion of well known colors."""
        assert rgb_to_hsl(*rgb) == hsl

    def test_components_are_truncated(self) -> None:
        """Test fractional results are truncated, not rounded."""
        # Lightness of mid gray is 50.2%
        assert rgb_to_hsl(128, 128, 128) == (0, 0, 50)

    def test_out_of_range_raises(self) -> None:
        """Test channels outside 0-255 are rejected."""
        with pytest.raises(ValueError):
            rgb_to_hsl(256, 0, 0)
        with pytest.raises(ValueError):
            rgb_to_hsl(0, -1, 0)

    def test_round_trip_within_one_unit(self) -> None:
        """Test converting saturated hues back and forth drifts by at most one."""
        for hue in range(360):
            back_hue, back_sat, back_light = rgb_to_hsl(*hsl_to_rgb(hue, 100, 50))
            drift = abs(back_hue - hue)
            assert min(drift, 360 - drift) <= 1, hue
            assert abs(back_sat - 100) <= 1
            assert abs(back_light - 50) <= 1

"""Unit tests for color conversion and interpolation."""

import pytest

from world_map import colors
from world_map.colors import ColorFormatError


class TestConversions:
    """Hex, RGB and HSL conversions."""

    def test_hex_to_rgb(self):
        assert colors.hex_to_rgb("#0a0B0f") == (10, 11, 15)
        assert colors.hex_to_rgb("0a0b0f") == (10, 11, 15)

    def test_hex_to_rgb_rejects_other_formats(self):
        assert colors.hex_to_rgb("#abc") is None
        assert colors.hex_to_rgb("rgb(1, 2, 3)") is None
        assert colors.hex_to_rgb("not a color") is None

    def test_rgb_to_hex_rounds_and_clamps(self):
        assert colors.rgb_to_hex(300, -5, 127.6) == "#ff0080"

    def test_parse_rgb_accepts_lenient_formats(self):
        assert colors.parse_rgb("#fff") == (255, 255, 255)
        assert colors.parse_rgb("rgb(12, 34, 56)") == (12, 34, 56)

    def test_parse_rgb_raises_on_garbage(self):
        with pytest.raises(ColorFormatError):
            colors.parse_rgb("chartreuse-ish")

    def test_hsl_of_pure_colors(self):
        assert colors.rgb_to_hsl(255, 0, 0) == pytest.approx((0.0, 100.0, 50.0))
        assert colors.rgb_to_hsl(0, 0, 255) == pytest.approx((240.0, 100.0, 50.0))
        assert colors.rgb_to_hsl(128, 128, 128)[1] == 0.0

    def test_hsl_round_trip(self):
        for hex_color in ("#ff0000", "#00ff00", "#0000ff", "#ffffff", "#000000", "#808080"):
            assert colors.hsl_to_hex(*colors.hex_to_hsl(hex_color)) == hex_color


class TestInterpolation:
    """HSL interpolation with the RGB fallback."""

    @pytest.mark.parametrize("color", ["#ff0000", "#00ff00", "#ffffff", "#000000"])
    def test_identity(self, color):
        for factor in (0.0, 0.3, 0.5, 1.0):
            assert colors.interpolate(color, color, factor) == color

    def test_endpoints(self):
        assert colors.interpolate("#ff0000", "#0000ff", 0.0) == "#ff0000"
        assert colors.interpolate("#ff0000", "#0000ff", 1.0) == "#0000ff"

    def test_output_is_lowercase(self):
        assert colors.interpolate("#FF0000", "#FF0000", 0.5) == "#ff0000"

    def test_factor_is_clamped(self):
        assert colors.interpolate("#ff0000", "#0000ff", 2.0) == "#0000ff"
        assert colors.interpolate("#ff0000", "#0000ff", -1.0) == "#ff0000"

    def test_hue_takes_the_short_way_round(self):
        assert colors.interpolate_hue(10, 350, 0.5) == pytest.approx(0.0)
        assert colors.interpolate_hue(350, 10, 0.5) == pytest.approx(0.0)
        assert colors.interpolate_hue(0, 90, 0.5) == pytest.approx(45.0)

    def test_falls_back_to_rgb(self):
        assert colors.interpolate("rgb(0, 0, 0)", "#ffffff", 0.5) == "#808080"
        assert colors.interpolate("#000", "#fff", 1.0) == "#ffffff"

    def test_unreadable_color_raises(self):
        with pytest.raises(ColorFormatError):
            colors.interpolate("nope", "#ffffff", 0.5)

    def test_color_format_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            colors.interpolate("#ffffff", "also nope", 0.5)

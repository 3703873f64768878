# world_map/colors.py

"""
================================================================================
SHARED COLOR UTILITIES
================================================================================
This module contains the color conversion and interpolation functions used
by the sky color engine and the header transition.

It is designed to be a pure, stateless utility with no dependencies on Pygame.

Conventions:
---------------
- RGB components are integers in [0, 255].
- HSL is (hue in degrees [0, 360), saturation %, lightness %) as floats.
- Hex output is always '#rrggbb', zero-padded and lowercase.
================================================================================
"""
import re

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)
_SHORT_HEX_PATTERN = re.compile(r"^#?([a-f\d])([a-f\d])([a-f\d])$", re.IGNORECASE)
_RGB_FUNC_PATTERN = re.compile(
    r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$", re.IGNORECASE
)


class ColorFormatError(ValueError):
    """Raised when a color string cannot be read in any supported format."""


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


# --- Hex <-> RGB ---
def hex_to_rgb(hex_color: str) -> tuple | None:
    """Parses '#rrggbb' (the '#' is optional). Returns None on mismatch."""
    match = _HEX_PATTERN.match(hex_color.strip()) if isinstance(hex_color, str) else None
    if not match:
        return None
    return tuple(int(group, 16) for group in match.groups())


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Formats an RGB triple as '#rrggbb', rounding and clamping each channel."""
    return "#{:02x}{:02x}{:02x}".format(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def parse_rgb(color: str) -> tuple:
    """
    Lenient RGB parser used by the interpolation fallback.

    Accepts '#rrggbb', '#rgb' and 'rgb(r, g, b)'. Raises ColorFormatError
    for anything else.
    """
    rgb = hex_to_rgb(color)
    if rgb is not None:
        return rgb
    if isinstance(color, str):
        text = color.strip()
        match = _SHORT_HEX_PATTERN.match(text)
        if match:
            return tuple(int(group * 2, 16) for group in match.groups())
        match = _RGB_FUNC_PATTERN.match(text)
        if match:
            channels = tuple(int(group) for group in match.groups())
            if all(0 <= c <= 255 for c in channels):
                return channels
    raise ColorFormatError(f"Unrecognised color value: {color!r}")


# --- RGB <-> HSL ---
def rgb_to_hsl(r: int, g: int, b: int) -> tuple:
    """Converts 8-bit RGB to (h degrees, s %, l %)."""
    r, g, b = r / 255, g / 255, b / 255
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    lightness = (max_c + min_c) / 2

    if max_c == min_c:
        return 0.0, 0.0, lightness * 100  # achromatic

    d = max_c - min_c
    saturation = d / (2 - max_c - min_c) if lightness > 0.5 else d / (max_c + min_c)
    if max_c == r:
        hue = (g - b) / d + (6 if g < b else 0)
    elif max_c == g:
        hue = (b - r) / d + 2
    else:
        hue = (r - g) / d + 4
    return hue / 6 * 360, saturation * 100, lightness * 100


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple:
    """Converts (h degrees, s %, l %) to an 8-bit RGB triple."""
    h = (h % 360) / 360
    s /= 100
    l /= 100

    if s == 0:
        r = g = b = l  # achromatic
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)
    return _clamp_channel(r * 255), _clamp_channel(g * 255), _clamp_channel(b * 255)


# --- Hex <-> HSL ---
def hex_to_hsl(hex_color: str) -> tuple | None:
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    return rgb_to_hsl(*rgb)


def hsl_to_hex(h: float, s: float, l: float) -> str:
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


# --- Interpolation ---
def interpolate_hue(h1: float, h2: float, factor: float) -> float:
    """Interpolates two hues along the shorter arc of the color wheel."""
    if abs(h2 - h1) > 180:
        if h2 > h1:
            h1 += 360
        else:
            h2 += 360
    return (h1 + (h2 - h1) * factor) % 360


def interpolate_rgb(color1: str, color2: str, factor: float) -> str:
    """Linearly interpolates two colors in RGB space."""
    factor = min(1.0, max(0.0, factor))
    rgb1 = parse_rgb(color1)
    rgb2 = parse_rgb(color2)
    return rgb_to_hex(*(c1 + (c2 - c1) * factor for c1, c2 in zip(rgb1, rgb2)))


def interpolate(color1: str, color2: str, factor: float) -> str:
    """
    Interpolates between two colors in HSL space for smoother transitions.

    Falls back to RGB interpolation when either color is not a plain
    '#rrggbb' value. Raises ColorFormatError if neither parse succeeds.
    """
    factor = min(1.0, max(0.0, factor))
    hsl1 = hex_to_hsl(color1)
    hsl2 = hex_to_hsl(color2)

    if hsl1 is None or hsl2 is None:
        return interpolate_rgb(color1, color2, factor)

    h = interpolate_hue(hsl1[0], hsl2[0], factor)
    s = hsl1[1] + (hsl2[1] - hsl1[1]) * factor
    l = hsl1[2] + (hsl2[2] - hsl1[2]) * factor
    return hsl_to_hex(h, s, l)

"""
Color helpers for deriving gradient stops, strokes and shadow tints
from the two palette colors.
"""
import math
from typing import Sequence, Tuple, Union

RGBA = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int]]


def _clamp_channel(value: float) -> int:
    return min(255, max(0, int(value)))


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Parse '#RRGGBB' (leading '#' optional)."""
    value = hex_color.strip().lstrip("#")
    if len(value) not in (6, 8):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def adjust_brightness(hex_color: str, factor: float) -> str:
    """
    Scale each channel by factor, clamping to [0, 255].
    Factors below 1 darken, above 1 brighten.
    """
    r, g, b = hex_to_rgb(hex_color)
    r = _clamp_channel(math.floor(r * factor))
    g = _clamp_channel(math.floor(g * factor))
    b = _clamp_channel(math.floor(b * factor))
    return rgb_to_hex(r, g, b)


def to_rgba(color: ColorLike, alpha: float | None = None) -> RGBA:
    """
    Normalize '#RRGGBB', '#RRGGBBAA', RGB or RGBA tuples to an RGBA tuple.
    alpha (0..1) overrides the color's own alpha when given.
    """
    if isinstance(color, str):
        value = color.strip().lstrip("#")
        r, g, b = hex_to_rgb(value)
        a = int(value[6:8], 16) if len(value) == 8 else 255
    else:
        channels = tuple(int(c) for c in color)
        if len(channels) == 3:
            r, g, b = channels
            a = 255
        elif len(channels) == 4:
            r, g, b, a = channels
        else:
            raise ValueError(f"Invalid color tuple: {color!r}")
    if alpha is not None:
        a = _clamp_channel(round(alpha * 255))
    return _clamp_channel(r), _clamp_channel(g), _clamp_channel(b), _clamp_channel(a)


TRANSPARENT: RGBA = (0, 0, 0, 0)

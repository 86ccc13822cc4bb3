"""
Reusable vector outlines for poster elements.

Builders return a new Path and never paint; the caller decides whether
to fill, stroke or clip with it.
"""
import math

from services.canvas import Path, Surface
from services.colors import ColorLike


def rounded_rect(x: float, y: float, width: float, height: float, radius: float) -> Path:
    """Rectangle with four 90° corner arcs; radius is clamped to half the shorter side."""
    r = max(0.0, min(radius, width / 2, height / 2))
    path = Path()
    path.move_to(x + r, y)
    path.line_to(x + width - r, y)
    path.arc(x + width - r, y + r, r, -math.pi / 2, 0)
    path.line_to(x + width, y + height - r)
    path.arc(x + width - r, y + height - r, r, 0, math.pi / 2)
    path.line_to(x + r, y + height)
    path.arc(x + r, y + height - r, r, math.pi / 2, math.pi)
    path.line_to(x, y + r)
    path.arc(x + r, y + r, r, math.pi, 3 * math.pi / 2)
    return path.close_path()


def angular_rect(x: float, y: float, width: float, height: float, corner_cut: float) -> Path:
    """Octagon made by cutting corner_cut off each corner of the rectangle."""
    path = Path()
    path.move_to(x + corner_cut, y)
    path.line_to(x + width - corner_cut, y)
    path.line_to(x + width, y + corner_cut)
    path.line_to(x + width, y + height - corner_cut)
    path.line_to(x + width - corner_cut, y + height)
    path.line_to(x + corner_cut, y + height)
    path.line_to(x, y + height - corner_cut)
    path.line_to(x, y + corner_cut)
    return path.close_path()


def hexagon(cx: float, cy: float, size: float) -> Path:
    path = Path()
    for i in range(6):
        angle = (math.pi / 3) * i
        hx = cx + size * math.cos(angle)
        hy = cy + size * math.sin(angle)
        if i == 0:
            path.move_to(hx, hy)
        else:
            path.line_to(hx, hy)
    return path.close_path()


def draw_hexagon(surface: Surface, cx: float, cy: float, size: float, fill: bool = False) -> None:
    """Fill or stroke a hexagon with the current state's style."""
    path = hexagon(cx, cy, size)
    if fill:
        surface.fill(path)
    else:
        surface.stroke(path)


def heart(x: float, y: float, size: float) -> Path:
    """Heart whose top notch sits at (x, y + size/4) and tip at (x, y + size)."""
    path = Path()
    path.move_to(x, y + size / 4)
    # left lobe
    path.bezier_curve_to(x, y, x - size / 2, y, x - size / 2, y + size / 4)
    path.bezier_curve_to(x - size / 2, y + size / 2, x, y + size * 3 / 4, x, y + size)
    # right lobe
    path.bezier_curve_to(x, y + size * 3 / 4, x + size / 2, y + size / 2, x + size / 2, y + size / 4)
    path.bezier_curve_to(x + size / 2, y, x, y, x, y + size / 4)
    return path.close_path()


def draw_heart(surface: Surface, x: float, y: float, size: float, color: ColorLike) -> None:
    """Filled heart with a small stroked highlight ring on the left lobe."""
    with surface.scope() as state:
        state.fill_style = color
        surface.fill(heart(x, y, size))

        state.stroke_style = (255, 255, 255, 128)
        state.line_width = size / 15
        highlight = Path().arc(x - size / 4, y + size / 3, size / 6, 0, math.pi * 2)
        surface.stroke(highlight)

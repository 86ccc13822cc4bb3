import math
import random

import pytest

from services.background import draw_hexagon_pattern
from services.canvas import Surface
from services.overlays import draw_circuit_lines
from services.paths import angular_rect, draw_heart, heart, hexagon, rounded_rect


def _bounds(path):
    pts = path.points()
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return min(xs), min(ys), max(xs), max(ys)


def test_rounded_rect_stays_inside_its_box():
    x0, y0, x1, y1 = _bounds(rounded_rect(10, 20, 100, 60, 15))
    assert x0 >= 10 - 1e-6 and y0 >= 20 - 1e-6
    assert x1 <= 110 + 1e-6 and y1 <= 80 + 1e-6


def test_rounded_rect_clamps_oversized_radius():
    # radius far larger than the box degenerates to a stadium, never overshoots
    path = rounded_rect(0, 0, 10, 40, 100)
    x0, y0, x1, y1 = _bounds(path)
    assert x0 >= -1e-6 and x1 <= 10 + 1e-6
    assert y0 >= -1e-6 and y1 <= 40 + 1e-6
    assert path.subpaths[-1].closed


def test_angular_rect_has_eight_vertices():
    path = angular_rect(0, 0, 100, 50, 10)
    pts = path.points()
    assert len(pts) == 8
    assert pts[0] == (10.0, 0.0)
    assert (100.0, 10.0) in pts
    assert (0.0, 40.0) in pts
    assert path.subpaths[0].closed


def test_hexagon_vertices_on_circle():
    pts = hexagon(50, 50, 20).points()
    assert len(pts) == 6
    for x, y in pts:
        assert math.hypot(x - 50, y - 50) == pytest.approx(20)
    assert pts[0] == pytest.approx((70, 50))


def test_heart_is_deterministic_and_bounded():
    first = heart(100, 40, 80).points()
    second = heart(100, 40, 80).points()
    assert first == second
    assert first[0] == (100.0, 60.0)
    assert any(p == pytest.approx((100, 120)) for p in first)
    xs = [p[0] for p in first]
    ys = [p[1] for p in first]
    assert min(xs) >= 60 - 1e-6 and max(xs) <= 140 + 1e-6
    assert min(ys) >= 40 - 1e-6 and max(ys) <= 120 + 1e-6


def test_draw_heart_paints_and_restores_state():
    surface = Surface.create(60, 60)
    draw_heart(surface, 30, 10, 40, "#FF4A7A")
    assert surface.depth == 0
    assert surface.state.line_width == 1.0
    # just above the tip, well inside the shape
    assert surface.to_image().getpixel((30, 40))[3] == 255
    assert surface.to_image().getpixel((2, 2))[3] == 0


def test_rect_builders_repeat_vertices_regardless_of_noise_layers():
    rounded_args = (12.5, 30, 200, 120, 24)
    angular_args = (40, 10, 310.4, 86.4, 17.28)
    surface = Surface.create(160, 90)

    first_rounded = rounded_rect(*rounded_args).points()
    first_angular = angular_rect(*angular_args).points()
    draw_hexagon_pattern(surface, "#FFB6C1", random.Random(1))
    second_rounded = rounded_rect(*rounded_args).points()
    draw_circuit_lines(surface, "#FF4A7A", random.Random(2))
    second_angular = angular_rect(*angular_args).points()

    assert first_rounded == second_rounded
    assert first_angular == second_angular
    assert rounded_rect(*rounded_args).points() == rounded_rect(*rounded_args).points()
    assert angular_rect(*angular_args).points() == angular_rect(*angular_args).points()

"""
Background layers: base gradient, hexagon texture, tech grid and
scattered watermark text.

Each layer runs inside its own surface scope so alpha, transform and
shadow settings never outlive the call.
"""
import math
import random

from domain.models import ColorOption
from services.canvas import FontSpec, LinearGradient, Path, Surface
from services.colors import adjust_brightness
from services.paths import draw_hexagon

HEX_SIZE_FRAC = 0.03
GRID_SPACING_FRAC = 0.05
TECH_SHAPE_COUNT = 20
PATTERN_TEXT_COUNT = 60
PATTERN_TOKENS = (
    "sp1",
    "prover",
    "stage 2",
    "op succinct",
    "zk",
    "SNARK",
    "recursion",
    "verify",
    "polynomial",
    "commit",
    "0x",
    "circuit",
    "trusted setup",
)
PATTERN_ANGLES = (-math.pi / 12, 0.0, math.pi / 12, math.pi / 18, -math.pi / 18)


def draw_base_gradient(surface: Surface, bg_color: str) -> None:
    gradient = LinearGradient(0, 0, surface.width, surface.height)
    gradient.add_color_stop(0, adjust_brightness(bg_color, 0.4))
    gradient.add_color_stop(0.7, adjust_brightness(bg_color, 0.8))
    gradient.add_color_stop(1, bg_color)
    with surface.scope() as state:
        state.fill_style = gradient
        surface.fill_rect(0, 0, surface.width, surface.height)


def draw_hexagon_pattern(surface: Surface, base_color: str, rng: random.Random) -> None:
    """Sparse hex tiling: ~30% outlined cells, ~20% faintly filled, the rest skipped."""
    width, height = surface.width, surface.height
    hex_size = width * HEX_SIZE_FRAC
    cols = math.ceil(width / (hex_size * 1.5)) + 2
    rows = math.ceil(height / (hex_size * 1.732)) + 2
    outline_color = adjust_brightness(base_color, 1.4)
    fill_color = adjust_brightness(base_color, 1.2)

    with surface.scope() as state:
        state.line_width = 1
        # start at -1 so partially visible edge cells are covered
        for r in range(-1, rows):
            for c in range(-1, cols):
                x = c * hex_size * 1.5
                y = r * hex_size * 1.732 + (c % 2) * (hex_size * 0.866)
                roll = rng.random()
                if roll < 0.3:
                    state.global_alpha = 0.03 + rng.random() * 0.05
                    state.stroke_style = outline_color
                    draw_hexagon(surface, x, y, hex_size, fill=False)
                elif roll < 0.5:
                    state.global_alpha = 0.02 + rng.random() * 0.03
                    state.fill_style = fill_color
                    draw_hexagon(surface, x, y, hex_size, fill=True)


def draw_tech_grid(surface: Surface, accent_color: str, rng: random.Random) -> None:
    width, height = surface.width, surface.height
    grid_size = width * GRID_SPACING_FRAC

    with surface.scope() as state:
        state.global_alpha = 0.08
        state.stroke_style = adjust_brightness(accent_color, 0.7)
        state.line_width = 0.5
        x = 0.0
        while x < width:
            surface.stroke(Path().move_to(x, 0).line_to(x, height))
            x += grid_size
        y = 0.0
        while y < height:
            surface.stroke(Path().move_to(0, y).line_to(width, y))
            y += grid_size

        state.global_alpha = 0.15
        state.line_width = 1.5
        bright = adjust_brightness(accent_color, 1.3)
        for _ in range(TECH_SHAPE_COUNT):
            shape_x = rng.random() * width
            shape_y = rng.random() * height
            shape_size = rng.random() * (grid_size / 2) + grid_size / 4
            state.stroke_style = accent_color if rng.random() > 0.5 else bright

            shape = Path()
            if rng.random() > 0.66:
                shape.move_to(shape_x, shape_y - shape_size / 2)
                shape.line_to(shape_x + shape_size / 2, shape_y + shape_size / 2)
                shape.line_to(shape_x - shape_size / 2, shape_y + shape_size / 2)
                shape.close_path()
            elif rng.random() > 0.33:
                start = rng.random() * math.pi * 2
                end = start + math.pi * (0.5 + rng.random() * 1.2)
                shape.arc(shape_x, shape_y, shape_size / 2, start, end)
            surface.stroke(shape)


def draw_patterned_text(surface: Surface, accent_color: str, rng: random.Random) -> None:
    """Security-paper style texture of short rotated tokens."""
    width, height = surface.width, surface.height
    base_font_size = max(10.0, min(15.0, width * 0.01))

    with surface.scope() as state:
        state.text_align = "center"
        state.text_baseline = "middle"
        for _ in range(PATTERN_TEXT_COUNT):
            token = PATTERN_TOKENS[int(rng.random() * len(PATTERN_TOKENS))]
            x = rng.random() * width
            y = rng.random() * height
            angle = PATTERN_ANGLES[int(rng.random() * len(PATTERN_ANGLES))]
            opacity = rng.random() * 0.09 + 0.07
            font_size = base_font_size + (rng.random() - 0.5) * 3
            brightness = 0.55 + rng.random() * 0.3

            with surface.scope() as token_state:
                surface.translate(x, y)
                surface.rotate(angle)
                token_state.font = FontSpec(size=font_size, monospace=True)
                token_state.fill_style = adjust_brightness(accent_color, brightness)
                token_state.global_alpha = opacity
                surface.fill_text(token, 0, 0)


def draw_background(surface: Surface, color: ColorOption, rng: random.Random) -> None:
    draw_base_gradient(surface, color.bg_color)
    draw_hexagon_pattern(surface, color.bg_color, rng)
    draw_tech_grid(surface, color.heart_color, rng)
    draw_patterned_text(surface, color.heart_color, rng)

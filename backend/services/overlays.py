"""
Decorative overlays drawn on top of everything else: glowing circuit
traces, soft particles and the generator watermark.
"""
import math
import random

from domain.models import ColorOption
from services.canvas import FontSpec, Path, RadialGradient, Surface
from services.colors import adjust_brightness

CIRCUIT_SPACING_PX = 80
CIRCUIT_SEGMENT_DIVISOR = 12
PARTICLE_COUNT = 35
WATERMARK_TEXT = "Team Repping Generator"


def draw_circuit_lines(surface: Surface, heart_color: str, rng: random.Random) -> None:
    """Random-walk traces with occasional node dots, stroked with a glow."""
    width, height = surface.width, surface.height
    line_count = width // CIRCUIT_SPACING_PX
    segment_length = width / CIRCUIT_SEGMENT_DIVISOR
    stroke_color = adjust_brightness(heart_color, 1.2)

    with surface.scope() as state:
        state.line_width = 1.5
        state.global_alpha = 0.3
        for _ in range(line_count):
            x = rng.random() * width
            y = rng.random() * height
            trace = Path().move_to(x, y)
            steps = math.ceil(rng.random() * 6 + 4)
            for _ in range(steps):
                angle = rng.random() * math.pi * 2
                length = rng.random() * segment_length + segment_length / 2
                x += math.cos(angle) * length
                y += math.sin(angle) * length
                trace.line_to(x, y)
                if rng.random() > 0.65:
                    with surface.scope() as dot_state:
                        dot_state.fill_style = heart_color
                        dot_state.global_alpha = 0.85 + rng.random() * 0.15
                        radius = rng.random() * 3 + 2.5
                        surface.fill(Path().arc(x, y, radius, 0, math.pi * 2))

            with surface.scope() as glow_state:
                glow_state.set_shadow(heart_color, blur=10 + rng.random() * 10)
                glow_state.stroke_style = stroke_color
                surface.stroke(trace)


def draw_glowing_particles(
    surface: Surface, heart_color: str, rng: random.Random, count: int = PARTICLE_COUNT
) -> None:
    width, height = surface.width, surface.height
    core_color = adjust_brightness(heart_color, 1.1)
    with surface.scope() as state:
        for _ in range(count):
            x = rng.random() * width
            y = rng.random() * height
            size = rng.random() * 3.5 + 2
            gradient = RadialGradient(x, y, 0, size * 3)
            gradient.add_color_stop(0, core_color)
            gradient.add_color_stop(1, (255, 255, 255, 0))
            state.global_alpha = rng.random() * 0.4 + 0.4
            state.fill_style = gradient
            surface.fill(Path().arc(x, y, size * 3, 0, math.pi * 2))


def draw_watermark(surface: Surface) -> None:
    with surface.scope() as state:
        state.global_alpha = 0.1
        state.fill_style = "#FFFFFF"
        state.font = FontSpec(size=int(surface.width * 0.02))
        state.text_align = "right"
        state.text_baseline = "bottom"
        surface.fill_text(WATERMARK_TEXT, surface.width - 15, surface.height - 10)


def draw_overlays(surface: Surface, color: ColorOption, rng: random.Random) -> None:
    draw_circuit_lines(surface, color.heart_color, rng)
    draw_glowing_particles(surface, color.heart_color, rng)
    draw_watermark(surface)

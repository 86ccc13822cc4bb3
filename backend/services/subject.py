"""
Subject photo layer: soft drop shadow, gradient frame and the photo
clipped to a rounded rectangle.
"""
from PIL import Image

from domain.models import ColorOption, LayoutRect
from services.canvas import LinearGradient, Surface
from services.colors import adjust_brightness, to_rgba
from services.paths import rounded_rect
from services.poster_layout import subject_border_width, subject_corner_radius

SHADOW_BLUR = 15
SHADOW_ALPHA = 0x33 / 255
HIGHLIGHT_STROKE_FRAC = 0.15


def draw_subject_shadow(surface: Surface, rect: LayoutRect, color: ColorOption) -> None:
    radius = subject_corner_radius(rect)
    with surface.scope() as state:
        state.set_shadow(
            to_rgba(adjust_brightness(color.heart_color, 0.2), alpha=SHADOW_ALPHA),
            blur=SHADOW_BLUR,
            offset_y=SHADOW_BLUR / 2,
        )
        surface.cast_shadow(rounded_rect(rect.x, rect.y, rect.width, rect.height, radius))


def draw_subject_frame(surface: Surface, rect: LayoutRect, color: ColorOption) -> None:
    border = subject_border_width(rect)
    frame = LayoutRect(
        x=rect.x - border,
        y=rect.y - border,
        width=rect.width + border * 2,
        height=rect.height + border * 2,
    )
    frame_radius = subject_corner_radius(rect) + border

    gradient = LinearGradient(frame.x, frame.y, frame.right, frame.bottom)
    gradient.add_color_stop(0, adjust_brightness(color.heart_color, 0.7))
    gradient.add_color_stop(0.5, color.heart_color)
    gradient.add_color_stop(1, adjust_brightness(color.heart_color, 1.3))

    with surface.scope() as state:
        state.fill_style = gradient
        surface.fill(rounded_rect(frame.x, frame.y, frame.width, frame.height, frame_radius))

        line_width = border * HIGHLIGHT_STROKE_FRAC
        state.stroke_style = adjust_brightness(color.heart_color, 1.5)
        state.line_width = line_width
        inner_radius = frame_radius - line_width / 2
        surface.stroke(
            rounded_rect(
                frame.x + line_width / 2,
                frame.y + line_width / 2,
                frame.width - line_width,
                frame.height - line_width,
                inner_radius if inner_radius > 0 else 2,
            )
        )


def draw_subject_photo(surface: Surface, image: Image.Image, rect: LayoutRect) -> None:
    with surface.scope():
        surface.clip(rounded_rect(rect.x, rect.y, rect.width, rect.height, subject_corner_radius(rect)))
        surface.draw_image(image, rect.x, rect.y, rect.width, rect.height)


def draw_subject(surface: Surface, image: Image.Image, rect: LayoutRect, color: ColorOption) -> None:
    draw_subject_shadow(surface, rect, color)
    draw_subject_frame(surface, rect, color)
    draw_subject_photo(surface, image, rect)

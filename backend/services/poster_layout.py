"""
Poster layout solver.

Computes the two-column geometry and every element rectangle from the
canvas size and fixed proportional constants. Pure and deterministic.
"""
import math
from typing import Tuple

from domain.models import LayoutRect, PosterLayout

CANVAS_WIDTH = 1280
CANVAS_HEIGHT = CANVAS_WIDTH * 9 // 16

PADDING_FRAC = 0.04
ACCENT_SECTION_FRAC = 0.52

SUBJECT_MAX_HEIGHT_FRAC = 0.65
SUBJECT_MAX_WIDTH_FRAC = 0.9
SUBJECT_BORDER_FRAC = 0.02
SUBJECT_BORDER_MIN_PX = 8.0
SUBJECT_CORNER_FRAC = 0.5

ACCENT_WIDTH_FRAC = 0.95
ACCENT_MAX_HEIGHT_FRAC = 0.85

USERNAME_FONT_FRAC = 0.09
USERNAME_GAP_PADDINGS = 0.8

TAG_HEIGHT_FRAC = 0.12
TAG_WIDTH_FRAC = 0.8
TAG_GAP_PADDINGS = 0.4
BOTTOM_MARGIN_PADDINGS = 0.25


def compute_poster_layout(width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT) -> PosterLayout:
    """
    Split the canvas into subject and accent columns.

    subject width + accent width + 2.5 * padding == width
    """
    padding = width * PADDING_FRAC
    accent_width = width * ACCENT_SECTION_FRAC
    subject_width = width - accent_width - padding * 2.5
    subject_x = padding
    accent_x = subject_width + padding * 2
    return PosterLayout(
        canvas_width=width,
        canvas_height=height,
        padding=padding,
        subject_section=LayoutRect(x=subject_x, y=0, width=subject_width, height=height),
        accent_section=LayoutRect(x=accent_x, y=0, width=accent_width, height=height),
    )


def username_font_size(layout: PosterLayout) -> int:
    return int(math.floor(layout.subject_section.width * USERNAME_FONT_FRAC))


def tag_size(layout: PosterLayout) -> Tuple[float, float]:
    return layout.subject_section.width * TAG_WIDTH_FRAC, layout.canvas_height * TAG_HEIGHT_FRAC


def subject_max_height(layout: PosterLayout) -> float:
    """
    Nominal cap is 65% of the canvas height; it tightens when the username
    and badge stacked below the photo would otherwise run off the canvas.
    """
    nominal = layout.canvas_height * SUBJECT_MAX_HEIGHT_FRAC
    _, tag_height = tag_size(layout)
    below = (
        layout.padding * USERNAME_GAP_PADDINGS
        + username_font_size(layout)
        + layout.padding * TAG_GAP_PADDINGS
        + tag_height
        + layout.padding * BOTTOM_MARGIN_PADDINGS
    )
    available = layout.canvas_height - subject_top(layout) - below
    return max(1.0, min(nominal, available))


def subject_top(layout: PosterLayout) -> float:
    return layout.padding * 2


def fit_subject(image_width: int, image_height: int, layout: PosterLayout) -> LayoutRect:
    """
    Fit the subject photo inside the subject column, preserving aspect ratio.
    Height is clamped first, then width; images are never upscaled.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Subject image has no pixels")
    max_height = subject_max_height(layout)
    max_width = layout.subject_section.width * SUBJECT_MAX_WIDTH_FRAC
    aspect = image_width / image_height

    draw_width = float(image_width)
    draw_height = float(image_height)
    if draw_height > max_height:
        draw_height = max_height
        draw_width = draw_height * aspect
    if draw_width > max_width:
        draw_width = max_width
        draw_height = draw_width / aspect

    section = layout.subject_section
    return LayoutRect(
        x=section.x + (section.width - draw_width) / 2,
        y=subject_top(layout),
        width=draw_width,
        height=draw_height,
    )


def subject_border_width(subject: LayoutRect) -> float:
    return max(SUBJECT_BORDER_MIN_PX, subject.width * SUBJECT_BORDER_FRAC)


def subject_corner_radius(subject: LayoutRect) -> float:
    return subject.width * SUBJECT_CORNER_FRAC


def fit_accent(image_width: int, image_height: int, layout: PosterLayout) -> LayoutRect:
    """
    Scale the accent image to 95% of its column width, capping the height at
    85% of the canvas, and centre it in the column and vertically.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Accent image has no pixels")
    aspect = image_width / image_height
    section = layout.accent_section
    draw_width = section.width * ACCENT_WIDTH_FRAC
    draw_height = draw_width / aspect
    max_height = layout.canvas_height * ACCENT_MAX_HEIGHT_FRAC
    if draw_height > max_height:
        draw_height = max_height
        draw_width = draw_height * aspect
    return LayoutRect(
        x=section.x + (section.width - draw_width) / 2,
        y=(layout.canvas_height - draw_height) / 2,
        width=draw_width,
        height=draw_height,
    )


def username_baseline(layout: PosterLayout, subject: LayoutRect) -> float:
    """Bottom edge of the username text."""
    return subject.bottom + layout.padding * USERNAME_GAP_PADDINGS + username_font_size(layout)


def tag_rect(layout: PosterLayout, baseline_y: float) -> LayoutRect:
    tag_width, tag_height = tag_size(layout)
    section = layout.subject_section
    return LayoutRect(
        x=section.x + (section.width - tag_width) / 2,
        y=baseline_y + layout.padding * TAG_GAP_PADDINGS,
        width=tag_width,
        height=tag_height,
    )

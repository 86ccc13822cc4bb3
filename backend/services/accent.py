"""
Accent image layer.

The accent sprite gets two independent drop shadows (a colored ambient
glow and a dark grounding shadow) plus a faint squashed reflection.
"""
import logging

from domain.models import AbsentAccent, Accent, ColorOption, LayoutRect, PosterLayout, PresentAccent
from services.canvas import Surface
from services.colors import to_rgba
from services.poster_layout import fit_accent

logger = logging.getLogger(__name__)

GLOW_BLUR = 30
GLOW_ALPHA = 0x33 / 255
GROUND_BLUR = 20
GROUND_OFFSET_Y = 15
GROUND_COLOR = (0, 0, 0, 102)
REFLECTION_ALPHA = 0.2
REFLECTION_SCALE_Y = -0.2


def draw_floating_effect(surface: Surface, accent: PresentAccent, rect: LayoutRect, heart_color: str) -> None:
    image = accent.image
    with surface.scope() as state:
        state.set_shadow(to_rgba(heart_color, alpha=GLOW_ALPHA), blur=GLOW_BLUR)
        surface.cast_image_shadow(image, rect.x, rect.y, rect.width, rect.height)
        state.set_shadow(GROUND_COLOR, blur=GROUND_BLUR, offset_y=GROUND_OFFSET_Y)
        surface.cast_image_shadow(image, rect.x, rect.y, rect.width, rect.height)
        state.clear_shadow()
        surface.draw_image(image, rect.x, rect.y, rect.width, rect.height)

    with surface.scope() as state:
        state.global_alpha = REFLECTION_ALPHA
        # flipped vertically and squashed to a fifth of its height
        surface.translate(0, 2 * rect.y + rect.height)
        surface.scale(1, REFLECTION_SCALE_Y)
        surface.draw_image(image, rect.x, rect.y, rect.width, rect.height)


def draw_accent(surface: Surface, accent: Accent, layout: PosterLayout, color: ColorOption) -> None:
    if isinstance(accent, AbsentAccent):
        logger.info("[accent] no accent image for %s; leaving column empty", color.name)
        return
    if not isinstance(accent, PresentAccent):
        raise TypeError(f"Unexpected accent variant: {accent!r}")
    rect = fit_accent(accent.image.width, accent.image.height, layout)
    draw_floating_effect(surface, accent, rect, color.heart_color)

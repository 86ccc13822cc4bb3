"""
Text layers: the username under the subject photo and the angular
"TEAM <COLOR>" badge.
"""
from domain.models import ColorOption, LayoutRect, PosterLayout
from services.canvas import FontSpec, LinearGradient, Surface
from services.colors import adjust_brightness
from services.paths import angular_rect
from services.poster_layout import username_baseline, username_font_size

TAG_CORNER_CUT_FRAC = 0.2
TAG_STROKE_WIDTH = 2
TAG_FONT_FRAC = 0.45


def team_label(color: ColorOption) -> str:
    return f"TEAM {color.name.upper()}"


def draw_username(
    surface: Surface,
    username: str,
    layout: PosterLayout,
    subject: LayoutRect,
    color: ColorOption,
) -> float:
    """Draw the upper-cased username centred under the photo; returns its baseline y."""
    font_size = username_font_size(layout)
    baseline_y = username_baseline(layout, subject)
    with surface.scope() as state:
        state.font = FontSpec(size=font_size, bold=True)
        state.fill_style = color.heart_color
        state.text_align = "center"
        state.text_baseline = "bottom"
        state.set_shadow(
            (0, 0, 0, 102),
            blur=font_size * 0.08,
            offset_x=font_size * 0.04,
            offset_y=font_size * 0.04,
        )
        surface.fill_text(username.upper(), layout.subject_section.center_x, baseline_y)
    return baseline_y


def draw_team_tag(surface: Surface, rect: LayoutRect, color: ColorOption) -> None:
    """Badge body: gradient fill with drop shadow, inset stroke and gloss band."""
    x, y, width, height = rect.x, rect.y, rect.width, rect.height
    corner_cut = height * TAG_CORNER_CUT_FRAC
    heart_color = color.heart_color

    with surface.scope() as state:
        state.set_shadow((0, 0, 0, 153), blur=15, offset_y=8)
        gradient = LinearGradient(x, y, x + width, y)
        gradient.add_color_stop(0, adjust_brightness(heart_color, 0.8))
        gradient.add_color_stop(0.5, heart_color)
        gradient.add_color_stop(1, adjust_brightness(heart_color, 0.8))
        state.fill_style = gradient
        surface.fill(angular_rect(x, y, width, height, corner_cut))

        state.clear_shadow()
        inset = TAG_STROKE_WIDTH
        state.stroke_style = adjust_brightness(heart_color, 1.3)
        state.line_width = inset
        state.global_alpha = 0.7
        inner_cut = corner_cut - inset if corner_cut - inset > 0 else 2
        surface.stroke(angular_rect(x + inset, y + inset, width - inset * 2, height - inset * 2, inner_cut))

        state.global_alpha = 0.15
        gloss = LinearGradient(x, y, x, y + height / 2)
        gloss.add_color_stop(0, (255, 255, 255, 153))
        gloss.add_color_stop(1, (255, 255, 255, 0))
        state.fill_style = gloss
        surface.fill(angular_rect(x, y, width, height / 1.8, corner_cut))


def draw_team_label(surface: Surface, rect: LayoutRect, color: ColorOption) -> None:
    """Outlined then filled label text centred in the badge."""
    label = team_label(color)
    font_size = int(rect.height * TAG_FONT_FRAC)
    with surface.scope() as state:
        state.font = FontSpec(size=font_size, bold=True)
        state.text_align = "center"
        state.text_baseline = "middle"
        state.stroke_style = (0, 0, 0, 128)
        state.line_width = font_size * 0.05
        state.fill_style = "#FFFFFF"
        surface.stroke_text(label, rect.center_x, rect.center_y)
        surface.fill_text(label, rect.center_x, rect.center_y)


def draw_team_badge(surface: Surface, rect: LayoutRect, color: ColorOption) -> None:
    draw_team_tag(surface, rect, color)
    draw_team_label(surface, rect, color)

import random

import pytest
from PIL import Image

from domain.models import AbsentAccent, PresentAccent, get_color_option
from services.accent import draw_accent
from services.background import (
    draw_background,
    draw_base_gradient,
    draw_hexagon_pattern,
    draw_patterned_text,
    draw_tech_grid,
)
from services.canvas import DrawState, Surface
from services.labels import draw_team_badge, draw_username, team_label
from services.overlays import draw_circuit_lines, draw_glowing_particles, draw_overlays, draw_watermark
from services.poster_layout import compute_poster_layout, fit_subject, tag_rect
from services.subject import draw_subject, draw_subject_shadow

PINK = get_color_option("pink")

LAYERS = [
    ("base_gradient", lambda s, rng: draw_base_gradient(s, PINK.bg_color)),
    ("hexagons", lambda s, rng: draw_hexagon_pattern(s, PINK.bg_color, rng)),
    ("tech_grid", lambda s, rng: draw_tech_grid(s, PINK.heart_color, rng)),
    ("patterned_text", lambda s, rng: draw_patterned_text(s, PINK.heart_color, rng)),
    ("circuit_lines", lambda s, rng: draw_circuit_lines(s, PINK.heart_color, rng)),
    ("particles", lambda s, rng: draw_glowing_particles(s, PINK.heart_color, rng)),
    ("watermark", lambda s, rng: draw_watermark(s)),
]


@pytest.mark.parametrize("name,layer", LAYERS, ids=[name for name, _ in LAYERS])
def test_layer_leaves_default_state(name, layer):
    surface = Surface.create(320, 180)
    layer(surface, random.Random(5))
    assert surface.depth == 0
    assert surface.state == DrawState()


def test_base_gradient_covers_canvas_dark_to_light():
    surface = Surface.create(160, 90)
    draw_base_gradient(surface, PINK.bg_color)
    image = surface.to_image()
    top_left = image.getpixel((0, 0))
    bottom_right = image.getpixel((159, 89))
    assert top_left[3] == 255 and bottom_right[3] == 255
    assert sum(top_left[:3]) < sum(bottom_right[:3])


def test_background_is_repeatable_with_same_seed():
    first = Surface.create(320, 180)
    second = Surface.create(320, 180)
    draw_background(first, PINK, random.Random(11))
    draw_background(second, PINK, random.Random(11))
    assert first.to_png_bytes() == second.to_png_bytes()


def test_overlays_consume_randomness():
    rng = random.Random(3)
    before = rng.getstate()
    draw_overlays(Surface.create(320, 180), PINK, rng)
    assert rng.getstate() != before


def test_subject_layer_frames_photo_and_restores_state():
    surface = Surface.create(1280, 720)
    layout = compute_poster_layout(surface.width, surface.height)
    rect = fit_subject(300, 400, layout)
    draw_subject(surface, Image.new("RGB", (300, 400), (10, 200, 30)), rect, PINK)
    assert surface.depth == 0
    assert surface.state == DrawState()
    assert surface.to_image().getpixel((int(rect.center_x), int(rect.center_y))) == (10, 200, 30, 255)


def test_present_accent_is_drawn_in_accent_column():
    surface = Surface.create(1280, 720)
    layout = compute_poster_layout(surface.width, surface.height)
    accent = PresentAccent(image=Image.new("RGBA", (200, 200), (0, 0, 255, 255)))
    draw_accent(surface, accent, layout, PINK)
    assert surface.depth == 0
    assert surface.to_image().getpixel((int(layout.accent_section.center_x), 360))[:3] == (0, 0, 255)
    assert surface.to_image().getpixel((int(layout.subject_section.center_x), 360))[3] == 0


def test_absent_accent_draws_nothing():
    surface = Surface.create(320, 180)
    draw_accent(surface, AbsentAccent(), compute_poster_layout(320, 180), PINK)
    assert surface.to_image().getbbox() is None


def test_accent_rejects_unknown_variant():
    with pytest.raises(TypeError):
        draw_accent(Surface.create(10, 10), None, compute_poster_layout(10, 10), PINK)


def test_labels_draw_username_and_badge():
    surface = Surface.create(1280, 720)
    layout = compute_poster_layout(surface.width, surface.height)
    rect = fit_subject(300, 400, layout)
    baseline = draw_username(surface, "zkfan", layout, rect, PINK)
    badge = tag_rect(layout, baseline)
    draw_team_badge(surface, badge, PINK)
    assert surface.depth == 0
    assert surface.state == DrawState()
    assert team_label(PINK) == "TEAM PINK"
    # badge body is opaque at its left edge, away from the label text
    assert surface.to_image().getpixel((int(badge.x + badge.height * 0.3), int(badge.center_y)))[3] == 255


def test_circuit_traces_have_four_to_ten_segments(monkeypatch):
    segments = []
    original = Surface.stroke

    def recording_stroke(self, path, paint=None):
        sub = path.subpaths[0]
        if not sub.closed:
            segments.append(len(sub.points) - 1)
        return original(self, path, paint)

    monkeypatch.setattr(Surface, "stroke", recording_stroke)
    for seed in range(60):
        draw_circuit_lines(Surface.create(160, 90), PINK.heart_color, random.Random(seed))

    assert len(segments) == 60 * (160 // 80)
    assert min(segments) >= 4
    assert max(segments) == 10


def test_subject_shadow_stays_faint_and_skips_the_shape():
    surface = Surface.create(1280, 720)
    layout = compute_poster_layout(surface.width, surface.height)
    rect = fit_subject(300, 400, layout)
    draw_subject_shadow(surface, rect, PINK)
    image = surface.to_image()
    _, max_alpha = image.getchannel("A").getextrema()
    assert 0 < max_alpha <= 0x33
    assert surface.depth == 0

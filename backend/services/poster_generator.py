"""
Poster generation pipeline.

Pipeline stages:
1. Load: decode the subject image (the only suspension point)
2. Composite: background -> subject -> accent -> username + team badge -> overlays
3. Encode: PNG data URL
"""
import asyncio
import logging
import random
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from PIL import Image

from domain.errors import PosterError
from domain.models import Accent, ColorOption, GeneratePosterParams, PipelineState, accent_from_optional
from services.accent import draw_accent
from services.background import draw_background
from services.canvas import Surface
from services.image_loader import load_image
from services.labels import draw_team_badge, draw_username
from services.overlays import draw_overlays
from services.poster_layout import CANVAS_HEIGHT, CANVAS_WIDTH, compute_poster_layout, fit_subject, tag_rect
from services.subject import draw_subject
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Allowed lifecycle moves; FAILED is reachable only before compositing starts.
_TRANSITIONS = {
    PipelineState.IDLE: (PipelineState.LOADING, PipelineState.FAILED),
    PipelineState.LOADING: (PipelineState.COMPOSITING, PipelineState.FAILED),
    PipelineState.COMPOSITING: (PipelineState.DONE,),
    PipelineState.DONE: (),
    PipelineState.FAILED: (),
}


class PosterPipeline:
    """Tracks the lifecycle of one generation: idle -> loading -> compositing -> done."""

    def __init__(self, label: str = "poster"):
        self.label = label
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [self.state]

    def advance(self, new_state: PipelineState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid pipeline transition {self.state.value} -> {new_state.value}")
        logger.debug("[poster] %s %s -> %s", self.label, self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)


def make_rng(config: Optional[Settings] = None) -> random.Random:
    """Unseeded by default; POSTER_RANDOM_SEED makes the decorative noise repeatable."""
    config = config or default_settings
    if config.POSTER_RANDOM_SEED is not None:
        return random.Random(config.POSTER_RANDOM_SEED)
    return random.Random()


def _snapshot_writer(config: Settings) -> Optional[Callable[[str, Surface], None]]:
    if not config.POSTER_DEBUG_ARTIFACTS:
        return None
    debug_dir = Path(config.POSTER_DEBUG_DIR)
    debug_dir.mkdir(parents=True, exist_ok=True)
    counter = [0]

    def write(stage: str, surface: Surface) -> None:
        counter[0] += 1
        path = debug_dir / f"{counter[0]:02d}_{stage}.png"
        try:
            surface.to_image().save(path)
        except OSError:
            logger.warning("[debug-artifacts] failed to write %s", path, exc_info=True)

    return write


def render_poster(
    surface: Surface,
    subject: Image.Image,
    color: ColorOption,
    username: str,
    accent: Accent,
    rng: random.Random,
    on_layer: Optional[Callable[[str, Surface], None]] = None,
) -> Tuple[float, float]:
    """
    Run every layer onto surface in the fixed order. Synchronous; nothing
    here yields. Returns the (username baseline y, badge bottom y).
    """
    layout = compute_poster_layout(surface.width, surface.height)
    subject_rect = fit_subject(subject.width, subject.height, layout)

    def done(stage: str) -> None:
        if surface.depth != 0:
            raise RuntimeError(f"Drawing state leaked from {stage} layer (depth={surface.depth})")
        if on_layer is not None:
            on_layer(stage, surface)

    draw_background(surface, color, rng)
    done("background")
    draw_subject(surface, subject, subject_rect, color)
    done("subject")
    draw_accent(surface, accent, layout, color)
    done("accent")
    baseline_y = draw_username(surface, username, layout, subject_rect, color)
    badge = tag_rect(layout, baseline_y)
    draw_team_badge(surface, badge, color)
    done("labels")
    draw_overlays(surface, color, rng)
    done("overlays")
    return baseline_y, badge.bottom


async def generate_poster(
    params: GeneratePosterParams,
    rng: Optional[random.Random] = None,
    config: Optional[Settings] = None,
) -> str:
    """
    Generate the poster and return it as a PNG data URL.

    Raises:
        ImageDecodeError: the subject image could not be loaded.
        SurfaceUnavailableError: the drawing surface could not be created.
    """
    config = config or default_settings
    pipeline = PosterPipeline(label=params.final_color.name)
    started = time.perf_counter()

    try:
        pipeline.advance(PipelineState.LOADING)
        subject = await asyncio.to_thread(load_image, params.base_image_url)
        surface = Surface.create(CANVAS_WIDTH, CANVAS_HEIGHT)
        pipeline.advance(PipelineState.COMPOSITING)
    except PosterError:
        pipeline.advance(PipelineState.FAILED)
        logger.warning("[poster] generation failed color=%s", params.final_color.name, exc_info=True)
        raise

    render_poster(
        surface,
        subject,
        params.final_color,
        params.username,
        accent_from_optional(params.accent_image),
        rng or make_rng(config),
        on_layer=_snapshot_writer(config),
    )
    data_url = surface.to_data_url()
    pipeline.advance(PipelineState.DONE)
    logger.info(
        "[poster] color=%s subject=%sx%s accent=%s elapsed_ms=%d",
        params.final_color.name,
        subject.width,
        subject.height,
        params.accent_image is not None,
        int((time.perf_counter() - started) * 1000),
    )
    return data_url

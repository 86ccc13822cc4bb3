"""
Core domain models for the poster generator.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from PIL import Image


class PipelineState(str, Enum):
    """Lifecycle of a single poster generation."""
    IDLE = "idle"
    LOADING = "loading"
    COMPOSITING = "compositing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ColorOption:
    """
    One palette entry.

    bg_color tints the background, heart_color is the accent used for
    frames, badges, text and glow effects.
    """
    name: str
    bg_color: str
    heart_color: str


COLOR_OPTIONS: Tuple[ColorOption, ...] = (
    ColorOption(name="blue", bg_color="#B6D0FF", heart_color="#4A7AFF"),
    ColorOption(name="pink", bg_color="#FFB6C1", heart_color="#FF4A7A"),
    ColorOption(name="green", bg_color="#B6FFD0", heart_color="#4AFF7A"),
    ColorOption(name="purple", bg_color="#D0B6FF", heart_color="#7A4AFF"),
    ColorOption(name="orange", bg_color="#FFD0B6", heart_color="#FF7A4A"),
)

DEFAULT_COLOR_NAME = "pink"


def get_color_option(name: str) -> ColorOption:
    """Resolve a palette key (case-insensitive)."""
    key = (name or "").strip().lower()
    for option in COLOR_OPTIONS:
        if option.name == key:
            return option
    raise ValueError(f"Unknown color: {name}")


@dataclass
class LayoutRect:
    """A positioned rectangle on the poster canvas, in pixels."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def within(self, width: float, height: float, tolerance: float = 1e-6) -> bool:
        return (
            self.x >= -tolerance
            and self.y >= -tolerance
            and self.right <= width + tolerance
            and self.bottom <= height + tolerance
        )


@dataclass
class PosterLayout:
    """Two-column geometry: subject column on the left, accent column on the right."""
    canvas_width: int
    canvas_height: int
    padding: float
    subject_section: LayoutRect
    accent_section: LayoutRect


@dataclass(frozen=True)
class PresentAccent:
    image: Image.Image


@dataclass(frozen=True)
class AbsentAccent:
    pass


Accent = Union[PresentAccent, AbsentAccent]


def accent_from_optional(image: Optional[Image.Image]) -> Accent:
    if image is None:
        return AbsentAccent()
    return PresentAccent(image=image)


@dataclass
class GeneratePosterParams:
    """
    Input bundle for one poster generation.

    base_image_url may be a data URL, an http(s) URL or a local path.
    username is expected to be trimmed and non-empty already.
    """
    base_image_url: str
    final_color: ColorOption
    accent_image: Optional[Image.Image]
    username: str

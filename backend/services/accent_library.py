"""
Per-color accent images.

Looks for accent_<color>.png in the configured accent directory. A
missing or broken file is logged and treated as "no accent" so poster
generation still goes ahead.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import Image

from domain.errors import ImageDecodeError
from domain.models import COLOR_OPTIONS, ColorOption
from services.image_loader import load_image
from settings import settings

logger = logging.getLogger(__name__)


def accent_path(color: ColorOption, accent_dir: Optional[str] = None) -> Optional[Path]:
    root = accent_dir or settings.POSTER_ACCENT_DIR
    if not root:
        return None
    return Path(root) / f"accent_{color.name}.png"


def load_accent(color: ColorOption, accent_dir: Optional[str] = None) -> Optional[Image.Image]:
    path = accent_path(color, accent_dir)
    if path is None:
        return None
    if not path.exists():
        logger.info("[accent] no accent image at %s", path)
        return None
    try:
        return load_image(str(path))
    except ImageDecodeError:
        logger.error("[accent] failed to load accent image for %s from %s", color.name, path)
        return None


@lru_cache(maxsize=None)
def _cached_accent(color_name: str, accent_dir: str) -> Optional[Image.Image]:
    color = next((c for c in COLOR_OPTIONS if c.name == color_name), None)
    if color is None:
        return None
    return load_accent(color, accent_dir)


def get_accent(color: ColorOption) -> Optional[Image.Image]:
    """Cached accent lookup for the configured directory; returns a private copy."""
    if not settings.POSTER_ACCENT_DIR:
        return None
    image = _cached_accent(color.name, settings.POSTER_ACCENT_DIR)
    return image.copy() if image is not None else None

"""
Validation of caller-supplied poster inputs.

The compositing core trusts its inputs; these checks run in the API and
CLI before a generation is started.
"""
from pathlib import Path
from typing import Optional

from domain.errors import PosterValidationError
from domain.models import ColorOption, get_color_option

ALLOWED_CONTENT_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")
ALLOWED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")

INVALID_TYPE_MESSAGE = "Invalid file type. Only PNG, JPEG, GIF and WebP images are allowed."
USERNAME_REQUIRED_MESSAGE = "Username is required to generate the poster."


def is_allowed_image(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Check the declared content type, falling back to the file extension."""
    if content_type and content_type.lower() != "application/octet-stream":
        return content_type.lower() in ALLOWED_CONTENT_TYPES
    if filename:
        return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS
    return False


def validate_upload(filename: Optional[str], content_type: Optional[str]) -> None:
    if not is_allowed_image(filename, content_type):
        raise PosterValidationError(INVALID_TYPE_MESSAGE)


def clean_username(username: Optional[str]) -> str:
    cleaned = (username or "").strip()
    if not cleaned:
        raise PosterValidationError(USERNAME_REQUIRED_MESSAGE)
    return cleaned


def resolve_color(name: Optional[str]) -> ColorOption:
    try:
        return get_color_option(name or "")
    except ValueError as exc:
        raise PosterValidationError(str(exc)) from exc


def poster_filename(original_filename: Optional[str], color: ColorOption) -> str:
    """Download name: '<original stem>_succinctified_<color>.png'."""
    stem = Path(original_filename).stem if original_filename else ""
    return f"{stem or 'image'}_succinctified_{color.name}.png"

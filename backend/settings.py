import os
from typing import Optional

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: Optional[int] = None) -> Optional[int]:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.POSTER_FONT_PATH: Optional[str] = os.getenv("POSTER_FONT_PATH") or None
        self.POSTER_BOLD_FONT_PATH: Optional[str] = os.getenv("POSTER_BOLD_FONT_PATH") or None
        self.POSTER_MONO_FONT_PATH: Optional[str] = os.getenv("POSTER_MONO_FONT_PATH") or None
        self.POSTER_ACCENT_DIR: Optional[str] = os.getenv("POSTER_ACCENT_DIR") or None
        self.POSTER_RANDOM_SEED: Optional[int] = _as_int(os.getenv("POSTER_RANDOM_SEED"))
        self.POSTER_FETCH_TIMEOUT: float = _as_float(os.getenv("POSTER_FETCH_TIMEOUT"), 10.0)
        self.POSTER_MAX_UPLOAD_BYTES: int = _as_int(os.getenv("POSTER_MAX_UPLOAD_BYTES"), 15 * 1024 * 1024)
        self.POSTER_DEBUG_ARTIFACTS: bool = _as_bool(os.getenv("POSTER_DEBUG_ARTIFACTS"), False)
        self.POSTER_DEBUG_DIR: str = os.getenv("POSTER_DEBUG_DIR", "poster_debug")


settings = Settings()

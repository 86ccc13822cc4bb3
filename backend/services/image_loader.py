"""
Resolve an image reference (data URL, http(s) URL or local path) into a
decoded RGBA Pillow image.
"""
import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from domain.errors import ImageDecodeError
from settings import settings

logger = logging.getLogger(__name__)

USER_AGENT = "team-poster/1.0 (image-fetch)"
FETCH_CHUNK_BYTES = 64 * 1024
_SESSION = requests.Session()


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ValueError("Malformed data URL")
    if header.endswith(";base64"):
        return base64.b64decode(payload, validate=False)
    return unquote_to_bytes(payload)


def _fetch_remote(url: str, timeout: Optional[float] = None) -> bytes:
    """Stream the body, giving up once it exceeds POSTER_MAX_UPLOAD_BYTES."""
    limit = settings.POSTER_MAX_UPLOAD_BYTES
    resp = _SESSION.get(
        url,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout if timeout is not None else settings.POSTER_FETCH_TIMEOUT,
        stream=True,
    )
    try:
        resp.raise_for_status()
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise ValueError(f"Remote image is larger than {limit} bytes")
        buffer = bytearray()
        for chunk in resp.iter_content(chunk_size=FETCH_CHUNK_BYTES):
            buffer.extend(chunk)
            if len(buffer) > limit:
                raise ValueError(f"Remote image is larger than {limit} bytes")
        return bytes(buffer)
    finally:
        resp.close()


def read_image_bytes(reference: str) -> bytes:
    if reference.startswith("data:"):
        return _decode_data_url(reference)
    if reference.startswith(("http://", "https://")):
        return _fetch_remote(reference)
    return Path(reference).read_bytes()


def decode_image(data: bytes) -> Image.Image:
    """Decode bytes into an upright RGBA image (EXIF orientation applied)."""
    with Image.open(BytesIO(data)) as img:
        img.load()
        upright = ImageOps.exif_transpose(img)
        return upright.convert("RGBA")


def load_image(reference: str) -> Image.Image:
    """
    Load and decode an image reference.

    Raises:
        ImageDecodeError: if the reference cannot be read or decoded.
    """
    if not reference:
        raise ImageDecodeError()
    try:
        data = read_image_bytes(reference)
        image = decode_image(data)
    except (
        OSError,
        ValueError,
        binascii.Error,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        requests.RequestException,
    ) as exc:
        logger.warning("[loader] failed to load image reference %s: %s", _describe(reference), exc)
        raise ImageDecodeError() from exc
    if image.width == 0 or image.height == 0:
        raise ImageDecodeError()
    return image


def _describe(reference: str) -> str:
    if reference.startswith("data:"):
        return f"{reference[:32]}... ({len(reference)} chars)"
    return reference

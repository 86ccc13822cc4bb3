"""Render a single team poster from a local photo or URL.

Usage (from backend/):
    python -m scripts.render_poster --image photo.jpg --username zkfan [--color pink] [--accent accent.png] [--seed 123]

Useful for checking the composition without running the API. The PNG lands
next to the input as <stem>_succinctified_<color>.png unless --out is given.
When POSTER_DEBUG_ARTIFACTS=1, one snapshot per layer is written under
POSTER_DEBUG_DIR.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import hashlib
import logging
import random
from pathlib import Path

from domain.errors import PosterError
from domain.models import DEFAULT_COLOR_NAME, GeneratePosterParams
from services.accent_library import get_accent
from services.image_loader import load_image
from services.poster_generator import generate_poster
from services.poster_inputs import clean_username, poster_filename, resolve_color

logger = logging.getLogger("render_poster")


def main() -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Render a team poster for one photo.")
    parser.add_argument("--image", required=True, help="Path, URL or data URL of the subject photo.")
    parser.add_argument("--username", required=True, help="Name printed under the photo.")
    parser.add_argument("--color", default=DEFAULT_COLOR_NAME, help="Team color (blue, pink, green, purple, orange).")
    parser.add_argument("--accent", default=None, help="Accent image; defaults to the configured accent library.")
    parser.add_argument("--out", default=None, help="Output PNG path.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the decorative noise.")
    args = parser.parse_args()

    try:
        color = resolve_color(args.color)
        username = clean_username(args.username)
        accent = load_image(args.accent) if args.accent else get_accent(color)
    except PosterError as exc:
        raise SystemExit(str(exc))

    params = GeneratePosterParams(
        base_image_url=args.image,
        final_color=color,
        accent_image=accent,
        username=username,
    )
    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        data_url = asyncio.run(generate_poster(params, rng=rng))
    except PosterError as exc:
        raise SystemExit(str(exc))

    if args.out:
        out_path = Path(args.out)
    else:
        source = Path(args.image)
        if source.exists():
            out_path = source.parent / poster_filename(source.name, color)
        else:
            original = None if args.image.startswith("data:") else source.name
            out_path = Path.cwd() / poster_filename(original, color)
    png_bytes = base64.b64decode(data_url.split(",", 1)[1])
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(png_bytes)

    logger.info(
        "[poster] color=%s accent=%s seed=%s output=%s sha256=%s",
        color.name,
        accent is not None,
        args.seed,
        out_path,
        hashlib.sha256(png_bytes).hexdigest(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

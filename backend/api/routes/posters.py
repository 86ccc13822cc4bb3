"""
Poster API routes.

Accepts an uploaded photo, a palette color and a username, and returns
the generated poster as a data URL or as a PNG download.
"""
import asyncio
import base64
from typing import List

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from domain.errors import ImageDecodeError, PosterValidationError, SurfaceUnavailableError
from domain.models import COLOR_OPTIONS, GeneratePosterParams
from services.accent_library import get_accent
from services.poster_generator import generate_poster
from services.poster_inputs import clean_username, poster_filename, resolve_color, validate_upload
from settings import settings

router = APIRouter()


class ColorOptionResponse(BaseModel):
    name: str
    bg_color: str
    heart_color: str
    accent_available: bool


class PosterResponse(BaseModel):
    data_url: str
    filename: str
    color: str


@router.get("/palette", response_model=List[ColorOptionResponse])
async def list_palette():
    """List the team colors a poster can be generated with."""
    return [
        ColorOptionResponse(
            name=c.name,
            bg_color=c.bg_color,
            heart_color=c.heart_color,
            accent_available=get_accent(c) is not None,
        )
        for c in COLOR_OPTIONS
    ]


def _generate_blocking(params: GeneratePosterParams) -> str:
    # Compositing is CPU-bound; give it its own loop on a worker thread.
    return asyncio.run(generate_poster(params))


async def _build_poster(file: UploadFile, color: str, username: str) -> PosterResponse:
    try:
        validate_upload(file.filename, file.content_type)
        display_name = clean_username(username)
        color_option = resolve_color(color)
    except PosterValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(content) > settings.POSTER_MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Uploaded file is too large.")

    mime = (file.content_type or "image/png").lower()
    data_url = f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"
    params = GeneratePosterParams(
        base_image_url=data_url,
        final_color=color_option,
        accent_image=get_accent(color_option),
        username=display_name,
    )
    try:
        poster_url = await asyncio.to_thread(_generate_blocking, params)
    except ImageDecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SurfaceUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    return PosterResponse(
        data_url=poster_url,
        filename=poster_filename(file.filename, color_option),
        color=color_option.name,
    )


@router.post("", response_model=PosterResponse)
async def create_poster(
    file: UploadFile = File(...),
    color: str = Form(...),
    username: str = Form(...),
):
    """Generate a poster and return it as a PNG data URL."""
    return await _build_poster(file, color, username)


@router.post("/download")
async def download_poster(
    file: UploadFile = File(...),
    color: str = Form(...),
    username: str = Form(...),
):
    """Generate a poster and return the PNG bytes as an attachment."""
    poster = await _build_poster(file, color, username)
    png_bytes = base64.b64decode(poster.data_url.split(",", 1)[1])
    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{poster.filename}"'},
    )

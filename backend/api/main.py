"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import posters
from domain.models import COLOR_OPTIONS
from services.accent_library import get_accent

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Team Poster API",
    description="Generates team repping posters from an uploaded photo",
    version="0.1.0",
)

# CORS for the upload page
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(posters.router, prefix="/posters", tags=["posters"])


@app.on_event("startup")
def startup_event():
    """Warm the accent cache and report colors that will render without one."""
    missing = [color.name for color in COLOR_OPTIONS if get_accent(color) is None]
    if missing:
        logger.warning("[accent] no accent image for %s; those posters skip the accent column", ", ".join(missing))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Team Poster API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}

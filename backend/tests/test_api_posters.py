import asyncio
import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from api.main import app
from api.routes import posters as posters_router

client = TestClient(app)


def _png_bytes(size=(40, 60)):
    buf = BytesIO()
    Image.new("RGB", size, (120, 30, 200)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture(autouse=True)
def _no_accents(monkeypatch):
    monkeypatch.setattr(posters_router.settings, "POSTER_ACCENT_DIR", None)


@pytest.fixture
def fake_generate(monkeypatch):
    calls = []

    async def fake_generate_poster(params):
        calls.append(params)
        return "data:image/png;base64," + base64.b64encode(_png_bytes((16, 9))).decode("ascii")

    monkeypatch.setattr(posters_router, "generate_poster", fake_generate_poster)
    return calls


def test_health_endpoints():
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy"}


def test_palette_lists_all_colors():
    resp = client.get("/posters/palette")
    assert resp.status_code == 200
    body = resp.json()
    assert [c["name"] for c in body] == ["blue", "pink", "green", "purple", "orange"]
    assert body[1]["heart_color"] == "#FF4A7A"
    assert all(c["accent_available"] is False for c in body)


def test_create_poster_end_to_end():
    resp = client.post(
        "/posters",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        data={"color": "blue", "username": "  zkfan  "},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"] == "me_succinctified_blue.png"
    assert body["color"] == "blue"
    poster = Image.open(BytesIO(base64.b64decode(body["data_url"].split(",", 1)[1])))
    assert poster.size == (1280, 720)


def test_create_poster_passes_cleaned_inputs(fake_generate):
    resp = client.post(
        "/posters",
        files={"file": ("shot.webp", _png_bytes(), "image/webp")},
        data={"color": "Orange", "username": " Ana "},
    )
    assert resp.status_code == 200
    params = fake_generate[0]
    assert params.username == "Ana"
    assert params.final_color.name == "orange"
    assert params.accent_image is None
    assert params.base_image_url.startswith("data:image/webp;base64,")


def test_rejects_non_image_upload(fake_generate):
    resp = client.post(
        "/posters",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"color": "blue", "username": "zkfan"},
    )
    assert resp.status_code == 400
    assert "Invalid file type" in resp.json()["detail"]
    assert fake_generate == []


def test_rejects_blank_username(fake_generate):
    resp = client.post(
        "/posters",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        data={"color": "blue", "username": "   "},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Username is required to generate the poster."


def test_rejects_unknown_color(fake_generate):
    resp = client.post(
        "/posters",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        data={"color": "teal", "username": "zkfan"},
    )
    assert resp.status_code == 400


def test_rejects_oversized_upload(monkeypatch, fake_generate):
    monkeypatch.setattr(posters_router.settings, "POSTER_MAX_UPLOAD_BYTES", 10)
    resp = client.post(
        "/posters",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        data={"color": "blue", "username": "zkfan"},
    )
    assert resp.status_code == 413


def test_undecodable_upload_is_unprocessable():
    resp = client.post(
        "/posters",
        files={"file": ("me.png", b"definitely not png data", "image/png")},
        data={"color": "pink", "username": "zkfan"},
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Failed to load the image for editing"


def test_download_returns_png_attachment(fake_generate):
    resp = client.post(
        "/posters/download",
        files={"file": ("holiday.jpg", _png_bytes(), "image/jpeg")},
        data={"color": "green", "username": "zkfan"},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert 'filename="holiday_succinctified_green.png"' in resp.headers["content-disposition"]
    assert Image.open(BytesIO(resp.content)).size == (16, 9)


def test_poster_is_composited_off_the_event_loop(monkeypatch, fake_generate):
    seen = []
    original = posters_router._generate_blocking

    def recording_generate(params):
        try:
            asyncio.get_running_loop()
            seen.append("on_loop")
        except RuntimeError:
            seen.append("worker")
        return original(params)

    monkeypatch.setattr(posters_router, "_generate_blocking", recording_generate)
    resp = client.post(
        "/posters",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        data={"color": "pink", "username": "zkfan"},
    )
    assert resp.status_code == 200
    assert seen == ["worker"]
    assert len(fake_generate) == 1

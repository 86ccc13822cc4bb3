import base64
from io import BytesIO

import pytest
import requests
from PIL import Image

import services.image_loader as loader
from domain.errors import ImageDecodeError


def _png_bytes(size=(12, 8), color=(255, 0, 0)):
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200, headers=None):
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self.closed = False

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]

    def close(self):
        self.closed = True

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")


def test_loads_base64_data_url():
    url = "data:image/png;base64," + base64.b64encode(_png_bytes()).decode("ascii")
    image = loader.load_image(url)
    assert image.mode == "RGBA"
    assert image.size == (12, 8)
    assert image.getpixel((0, 0)) == (255, 0, 0, 255)


def test_loads_local_jpeg(tmp_path):
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (30, 20), (0, 128, 0)).save(path, format="JPEG")
    image = loader.load_image(str(path))
    assert image.mode == "RGBA"
    assert image.size == (30, 20)


def test_applies_exif_orientation(tmp_path):
    path = tmp_path / "rotated.jpg"
    img = Image.new("RGB", (40, 10), (0, 0, 255))
    exif = img.getexif()
    exif[0x0112] = 6
    img.save(path, format="JPEG", exif=exif)
    assert loader.load_image(str(path)).size == (10, 40)


def test_fetches_remote_with_timeout_and_user_agent(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None, stream=False):
        seen.update(url=url, headers=headers, timeout=timeout, stream=stream)
        return FakeResponse(_png_bytes((5, 5)))

    monkeypatch.setattr(loader._SESSION, "get", fake_get)
    monkeypatch.setattr(loader.settings, "POSTER_FETCH_TIMEOUT", 3.5)
    image = loader.load_image("https://example.com/me.png")
    assert image.size == (5, 5)
    assert seen["url"] == "https://example.com/me.png"
    assert seen["timeout"] == 3.5
    assert seen["headers"]["User-Agent"] == loader.USER_AGENT
    assert seen["stream"] is True


def test_remote_http_error_becomes_decode_error(monkeypatch):
    monkeypatch.setattr(loader._SESSION, "get", lambda *a, **k: FakeResponse(status_code=404))
    with pytest.raises(ImageDecodeError):
        loader.load_image("https://example.com/missing.png")


def test_remote_connection_error_becomes_decode_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(loader._SESSION, "get", boom)
    with pytest.raises(ImageDecodeError):
        loader.load_image("http://example.com/x.png")


@pytest.mark.parametrize(
    "reference",
    [
        "",
        "data:image/png;base64,bm90IGFuIGltYWdl",
        "data:image/png;base64",
        "/definitely/not/here.png",
    ],
)
def test_unreadable_references_raise_decode_error(reference):
    with pytest.raises(ImageDecodeError) as excinfo:
        loader.load_image(reference)
    assert str(excinfo.value) == "Failed to load the image for editing"


def test_remote_body_over_the_cap_is_rejected(monkeypatch):
    response = FakeResponse(_png_bytes((64, 64)))
    monkeypatch.setattr(loader._SESSION, "get", lambda *a, **k: response)
    monkeypatch.setattr(loader.settings, "POSTER_MAX_UPLOAD_BYTES", 100)
    monkeypatch.setattr(loader, "FETCH_CHUNK_BYTES", 16)
    with pytest.raises(ImageDecodeError):
        loader.load_image("https://example.com/huge.png")
    assert response.closed


def test_declared_length_over_the_cap_is_rejected_before_reading(monkeypatch):
    class NoBodyResponse(FakeResponse):
        def iter_content(self, chunk_size=1):
            raise AssertionError("body should not be read")

    response = NoBodyResponse(headers={"Content-Length": "5000"})
    monkeypatch.setattr(loader._SESSION, "get", lambda *a, **k: response)
    monkeypatch.setattr(loader.settings, "POSTER_MAX_UPLOAD_BYTES", 1000)
    with pytest.raises(ImageDecodeError):
        loader.load_image("https://example.com/huge.png")
    assert response.closed

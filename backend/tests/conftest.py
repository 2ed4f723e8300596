"""Shared pytest fixtures for CanvasForge tests."""

from __future__ import annotations

import pytest
from PIL import Image

from backend.canvasforge.codec import RasterCodec, get_codec
from backend.tests.fakes import RecordingSleep, encode_image, gradient_image


@pytest.fixture(autouse=True)
def no_gemini_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real API key out of the tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def codec() -> RasterCodec:
    return get_codec()


@pytest.fixture
def landscape_image() -> Image.Image:
    """800x600 gradient."""
    return gradient_image(800, 600)


@pytest.fixture
def landscape_jpeg(landscape_image: Image.Image) -> bytes:
    return encode_image(landscape_image, "JPEG", quality=90)


@pytest.fixture
def small_png() -> bytes:
    """60x40 gradient PNG."""
    return encode_image(gradient_image(60, 40))


@pytest.fixture
def rgba_image() -> Image.Image:
    """RGBA image with a transparent left half."""
    img = Image.new("RGBA", (120, 80), (200, 40, 40, 255))
    img.paste((0, 0, 0, 0), (0, 0, 60, 80))
    return img


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def simple_svg() -> str:
    """400x200 SVG with a named background rect and a circle."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200" '
        'viewBox="0 0 400 200" fill="none">\n'
        '  <rect id="background" x="0" y="0" width="400" height="200" fill="#336699"/>\n'
        '  <circle id="logo" cx="200" cy="100" r="50" fill="#ffcc00"/>\n'
        "</svg>\n"
    )


@pytest.fixture
def unsized_svg() -> str:
    """SVG with neither width/height nor viewBox."""
    return (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<path d="M0 0 L10 10" style="stroke:black;fill:rgb(10, 20, 30)"/>'
        "</svg>"
    )

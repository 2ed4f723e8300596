"""Tests for the gamma-correct resize."""

from __future__ import annotations

from PIL import Image

from backend.canvasforge.codec import high_quality_resize


class TestHighQualityResize:
    def test_basic_resize(self) -> None:
        img = Image.new("RGB", (200, 100), (128, 128, 128))
        result = high_quality_resize(img, (100, 50))
        assert result.size == (100, 50)

    def test_rgba_keeps_alpha(self, rgba_image: Image.Image) -> None:
        result = high_quality_resize(rgba_image, (60, 40))
        assert result.mode == "RGBA"
        assert result.size == (60, 40)
        assert result.getpixel((2, 20))[3] == 0
        assert result.getpixel((57, 20))[3] == 255

    def test_grayscale_converted(self) -> None:
        img = Image.new("L", (100, 100), 128)
        result = high_quality_resize(img, (50, 50))
        assert result.mode == "RGB"

    def test_same_size_returns_copy(self) -> None:
        img = Image.new("RGB", (100, 100), (10, 20, 30))
        result = high_quality_resize(img, (100, 100))
        assert result.size == (100, 100)
        assert result is not img

    def test_invalid_target_returns_input(self) -> None:
        img = Image.new("RGB", (100, 100))
        assert high_quality_resize(img, (0, 50)) is img

    def test_solid_color_preserved(self) -> None:
        img = Image.new("RGB", (64, 64), (200, 100, 50))
        result = high_quality_resize(img, (128, 128))
        r, g, b = result.getpixel((64, 64))
        assert abs(r - 200) <= 1 and abs(g - 100) <= 1 and abs(b - 50) <= 1

"""Tests for edge-color sampling."""

from __future__ import annotations

from PIL import Image

from backend.canvasforge.extension import detect_edge_color, edge_band_thickness
from backend.canvasforge.models import EdgeColor


class TestEdgeBandThickness:
    def test_three_percent_of_short_side(self) -> None:
        assert edge_band_thickness(500, 250) == 7

    def test_clamped_low(self) -> None:
        assert edge_band_thickness(50, 50) == 3

    def test_clamped_high(self) -> None:
        assert edge_band_thickness(4000, 3000) == 15


class TestDetectEdgeColor:
    def test_solid_image(self) -> None:
        img = Image.new("RGB", (200, 100), (10, 120, 230))
        assert detect_edge_color(img) == EdgeColor(10, 120, 230)

    def test_center_is_ignored(self) -> None:
        img = Image.new("RGB", (200, 200), (255, 255, 255))
        img.paste((0, 0, 0), (20, 20, 180, 180))
        assert detect_edge_color(img) == EdgeColor(255, 255, 255)

    def test_top_bottom_outweigh_sides(self) -> None:
        # 100x100: band 3. Top/bottom red, left/right blue.
        img = Image.new("RGB", (100, 100), (0, 0, 0))
        img.paste((255, 0, 0), (0, 0, 100, 3))
        img.paste((255, 0, 0), (0, 97, 100, 100))
        img.paste((0, 0, 255), (0, 3, 3, 97))
        img.paste((0, 0, 255), (97, 3, 100, 97))

        color = detect_edge_color(img)
        # Weighted 1.5 (x2) vs 1.0 (x2)
        assert color.r == round(255 * 3 / 5)
        assert color.b == round(255 * 2 / 5)
        assert color.g == 0

    def test_tiny_image_uses_whole_mean(self) -> None:
        img = Image.new("RGB", (2, 2), (40, 50, 60))
        assert detect_edge_color(img) == EdgeColor(40, 50, 60)

    def test_rgba_input(self, rgba_image: Image.Image) -> None:
        color = detect_edge_color(rgba_image)
        assert 0 <= color.r <= 255

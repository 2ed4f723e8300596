"""Tests for the data model helpers."""

from __future__ import annotations

import pytest

from backend.canvasforge.enums import OutputFormat, StrategyType
from backend.canvasforge.exceptions import ProcessingCancelledError, ValidationError
from backend.canvasforge.models import (
    AspectRatio,
    CancellationToken,
    CropRect,
    Dimensions,
    EdgeColor,
    ExtensionStrategy,
    ImageBuffer,
)


class TestDimensions:
    def test_scale_rounds(self) -> None:
        assert Dimensions(800, 600).scale(1.5) == Dimensions(1200, 900)
        assert Dimensions(3, 3).scale(1.5) == Dimensions(4, 4)

    def test_fits_within(self) -> None:
        assert Dimensions(100, 50).fits_within(Dimensions(100, 60))
        assert not Dimensions(101, 50).fits_within(Dimensions(100, 60))


class TestAspectRatio:
    def test_parse(self) -> None:
        ratio = AspectRatio.parse("9:16")
        assert ratio == AspectRatio(9, 16)
        assert str(ratio) == "9:16"

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError, match="expected W:H"):
            AspectRatio.parse("wide")


class TestSmallValues:
    def test_crop_rect_box(self) -> None:
        assert CropRect(10, 20, 30, 40).to_box() == (10, 20, 40, 60)

    def test_edge_color_hex(self) -> None:
        assert EdgeColor(51, 102, 153).to_hex() == "#336699"

    def test_buffer_mime_types(self) -> None:
        assert ImageBuffer(b"x", 1, 1, "jpg").mime_type == "image/jpeg"
        assert ImageBuffer(b"x", 1, 1, "svg").mime_type == "image/svg+xml"

    def test_output_format_parse(self) -> None:
        assert OutputFormat.parse("JPG") is OutputFormat.JPEG
        assert OutputFormat.parse(".webp") is OutputFormat.WEBP

    def test_output_format_parse_unknown(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported output format"):
            OutputFormat.parse("gif")


class TestExtensionStrategy:
    def test_default_follows_backend(self) -> None:
        assert ExtensionStrategy.default(True).type is StrategyType.AI
        assert ExtensionStrategy.default(False).type is StrategyType.DETERMINISTIC


class TestCancellationToken:
    def test_check_passes_until_cancelled(self) -> None:
        token = CancellationToken()
        token.check("decode")
        token.cancel()
        assert token.cancelled
        with pytest.raises(ProcessingCancelledError, match="before encode"):
            token.check("encode")

"""Enumerations shared across CanvasForge."""

from __future__ import annotations

from enum import Enum

from .exceptions import ValidationError


class OutputFormat(Enum):
    """Encodings the pipeline can produce."""
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    SVG = "svg"

    @classmethod
    def parse(cls, value: str | OutputFormat) -> OutputFormat:
        if isinstance(value, cls):
            return value
        normalized = str(value).lower().strip().lstrip(".")
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError as e:
            raise ValidationError(f"Unsupported output format '{value}'") from e


class StrategyType(Enum):
    """How area outside the original image gets filled."""
    AI = "ai"
    DETERMINISTIC = "deterministic"


class RotateOperation(Enum):
    """Rotate / flip operations."""
    ROTATE_90 = "rotate-90"
    ROTATE_180 = "rotate-180"
    ROTATE_270 = "rotate-270"
    FLIP_HORIZONTAL = "flip-horizontal"
    FLIP_VERTICAL = "flip-vertical"
    CUSTOM = "custom"


class FilterName(Enum):
    """Named image filters."""
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    BLUR = "blur"
    SHARPEN = "sharpen"
    BRIGHTEN = "brighten"
    CONTRAST = "contrast"
    VINTAGE = "vintage"
    INVERT = "invert"
    EDGE_ENHANCE = "edge_enhance"
    DENOISE = "denoise"


class EnhanceMethod(Enum):
    """Enhancement backends."""
    AI = "ai"
    SHARPEN = "sharpen"
    ONNX = "onnx"

"""Input validation for CanvasForge."""

from __future__ import annotations

from .config import Config
from .exceptions import ValidationError
from .models import AspectRatio, Dimensions


def validate_dimensions(width: int, height: int) -> None:
    """Validate target dimensions.

    Args:
        width: Target width in pixels.
        height: Target height in pixels.

    Raises:
        ValidationError: If dimensions are invalid.
    """
    if not isinstance(width, int | float) or not isinstance(height, int | float):
        raise ValidationError(
            f"Dimensions must be numbers, got {type(width).__name__} and {type(height).__name__}"
        )

    width = int(width)
    height = int(height)

    if width <= 0 or height <= 0:
        raise ValidationError(f"Dimensions must be positive, got {width}x{height}")
    if width > Config.MAX_IMAGE_SIZE or height > Config.MAX_IMAGE_SIZE:
        raise ValidationError(
            f"Dimensions exceed maximum {Config.MAX_IMAGE_SIZE}, got {width}x{height}"
        )


def validate_quality(quality: int) -> None:
    """Validate an encoder quality in [0, 100].

    Raises:
        ValidationError: If quality is out of range.
    """
    if not isinstance(quality, int | float) or not 0 <= quality <= 100:
        raise ValidationError(f"Quality must be between 0 and 100, got {quality}")


def validate_aspect_ratio(target: Dimensions | AspectRatio | float) -> float:
    """Validate an aspect-ratio target and return it as width / height.

    Raises:
        ValidationError: If the ratio is not positive.
    """
    if isinstance(target, Dimensions):
        validate_dimensions(target.width, target.height)
        return target.ratio
    if isinstance(target, AspectRatio):
        if target.width <= 0 or target.height <= 0:
            raise ValidationError(f"Aspect ratio terms must be positive, got {target}")
        return target.value
    if isinstance(target, int | float) and target > 0:
        return float(target)
    raise ValidationError(f"Invalid aspect ratio target: {target!r}")


def validate_custom_angle(angle: float) -> None:
    """Validate a free rotation angle in degrees."""
    if not -180 <= angle <= 180:
        raise ValidationError("Custom angle must be between -180 and 180 degrees")

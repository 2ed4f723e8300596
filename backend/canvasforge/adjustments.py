"""Pixel adjustments: sharpening, named filters, rotation and flips."""

from __future__ import annotations

import logging

import cv2
import numpy as np
from PIL import Image, ImageEnhance, ImageOps

from .config import Config
from .enums import FilterName, RotateOperation
from .exceptions import ValidationError
from .validators import validate_custom_angle

logger = logging.getLogger("canvasforge.adjustments")

_SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float32,
)

_EDGE_KERNEL = np.array([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], dtype=np.float32)


def _split_alpha(image: Image.Image) -> tuple[np.ndarray, Image.Image | None]:
    alpha = image.getchannel("A") if image.mode == "RGBA" else None
    return np.array(image.convert("RGB")), alpha


def _merge_alpha(rgb: np.ndarray, alpha: Image.Image | None) -> Image.Image:
    result = Image.fromarray(np.ascontiguousarray(rgb))
    if alpha is not None and alpha.size == result.size:
        result.putalpha(alpha)
    return result


def sharpen(image: Image.Image, sharpness: float = Config.DEFAULT_SHARPNESS) -> Image.Image:
    """Unsharp mask. ``sharpness`` 1-10 sets the blur sigma (0.5 to 5.0)."""
    sharpness = max(1.0, min(10.0, float(sharpness)))
    sigma = 0.5 * sharpness

    rgb, alpha = _split_alpha(image)
    blurred = cv2.GaussianBlur(rgb, (0, 0), sigmaX=sigma)
    sharpened = cv2.addWeighted(rgb, 2.0, blurred, -1.0, 0)
    logger.debug("Sharpened %dx%d with sigma %.2f", image.width, image.height, sigma)
    return _merge_alpha(sharpened, alpha)


def apply_filter(image: Image.Image, filter_name: FilterName | str, intensity: float = 0.5) -> Image.Image:
    """Apply one named filter.

    Args:
        image: Source image (RGB or RGBA).
        filter_name: One of ``FilterName``.
        intensity: Strength in [0, 1] for filters that take one.

    Raises:
        ValidationError: On an unknown filter or out-of-range intensity.
    """
    try:
        name = FilterName(filter_name)
    except ValueError as e:
        raise ValidationError(f"Unknown filter '{filter_name}'") from e
    if not 0.0 <= intensity <= 1.0:
        raise ValidationError(f"Filter intensity must be between 0 and 1, got {intensity}")

    rgb, alpha = _split_alpha(image)

    if name is FilterName.GRAYSCALE:
        gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
        out = cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB)
    elif name is FilterName.SEPIA:
        out = _sepia(rgb, intensity)
    elif name is FilterName.BLUR:
        out = cv2.GaussianBlur(rgb, (0, 0), sigmaX=0.5 + intensity * 9.5)
    elif name is FilterName.SHARPEN:
        return sharpen(image, 1 + intensity * 9)
    elif name is FilterName.BRIGHTEN:
        out = np.array(ImageEnhance.Brightness(Image.fromarray(rgb)).enhance(1.0 + intensity))
    elif name is FilterName.CONTRAST:
        out = np.array(ImageEnhance.Contrast(Image.fromarray(rgb)).enhance(1.0 + intensity))
    elif name is FilterName.VINTAGE:
        faded = ImageEnhance.Color(Image.fromarray(_sepia(rgb, intensity * 0.6))).enhance(1.0 - 0.3 * intensity)
        out = np.array(ImageEnhance.Contrast(faded).enhance(1.0 - 0.2 * intensity))
    elif name is FilterName.INVERT:
        out = 255 - rgb
    elif name is FilterName.EDGE_ENHANCE:
        out = cv2.filter2D(rgb, -1, _EDGE_KERNEL)
    elif name is FilterName.DENOISE:
        strength = 3 + intensity * 12
        out = cv2.fastNlMeansDenoisingColored(rgb, None, strength, strength, 7, 21)
    else:
        raise ValidationError(f"Unsupported filter '{name.value}'")

    logger.debug("Applied filter %s (intensity %.2f)", name.value, intensity)
    return _merge_alpha(out, alpha)


def _sepia(rgb: np.ndarray, intensity: float) -> np.ndarray:
    toned = np.clip(rgb.astype(np.float32) @ _SEPIA_MATRIX.T, 0, 255)
    blended = rgb.astype(np.float32) * (1.0 - intensity) + toned * intensity
    return np.clip(blended, 0, 255).astype(np.uint8)


def rotate_flip(
    image: Image.Image,
    operation: RotateOperation | str,
    custom_angle: float | None = None,
    flip_horizontal: bool = False,
    flip_vertical: bool = False,
) -> Image.Image:
    """Rotate clockwise or flip, then apply any extra flips.

    A custom angle expands the canvas to hold the whole rotated image and
    fills the new corners with white.

    Raises:
        ValidationError: On an unknown operation or a missing/out-of-range angle.
    """
    try:
        op = RotateOperation(operation)
    except ValueError as e:
        raise ValidationError(f"Invalid operation '{operation}'") from e

    if op is RotateOperation.ROTATE_90:
        result = image.transpose(Image.Transpose.ROTATE_270)
    elif op is RotateOperation.ROTATE_180:
        result = image.transpose(Image.Transpose.ROTATE_180)
    elif op is RotateOperation.ROTATE_270:
        result = image.transpose(Image.Transpose.ROTATE_90)
    elif op is RotateOperation.FLIP_HORIZONTAL:
        result = ImageOps.mirror(image)
    elif op is RotateOperation.FLIP_VERTICAL:
        result = ImageOps.flip(image)
    else:
        if custom_angle is None:
            raise ValidationError("Custom rotation requires an angle")
        validate_custom_angle(custom_angle)
        result = rotate_by_angle(image, custom_angle)

    if flip_horizontal:
        result = ImageOps.mirror(result)
    if flip_vertical:
        result = ImageOps.flip(result)
    return result


def rotate_by_angle(image: Image.Image, angle: float) -> Image.Image:
    """Rotate clockwise by ``angle`` degrees on an expanded white canvas."""
    arr = np.array(image)
    h, w = arr.shape[:2]
    center = (w / 2, h / 2)

    # OpenCV angles are counter-clockwise
    matrix = cv2.getRotationMatrix2D(center, -angle, 1.0)
    cos, sin = abs(matrix[0, 0]), abs(matrix[0, 1])
    new_w = max(1, int(round(h * sin + w * cos)))
    new_h = max(1, int(round(h * cos + w * sin)))
    matrix[0, 2] += new_w / 2 - center[0]
    matrix[1, 2] += new_h / 2 - center[1]

    fill = (255,) * arr.shape[2] if arr.ndim == 3 else 255
    rotated = cv2.warpAffine(
        arr,
        matrix,
        (new_w, new_h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=fill,
    )
    logger.debug("Rotated %dx%d by %.1f deg to %dx%d", w, h, angle, new_w, new_h)
    return Image.fromarray(rotated)

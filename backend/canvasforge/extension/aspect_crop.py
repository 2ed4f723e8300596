"""Maximal centered crop to an exact aspect ratio."""

from __future__ import annotations

import logging

from PIL import Image

from ..codec import RasterCodec, get_codec
from ..models import CropRect

logger = logging.getLogger("canvasforge.extension.aspect_crop")


def compute_aspect_crop(width: int, height: int, ratio: float) -> CropRect:
    """Largest centered window of ``width``x``height`` matching ``ratio``.

    A source wider than the target keeps its full height; otherwise its width
    is the limit, and the width is re-derived from the rounded height so the
    window stays within half a pixel of the ratio. Offsets are floored so
    the window never leaves the source.
    """
    if width / height > ratio:
        crop_h = height
        crop_w = max(1, min(width, round(height * ratio)))
    else:
        crop_h = max(1, min(height, round(width / ratio)))
        crop_w = round(crop_h * ratio)
        if crop_w > width and crop_h > 1:
            crop_h -= 1
            crop_w = round(crop_h * ratio)
        crop_w = max(1, min(width, crop_w))

    return CropRect(
        left=(width - crop_w) // 2,
        top=(height - crop_h) // 2,
        width=crop_w,
        height=crop_h,
    )


def crop_to_aspect_ratio(
    image: Image.Image, ratio: float, codec: RasterCodec | None = None
) -> Image.Image:
    """Extract the maximal centered region of ``image`` with ``ratio``."""
    codec = codec or get_codec()
    rect = compute_aspect_crop(image.width, image.height, ratio)

    if (rect.width, rect.height) == image.size:
        return image

    logger.debug(
        "Aspect crop %dx%d -> %dx%d at (%d, %d)",
        image.width, image.height, rect.width, rect.height, rect.left, rect.top,
    )
    return codec.extract(image, rect)

"""Deterministic canvas extension with a sampled edge color."""

from __future__ import annotations

import logging

from PIL import Image

from ..codec import RasterCodec, get_codec, high_quality_resize
from ..models import CropRect, Dimensions
from .edge_color import detect_edge_color

logger = logging.getLogger("canvasforge.extension.canvas_extender")


class CanvasExtender:
    """Extend an image to a larger canvas filled with its own edge color.

    Used both when no generative backend is configured and as the fallback
    when generative fill fails or returns the input unchanged.
    """

    def __init__(self, codec: RasterCodec | None = None) -> None:
        self.codec = codec or get_codec()

    def extend(
        self,
        image: Image.Image,
        original_dimensions: Dimensions,
        target_dimensions: Dimensions,
    ) -> Image.Image:
        """Extend ``image`` to exactly ``target_dimensions``.

        When the target fits inside the original on both axes, this is a
        cover-crop instead: extension only ever adds area.

        Args:
            image: Source image.
            original_dimensions: Caller-reported size of the source.
            target_dimensions: Requested output size.

        Returns:
            Image at exactly ``target_dimensions``.
        """
        if target_dimensions.fits_within(original_dimensions):
            logger.debug(
                "Target %dx%d within original %dx%d, cover-cropping",
                target_dimensions.width, target_dimensions.height,
                original_dimensions.width, original_dimensions.height,
            )
            return crop_to_exact_dimensions(image, target_dimensions, self.codec)

        edge_color = detect_edge_color(image)

        # The decoded size wins over the caller-reported one
        actual_w, actual_h = image.size
        canvas_w = max(target_dimensions.width, actual_w)
        canvas_h = max(target_dimensions.height, actual_h)

        canvas = Image.new("RGB", (canvas_w, canvas_h), edge_color.to_tuple())
        left = max(0, (canvas_w - actual_w) // 2)
        top = max(0, (canvas_h - actual_h) // 2)
        result = self.codec.composite(canvas, [(image, left, top)])

        logger.info(
            "Extended %dx%d to %dx%d with edge color %s",
            actual_w, actual_h, canvas_w, canvas_h, edge_color.to_hex(),
        )

        if (canvas_w, canvas_h) != target_dimensions.to_tuple():
            result = self.codec.resize(
                result, target_dimensions.to_tuple(), Image.Resampling.LANCZOS
            )

        return result


def crop_to_exact_dimensions(
    image: Image.Image,
    target_dimensions: Dimensions,
    codec: RasterCodec | None = None,
) -> Image.Image:
    """Scale to cover ``target_dimensions`` then center-crop the overflow.

    The scale is ``max(scale_x, scale_y)`` so the result never has an
    unfilled border.
    """
    codec = codec or get_codec()
    src_w, src_h = image.size
    target_w, target_h = target_dimensions.to_tuple()

    scale = max(target_w / src_w, target_h / src_h)
    scaled_w = max(target_w, round(src_w * scale))
    scaled_h = max(target_h, round(src_h * scale))

    scaled = high_quality_resize(image, (scaled_w, scaled_h))

    rect = CropRect(
        left=max(0, (scaled_w - target_w) // 2),
        top=max(0, (scaled_h - target_h) // 2),
        width=target_w,
        height=target_h,
    )
    return codec.extract(scaled, rect)

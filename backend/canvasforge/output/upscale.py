"""Size-driven automatic upscaling of small outputs."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from PIL import Image

from ..codec import RasterCodec, get_codec, high_quality_resize
from ..config import Config
from ..exceptions import UpscaleError
from ..models import ImageMetadata, ProcessedImage

logger = logging.getLogger("canvasforge.output.upscale")


def upscale_factor(size_bytes: int) -> float:
    """Linear scale expected to bring ``size_bytes`` to the target band.

    Encoded size grows roughly with pixel count, so the linear factor is the
    square root of the byte ratio, capped at ``Config.UPSCALE_MAX_FACTOR``.
    """
    target = sum(Config.UPSCALE_TARGET_BYTES) / 2
    return min(math.sqrt(target / max(1, size_bytes)), Config.UPSCALE_MAX_FACTOR)


def auto_upscale_if_needed(
    processed: ProcessedImage,
    codec: RasterCodec | None = None,
) -> ProcessedImage:
    """Upscale raster outputs smaller than ``Config.UPSCALE_MIN_BYTES``.

    Upsampled content compresses better than its pixel count suggests, so
    one step often lands short of the floor. The factor is re-estimated from
    each re-encode and the source is resampled again, until the output
    reaches the floor or the total factor hits ``Config.UPSCALE_MAX_FACTOR``.
    Every pass resamples the original pixels, never a previous pass.

    Vector outputs and outputs already large enough are returned as is.
    Never raises: on any failure the input is returned unmodified.
    """
    size = len(processed.buffer)
    fmt = processed.metadata.format.lower()

    if fmt == "svg" or size >= Config.UPSCALE_MIN_BYTES:
        return processed

    width, height = processed.metadata.width, processed.metadata.height
    total = 1.0
    data = processed.buffer
    upscaled = None

    try:
        codec = codec or get_codec()
        image = codec.decode(processed.buffer)
        while len(data) < Config.UPSCALE_MIN_BYTES and total < Config.UPSCALE_MAX_FACTOR:
            # The byte ratio is always > 1 here, so the factor grows every pass
            total = min(total * upscale_factor(len(data)), Config.UPSCALE_MAX_FACTOR)
            new_size = (round(width * total), round(height * total))
            if max(new_size) > Config.MAX_IMAGE_SIZE:
                raise UpscaleError(
                    f"upscaled size {new_size[0]}x{new_size[1]} exceeds maximum {Config.MAX_IMAGE_SIZE}"
                )
            upscaled = high_quality_resize(image, new_size, Image.Resampling.LANCZOS)
            data = codec.encode(upscaled, fmt, Config.UPSCALE_QUALITY)
            logger.debug(
                "Upscale pass: factor %.2f, %dx%d, %.1f KB",
                total, new_size[0], new_size[1], len(data) / 1024,
            )
    except Exception as e:
        logger.warning("Auto-upscale skipped, keeping original output: %s", e)
        return processed

    if upscaled is None:
        return processed

    logger.info(
        "Upscaled %dx%d (%.1f KB) to %dx%d (%.1f KB), factor %.2f",
        width, height, size / 1024, upscaled.width, upscaled.height, len(data) / 1024, total,
    )
    return replace(
        processed,
        buffer=data,
        metadata=ImageMetadata(
            width=upscaled.width,
            height=upscaled.height,
            format=fmt,
            size_bytes=len(data),
        ),
        was_upscaled=True,
    )

"""Raster codec factory for CanvasForge.

The codec is configured once per process: Pillow's decompression-bomb
limit is raised for very large inputs while OpenCV is held to one thread
with OpenCL disabled, which trades latency for bounded peak memory so that
only one decode pipeline is in flight per image.
"""

from __future__ import annotations

import logging
import threading

import cv2
from PIL import Image, features

from ..config import Config
from ..exceptions import CodecUnavailableError
from .base_codec import RasterCodec
from .pillow_codec import PillowCodec
from .resize import high_quality_resize

logger = logging.getLogger("canvasforge.codec")

_lock = threading.Lock()
_codec: RasterCodec | None = None


def configure_codec() -> None:
    """Apply process-wide codec tuning and verify required encoders.

    Raises:
        CodecUnavailableError: If Pillow lacks JPEG or zlib support.
    """
    missing = [name for name in ("jpg", "zlib") if not features.check_codec(name)]
    if missing:
        raise CodecUnavailableError(
            f"Pillow was built without {', '.join(missing)} support. Image processing is not available."
        )
    if not features.check_module("webp"):
        logger.warning("Pillow was built without WebP support; webp output will fail")

    Image.MAX_IMAGE_PIXELS = Config.MAX_INPUT_PIXELS
    cv2.setNumThreads(1)
    cv2.ocl.setUseOpenCL(False)
    logger.debug("Codec configured (pixel limit %d, 1 OpenCV thread)", Config.MAX_INPUT_PIXELS)


def get_codec() -> RasterCodec:
    """Return the process-wide codec, configuring it on first use.

    Raises:
        CodecUnavailableError: If the codec cannot be initialized.
    """
    global _codec
    with _lock:
        if _codec is None:
            configure_codec()
            _codec = PillowCodec()
        return _codec


__all__ = ["get_codec", "configure_codec", "RasterCodec", "PillowCodec", "high_quality_resize"]

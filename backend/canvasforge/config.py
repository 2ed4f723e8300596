"""Global configuration for CanvasForge."""

from __future__ import annotations

import os

from PIL import Image


class Config:
    """Global configuration."""

    # Processing limits
    MAX_IMAGE_SIZE = 16384
    MAX_INPUT_PIXELS = 1_000_000_000  # 1 gigapixel

    # Expansion
    EXPANSION_FACTOR = 1.5  # Linear growth before the aspect-ratio crop

    # Edge sampling
    EDGE_BAND_RATIO = 0.03  # 3% of the smallest dimension
    EDGE_BAND_MIN = 3
    EDGE_BAND_MAX = 15
    HORIZONTAL_EDGE_WEIGHT = 1.5  # Top / bottom bands
    VERTICAL_EDGE_WEIGHT = 1.0  # Left / right bands
    FALLBACK_COLOR = (255, 255, 255)

    # Generative fill
    GEMINI_MODEL = "gemini-2.5-flash-image-preview"
    GEMINI_API_KEY_ENV = "GEMINI_API_KEY"
    AI_MAX_ATTEMPTS = 3
    AI_BACKOFF_SECONDS = 1.0  # Wait grows by this much per failed attempt
    TRANSPORT_FORMAT = "PNG"
    TRANSPORT_QUALITY = 90  # PNG maps this onto a zlib compression level

    # Output validation
    SIMILARITY_TOLERANCE = 5.0  # Per-channel mean, out of 255

    # Auto-upscale
    UPSCALE_MIN_BYTES = 100 * 1024
    UPSCALE_TARGET_BYTES = (190 * 1024, 200 * 1024)
    UPSCALE_MAX_FACTOR = 4.0
    UPSCALE_QUALITY = 90

    # Compression search
    COMPRESS_START_QUALITY = 90
    COMPRESS_SOFT_FLOOR = 30
    COMPRESS_HARD_FLOOR = 10
    COMPRESS_STEP = 5
    COMPRESS_MAX_ATTEMPTS = 20

    # Vector input
    RASTER_DENSITY = 300  # DPI used when rasterizing SVG input
    SVG_BASE_DENSITY = 96

    # Quality
    RESIZE_QUALITY = Image.Resampling.LANCZOS
    GAMMA = 2.2

    # Sharpening
    DEFAULT_SHARPNESS = 5

    @classmethod
    def gemini_api_key(cls) -> str | None:
        """Read the generative-fill API key from the environment."""
        return os.environ.get(cls.GEMINI_API_KEY_ENV) or None

"""Output encoding and post-processing for CanvasForge."""

from .format_optimizer import encode_for_format, wrap_raster_in_svg
from .upscale import auto_upscale_if_needed, upscale_factor

__all__ = [
    "auto_upscale_if_needed",
    "encode_for_format",
    "upscale_factor",
    "wrap_raster_in_svg",
]

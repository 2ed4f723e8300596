"""Final encoding per requested output format."""

from __future__ import annotations

import base64
import logging

from PIL import Image

from ..codec import RasterCodec, get_codec
from ..constants import SVG_NAMESPACE, XLINK_NAMESPACE
from ..enums import OutputFormat
from ..models import ProcessingOptions

logger = logging.getLogger("canvasforge.output.format_optimizer")


def encode_for_format(
    image: Image.Image,
    options: ProcessingOptions,
    codec: RasterCodec | None = None,
) -> bytes:
    """Encode ``image`` as ``options.format`` at ``options.quality``.

    SVG output of a raster is raster-in-vector packaging: the pixels are
    re-encoded as PNG and embedded in a minimal SVG document of the same
    size. No tracing or vectorization happens.
    """
    codec = codec or get_codec()
    fmt = OutputFormat.parse(options.format)

    if fmt is OutputFormat.SVG:
        png = codec.encode(image, OutputFormat.PNG.value, options.quality)
        logger.debug("Packaging %dx%d raster into SVG", image.width, image.height)
        return wrap_raster_in_svg(png, image.width, image.height)

    return codec.encode(image, fmt.value, options.quality)


def wrap_raster_in_svg(png_bytes: bytes, width: int, height: int) -> bytes:
    """Embed PNG bytes as a base64 data URI in an SVG sized to the raster."""
    encoded = base64.b64encode(png_bytes).decode("ascii")
    markup = (
        f'<svg xmlns="{SVG_NAMESPACE}" xmlns:xlink="{XLINK_NAMESPACE}" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
        f'<image width="{width}" height="{height}" '
        f'xlink:href="data:image/png;base64,{encoded}"/>'
        f"</svg>"
    )
    return markup.encode("utf-8")

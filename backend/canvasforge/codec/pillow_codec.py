"""Pillow-backed raster codec, with cairosvg for vector input."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import Config
from ..exceptions import CodecError
from ..models import CropRect, ImageBuffer
from ..vector.markup import is_svg, parse_svg
from .base_codec import RasterCodec

logger = logging.getLogger("canvasforge.codec.pillow")

# Optional import: only needed for vector input
try:
    import cairosvg

    HAS_CAIROSVG = True
except (ImportError, OSError):
    HAS_CAIROSVG = False
    logger.info("cairosvg not available. Vector input cannot be rasterized.")


class PillowCodec(RasterCodec):
    """Decode/encode/resample images with Pillow.

    Vector input is rasterized once at ``Config.RASTER_DENSITY`` DPI.
    """

    def decode(self, data: bytes) -> Image.Image:
        if is_svg(data):
            data = self.rasterize_svg(data)

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise CodecError(f"decode: could not read image data: {e}") from e

        # Respect camera orientation so width/height match what users see
        image = ImageOps.exif_transpose(image)

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")
        return image

    def probe(self, data: bytes) -> ImageBuffer:
        if is_svg(data):
            size = parse_svg(data).intrinsic_size()
            if size is None:
                raise CodecError("probe: SVG has neither width/height nor viewBox")
            scale = Config.RASTER_DENSITY / Config.SVG_BASE_DENSITY
            return ImageBuffer(
                data=data,
                width=max(1, round(size[0] * scale)),
                height=max(1, round(size[1] * scale)),
                format="svg",
            )

        try:
            with Image.open(io.BytesIO(data)) as image:
                transposed = ImageOps.exif_transpose(image)
                width, height = transposed.size
                fmt = (image.format or "unknown").lower()
        except (UnidentifiedImageError, OSError) as e:
            raise CodecError(f"probe: could not read image header: {e}") from e

        return ImageBuffer(data=data, width=width, height=height, format=fmt)

    def rasterize_svg(self, data: bytes) -> bytes:
        """Render SVG markup to PNG bytes at the configured density."""
        if not HAS_CAIROSVG:
            raise CodecError("rasterize: cairosvg is required for SVG input. Run: pip install cairosvg")

        parse_svg(data)
        try:
            return cairosvg.svg2png(
                bytestring=data,
                scale=Config.RASTER_DENSITY / Config.SVG_BASE_DENSITY,
            )
        except Exception as e:
            raise CodecError(f"rasterize: could not render SVG: {e}") from e

    def encode(self, image: Image.Image, fmt: str, quality: int) -> bytes:
        fmt = fmt.lower()
        out = io.BytesIO()
        try:
            if fmt in ("jpeg", "jpg"):
                flatten_alpha(image).save(
                    out, format="JPEG", quality=int(quality), optimize=True, progressive=True
                )
            elif fmt == "png":
                image.save(out, format="PNG", optimize=False, compress_level=png_compress_level(quality))
            elif fmt == "webp":
                image.save(out, format="WEBP", quality=int(quality), method=4)
            else:
                raise CodecError(f"encode: unsupported raster format '{fmt}'")
        except (OSError, KeyError, ValueError) as e:
            raise CodecError(f"encode: could not write {fmt}: {e}") from e
        return out.getvalue()

    def resize(
        self, image: Image.Image, size: tuple[int, int], kernel: Image.Resampling
    ) -> Image.Image:
        return image.resize(size, kernel)

    def extract(self, image: Image.Image, rect: CropRect) -> Image.Image:
        if rect.left < 0 or rect.top < 0 or rect.right > image.width or rect.bottom > image.height:
            raise CodecError(
                f"extract: region {rect} exceeds image bounds {image.width}x{image.height}"
            )
        return image.crop(rect.to_box())

    def composite(
        self,
        canvas: Image.Image,
        layers: list[tuple[Image.Image, int, int]],
    ) -> Image.Image:
        result = canvas.copy()
        for layer, left, top in layers:
            if layer.mode == "RGBA":
                result.paste(layer, (left, top), layer)
            else:
                result.paste(layer, (left, top))
        return result

    def stats(self, image: Image.Image) -> tuple[float, ...]:
        arr = np.asarray(image.convert("RGB"), dtype=np.float64)
        if arr.size == 0:
            raise CodecError("stats: image has no pixels")
        return tuple(float(v) for v in arr.reshape(-1, 3).mean(axis=0))


def flatten_alpha(image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Composite transparency onto a solid background (for JPEG)."""
    if image.mode == "RGB":
        return image
    rgba = image.convert("RGBA")
    base = Image.new("RGB", rgba.size, background)
    base.paste(rgba, mask=rgba.getchannel("A"))
    return base


def png_compress_level(quality: int) -> int:
    """Map a 0-100 quality onto zlib's 0-9 (higher quality, less effort)."""
    return max(0, min(9, round((100 - quality) / 11)))

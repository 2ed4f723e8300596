"""Abstract raster codec capability."""

from __future__ import annotations

from abc import ABC, abstractmethod

from PIL import Image

from ..models import CropRect, ImageBuffer


class RasterCodec(ABC):
    """Abstract base class for the raster codec used by every pipeline stage."""

    @abstractmethod
    def decode(self, data: bytes) -> Image.Image:
        """Decode raster or vector bytes into an image.

        Raises:
            CodecError: If the bytes cannot be decoded.
        """
        ...

    @abstractmethod
    def probe(self, data: bytes) -> ImageBuffer:
        """Read width, height and format without keeping the decoded pixels."""
        ...

    @abstractmethod
    def encode(self, image: Image.Image, fmt: str, quality: int) -> bytes:
        """Encode an image as ``fmt`` (jpeg, png, webp)."""
        ...

    @abstractmethod
    def resize(
        self, image: Image.Image, size: tuple[int, int], kernel: Image.Resampling
    ) -> Image.Image:
        """Resample to exactly ``size`` (fill-style, aspect not preserved)."""
        ...

    @abstractmethod
    def extract(self, image: Image.Image, rect: CropRect) -> Image.Image:
        """Extract a rectangular region."""
        ...

    @abstractmethod
    def composite(
        self,
        canvas: Image.Image,
        layers: list[tuple[Image.Image, int, int]],
    ) -> Image.Image:
        """Paste ``(image, left, top)`` layers onto ``canvas`` in order."""
        ...

    @abstractmethod
    def stats(self, image: Image.Image) -> tuple[float, ...]:
        """Per-channel mean intensity (R, G, B)."""
        ...

    def to_buffer(self, image: Image.Image, fmt: str, quality: int) -> ImageBuffer:
        """Encode ``image`` and wrap it with its metadata."""
        data = self.encode(image, fmt, quality)
        return ImageBuffer(data=data, width=image.width, height=image.height, format=fmt)

"""Data structures for CanvasForge."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from .enums import OutputFormat, StrategyType
from .exceptions import ProcessingCancelledError


@dataclass(frozen=True)
class Dimensions:
    """Pixel geometry of an image, an expansion target or a crop target."""
    width: int
    height: int

    @property
    def ratio(self) -> float:
        return self.width / self.height

    def scale(self, factor: float) -> Dimensions:
        return Dimensions(
            width=max(1, round(self.width * factor)),
            height=max(1, round(self.height * factor)),
        )

    def fits_within(self, other: Dimensions) -> bool:
        return self.width <= other.width and self.height <= other.height

    def to_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class AspectRatio:
    """Width:height ratio such as 9:16."""
    width: int
    height: int

    @property
    def value(self) -> float:
        return self.width / self.height

    @classmethod
    def parse(cls, text: str) -> AspectRatio:
        """Parse ``"W:H"`` into an AspectRatio."""
        try:
            w, h = (int(part) for part in text.split(":"))
        except ValueError as e:
            raise ValueError(f"Invalid aspect ratio '{text}', expected W:H") from e
        return cls(w, h)

    def __str__(self) -> str:
        return f"{self.width}:{self.height}"


@dataclass(frozen=True)
class CropRect:
    """Extraction window inside an image."""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def to_box(self) -> tuple[int, int, int, int]:
        """Pillow ``crop`` box."""
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class EdgeColor:
    """Representative background color sampled from image borders."""
    r: int
    g: int
    b: int

    def to_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


@dataclass(frozen=True)
class ImageBuffer:
    """Encoded image bytes plus decoded metadata."""
    data: bytes
    width: int
    height: int
    format: str

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    @property
    def mime_type(self) -> str:
        fmt = self.format.lower()
        if fmt == "svg":
            return "image/svg+xml"
        return f"image/{'jpeg' if fmt == 'jpg' else fmt}"

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ProcessingOptions:
    """Immutable encoding options for one request."""
    target_dimensions: Dimensions
    quality: int = 80
    format: OutputFormat = OutputFormat.JPEG


@dataclass(frozen=True)
class ExtensionStrategy:
    """Tagged choice of fill approach."""
    type: StrategyType = StrategyType.AI

    @classmethod
    def ai(cls) -> ExtensionStrategy:
        return cls(StrategyType.AI)

    @classmethod
    def deterministic(cls) -> ExtensionStrategy:
        return cls(StrategyType.DETERMINISTIC)

    @classmethod
    def default(cls, ai_configured: bool) -> ExtensionStrategy:
        """AI when a generative backend is configured, deterministic otherwise."""
        return cls.ai() if ai_configured else cls.deterministic()


@dataclass(frozen=True)
class ImageMetadata:
    """Metadata read back from a produced buffer."""
    width: int
    height: int
    format: str
    size_bytes: int


@dataclass(frozen=True)
class ProcessedImage:
    """Terminal artifact of a processing request."""
    buffer: bytes
    metadata: ImageMetadata
    used_fallback: bool = False
    was_upscaled: bool = False
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class ProcessingRequest:
    """One independent unit of work for batch processing."""
    name: str
    buffer: bytes
    target: Dimensions | AspectRatio
    options: ProcessingOptions
    strategy: ExtensionStrategy | None = None
    original_dimensions: Dimensions | None = None


class CancellationToken:
    """Cooperative cancellation flag checked between pipeline stages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self, stage: str) -> None:
        """Raise if cancellation was requested before ``stage``."""
        if self._event.is_set():
            raise ProcessingCancelledError(f"Request cancelled before {stage}")

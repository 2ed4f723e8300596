"""Custom exception hierarchy for CanvasForge."""

from __future__ import annotations


class CanvasForgeError(Exception):
    """Base exception for all CanvasForge errors."""


class ProcessingError(CanvasForgeError):
    """Raised when a request cannot produce any output.

    ``stage`` names the pipeline stage that exhausted all options.
    """

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class CodecUnavailableError(CanvasForgeError):
    """Raised when the raster codec capability cannot be initialized."""


class CodecError(CanvasForgeError):
    """Raised when decoding or encoding an image buffer fails."""


class GenerativeFillError(CanvasForgeError):
    """Raised when the generative fill service gives up.

    ``attempt_errors`` keeps the message of every failed attempt in order.
    """

    def __init__(self, message: str, attempt_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.attempt_errors = list(attempt_errors or [])


class GenerativeFillNoopError(GenerativeFillError):
    """Raised when the service "succeeds" but returns the input unchanged."""


class VectorMarkupInvalidError(CanvasForgeError):
    """Raised when vector markup cannot be parsed."""


class UpscaleError(CanvasForgeError):
    """Raised when automatic upscaling fails."""


class ValidationError(CanvasForgeError):
    """Raised when input validation fails."""


class ProcessingCancelledError(CanvasForgeError):
    """Raised when a request is cancelled between stages."""

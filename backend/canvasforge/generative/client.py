"""Generative fill client with bounded retries."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..codec import RasterCodec, get_codec
from ..config import Config
from ..exceptions import GenerativeFillError, ProcessingCancelledError
from ..models import CancellationToken, Dimensions, ImageBuffer
from .backend import GenerativeBackend
from .prompts import ENHANCEMENT_PROMPT, build_extension_prompt
from .scratch import ScratchSpace

logger = logging.getLogger("canvasforge.generative.client")

_TRANSPORT_FORMATS = {"png", "jpeg", "webp"}


class GenerativeFillClient:
    """Submit an image and an instruction to a generative backend.

    Up to ``max_attempts`` sequential attempts with a wait of
    ``backoff_seconds * attempt`` between them (1 s, then 2 s by default).
    Attempts are never run concurrently: a second in-flight call would
    double the cost for nothing. Every attempt must yield exactly one
    decodable image; an empty response is a failed attempt.

    Usage:
        client = GenerativeFillClient(GeminiImageBackend(api_key))
        expanded = client.generate(buffer, Dimensions(1200, 900))
    """

    def __init__(
        self,
        backend: GenerativeBackend,
        codec: RasterCodec | None = None,
        max_attempts: int = Config.AI_MAX_ATTEMPTS,
        backoff_seconds: float = Config.AI_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.backend = backend
        self.codec = codec or get_codec()
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def generate(
        self,
        image: ImageBuffer,
        target_dimensions: Dimensions,
        cancel_token: CancellationToken | None = None,
    ) -> ImageBuffer:
        """Ask the backend to extend ``image`` to ``target_dimensions``.

        Raises:
            GenerativeFillError: After all attempts failed.
            ProcessingCancelledError: If cancelled between attempts.
        """
        prompt = build_extension_prompt(image.dimensions, target_dimensions)
        return self._submit_with_retry("generative fill", prompt, image, cancel_token)

    def enhance(
        self, image: ImageBuffer, cancel_token: CancellationToken | None = None
    ) -> ImageBuffer:
        """Ask the backend for a same-size quality enhancement of ``image``."""
        return self._submit_with_retry("generative enhance", ENHANCEMENT_PROMPT, image, cancel_token)

    def _submit_with_retry(
        self,
        operation: str,
        prompt: str,
        image: ImageBuffer,
        cancel_token: CancellationToken | None,
    ) -> ImageBuffer:
        errors: list[str] = []

        with ScratchSpace() as scratch:
            payload, mime_type = self._encode_for_transport(image, scratch)

            for attempt in range(1, self.max_attempts + 1):
                if cancel_token is not None:
                    cancel_token.check(f"{operation} attempt {attempt}")

                try:
                    parts = self.backend.submit(prompt, payload, mime_type)
                    result = self._single_image(parts)
                    logger.info(
                        "%s succeeded on attempt %d/%d (%dx%d)",
                        operation, attempt, self.max_attempts, result.width, result.height,
                    )
                    return result
                except ProcessingCancelledError:
                    raise
                except Exception as e:
                    message = f"attempt {attempt}/{self.max_attempts}: {e}"
                    errors.append(message)
                    logger.warning("%s %s", operation, message)

                if attempt < self.max_attempts:
                    self._sleep(self.backoff_seconds * attempt)

        raise GenerativeFillError(
            f"{operation} failed after {self.max_attempts} attempts: {'; '.join(errors)}",
            attempt_errors=errors,
        )

    def _encode_for_transport(
        self, image: ImageBuffer, scratch: ScratchSpace
    ) -> tuple[bytes, str]:
        """Raster bytes the service accepts, re-encoded to PNG otherwise."""
        if image.format.lower() in _TRANSPORT_FORMATS:
            buf = scratch.acquire(image.data)
            return buf.getvalue(), image.mime_type

        decoded = self.codec.decode(image.data)
        fmt = Config.TRANSPORT_FORMAT.lower()
        buf = scratch.acquire(self.codec.encode(decoded, fmt, Config.TRANSPORT_QUALITY))
        return buf.getvalue(), f"image/{fmt}"

    def _single_image(self, parts: list[bytes]) -> ImageBuffer:
        if not parts:
            raise GenerativeFillError("No image data returned from the generative model")
        if len(parts) > 1:
            logger.warning("Generative model returned %d images, using the first", len(parts))
        return self.codec.probe(parts[0])

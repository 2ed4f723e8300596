"""Generative image service backends."""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod

from ..config import Config
from ..exceptions import GenerativeFillError

logger = logging.getLogger("canvasforge.generative.backend")

# Optional import: the AI strategy is disabled without it
try:
    from google import genai
    from google.genai import types

    HAS_GENAI = True
except ImportError:
    HAS_GENAI = False
    logger.info("google-genai not available. Generative fill disabled.")


class GenerativeBackend(ABC):
    """Abstract capability: image plus instruction in, image parts out."""

    @abstractmethod
    def submit(self, instruction: str, image_bytes: bytes, mime_type: str) -> list[bytes]:
        """Submit one request.

        Args:
            instruction: Natural-language edit instruction.
            image_bytes: Encoded source image.
            mime_type: MIME type of ``image_bytes``.

        Returns:
            Image payloads found in the response (possibly empty).

        Raises:
            Exception: Any transport, timeout or service error. Callers treat
                all of them as retriable.
        """
        ...


class GeminiImageBackend(GenerativeBackend):
    """Gemini image-editing model through the google-genai SDK."""

    def __init__(self, api_key: str, model: str = Config.GEMINI_MODEL) -> None:
        if not HAS_GENAI:
            raise GenerativeFillError("google-genai is required. Run: pip install google-genai")
        if not api_key:
            raise GenerativeFillError("Gemini API key not configured")
        self.model = model
        self._client = genai.Client(api_key=api_key)

    def submit(self, instruction: str, image_bytes: bytes, mime_type: str) -> list[bytes]:
        response = self._client.models.generate_content(
            model=self.model,
            contents=[
                types.Part.from_text(text=instruction),
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            ],
            config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
        )
        return extract_image_parts(response)


def extract_image_parts(response: object) -> list[bytes]:
    """Collect inline image payloads from a generate_content response."""
    images: list[bytes] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline else None
            if not data:
                continue
            if isinstance(data, str):
                data = base64.b64decode(data)
            images.append(bytes(data))
    return images


def create_backend(api_key: str | None = None) -> GenerativeBackend | None:
    """Build the Gemini backend if a key is available, else None."""
    api_key = api_key or Config.gemini_api_key()
    if not api_key:
        logger.warning("Gemini API key not found - AI features will be disabled")
        return None
    if not HAS_GENAI:
        logger.warning("Gemini API key set but google-genai is not installed - AI features disabled")
        return None
    return GeminiImageBackend(api_key)

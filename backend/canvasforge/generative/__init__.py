"""Generative fill for CanvasForge."""

from .backend import GeminiImageBackend, GenerativeBackend, create_backend
from .client import GenerativeFillClient
from .scratch import ScratchSpace

__all__ = [
    "GeminiImageBackend",
    "GenerativeBackend",
    "GenerativeFillClient",
    "ScratchSpace",
    "create_backend",
]

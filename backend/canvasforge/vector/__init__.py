"""Vector-native processing for CanvasForge."""

from .markup import SvgDocument, is_svg, parse_svg
from .native import VectorNativeProcessor, detect_vector_background, extend_vector, resize_vector
from .optimizer import PassthroughOptimizer, ScourOptimizer, VectorOptimizer

__all__ = [
    "PassthroughOptimizer",
    "ScourOptimizer",
    "SvgDocument",
    "VectorNativeProcessor",
    "VectorOptimizer",
    "detect_vector_background",
    "extend_vector",
    "is_svg",
    "parse_svg",
    "resize_vector",
]

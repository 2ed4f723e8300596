"""Canvas extension stages for CanvasForge."""

from .aspect_crop import compute_aspect_crop, crop_to_aspect_ratio
from .canvas_extender import CanvasExtender, crop_to_exact_dimensions
from .edge_color import detect_edge_color, edge_band_thickness
from .similarity import are_images_different

__all__ = [
    "CanvasExtender",
    "are_images_different",
    "compute_aspect_crop",
    "crop_to_aspect_ratio",
    "crop_to_exact_dimensions",
    "detect_edge_color",
    "edge_band_thickness",
]

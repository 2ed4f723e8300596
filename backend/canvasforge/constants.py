"""Shared constants for CanvasForge."""

from __future__ import annotations

from .models import AspectRatio

# Aspect-ratio presets offered to callers
ASPECT_RATIO_PRESETS: dict[str, AspectRatio] = {
    "Instagram Stories/TikTok": AspectRatio(9, 16),
    "Portrait Print": AspectRatio(2, 3),
    "Widescreen": AspectRatio(16, 9),
    "Square": AspectRatio(1, 1),
    "Standard": AspectRatio(4, 3),
    "Landscape": AspectRatio(3, 2),
}

# Vector input is sniffed by its root tag in the leading bytes
SVG_SNIFF_BYTES = 1024

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

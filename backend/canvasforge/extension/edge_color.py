"""Representative background color from an image's border bands."""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from ..config import Config
from ..models import EdgeColor

logger = logging.getLogger("canvasforge.extension.edge_color")


def edge_band_thickness(width: int, height: int) -> int:
    """Band thickness: 3% of the smallest side, clamped to [3, 15] px."""
    band = int(min(width, height) * Config.EDGE_BAND_RATIO)
    return max(Config.EDGE_BAND_MIN, min(Config.EDGE_BAND_MAX, band))


def detect_edge_color(image: Image.Image) -> EdgeColor:
    """Sample the border bands of ``image`` and average their colors.

    Top and bottom bands span the full width; left and right bands skip the
    corners already covered by them. Top/bottom carry a heavier weight since
    horizontal letterboxing is the common case. Degenerate images fall back
    to the whole-image mean, then to white.

    Args:
        image: Source image (any mode).

    Returns:
        The weighted mean border color.
    """
    try:
        arr = np.asarray(image.convert("RGB"), dtype=np.float64)
        height, width = arr.shape[:2]
        if width == 0 or height == 0:
            return EdgeColor(*Config.FALLBACK_COLOR)

        band = edge_band_thickness(width, height)
        samples: list[tuple[np.ndarray, float]] = []

        if height > band:
            samples.append((arr[:band, :], Config.HORIZONTAL_EDGE_WEIGHT))
            samples.append((arr[height - band:, :], Config.HORIZONTAL_EDGE_WEIGHT))

        if width > band and height > 2 * band:
            samples.append((arr[band:height - band, :band], Config.VERTICAL_EDGE_WEIGHT))
            samples.append((arr[band:height - band, width - band:], Config.VERTICAL_EDGE_WEIGHT))

        if not samples:
            mean = arr.reshape(-1, 3).mean(axis=0)
            logger.debug("No edge bands for %dx%d image, using whole-image mean", width, height)
            return _to_color(mean)

        total_weight = sum(weight for _, weight in samples)
        weighted = sum(region.reshape(-1, 3).mean(axis=0) * weight for region, weight in samples)
        return _to_color(weighted / total_weight)
    except (ValueError, OSError, MemoryError) as e:
        logger.warning("Edge color detection failed, using white: %s", e)
        return EdgeColor(*Config.FALLBACK_COLOR)


def _to_color(mean: np.ndarray) -> EdgeColor:
    r, g, b = (int(np.clip(round(float(v)), 0, 255)) for v in mean)
    return EdgeColor(r, g, b)

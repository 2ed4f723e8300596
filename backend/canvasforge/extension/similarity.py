"""Cheap check that a generated image is not the input handed back."""

from __future__ import annotations

import logging

from ..codec import RasterCodec, get_codec
from ..config import Config
from ..exceptions import CodecError
from ..models import ImageBuffer

logger = logging.getLogger("canvasforge.extension.similarity")


def are_images_different(
    original: ImageBuffer | bytes,
    candidate: ImageBuffer | bytes,
    codec: RasterCodec | None = None,
    tolerance: float = Config.SIMILARITY_TOLERANCE,
) -> bool:
    """Return True unless ``candidate`` looks like ``original`` unchanged.

    Checks, cheapest first: byte length, decoded dimensions, then the mean of
    each RGB channel within ``tolerance``. This is a global statistic, not a
    pixel diff. It only needs to catch "literally unchanged" and leans toward
    reporting a difference. Any comparison failure counts as different.
    """
    original_data = original.data if isinstance(original, ImageBuffer) else original
    candidate_data = candidate.data if isinstance(candidate, ImageBuffer) else candidate

    if len(original_data) != len(candidate_data):
        return True

    codec = codec or get_codec()
    try:
        first = codec.decode(original_data)
        second = codec.decode(candidate_data)
    except CodecError as e:
        logger.warning("Error comparing images, assuming they are different: %s", e)
        return True

    if first.size != second.size:
        return True

    first_means = codec.stats(first)
    second_means = codec.stats(second)
    for channel, (a, b) in enumerate(zip(first_means, second_means)):
        if abs(a - b) > tolerance:
            logger.debug("Channel %d mean differs: %.2f vs %.2f", channel, a, b)
            return True

    return False

"""Vector markup optimizer capability."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger("canvasforge.vector.optimizer")

# Optional import
try:
    from scour import scour

    HAS_SCOUR = True
except ImportError:
    HAS_SCOUR = False
    logger.info("scour not installed. Vector output will not be optimized. Run: pip install scour")


class VectorOptimizer(ABC):
    """Take markup, return semantically equivalent (smaller) markup."""

    @abstractmethod
    def optimize(self, markup: str) -> str:
        ...


class ScourOptimizer(VectorOptimizer):
    """Optimize with scour, never dropping the viewBox or any id.

    Both are load-bearing: the viewBox drives scaling and ids may be
    referenced from outside the document. Unreferenced ``<defs>`` content
    is kept for the same reason. Group collapsing is off so the
    centering ``<g transform>`` survives.
    """

    def optimize(self, markup: str) -> str:
        if not HAS_SCOUR:
            return markup

        options = scour.sanitizeOptions()
        options.strip_ids = False
        options.shorten_ids = False
        options.keep_defs = True
        options.enable_viewboxing = False
        options.group_collapse = False
        options.strip_comments = True

        try:
            optimized = scour.scourString(markup, options)
        except Exception as e:
            logger.warning("Vector optimization failed, keeping markup as is: %s", e)
            return markup

        logger.debug("Optimized vector markup %d -> %d chars", len(markup), len(optimized))
        return optimized


class PassthroughOptimizer(VectorOptimizer):
    """Leave markup untouched."""

    def optimize(self, markup: str) -> str:
        return markup

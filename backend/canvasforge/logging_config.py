"""Structured logging configuration for CanvasForge."""

from __future__ import annotations

import logging
import os
import sys
import warnings

from PIL import Image


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure structured logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR). Defaults to
            ``CANVASFORGE_LOG_LEVEL`` or INFO.

    Returns:
        The root canvasforge logger.
    """
    level = level or os.environ.get("CANVASFORGE_LOG_LEVEL", "INFO")
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger("canvasforge")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid duplicate handlers on repeated calls
    if not root_logger.handlers:
        root_logger.addHandler(handler)

    # Pillow warns on every large decode once the pixel limit is raised
    warnings.filterwarnings("ignore", category=Image.DecompressionBombWarning)

    return root_logger

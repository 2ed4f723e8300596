"""Scoped scratch buffers for the generative-fill transport step."""

from __future__ import annotations

import io
import logging

logger = logging.getLogger("canvasforge.generative.scratch")


class ScratchSpace:
    """Hands out in-memory scratch buffers and releases them all on exit.

    Usage:
        with ScratchSpace() as scratch:
            buf = scratch.acquire(payload)
            ...
    """

    def __init__(self) -> None:
        self._buffers: list[io.BytesIO] = []

    def acquire(self, data: bytes = b"") -> io.BytesIO:
        buf = io.BytesIO(data)
        self._buffers.append(buf)
        return buf

    @property
    def active(self) -> int:
        """Number of buffers still open."""
        return sum(1 for buf in self._buffers if not buf.closed)

    def release(self) -> None:
        for buf in self._buffers:
            buf.close()
        if self._buffers:
            logger.debug("Released %d scratch buffer(s)", len(self._buffers))
        self._buffers.clear()

    def __enter__(self) -> ScratchSpace:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

"""
Choice of transcription strategy.

Oversized files always go through segmentation.  Files within the limit are
sent whole; if that first direct submission fails the pipeline asks the
model to transcribe by reference instead.  Segments never fall back to the
reference strategy; a failed segment becomes a placeholder line.
"""

from __future__ import annotations

import enum


class Strategy(enum.Enum):
    DIRECT = "direct"
    METADATA_ONLY = "metadata_only"
    SEGMENTED = "segmented"


def choose_strategy(size_bytes: int, max_size_bytes: int, *, direct_failed: bool = False) -> Strategy:
    """Return the strategy for a file of ``size_bytes``.

    Args:
        size_bytes: Size of the audio artifact.
        max_size_bytes: Largest size sent in a single request.
        direct_failed: Whether a direct submission of the whole file has
            already failed.
    """
    if size_bytes > max_size_bytes:
        return Strategy.SEGMENTED
    if direct_failed:
        return Strategy.METADATA_ONLY
    return Strategy.DIRECT

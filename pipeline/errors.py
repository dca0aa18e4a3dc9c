"""
Error kinds raised by the transcription pipeline.

Every per-URL failure is one of these.  The orchestrator in
:mod:`pipeline.tasks` catches them at the URL boundary and turns them into
error records, so a single bad link never aborts the rest of a batch.
"""

from __future__ import annotations


class VidscribeError(Exception):
    """Base error for the pipeline."""


class ConfigurationError(VidscribeError):
    """Raised when an environment setting cannot be parsed."""


class UnsupportedPlatform(VidscribeError):
    """Raised for URLs that are neither YouTube nor Twitter/X."""

    def __init__(self, url: str) -> None:
        super().__init__("Unsupported platform. Only YouTube and Twitter/X are supported")
        self.url = url


class InvalidURL(VidscribeError):
    """Raised when a supported URL does not carry a usable id."""


class AcquisitionFailed(VidscribeError):
    """Raised when audio could not be downloaded or transcoded."""


class SegmentationFailed(VidscribeError):
    """Raised when ffmpeg could not split an artifact into parts."""


class TranscriptionFailed(VidscribeError):
    """Raised when the inference service did not return a transcription."""


class MetadataLookupFailed(VidscribeError):
    """Raised by title lookups.  Callers always substitute a default title."""

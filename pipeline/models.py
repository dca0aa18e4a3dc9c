"""
Plain data types shared by the pipeline components.

All of them are frozen dataclasses: an artifact or a result is created once
by the component that owns it and is never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AudioArtifact:
    """A local audio file produced by acquisition or segmentation."""

    local_path: str
    title: str
    source_id: str


@dataclass(frozen=True)
class AudioTrackCandidate:
    """One selectable audio encoding offered by a source video.

    ``format_id`` is the downloader's handle for the stream and is only used
    to request it once selected.
    """

    has_audio_only: bool
    language: Optional[str] = None
    is_default_track: bool = False
    display_name: Optional[str] = None
    bitrate: Optional[float] = None
    format_id: Optional[str] = None


@dataclass(frozen=True)
class TranscriptionResult:
    title: str
    transcription: str


@dataclass(frozen=True)
class UrlResult:
    url: str
    title: str
    transcription: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "title": self.title, "transcription": self.transcription}


@dataclass(frozen=True)
class UrlError:
    url: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "error": self.error}


@dataclass
class BatchResult:
    """Successes and failures of one batch, each in input order."""

    results: List[UrlResult] = field(default_factory=list)
    errors: List[UrlError] = field(default_factory=list)
    total_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
            "totalProcessed": self.total_processed,
            "successCount": len(self.results),
            "errorCount": len(self.errors),
        }

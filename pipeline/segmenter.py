"""
Splitting of oversized audio into fixed-duration parts.

ffmpeg's segment muxer does the work with stream copy, so parts are cut at
the nearest frame boundary and never re-encoded.  Parts are numbered with a
fixed-width suffix (``_part_000``), which makes lexicographic order equal to
chronological order.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import List, Optional

from .artifact_store import ArtifactStore
from .errors import SegmentationFailed
from .models import AudioArtifact
from .process_utils import run_command

logger = logging.getLogger(__name__)


class Segmenter:
    def __init__(
        self,
        store: ArtifactStore,
        *,
        ffmpeg_path: str = "ffmpeg",
        timeout_s: Optional[float] = None,
    ) -> None:
        self.store = store
        self.ffmpeg_path = ffmpeg_path
        self.timeout_s = timeout_s

    def segment(self, artifact: AudioArtifact, max_duration_seconds: int) -> List[AudioArtifact]:
        """Split ``artifact`` into parts of at most ``max_duration_seconds``.

        Args:
            artifact: The parent audio file.  It is left in place.
            max_duration_seconds: Length of each part.

        Returns:
            The parts in playback order.  Titles carry a ``(part i/n)``
            suffix and every part keeps the parent's ``source_id``.

        Raises:
            SegmentationFailed: If ffmpeg fails or produces no parts.
        """
        if max_duration_seconds <= 0:
            raise SegmentationFailed("Segment duration must be positive")
        base, ext = os.path.splitext(os.path.basename(artifact.local_path))
        prefix = f"{base}_part_"
        pattern = self.store.put(f"{prefix}%03d{ext}")
        logger.info("Splitting audio file into segments of %s seconds...", max_duration_seconds)

        args = [
            self.ffmpeg_path,
            "-i",
            artifact.local_path,
            "-f",
            "segment",
            "-segment_time",
            str(max_duration_seconds),
            "-c",
            "copy",
            pattern,
        ]
        try:
            result = run_command(args, timeout_s=self.timeout_s)
        except (OSError, subprocess.SubprocessError) as exc:
            self._discard(prefix)
            raise SegmentationFailed(f"Error splitting audio file: {exc}") from exc
        if not result.ok:
            self._discard(prefix)
            detail = result.stderr.strip().splitlines()[-1:] or [f"exit code {result.returncode}"]
            raise SegmentationFailed(f"Error splitting audio file: {detail[0]}")

        paths = self.store.list(prefix)
        if not paths:
            raise SegmentationFailed("Audio file split produced no parts")
        logger.info("Audio file split into %d parts", len(paths))
        total = len(paths)
        return [
            AudioArtifact(
                local_path=path,
                title=f"{artifact.title} (part {i}/{total})",
                source_id=artifact.source_id,
            )
            for i, path in enumerate(paths, start=1)
        ]

    def _discard(self, prefix: str) -> None:
        for path in self.store.list(prefix):
            self.store.remove(path)

"""
Local store for temporary audio artifacts.

One store is created per process and handed to every component that
produces or consumes audio files.  The orchestrator empties it at the start
of each batch, so only one batch may use a given store at a time.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Filesystem directory holding the pipeline's temporary files."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = os.path.abspath(base_dir)
        os.makedirs(self.base_dir, exist_ok=True)

    def put(self, name: str) -> str:
        """Reserve the deterministic path for ``name`` inside the store.

        Nothing is written; the caller (a downloader or ffmpeg) creates the
        file at the returned path.
        """
        os.makedirs(self.base_dir, exist_ok=True)
        return os.path.join(self.base_dir, os.path.basename(name))

    def get(self, name: str) -> Optional[str]:
        """Return the path for ``name`` if the file already exists."""
        path = os.path.join(self.base_dir, os.path.basename(name))
        return path if os.path.isfile(path) else None

    def list(self, prefix: str) -> List[str]:
        """Return paths of files whose name starts with ``prefix``, sorted."""
        if not os.path.isdir(self.base_dir):
            return []
        names = sorted(n for n in os.listdir(self.base_dir) if n.startswith(prefix))
        return [os.path.join(self.base_dir, n) for n in names]

    def remove(self, path: Optional[str]) -> bool:
        """Delete ``path`` if it exists.

        Failures are logged and swallowed.

        Returns:
            ``True`` if a file was deleted.
        """
        if not path or not os.path.exists(path):
            return False
        try:
            os.remove(path)
        except OSError as exc:
            logger.error("Error deleting temporary file %s: %s", path, exc)
            return False
        logger.info("Deleted temporary file %s", path)
        return True

    def clear(self) -> int:
        """Delete every file in the store and return how many were removed."""
        logger.info("Clearing temporary folder %s", self.base_dir)
        if not os.path.isdir(self.base_dir):
            os.makedirs(self.base_dir, exist_ok=True)
            return 0
        deleted = 0
        for name in os.listdir(self.base_dir):
            path = os.path.join(self.base_dir, name)
            if os.path.isfile(path) and self.remove(path):
                deleted += 1
        if deleted:
            logger.info("Deleted %d temporary files", deleted)
        else:
            logger.info("Temporary folder is already empty")
        return deleted

"""
Runtime settings for the pipeline.

Values come from environment variables, optionally seeded from a ``.env``
file in the working directory:

* ``GEMINI_API_KEY`` – API key for the generative model.
* ``GEMINI_MODEL`` – Model used for transcription (default
  ``gemini-2.5-pro``).
* ``GEMINI_TIMEOUT_SECONDS`` – Optional per-request timeout.
* ``MAX_SIZE`` – Largest file, in MB, sent to the model in one request.
  Larger files are split into segments.
* ``SEGMENT_SIZE`` – Segment length in seconds.
* ``TEMP_DIR`` – Directory holding downloaded audio.  It is emptied at the
  start of every batch.
* ``FFMPEG_PATH`` / ``YTDLP_PATH`` – Binaries used for segmentation and
  Twitter/X extraction.
* ``SUBPROCESS_TIMEOUT_SECONDS`` – Optional timeout for those binaries.
* ``METADATA_TIMEOUT_SECONDS`` – Timeout for title lookups.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_MODEL = "gemini-2.5-pro"


def _number(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_timeout_seconds: Optional[float] = None
    max_size_mb: float = 20.0
    segment_seconds: int = 600
    temp_dir: str = "temp"
    ffmpeg_path: str = "ffmpeg"
    ytdlp_path: str = "yt-dlp"
    subprocess_timeout_seconds: Optional[float] = None
    metadata_timeout_seconds: float = 10.0

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ`` after
        loading ``.env``).

        Raises:
            ConfigurationError: If a numeric variable is malformed.
        """
        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            gemini_model=env.get("GEMINI_MODEL") or DEFAULT_MODEL,
            gemini_timeout_seconds=_number(env, "GEMINI_TIMEOUT_SECONDS", None),
            max_size_mb=_number(env, "MAX_SIZE", cls.max_size_mb),
            segment_seconds=int(_number(env, "SEGMENT_SIZE", cls.segment_seconds)),
            temp_dir=env.get("TEMP_DIR") or cls.temp_dir,
            ffmpeg_path=env.get("FFMPEG_PATH") or cls.ffmpeg_path,
            ytdlp_path=env.get("YTDLP_PATH") or cls.ytdlp_path,
            subprocess_timeout_seconds=_number(env, "SUBPROCESS_TIMEOUT_SECONDS", None),
            metadata_timeout_seconds=_number(
                env, "METADATA_TIMEOUT_SECONDS", cls.metadata_timeout_seconds
            ),
        )

"""
Audio acquisition for YouTube and Twitter/X links.

Both acquirers turn a URL into an :class:`~pipeline.models.AudioArtifact`
stored as MP3 in the shared :class:`~pipeline.artifact_store.ArtifactStore`:

* YouTube audio is fetched with the ``yt_dlp`` library.  The available
  audio-only streams are ranked by :func:`~pipeline.track_selector.select_track`,
  the chosen one is downloaded and then transcoded to 128 kbps MP3 with
  ``pydub``.  A file already present for the same video id is reused.
* Twitter/X broadcasts and posts are handed to the ``yt-dlp`` command line,
  which extracts the audio straight to MP3.

Title lookups are best effort; a synthetic title is used when they fail.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any, Callable, Dict, List, Optional

import requests
import yt_dlp
from pydub import AudioSegment

from . import platforms
from .artifact_store import ArtifactStore
from .errors import AcquisitionFailed, MetadataLookupFailed, UnsupportedPlatform
from .models import AudioArtifact, AudioTrackCandidate
from .platforms import Platform
from .process_utils import run_command
from .track_selector import select_track

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"
DEFAULT_AUDIO_FILTER = "bestaudio/best"
MP3_BITRATE = "128k"
# yt-dlp ranks the default audio track of a multi-language video with this
# language_preference value.
DEFAULT_TRACK_PREFERENCE = 10


def candidate_from_format(fmt: Dict[str, Any]) -> AudioTrackCandidate:
    """Build a track candidate from a yt-dlp format dictionary."""
    acodec = fmt.get("acodec")
    note = fmt.get("format_note") or None
    preference = fmt.get("language_preference")
    is_default = (preference is not None and preference >= DEFAULT_TRACK_PREFERENCE) or (
        note is not None and "(default)" in note
    )
    return AudioTrackCandidate(
        has_audio_only=fmt.get("vcodec") == "none" and acodec not in (None, "none"),
        language=fmt.get("language") or None,
        is_default_track=bool(is_default),
        display_name=note,
        bitrate=fmt.get("abr") or fmt.get("tbr"),
        format_id=fmt.get("format_id"),
    )


class YouTubeAcquirer:
    def __init__(
        self,
        store: ArtifactStore,
        *,
        metadata_timeout_s: float = 10.0,
        ydl_factory: Callable[[Dict[str, Any]], Any] = yt_dlp.YoutubeDL,
        http_get: Callable[..., Any] = requests.get,
    ) -> None:
        self.store = store
        self.metadata_timeout_s = metadata_timeout_s
        self.ydl_factory = ydl_factory
        self.http_get = http_get

    def lookup_title(self, video_id: str) -> str:
        """Fetch the video title from YouTube's oEmbed endpoint.

        Raises:
            MetadataLookupFailed: On any HTTP error or missing title.
        """
        try:
            response = self.http_get(
                OEMBED_URL,
                params={"url": f"https://www.youtube.com/watch?v={video_id}", "format": "json"},
                timeout=self.metadata_timeout_s,
            )
            response.raise_for_status()
            title = (response.json() or {}).get("title")
        except (requests.RequestException, ValueError) as exc:
            raise MetadataLookupFailed(str(exc)) from exc
        if not title:
            raise MetadataLookupFailed("oEmbed response has no title")
        return title

    def _title(self, video_id: str) -> str:
        try:
            title = self.lookup_title(video_id)
        except MetadataLookupFailed as exc:
            logger.info("Failed to get video information via API, using ID as title: %s", exc)
            return f"YouTube Video {video_id}"
        logger.info("Retrieved video title: %s", title)
        return title

    def _options(self, **extra: Any) -> Dict[str, Any]:
        opts: Dict[str, Any] = {"quiet": True, "no_warnings": True, "noprogress": True}
        opts.update(extra)
        return opts

    def list_candidates(self, url: str) -> List[AudioTrackCandidate]:
        with self.ydl_factory(self._options()) as ydl:
            info = ydl.extract_info(url, download=False)
        formats = (info or {}).get("formats") or []
        return [c for c in map(candidate_from_format, formats) if c.has_audio_only]

    def _download(self, url: str, video_id: str, format_spec: str) -> str:
        template = self.store.put(f"{video_id}.source.%(ext)s")
        with self.ydl_factory(self._options(format=format_spec, outtmpl=template)) as ydl:
            info = ydl.extract_info(url, download=True)
            downloads = info.get("requested_downloads") or []
            if downloads and downloads[0].get("filepath"):
                return downloads[0]["filepath"]
            return ydl.prepare_filename(info)

    def acquire(self, url: str) -> AudioArtifact:
        """Download the audio of a YouTube video as MP3.

        Raises:
            InvalidURL: If the URL carries no 11-character video id.
            AcquisitionFailed: If the stream could not be fetched or
                transcoded.
        """
        video_id = platforms.youtube_id(url)
        name = f"{video_id}.mp3"
        output_path = self.store.put(name)

        logger.info("Getting video information for ID: %s", video_id)
        title = self._title(video_id)

        cached = self.store.get(name)
        if cached:
            logger.info("Audio file already exists, skipping download")
            return AudioArtifact(local_path=cached, title=title, source_id=video_id)

        try:
            selected = select_track(self.list_candidates(url))
            if selected is not None and selected.format_id:
                logger.info(
                    "Selected audio format: %s (%s, language=%s)",
                    selected.format_id,
                    selected.display_name or "no name",
                    selected.language or "none",
                )
                format_spec = selected.format_id
            else:
                logger.info("Selected audio format: using default filter")
                format_spec = DEFAULT_AUDIO_FILTER

            logger.info("Starting audio stream download...")
            source_path = self._download(url, video_id, format_spec)
            logger.info("Starting audio conversion...")
            AudioSegment.from_file(source_path).export(
                output_path, format="mp3", bitrate=MP3_BITRATE
            )
        except Exception as exc:
            self.store.remove(output_path)
            raise AcquisitionFailed(f"Error getting audio stream: {exc}") from exc
        finally:
            # includes yt-dlp .part leftovers
            for leftover in self.store.list(f"{video_id}.source."):
                self.store.remove(leftover)

        logger.info("Audio successfully downloaded and converted: %s", output_path)
        return AudioArtifact(local_path=output_path, title=title, source_id=video_id)


class TwitterAcquirer:
    def __init__(
        self,
        store: ArtifactStore,
        *,
        ytdlp_path: str = "yt-dlp",
        ffmpeg_path: str = "ffmpeg",
        timeout_s: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ytdlp_path = ytdlp_path
        self.ffmpeg_path = ffmpeg_path
        self.timeout_s = timeout_s
        self.clock = clock

    def lookup_title(self, url: str) -> str:
        """Ask yt-dlp for the post title without downloading anything.

        Raises:
            MetadataLookupFailed: If yt-dlp fails or prints nothing.
        """
        try:
            result = run_command(
                [self.ytdlp_path, "--skip-download", "--print", "title", url],
                timeout_s=self.timeout_s,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise MetadataLookupFailed(str(exc)) from exc
        title = result.stdout.strip()
        if not result.ok or not title:
            raise MetadataLookupFailed(result.stderr.strip() or "yt-dlp printed no title")
        return title.splitlines()[0]

    def _title(self, url: str, post_id: str) -> str:
        try:
            return self.lookup_title(url)
        except MetadataLookupFailed as exc:
            logger.error("Error getting Twitter video title: %s", exc)
            return f"Twitter/X Content ({post_id})"

    def _remove_stale(self, name: str) -> None:
        for stale in (f"{name}.mp3", f"{name}.temp"):
            path = self.store.get(stale)
            if path:
                logger.info("Removing stale file %s before download", path)
                self.store.remove(path)

    def _discard(self, unique_path: str) -> None:
        for leftover in self.store.list(os.path.basename(unique_path)):
            self.store.remove(leftover)

    def acquire(self, url: str) -> AudioArtifact:
        """Extract the audio of a Twitter/X broadcast or post as MP3.

        Raises:
            InvalidURL: If the URL is not a broadcast or status link.
            AcquisitionFailed: If yt-dlp fails or leaves no MP3 behind.
        """
        logger.info("Processing Twitter/X URL: %s", url)
        kind, post_id = platforms.twitter_ref(url)
        name = f"twitter_{kind}_{post_id}"
        self._remove_stale(name)

        title = self._title(url, post_id)
        logger.info("Retrieved Twitter/X video title: %s", title)

        unique = self.store.put(f"{name}_{int(self.clock() * 1000)}")
        final_path = f"{unique}.mp3"
        args = [
            self.ytdlp_path,
            url,
            "-x",
            "--audio-format",
            "mp3",
            "--audio-quality",
            "0",
            "-o",
            f"{unique}.%(ext)s",
            "--quiet",
            "--no-warnings",
            "--no-progress",
        ]
        if self.ffmpeg_path != "ffmpeg":
            args += ["--ffmpeg-location", self.ffmpeg_path]

        logger.info("Downloading audio from Twitter/X...")
        try:
            result = run_command(args, timeout_s=self.timeout_s)
        except (OSError, subprocess.SubprocessError) as exc:
            self._discard(unique)
            raise AcquisitionFailed(f"Error downloading Twitter/X audio: {exc}") from exc
        if not result.ok:
            self._discard(unique)
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise AcquisitionFailed(f"Error downloading Twitter/X audio: {detail}")
        if not os.path.isfile(final_path):
            self._discard(unique)
            raise AcquisitionFailed("Audio file was not downloaded")

        logger.info("Audio successfully downloaded: %s", final_path)
        return AudioArtifact(local_path=final_path, title=title, source_id=post_id)


class AudioAcquirer:
    """Dispatches a URL to the acquirer for its platform."""

    def __init__(self, youtube: YouTubeAcquirer, twitter: TwitterAcquirer) -> None:
        self._by_platform = {Platform.YOUTUBE: youtube, Platform.TWITTER_X: twitter}

    def acquire(self, url: str, platform: Optional[Platform] = None) -> AudioArtifact:
        """Acquire audio for ``url``.

        Raises:
            UnsupportedPlatform: If the URL is not YouTube or Twitter/X.
        """
        platform = platform or platforms.classify(url)
        acquirer = self._by_platform.get(platform)
        if acquirer is None:
            raise UnsupportedPlatform(url)
        return acquirer.acquire(url)

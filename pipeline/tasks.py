"""
Orchestration layer for the transcription pipeline.

:class:`TranscriptionPipeline` is called from the HTTP entrypoint in
:mod:`vidscribe.main`.  For every URL in a batch it:

* classifies the link as YouTube or Twitter/X (anything else is rejected);
* downloads the audio into the artifact store;
* routes by file size: small files are sent whole to Gemini (falling back
  to a by-reference prompt if that fails), large files are cut into
  segments that are transcribed one by one and joined;
* deletes every file it created, whatever happened.

URLs are processed one after another.  A failure only produces an error
record for that URL; the rest of the batch carries on.
"""

from __future__ import annotations

import enum
import logging
import os
from typing import Iterable, List, Optional

from .artifact_store import ArtifactStore
from .audio_acquirer import AudioAcquirer, TwitterAcquirer, YouTubeAcquirer
from .config import Settings
from .errors import TranscriptionFailed, UnsupportedPlatform
from .models import AudioArtifact, BatchResult, TranscriptionResult, UrlError, UrlResult
from .platforms import Platform, classify
from .routing import Strategy, choose_strategy
from .segmenter import Segmenter
from .stt_service import TranscriptionClient

logger = logging.getLogger(__name__)

SEGMENT_ERROR_TEMPLATE = "[Error transcribing part {index}]"


class State(enum.Enum):
    CLASSIFYING = "classifying"
    ACQUIRING = "acquiring"
    ROUTING = "routing"
    DIRECT = "direct"
    SEGMENTING = "segmenting"
    TRANSCRIBING = "transcribing"
    CLEANING = "cleaning"
    DONE = "done"


class TranscriptionPipeline:
    def __init__(
        self,
        store: ArtifactStore,
        acquirer: AudioAcquirer,
        segmenter: Segmenter,
        client: TranscriptionClient,
        *,
        max_size_bytes: int,
        segment_seconds: int,
    ) -> None:
        self.store = store
        self.acquirer = acquirer
        self.segmenter = segmenter
        self.client = client
        self.max_size_bytes = max_size_bytes
        self.segment_seconds = segment_seconds

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store: Optional[ArtifactStore] = None,
        client: Optional[TranscriptionClient] = None,
    ) -> "TranscriptionPipeline":
        store = store or ArtifactStore(settings.temp_dir)
        acquirer = AudioAcquirer(
            YouTubeAcquirer(store, metadata_timeout_s=settings.metadata_timeout_seconds),
            TwitterAcquirer(
                store,
                ytdlp_path=settings.ytdlp_path,
                ffmpeg_path=settings.ffmpeg_path,
                timeout_s=settings.subprocess_timeout_seconds,
            ),
        )
        segmenter = Segmenter(
            store,
            ffmpeg_path=settings.ffmpeg_path,
            timeout_s=settings.subprocess_timeout_seconds,
        )
        return cls(
            store,
            acquirer,
            segmenter,
            client or TranscriptionClient.from_settings(settings),
            max_size_bytes=settings.max_size_bytes,
            segment_seconds=settings.segment_seconds,
        )

    def process_batch(self, urls: Iterable[str]) -> BatchResult:
        """Transcribe every URL in order.

        The artifact store is emptied first, so leftovers of an earlier
        batch never leak into this one.
        """
        urls = list(urls)
        self.store.clear()
        batch = BatchResult(total_processed=len(urls))
        for url in urls:
            logger.info("Processing URL: %s", url)
            try:
                result = self.process_url(url)
            except Exception as exc:
                if isinstance(exc, UnsupportedPlatform):
                    logger.info("Skipping %s: %s", url, exc)
                else:
                    logger.exception("Error processing URL %s", url)
                batch.errors.append(UrlError(url=url, error=str(exc) or "Error processing URL"))
                continue
            batch.results.append(
                UrlResult(url=url, title=result.title, transcription=result.transcription)
            )
        logger.info(
            "Batch complete: %d succeeded, %d failed", len(batch.results), len(batch.errors)
        )
        return batch

    def process_url(self, url: str) -> TranscriptionResult:
        """Run the full pipeline for one URL.

        Raises:
            VidscribeError: Any of the pipeline error kinds.
        """
        owned: List[str] = []
        state = self._enter(url, State.CLASSIFYING)
        try:
            platform = classify(url)
            if platform is Platform.UNSUPPORTED:
                raise UnsupportedPlatform(url)

            state = self._enter(url, State.ACQUIRING)
            artifact = self.acquirer.acquire(url, platform)
            owned.append(artifact.local_path)

            state = self._enter(url, State.ROUTING)
            if not os.path.exists(artifact.local_path):
                raise TranscriptionFailed("Audio file not found")
            size = os.path.getsize(artifact.local_path)
            logger.info("Audio file size: %.2f MB", size / (1024 * 1024))
            strategy = choose_strategy(size, self.max_size_bytes)

            if strategy is Strategy.SEGMENTED:
                logger.info("File too large for direct submission, using file splitting method")
                state = self._enter(url, State.SEGMENTING)
                segments = self.segmenter.segment(artifact, self.segment_seconds)
                owned.extend(s.local_path for s in segments)
                state = self._enter(url, State.TRANSCRIBING)
                return self._transcribe_segments(artifact, segments)

            state = self._enter(url, State.DIRECT)
            try:
                return self.client.transcribe(artifact, strategy)
            except TranscriptionFailed as exc:
                logger.error("Error sending audio directly: %s", exc)
                strategy = choose_strategy(size, self.max_size_bytes, direct_failed=True)
            logger.info("Switching to %s transcription", strategy.value)
            return self.client.transcribe(artifact, strategy)
        finally:
            logger.debug("%s: %s (after %s)", url, State.CLEANING.value, state.value)
            for path in owned:
                self.store.remove(path)
            self._enter(url, State.DONE)

    def _transcribe_segments(
        self, parent: AudioArtifact, segments: List[AudioArtifact]
    ) -> TranscriptionResult:
        blocks: List[str] = []
        total = len(segments)
        for index, segment in enumerate(segments, start=1):
            logger.info("Processing segment %d/%d...", index, total)
            try:
                result = self.client.transcribe_audio(segment, segment=True)
                blocks.append(result.transcription)
                logger.info("Segment %d successfully transcribed", index)
            except TranscriptionFailed as exc:
                logger.error("Error transcribing segment %d: %s", index, exc)
                blocks.append(SEGMENT_ERROR_TEMPLATE.format(index=index))
            finally:
                self.store.remove(segment.local_path)
        transcription = "".join(f"{block}\n\n" for block in blocks).strip()
        return TranscriptionResult(title=parent.title, transcription=transcription)

    @staticmethod
    def _enter(url: str, state: State) -> State:
        logger.debug("%s: %s", url, state.value)
        return state

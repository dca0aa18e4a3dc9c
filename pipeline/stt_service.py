"""
Gemini transcription client.

Two ways of asking the model for a transcript are supported:

* **direct audio** – the MP3 bytes are sent inline with a fixed
  instruction prompt.  Calls go through a :class:`~pipeline.retry.RetryPolicy`
  (three attempts, 1s/2s backoff by default).
* **by reference** – a text-only prompt naming the video's title and id.
  Used only as a fallback when the whole file could not be submitted.

Usage::

    from pipeline.stt_service import TranscriptionClient

    client = TranscriptionClient.from_settings(settings)
    result = client.transcribe(artifact)
    print(result.transcription)
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import google.generativeai as genai

from .config import Settings
from .errors import TranscriptionFailed
from .models import AudioArtifact, TranscriptionResult
from .retry import SINGLE_ATTEMPT, RetryPolicy
from .routing import Strategy

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/mpeg"

_PROMPT_TEMPLATE = (
    "Create a complete transcription of this {subject}. Pay special attention to "
    "the first 5 minutes of the audio - ignore and exclude any song lyrics, musical "
    "intros, and background music that often appear at the beginning of videos. "
    "Throughout the entire audio, focus only on speech and dialogues. Return only "
    "the transcription text without any comments."
)
AUDIO_PROMPT = _PROMPT_TEMPLATE.format(subject="audio")
SEGMENT_PROMPT = _PROMPT_TEMPLATE.format(subject="audio segment")

REFERENCE_PROMPT = """I want you to act as a transcriber for audio from a YouTube video.

Video: "{title}" (ID: {source_id})
URL: https://www.youtube.com/watch?v={source_id}

Task:
1. Watch the video at the URL
2. Create an accurate text transcription of the audio content
3. Return only the transcription text without additional comments"""


class TranscriptionClient:
    """Sends audio (or a reference to it) to a generative model."""

    def __init__(
        self,
        model: Any,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        timeout_s: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout_s = timeout_s
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "TranscriptionClient":
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)
        else:
            logger.warning("GEMINI_API_KEY is not set; requests will fail")
        model = genai.GenerativeModel(settings.gemini_model)
        return cls(model, timeout_s=settings.gemini_timeout_seconds, **kwargs)

    def _generate(self, contents: Any) -> str:
        kwargs: Dict[str, Any] = {}
        if self.timeout_s:
            kwargs["request_options"] = {"timeout": self.timeout_s}
        response = self.model.generate_content(contents, **kwargs)
        return response.text

    def transcribe_audio(
        self,
        artifact: AudioArtifact,
        *,
        segment: bool = False,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> TranscriptionResult:
        """Transcribe ``artifact`` by uploading its bytes.

        Args:
            artifact: Audio file to send.
            segment: Use the prompt worded for a part of a longer recording.
            retry_policy: Overrides the client's policy for this call.

        Raises:
            TranscriptionFailed: Once every attempt has failed.
        """
        if not os.path.exists(artifact.local_path):
            raise TranscriptionFailed("Audio file not found")
        with open(artifact.local_path, "rb") as f:
            audio = f.read()
        prompt = SEGMENT_PROMPT if segment else AUDIO_PROMPT
        contents = [prompt, {"mime_type": AUDIO_MIME_TYPE, "data": audio}]
        policy = retry_policy or self.retry_policy

        logger.info("Transcribing %s", os.path.basename(artifact.local_path))
        try:
            text = policy.call(self._generate, contents, sleep=self.sleep)
        except Exception as exc:
            raise TranscriptionFailed(str(exc) or exc.__class__.__name__) from exc
        logger.info("Response received from Gemini API")
        return TranscriptionResult(title=artifact.title, transcription=text)

    def transcribe_by_reference(self, artifact: AudioArtifact) -> TranscriptionResult:
        """Ask the model to transcribe the source video without uploading it.

        No retry is attempted.

        Raises:
            TranscriptionFailed: If the request fails.
        """
        logger.info("Using URL transcription method")
        prompt = REFERENCE_PROMPT.format(title=artifact.title, source_id=artifact.source_id)
        try:
            text = self._generate(prompt)
        except Exception as exc:
            raise TranscriptionFailed(str(exc) or exc.__class__.__name__) from exc
        logger.info("Response received from Gemini API (URL method)")
        return TranscriptionResult(title=artifact.title, transcription=text)

    def transcribe(
        self, artifact: AudioArtifact, strategy: Strategy = Strategy.DIRECT
    ) -> TranscriptionResult:
        """Transcribe a whole file with ``strategy``.

        ``DIRECT`` makes a single submission so that a failure can be routed
        to ``METADATA_ONLY`` right away.  Segmented transcription is driven
        by the orchestrator through :meth:`transcribe_audio`.
        """
        if strategy is Strategy.DIRECT:
            return self.transcribe_audio(artifact, retry_policy=SINGLE_ATTEMPT)
        if strategy is Strategy.METADATA_ONLY:
            return self.transcribe_by_reference(artifact)
        raise ValueError(f"Strategy {strategy.value} cannot be applied to a whole file")

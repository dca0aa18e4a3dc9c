"""
Audio track selection.

Videos with dubbed or multi-language audio expose several audio-only
streams.  :func:`select_track` picks the one most likely to be the original
English speech.  Rules are tried in order and the first match wins:

1. display name mentions both "English" and "original" and the track is
   the default one;
2. any default track;
3. any English track (display name or ``en``/``eng`` language code);
4. any track without language metadata;
5. the highest bitrate (missing bitrate counts as 0).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from .models import AudioTrackCandidate

logger = logging.getLogger(__name__)

ENGLISH_CODES = {"en", "eng"}


def _is_original_english_default(track: AudioTrackCandidate) -> bool:
    name = track.display_name or ""
    return "English" in name and "original" in name and track.is_default_track


def _is_default(track: AudioTrackCandidate) -> bool:
    return track.is_default_track


def _is_english(track: AudioTrackCandidate) -> bool:
    if "English" in (track.display_name or ""):
        return True
    return (track.language or "").lower() in ENGLISH_CODES


def _has_no_language(track: AudioTrackCandidate) -> bool:
    return not track.language


RULES: List[Callable[[AudioTrackCandidate], bool]] = [
    _is_original_english_default,
    _is_default,
    _is_english,
    _has_no_language,
]


def select_track(candidates: Sequence[AudioTrackCandidate]) -> Optional[AudioTrackCandidate]:
    """Pick the best audio-only track from ``candidates``.

    Args:
        candidates: Tracks offered by the source.  Entries that are not
            audio-only are ignored.

    Returns:
        The selected track, or ``None`` if there is no audio-only candidate.
    """
    tracks = [c for c in candidates if c.has_audio_only]
    if not tracks:
        return None
    for rank, rule in enumerate(RULES, start=1):
        for track in tracks:
            if rule(track):
                logger.debug("Track %s selected by rule %d", track.format_id, rank)
                return track
    # max() keeps the first of equal bitrates
    best = max(tracks, key=lambda t: t.bitrate or 0)
    logger.debug("Track %s selected by highest bitrate", best.format_id)
    return best

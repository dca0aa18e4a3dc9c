"""
URL classification and id extraction.

Each supported platform owns its own parse rule.  Classification looks at
the host only, so ``netflix.com`` is not mistaken for ``x.com``.
"""

from __future__ import annotations

import enum
import re
from typing import Tuple
from urllib.parse import urlparse

from .errors import InvalidURL

YOUTUBE_ID_RE = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")
BROADCAST_RE = re.compile(r"/broadcasts/([^/?]+)")
STATUS_RE = re.compile(r"/status/(\d+)")


class Platform(enum.Enum):
    YOUTUBE = "youtube"
    TWITTER_X = "twitter_x"
    UNSUPPORTED = "unsupported"


_HOSTS = {
    Platform.YOUTUBE: ("youtube.com", "youtu.be"),
    Platform.TWITTER_X: ("twitter.com", "x.com"),
}


def _host(url: str) -> str:
    if "://" not in url:
        url = "https://" + url
    return (urlparse(url.strip()).hostname or "").lower()


def classify(url: str) -> Platform:
    """Return the platform a URL belongs to."""
    host = _host(url)
    for platform, domains in _HOSTS.items():
        if any(host == d or host.endswith("." + d) for d in domains):
            return platform
    return Platform.UNSUPPORTED


def youtube_id(url: str) -> str:
    """Extract the 11-character video id from a YouTube URL.

    Raises:
        InvalidURL: If no 11-character id is present.
    """
    match = YOUTUBE_ID_RE.match(url)
    if not match or len(match.group(2)) != 11:
        raise InvalidURL("Invalid YouTube URL format")
    return match.group(2)


def twitter_ref(url: str) -> Tuple[str, str]:
    """Return ``(kind, id)`` for a Twitter/X broadcast or status URL.

    ``kind`` is ``"broadcast"`` or ``"status"``.

    Raises:
        InvalidURL: If the URL is neither, or the id segment is missing.
    """
    if "/broadcasts/" in url:
        match = BROADCAST_RE.search(url)
        if not match:
            raise InvalidURL("Could not extract broadcast ID from URL")
        return "broadcast", match.group(1)
    if "/status/" in url:
        match = STATUS_RE.search(url)
        if not match:
            raise InvalidURL("Could not extract status ID from URL")
        return "status", match.group(1)
    raise InvalidURL("Invalid Twitter/X URL format. Must contain /broadcasts/ or /status/")

"""
urls.py

Pure YouTube URL helpers.

This module:
- Contains NO I/O
- Contains NO API calls
- Contains NO state

Known shapes (scheme and www./m./music. prefixes optional):
    youtube.com/watch?v=ID
    youtube.com/embed/ID, /v/ID, /shorts/ID, /live/ID
    youtube-nocookie.com/embed/ID
    youtu.be/ID
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
_PATH_PREFIXES = ("embed", "v", "shorts", "live")


def is_video_id(value: str) -> bool:
    return bool(VIDEO_ID_RE.match(value or ""))


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Return the 11-character video id embedded in url, or None.

    Never raises: anything that does not look like a known YouTube URL
    shape yields None.

    Examples:
        >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        'dQw4w9WgXcQ'
        >>> extract_video_id("youtu.be/dQw4w9WgXcQ?t=42")
        'dQw4w9WgXcQ'
        >>> extract_video_id("https://example.com/watch?v=dQw4w9WgXcQ") is None
        True
    """
    if not isinstance(url, str):
        return None

    raw = url.strip()
    if not raw:
        return None
    if "://" not in raw:
        raw = "https://" + raw

    try:
        parts = urlsplit(raw)
    except ValueError:
        return None

    host = (parts.hostname or "").lower()
    segments = [s for s in parts.path.split("/") if s]

    candidate: Optional[str] = None

    if host in _SHORT_HOSTS:
        candidate = segments[0] if segments else None

    elif host in _YOUTUBE_HOSTS:
        if segments[:1] == ["watch"]:
            values = parse_qs(parts.query).get("v") or []
            candidate = values[0] if values else None
        elif len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
            candidate = segments[1]

    if candidate and is_video_id(candidate):
        return candidate
    return None

from __future__ import annotations

import re

_ID = r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"

# Checked in order; the first match wins.
_VIDEO_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"youtube\.com/(?:watch\?(?:.*&)?v=|embed/|v/)" + _ID),
    re.compile(r"youtu\.be/" + _ID),
    re.compile(r"youtube\.com/shorts/" + _ID),
)


def extract_video_id(url: str) -> str | None:
    """Return the 11-character video id for a watch, short or shorts URL.

    Returns ``None`` when no pattern matches; callers treat that as an invalid
    ingestion request.
    """

    if not url:
        return None
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def canonical_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def normalize_url(url: str) -> str:
    video_id = extract_video_id(url)
    if video_id is None:
        return url.strip()
    return canonical_url(video_id)


def thumbnail_url(video_id: str) -> str:
    return f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"

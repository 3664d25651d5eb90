from __future__ import annotations

from typing import Sequence

from ytscribe.transcript.models import TranscriptSegment


def format_clock(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


def to_timed_text(segments: Sequence[TranscriptSegment]) -> str:
    lines = [
        f"[{format_clock(item.start)} - {format_clock(item.end)}] {item.text}"
        for item in segments
    ]
    return "\n".join(lines)


def to_plain_text(segments: Sequence[TranscriptSegment]) -> str:
    return " ".join(item.text for item in segments)

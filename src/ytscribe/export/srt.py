from __future__ import annotations

from typing import Sequence

from ytscribe.transcript.models import TranscriptSegment


def format_timestamp(seconds: float) -> str:
    """SubRip clock, ``HH:MM:SS,mmm``."""

    minutes, millis = divmod(int(round(max(seconds, 0.0) * 1000.0)), 60_000)
    hours, minutes = divmod(minutes, 60)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def _cue_block(number: int, segment: TranscriptSegment) -> str:
    start = format_timestamp(segment.start)
    end = format_timestamp(segment.start + segment.duration)
    return f"{number}\n{start} --> {end}\n{segment.text.strip()}\n"


def to_srt(segments: Sequence[TranscriptSegment]) -> str:
    if not segments:
        return ""
    return "\n".join(_cue_block(number, segment) for number, segment in enumerate(segments, start=1))

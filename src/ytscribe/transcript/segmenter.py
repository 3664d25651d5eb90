from __future__ import annotations

from typing import Iterable

from ytscribe.transcript.models import Cue, TranscriptSegment

DEFAULT_MAX_DURATION_S = 30.0


def _clean_text(text: str) -> str:
    return " ".join(text.split())


def merge_cues(
    cues: Iterable[Cue],
    max_duration_s: float = DEFAULT_MAX_DURATION_S,
) -> list[TranscriptSegment]:
    """Greedily pack consecutive cues into segments spanning at most ``max_duration_s``.

    A cue that alone exceeds the limit becomes its own segment and is never
    split. Each segment starts no earlier than the previous one ends, so
    overlapping caption cues still yield non-overlapping segments.
    """

    if max_duration_s <= 0:
        raise ValueError("max_duration_s must be positive")

    ordered = sorted(cues, key=lambda item: item.start)
    segments: list[TranscriptSegment] = []
    parts: list[str] = []
    start = end = 0.0

    for cue in ordered:
        text = _clean_text(cue.text)
        if not text:
            continue
        if parts and max(end, cue.end) - start <= max_duration_s:
            parts.append(text)
            end = max(end, cue.end)
            continue
        if parts:
            segments.append(TranscriptSegment(text=" ".join(parts), start=start, duration=end - start))
        start = max(cue.start, segments[-1].end) if segments else cue.start
        end = max(cue.end, start)
        parts = [text]

    if parts:
        segments.append(TranscriptSegment(text=" ".join(parts), start=start, duration=end - start))
    return segments

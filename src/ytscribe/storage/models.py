from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any

from ytscribe.transcript.models import TranscriptSegment


@dataclass(slots=True)
class VideoRecord:
    url: str
    transcript: list[TranscriptSegment] = field(default_factory=list)
    summary: str | None = None

    def with_summary(self, summary: str) -> "VideoRecord":
        return replace(self, summary=summary)


def segment_to_dict(segment: TranscriptSegment) -> dict[str, Any]:
    return {"text": segment.text, "start": segment.start, "duration": segment.duration}


def segment_from_dict(data: Any) -> TranscriptSegment:
    if not isinstance(data, dict):
        raise ValueError(f"Segment must be an object, got {type(data).__name__}")
    start = float(data["start"])
    duration = float(data["duration"])
    if not math.isfinite(start):
        raise ValueError(f"Segment start must be finite, got {start}")
    if not (math.isfinite(duration) and duration >= 0):
        raise ValueError(f"Segment duration must be a finite value >= 0, got {duration}")
    return TranscriptSegment(text=str(data["text"]), start=start, duration=duration)


def record_to_dict(record: VideoRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "url": record.url,
        "transcript": [segment_to_dict(item) for item in record.transcript],
    }
    if record.summary is not None:
        payload["summary"] = record.summary
    return payload


def record_from_dict(data: Any) -> VideoRecord:
    if not isinstance(data, dict):
        raise ValueError(f"Record must be an object, got {type(data).__name__}")
    url = data["url"]
    if not isinstance(url, str) or not url.strip():
        raise ValueError("Record url must be a non-empty string")
    transcript = data.get("transcript") or []
    if not isinstance(transcript, list):
        raise ValueError("Record transcript must be a list")
    summary = data.get("summary")
    return VideoRecord(
        url=url,
        transcript=[segment_from_dict(item) for item in transcript],
        summary=str(summary) if summary is not None else None,
    )

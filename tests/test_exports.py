from __future__ import annotations

import json

from ytscribe.export.json import build_payload, dumps_payload
from ytscribe.export.srt import format_timestamp, to_srt
from ytscribe.export.txt import format_clock, to_plain_text, to_timed_text
from ytscribe.storage.models import VideoRecord
from ytscribe.transcript.models import TranscriptSegment

SEGMENTS = [
    TranscriptSegment(text="Hello world.", start=0.0, duration=1.0),
    TranscriptSegment(text="Second line.", start=61.2, duration=1.3),
]


def test_format_timestamp() -> None:
    assert format_timestamp(0.0) == "00:00:00,000"
    assert format_timestamp(1.234) == "00:00:01,234"
    assert format_timestamp(3723.045) == "01:02:03,045"


def test_to_srt() -> None:
    assert to_srt(SEGMENTS) == (
        "1\n00:00:00,000 --> 00:00:01,000\nHello world.\n"
        "\n"
        "2\n00:01:01,200 --> 00:01:02,500\nSecond line.\n"
    )
    assert to_srt([]) == ""


def test_timed_and_plain_text() -> None:
    assert format_clock(61.9) == "1:01"
    assert to_timed_text(SEGMENTS) == "[0:00 - 0:01] Hello world.\n[1:01 - 1:02] Second line."
    assert to_plain_text(SEGMENTS) == "Hello world. Second line."


def test_json_payload() -> None:
    record = VideoRecord(url="https://www.youtube.com/watch?v=dQw4w9WgXcQ", transcript=SEGMENTS)
    payload = json.loads(dumps_payload(build_payload(record)))
    assert payload["video_id"] == "dQw4w9WgXcQ"
    assert payload["summary"] is None
    assert payload["transcript"][1] == {"text": "Second line.", "start": 61.2, "duration": 1.3}

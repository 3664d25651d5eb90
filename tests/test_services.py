from __future__ import annotations

import httpx
import pytest

from ytscribe.config import Settings
from ytscribe.errors import ValidationFailure
from ytscribe.nlp.summarizer import DocumentChannel
from ytscribe.services import YtScribeService
from ytscribe.storage.kv import API_KEY_KEY
from ytscribe.transcript.source import TranscriptSource

URL = "https://youtu.be/dQw4w9WgXcQ"
CANONICAL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

CUES = [
    {"text": "a", "start": 0, "duration": 10},
    {"text": "b", "start": 10, "duration": 15},
    {"text": "c", "start": 25, "duration": 10},
]


def _source(status: int = 200, payload=None) -> TranscriptSource:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=CUES if payload is None else payload)

    return TranscriptSource("https://transcripts.example", client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_transcribe_segments_and_stores(settings, fake_completion) -> None:
    service = YtScribeService(settings, completion=fake_completion(), source=_source())
    session = service.open_session(URL)

    outcome = service.transcribe(session, URL)

    assert outcome.video_id == "dQw4w9WgXcQ"
    assert outcome.cue_count == 3
    assert outcome.segment_count == 2
    assert session.video.url == CANONICAL
    assert [item.url for item in service.list_videos()] == [CANONICAL]


def test_transcribe_rejects_invalid_url_before_fetch(settings, fake_completion) -> None:
    service = YtScribeService(settings, completion=fake_completion(), source=_source())
    with pytest.raises(ValidationFailure):
        service.transcribe(service.open_session("nope"), "https://example.com/video")


def test_transcribe_failure_gives_empty_transcript(settings, fake_completion) -> None:
    service = YtScribeService(settings, completion=fake_completion(), source=_source(status=500))
    session = service.open_session(URL)

    outcome = service.transcribe(session, URL)

    assert outcome.record is None
    assert session.video.transcript == []
    assert service.list_videos() == []


def test_summarize_streams_and_saves_summary(settings, fake_completion) -> None:
    completion = fake_completion(chunks=["# Overview\n", "Great video."])
    service = YtScribeService(settings, completion=completion, source=_source())
    session = service.open_session(URL)
    service.transcribe(session, URL)
    channel = DocumentChannel()

    result = service.summarize(session, language="en", channel=channel)

    assert result.text == "# Overview\nGreat video."
    assert channel.snapshot() == result.text
    assert completion.calls[0]["messages"][1]["content"] == "a b c"
    assert service.open_session(URL).summary == result.text
    assert session.video.summary == result.text
    assert len(service.list_videos()) == 1


def test_failed_summary_is_not_saved(settings, fake_completion) -> None:
    completion = fake_completion(chunks=["partial", "lost"], fail_after=1)
    service = YtScribeService(settings, completion=completion, source=_source())
    session = service.open_session(URL)
    service.transcribe(session, URL)

    result = service.summarize(session)

    assert result.error
    assert session.summary == ""
    assert service.open_session(URL).summary == ""


def test_summarize_requires_transcript(settings, fake_completion) -> None:
    service = YtScribeService(settings, completion=fake_completion(), source=_source())
    with pytest.raises(ValidationFailure):
        service.summarize(service.open_session(URL))


def test_search_and_chat_flow(settings, fake_completion) -> None:
    completion = fake_completion(
        ['{"matches": [{"timestamp": "00:25", "text": "c"}]}', "Sure, it is about c."],
        chunks=["Summary about c."],
    )
    service = YtScribeService(settings, completion=completion, source=_source())
    session = service.open_session(URL)
    service.transcribe(session, URL)

    result = service.search(session, "where is c")
    assert [item.timestamp for item in result.matches] == ["00:25"]

    with pytest.raises(ValidationFailure):
        service.open_chat(session)

    service.summarize(session)
    chat = service.open_chat(session)
    reply = chat.send("What is it about?")

    assert reply.content == "Sure, it is about c."
    assert "Summary about c." in completion.calls[-1]["messages"][0]["content"]


def test_api_key_falls_back_to_store(tmp_path) -> None:
    service = YtScribeService(Settings(data_dir=tmp_path, openai_api_key=None), source=_source())
    assert service.api_key() is None

    service.save_api_key("  sk-stored ")

    assert service.kv.get(API_KEY_KEY) == "sk-stored"
    assert service.api_key() == "sk-stored"
    with pytest.raises(ValidationFailure):
        service.save_api_key("   ")


def test_export_video_writes_files(settings, fake_completion) -> None:
    service = YtScribeService(settings, completion=fake_completion(), source=_source())
    service.transcribe(service.open_session(URL), URL)

    timed = service.export_video(URL, "timed")
    plain = service.export_video(CANONICAL, "txt")

    assert timed.read_text(encoding="utf-8") == "[0:00 - 0:25] a b\n[0:25 - 0:35] c"
    assert plain.read_text(encoding="utf-8") == "a b c"
    with pytest.raises(ValueError):
        service.export_video(URL, "pdf")
    with pytest.raises(ValueError):
        service.export_video("https://youtu.be/9bZkp7q19f0", "txt")

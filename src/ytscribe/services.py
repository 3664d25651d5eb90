from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ytscribe.config import Settings, get_settings
from ytscribe.errors import ValidationFailure
from ytscribe.export import json as json_export
from ytscribe.export.srt import to_srt
from ytscribe.export.txt import to_plain_text, to_timed_text
from ytscribe.nlp.chat import ChatSession
from ytscribe.nlp.completion import Completion, CompletionClient
from ytscribe.nlp.search import SearchResult, TranscriptSearch
from ytscribe.nlp.summarizer import DocumentChannel, SummarySynthesizer, SynthesisResult
from ytscribe.session import Session
from ytscribe.storage.kv import API_KEY_KEY, KeyValueStore
from ytscribe.storage.models import VideoRecord
from ytscribe.storage.store import VideoStore
from ytscribe.transcript.models import transcript_text
from ytscribe.transcript.segmenter import merge_cues
from ytscribe.transcript.source import TranscriptSource
from ytscribe.video_id import extract_video_id, normalize_url

logger = logging.getLogger(__name__)

EXPORT_FORMATS: dict[str, str] = {
    "timed": "transcript-with-timestamps.txt",
    "txt": "transcript.txt",
    "srt": "transcript.srt",
    "json": "video.json",
}


@dataclass(slots=True)
class TranscriptionOutcome:
    video_id: str
    cue_count: int
    segment_count: int
    record: VideoRecord | None


class YtScribeService:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        completion: Completion | None = None,
        source: TranscriptSource | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.settings.ensure_dirs()
        self.kv = KeyValueStore(self.settings.db_path)
        self.kv.initialize()
        self.store = VideoStore(self.kv)
        self.source = source or TranscriptSource(
            self.settings.transcript_service_url,
            language=self.settings.transcript_language,
            timeout=self.settings.request_timeout_s,
        )
        self._completion = completion

    def api_key(self) -> str | None:
        return self.settings.openai_api_key or self.kv.get(API_KEY_KEY)

    def save_api_key(self, key: str) -> None:
        key = key.strip()
        if not key:
            raise ValidationFailure("API key must not be blank")
        self.kv.set(API_KEY_KEY, key)
        self._completion = None

    @property
    def completion(self) -> Completion:
        if self._completion is None:
            self._completion = CompletionClient(
                self.api_key(),
                model=self.settings.completion_model,
                timeout=self.settings.request_timeout_s,
            )
        return self._completion

    def open_session(self, url: str) -> Session:
        record = self.store.get(url)
        if record is None:
            return Session()
        return Session(video=record, summary=record.summary or "")

    def transcribe(self, session: Session, url: str) -> TranscriptionOutcome:
        video_id = extract_video_id(url)
        if video_id is None:
            raise ValidationFailure(f"Invalid YouTube URL: {url}")

        cues = self.source.fetch_or_empty(video_id)
        segments = merge_cues(cues, max_duration_s=self.settings.segment_max_duration_s)
        session.summary = ""
        session.chat = None
        if not segments:
            session.video = VideoRecord(url=normalize_url(url))
            return TranscriptionOutcome(video_id=video_id, cue_count=len(cues), segment_count=0, record=None)

        record = self.store.upsert(VideoRecord(url=url, transcript=segments))
        session.video = record
        logger.info("Stored %d segments for %s", len(segments), record.url)
        return TranscriptionOutcome(
            video_id=video_id,
            cue_count=len(cues),
            segment_count=len(segments),
            record=record,
        )

    def _require_transcript(self, session: Session) -> VideoRecord:
        if session.video is None or not session.video.transcript:
            raise ValidationFailure("No transcript loaded for this session")
        return session.video

    def summarize(
        self,
        session: Session,
        *,
        language: str | None = None,
        channel: DocumentChannel | None = None,
    ) -> SynthesisResult:
        record = self._require_transcript(session)
        language = language or session.summary_language
        synthesizer = SummarySynthesizer(
            self.completion,
            temperature=self.settings.summary_temperature,
            max_tokens=self.settings.summary_max_tokens,
        )
        result = synthesizer.synthesize(
            session,
            transcript_text(record.transcript),
            language=language,
            channel=channel,
        )
        if result.ok:
            session.summary = result.text
            session.summary_language = language
            session.video = self.store.attach_summary(record.url, result.text)
            if session.chat is not None:
                session.chat.summary = result.text
        return result

    def search(self, session: Session, query: str) -> SearchResult:
        record = self._require_transcript(session)
        if not query.strip():
            return SearchResult()
        engine = TranscriptSearch(
            self.completion,
            temperature=self.settings.search_temperature,
            max_tokens=self.settings.search_max_tokens,
            max_matches=self.settings.search_max_matches,
        )
        return engine.search(session, query, record.transcript)

    def open_chat(self, session: Session) -> ChatSession:
        if not session.summary.strip():
            raise ValidationFailure("Generate a summary before starting a chat")
        session.chat = ChatSession(
            session.summary,
            self.completion,
            temperature=self.settings.chat_temperature,
            max_tokens=self.settings.chat_max_tokens,
        )
        return session.chat

    def list_videos(self) -> list[VideoRecord]:
        return self.store.load()

    def delete_video(self, url: str) -> bool:
        return self.store.delete(url)

    def clear_videos(self) -> None:
        self.store.clear()

    def export_video(self, url: str, export_format: str) -> Path:
        fmt = export_format.lower().strip()
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format. Use: {', '.join(EXPORT_FORMATS)}")

        record = self.store.get(url)
        if record is None:
            raise ValueError(f"No saved video for {url}")

        if fmt == "timed":
            content = to_timed_text(record.transcript)
        elif fmt == "txt":
            content = to_plain_text(record.transcript)
        elif fmt == "srt":
            content = to_srt(record.transcript)
        else:
            content = json_export.dumps_payload(json_export.build_payload(record))

        export_dir = self.settings.exports_dir / (extract_video_id(record.url) or "video")
        export_dir.mkdir(parents=True, exist_ok=True)
        output_path = export_dir / EXPORT_FORMATS[fmt]
        output_path.write_text(content, encoding="utf-8")
        return output_path

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from ytscribe.errors import PersistenceCorruption
from ytscribe.storage.kv import VIDEOS_KEY, KeyValueStore
from ytscribe.storage.models import VideoRecord, record_from_dict, record_to_dict
from ytscribe.video_id import normalize_url

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2


def migrate_legacy_chunk(chunk: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a ``{text, timestamp: [start, end]}`` chunk to start/duration form."""

    start, end = chunk["timestamp"]
    start = float(start)
    end = float(end) if end is not None else start
    return {"text": chunk.get("text", ""), "start": start, "duration": max(end - start, 0.0)}


def _is_legacy_chunk(chunk: Any) -> bool:
    return (
        isinstance(chunk, dict)
        and isinstance(chunk.get("timestamp"), (list, tuple))
        and len(chunk["timestamp"]) == 2
    )


def _upgrade_v1_record(record: Any) -> Any:
    if not isinstance(record, dict) or not isinstance(record.get("transcript"), list):
        return record
    transcript = [
        migrate_legacy_chunk(chunk) if _is_legacy_chunk(chunk) else chunk
        for chunk in record["transcript"]
    ]
    return {**record, "transcript": transcript}


def _upgrade_v1(payload: list[Any]) -> dict[str, Any]:
    # v1 is the untagged array written before the version tag existed; it may
    # still hold timestamp-pair chunks.
    videos: list[Any] = []
    for index, record in enumerate(payload):
        try:
            videos.append(_upgrade_v1_record(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping unreadable saved video #%d: %s", index, exc)
    return {"schema_version": 2, "videos": videos}


MIGRATIONS: dict[int, Callable[[Any], dict[str, Any]]] = {
    1: _upgrade_v1,
}


def schema_version(payload: Any) -> int:
    if isinstance(payload, list):
        return 1
    if isinstance(payload, dict):
        version = payload.get("schema_version")
        if isinstance(version, int) and not isinstance(version, bool):
            return version
    raise PersistenceCorruption("Stored collection has no recognizable schema version")


def migrate_payload(payload: Any) -> dict[str, Any]:
    version = schema_version(payload)
    if version > CURRENT_SCHEMA_VERSION:
        raise PersistenceCorruption(
            f"Stored collection has schema version {version}, newer than {CURRENT_SCHEMA_VERSION}"
        )
    while version < CURRENT_SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise PersistenceCorruption(f"No migration registered for schema version {version}")
        payload = step(payload)
        version = schema_version(payload)
    if not isinstance(payload.get("videos"), list):
        raise PersistenceCorruption("Stored collection has no 'videos' list")
    return payload


def decode_collection(raw: str) -> list[VideoRecord]:
    """Parse and migrate a stored collection, dropping records that fail to parse."""

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceCorruption(f"Stored collection is not valid JSON: {exc}") from exc

    records: list[VideoRecord] = []
    for index, item in enumerate(migrate_payload(payload)["videos"]):
        try:
            records.append(record_from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping unreadable saved video #%d: %s", index, exc)
    return _dedupe(records)


def encode_collection(records: list[VideoRecord]) -> str:
    payload = {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "videos": [record_to_dict(record) for record in records],
    }
    return json.dumps(payload, ensure_ascii=False)


def _dedupe(records: list[VideoRecord]) -> list[VideoRecord]:
    # Last write wins, matching upsert semantics.
    by_url: dict[str, VideoRecord] = {}
    for record in records:
        key = normalize_url(record.url)
        by_url.pop(key, None)
        by_url[key] = VideoRecord(url=key, transcript=record.transcript, summary=record.summary)
    return list(by_url.values())


class VideoStore:
    """URL-keyed collection of saved videos, written back whole on every change."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv
        self._videos: list[VideoRecord] | None = None

    def load(self) -> list[VideoRecord]:
        raw = self.kv.get(VIDEOS_KEY)
        if raw is None:
            self._videos = []
            return []
        try:
            self._videos = decode_collection(raw)
        except PersistenceCorruption as exc:
            logger.error("Error loading saved videos, starting empty: %s", exc)
            self._videos = []
        return list(self._videos)

    def _current(self) -> list[VideoRecord]:
        if self._videos is None:
            self.load()
        return self._videos

    def _persist(self, videos: list[VideoRecord]) -> None:
        self.kv.set(VIDEOS_KEY, encode_collection(videos))
        self._videos = videos

    def records(self) -> list[VideoRecord]:
        return list(self._current())

    def get(self, url: str) -> VideoRecord | None:
        key = normalize_url(url)
        for record in self._current():
            if record.url == key:
                return record
        return None

    def upsert(self, record: VideoRecord) -> VideoRecord:
        key = normalize_url(record.url)
        stored = VideoRecord(url=key, transcript=list(record.transcript), summary=record.summary)
        updated = [item for item in self.load() if item.url != key]
        updated.append(stored)
        self._persist(updated)
        return stored

    def attach_summary(self, url: str, summary: str) -> VideoRecord:
        self.load()
        record = self.get(url)
        if record is None:
            raise KeyError(f"No saved video for {url}")
        return self.upsert(record.with_summary(summary))

    def delete(self, url: str) -> bool:
        key = normalize_url(url)
        current = self.load()
        updated = [item for item in current if item.url != key]
        if len(updated) == len(current):
            return False
        self._persist(updated)
        return True

    def clear(self) -> None:
        self.kv.delete(VIDEOS_KEY)
        self._videos = []

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import httpx

from ytscribe.config import Settings
from ytscribe.storage.kv import API_KEY_KEY, KeyValueStore
from ytscribe.storage.store import VideoStore


@dataclass(slots=True)
class DoctorCheck:
    name: str
    status: str
    detail: str


def _check_db(settings: Settings) -> DoctorCheck:
    try:
        settings.ensure_dirs()
        with sqlite3.connect(settings.db_path) as conn:
            conn.execute("SELECT 1")
        return DoctorCheck("Store", "ok", f"SQLite writable at {settings.db_path}")
    except Exception as exc:  # pragma: no cover - environment dependent
        return DoctorCheck("Store", "fail", f"Cannot initialize SQLite at {settings.db_path}: {exc}")


def _check_saved_videos(kv: KeyValueStore) -> DoctorCheck:
    videos = VideoStore(kv).load()
    return DoctorCheck("Saved videos", "ok", f"{len(videos)} video(s) readable")


def _check_api_key(settings: Settings, kv: KeyValueStore) -> DoctorCheck:
    if settings.openai_api_key:
        return DoctorCheck("OpenAI API key", "ok", "Set via YTSCRIBE_OPENAI_API_KEY")
    if kv.get(API_KEY_KEY):
        return DoctorCheck("OpenAI API key", "ok", "Stored with 'ytscribe set-key'")
    return DoctorCheck(
        "OpenAI API key",
        "warn",
        "No key configured. Summaries, search and chat are unavailable until one is set.",
    )


def _check_transcript_service(settings: Settings) -> DoctorCheck:
    try:
        url = httpx.URL(settings.transcript_service_url)
    except httpx.InvalidURL as exc:
        return DoctorCheck("Transcript service", "fail", f"Invalid URL: {exc}")
    if url.scheme not in {"http", "https"} or not url.host:
        return DoctorCheck(
            "Transcript service",
            "fail",
            f"YTSCRIBE_TRANSCRIPT_SERVICE_URL must be an http(s) URL, got '{url}'",
        )
    return DoctorCheck("Transcript service", "ok", f"{url} (lang={settings.transcript_language})")


def run_doctor(settings: Settings) -> list[DoctorCheck]:
    checks: list[DoctorCheck] = [_check_db(settings)]
    if checks[0].status != "ok":
        return checks

    kv = KeyValueStore(settings.db_path)
    kv.initialize()
    checks.append(_check_saved_videos(kv))
    checks.append(_check_api_key(settings, kv))
    checks.append(_check_transcript_service(settings))
    checks.append(
        DoctorCheck(
            "Segmenting",
            "ok",
            f"Cues merged into segments of at most {settings.segment_max_duration_s:g}s",
        )
    )
    return checks

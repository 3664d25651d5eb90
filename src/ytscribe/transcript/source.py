from __future__ import annotations

import logging
from typing import Any

import httpx

from ytscribe.errors import TransportFailure
from ytscribe.transcript.models import Cue

logger = logging.getLogger(__name__)


def _first_number(item: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = item.get(key)
        if value is not None and not isinstance(value, bool):
            return float(value)
    return None


def parse_cue(item: Any) -> Cue:
    """Convert one cue object from the transcript service into a ``Cue``."""

    if not isinstance(item, dict):
        raise ValueError(f"Cue must be an object, got {type(item).__name__}")
    start = _first_number(item, "start", "startSeconds")
    if start is None:
        raise ValueError("Cue has no start offset")
    duration = _first_number(item, "duration", "durationSeconds")
    if duration is None:
        end = _first_number(item, "end", "endSeconds")
        duration = (end - start) if end is not None else 0.0
    return Cue(text=str(item.get("text", "")), start=start, end=start + max(duration, 0.0))


def parse_cues(payload: Any) -> list[Cue]:
    if not isinstance(payload, list):
        raise TransportFailure(f"Transcript service returned {type(payload).__name__}, expected a list")
    cues: list[Cue] = []
    for index, item in enumerate(payload):
        try:
            cues.append(parse_cue(item))
        except (TypeError, ValueError) as exc:
            logger.debug("Skipping malformed cue #%d: %s", index, exc)
    return cues


class TranscriptSource:
    """Fetches raw caption cues for a video id from the transcript service."""

    def __init__(
        self,
        base_url: str,
        *,
        language: str = "en",
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout = timeout
        self._client = client

    def _get(self, video_id: str) -> httpx.Response:
        params = {"video_id": video_id, "lang": self.language}
        url = f"{self.base_url}/transcript"
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.timeout)
        with httpx.Client() as client:
            return client.get(url, params=params, timeout=self.timeout)

    def fetch(self, video_id: str) -> list[Cue]:
        """Return the cue list, raising ``TransportFailure`` on any fetch problem."""

        try:
            response = self._get(video_id)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise TransportFailure(f"Transcript fetch failed for {video_id}: {exc}") from exc
        except ValueError as exc:
            raise TransportFailure(f"Transcript service returned invalid JSON for {video_id}") from exc
        return parse_cues(payload)

    def fetch_or_empty(self, video_id: str) -> list[Cue]:
        try:
            cues = self.fetch(video_id)
        except TransportFailure as exc:
            logger.error("Error fetching transcript: %s", exc)
            return []
        logger.info("Fetched %d cues for %s", len(cues), video_id)
        return cues

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from ytscribe.errors import CompletionError, ContractViolation
from ytscribe.nlp.completion import Completion, Message
from ytscribe.nlp.prompts import search_system_prompt, search_user_prompt
from ytscribe.session import Session, in_flight
from ytscribe.transcript.models import TranscriptSegment

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_LABEL_RE = re.compile(r"^\s*(?:(\d+):)?(\d{1,3}):(\d{1,2})\s*$")


@dataclass(frozen=True, slots=True)
class SearchMatch:
    timestamp: str
    text: str


@dataclass(slots=True)
class SearchResult:
    matches: list[SearchMatch] = field(default_factory=list)
    error: str | None = None


class Player(Protocol):
    def seek_to(self, seconds: float) -> None: ...

    def is_playable(self) -> bool: ...

    def play(self) -> None: ...


def format_timestamp(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def timestamp_to_seconds(label: str) -> int | None:
    """Map an ``MM:SS`` (or ``H:MM:SS``) label back to absolute seconds."""

    match = _LABEL_RE.match(label or "")
    if match is None:
        return None
    hours, minutes, seconds = match.groups()
    if int(seconds) >= 60:
        return None
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)


def annotate_transcript(segments: Sequence[TranscriptSegment]) -> str:
    return "\n".join(f"[{format_timestamp(item.start)}] {item.text}" for item in segments)


def strip_code_fence(content: str) -> str:
    match = _FENCE_RE.match(content)
    if match:
        return match.group(1).strip()
    return content.strip()


def _match_from_item(item: Any) -> SearchMatch | None:
    if not isinstance(item, dict):
        return None
    timestamp = item.get("timestamp")
    text = item.get("text")
    if not isinstance(timestamp, str) or not isinstance(text, str):
        return None
    if timestamp_to_seconds(timestamp) is None:
        return None
    return SearchMatch(timestamp=timestamp.strip(), text=text.strip())


def parse_matches(content: str, *, limit: int = 3) -> list[SearchMatch]:
    """Parse the model's reply into matches.

    Raises ``ContractViolation`` when the reply is not JSON or has no
    ``matches`` list. Items inside the list that are malformed are skipped.
    """

    try:
        payload = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise ContractViolation(f"Search reply is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("matches"), list):
        raise ContractViolation("Search reply has no 'matches' list")

    matches: list[SearchMatch] = []
    for item in payload["matches"]:
        match = _match_from_item(item)
        if match is None:
            logger.debug("Skipping malformed search match: %r", item)
            continue
        matches.append(match)
        if len(matches) >= limit:
            break
    return matches


def select_match(match: SearchMatch, player: Player) -> int | None:
    """Seek the player to a match and start playback if it can play."""

    seconds = timestamp_to_seconds(match.timestamp)
    if seconds is None:
        return None
    player.seek_to(seconds)
    if player.is_playable():
        player.play()
    return seconds


class TranscriptSearch:
    def __init__(
        self,
        completion: Completion,
        *,
        temperature: float = 0.3,
        max_tokens: int = 500,
        max_matches: int = 3,
    ) -> None:
        self.completion = completion
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_matches = max_matches

    def build_messages(self, query: str, segments: Sequence[TranscriptSegment]) -> list[Message]:
        return [
            {"role": "system", "content": search_system_prompt(self.max_matches)},
            {"role": "user", "content": search_user_prompt(annotate_transcript(segments), query)},
        ]

    def search(
        self,
        session: Session,
        query: str,
        segments: Sequence[TranscriptSegment],
    ) -> SearchResult:
        query = query.strip()
        if not query or not segments:
            return SearchResult()

        messages = self.build_messages(query, segments)
        with in_flight(session, "searching"):
            try:
                content = self.completion.complete(
                    messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
                matches = parse_matches(content, limit=self.max_matches)
            except CompletionError as exc:
                logger.error("Error searching transcript: %s", exc)
                return SearchResult(error=str(exc))
            except ContractViolation as exc:
                logger.error("Error parsing search results: %s", exc)
                return SearchResult(error=str(exc))
        return SearchResult(matches=matches)

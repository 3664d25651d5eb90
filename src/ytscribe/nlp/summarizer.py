from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from ytscribe.errors import CompletionError, ValidationFailure
from ytscribe.nlp.completion import Completion, Message
from ytscribe.nlp.prompts import summary_system_prompt
from ytscribe.session import Session, in_flight

logger = logging.getLogger(__name__)

ChannelState = Literal["open", "finalized", "failed", "cancelled"]
Subscriber = Callable[[str, str], None]


class DocumentChannel:
    """Append-only channel between the synthesizer and whoever renders its output.

    The producer pushes chunks in arrival order. Consumers either subscribe a
    callback, which receives ``(chunk, snapshot)`` after every push, or pull
    ``snapshot()`` whenever they like. Text already pushed is never removed.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._subscribers: list[Subscriber] = []
        self._cancel_requested = False
        self.state: ChannelState = "open"
        self.error: str | None = None

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def push(self, chunk: str) -> None:
        if self.state != "open":
            raise RuntimeError(f"Cannot push to a {self.state} channel")
        if not chunk:
            return
        self._parts.append(chunk)
        snapshot = self.snapshot()
        for callback in self._subscribers:
            callback(chunk, snapshot)

    def snapshot(self) -> str:
        return "".join(self._parts)

    def chunks(self) -> tuple[str, ...]:
        return tuple(self._parts)

    def cancel(self) -> None:
        """Ask the producer to stop at the next chunk boundary."""

        self._cancel_requested = True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def close(self, state: ChannelState, error: str | None = None) -> None:
        if self.state == "open":
            self.state = state
            self.error = error


@dataclass(slots=True)
class SynthesisResult:
    text: str
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


class SummarySynthesizer:
    def __init__(
        self,
        completion: Completion,
        *,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        self.completion = completion
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(self, transcript_text: str, language: str) -> list[Message]:
        try:
            system_prompt = summary_system_prompt(language)
        except ValueError as exc:
            raise ValidationFailure(str(exc)) from exc
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": transcript_text},
        ]

    def synthesize(
        self,
        session: Session,
        transcript_text: str,
        *,
        language: str = "en",
        channel: DocumentChannel | None = None,
    ) -> SynthesisResult:
        """Stream a structured summary of ``transcript_text`` into ``channel``.

        Returns the full document on success. On a failed request the result
        text is empty and ``error`` is set; whatever already reached the
        channel stays there but the channel is closed as ``failed``.
        """

        if not transcript_text.strip():
            raise ValidationFailure("Transcript is empty; nothing to summarize")
        messages = self.build_messages(transcript_text, language)
        channel = channel or DocumentChannel()

        with in_flight(session, "synthesizing"):
            try:
                for chunk in self.completion.stream(
                    messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ):
                    if channel.cancel_requested:
                        channel.close("cancelled")
                        logger.info("Summary generation cancelled after %d chars", len(channel.snapshot()))
                        return SynthesisResult(text=channel.snapshot(), cancelled=True)
                    channel.push(chunk)
            except CompletionError as exc:
                logger.error("Error generating summary: %s", exc)
                channel.close("failed", str(exc))
                return SynthesisResult(text="", error=str(exc))

            channel.close("finalized")
            return SynthesisResult(text=channel.snapshot())

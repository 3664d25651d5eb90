from __future__ import annotations

from typing import Any, Iterator, Protocol, Sequence

from openai import OpenAI, OpenAIError

from ytscribe.errors import CompletionError

Message = dict[str, str]


class Completion(Protocol):
    def complete(self, messages: Sequence[Message], *, temperature: float, max_tokens: int) -> str:
        """Return the full reply for a chat-style request."""

    def stream(
        self, messages: Sequence[Message], *, temperature: float, max_tokens: int
    ) -> Iterator[str]:
        """Yield reply text chunks in arrival order."""


class CompletionClient:
    """Chat completion calls through the OpenAI SDK, without automatic retries."""

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        timeout: float = 300.0,
        client: Any | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError(
                    "OpenAI API key required. Set YTSCRIBE_OPENAI_API_KEY or run 'ytscribe set-key'."
                )
            client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client
        self.model = model

    def complete(self, messages: Sequence[Message], *, temperature: float, max_tokens: int) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=list(messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise CompletionError(f"OpenAI API error: {exc}") from exc
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def stream(
        self, messages: Sequence[Message], *, temperature: float, max_tokens: int
    ) -> Iterator[str]:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=list(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            for chunk in response:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except OpenAIError as exc:
            raise CompletionError(f"OpenAI API error: {exc}") from exc

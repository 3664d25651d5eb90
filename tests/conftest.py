from __future__ import annotations

from typing import Iterator, Sequence

import pytest

from ytscribe.config import Settings
from ytscribe.errors import CompletionError


class FakeCompletion:
    """Scripted stand-in for the OpenAI-backed completion client."""

    def __init__(
        self,
        replies: Sequence[str] = (),
        *,
        chunks: Sequence[str] = (),
        fail_after: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self.replies = list(replies)
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.error = error
        self.calls: list[dict] = []

    def complete(self, messages, *, temperature: float, max_tokens: int) -> str:
        self.calls.append({"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)

    def stream(self, messages, *, temperature: float, max_tokens: int) -> Iterator[str]:
        self.calls.append({"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens})
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index == self.fail_after:
                raise CompletionError("stream dropped")
            yield chunk
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_completion():
    return FakeCompletion


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path / "data", openai_api_key="sk-test")

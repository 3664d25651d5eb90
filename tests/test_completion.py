from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from ytscribe.errors import CompletionError
from ytscribe.nlp.completion import CompletionClient


class FakeCompletions:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.kwargs: dict = {}

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions: FakeCompletions) -> CompletionClient:
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return CompletionClient(None, model="gpt-test", client=fake)


def _chunk(content: str | None):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


def test_complete_returns_message_content() -> None:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="reply"))])
    completions = FakeCompletions(response)

    text = _client(completions).complete([{"role": "user", "content": "hi"}], temperature=0.3, max_tokens=50)

    assert text == "reply"
    assert completions.kwargs == {
        "model": "gpt-test",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.3,
        "max_tokens": 50,
    }


def test_stream_yields_non_empty_deltas_in_order() -> None:
    chunks = [_chunk("Hel"), _chunk(None), SimpleNamespace(choices=[]), _chunk("lo")]
    completions = FakeCompletions(iter(chunks))

    parts = list(_client(completions).stream([], temperature=0.7, max_tokens=10))

    assert parts == ["Hel", "lo"]
    assert completions.kwargs["stream"] is True


def test_openai_errors_become_completion_errors() -> None:
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    client = _client(FakeCompletions(error=error))

    with pytest.raises(CompletionError):
        client.complete([], temperature=0.0, max_tokens=1)
    with pytest.raises(CompletionError):
        list(client.stream([], temperature=0.0, max_tokens=1))


def test_missing_api_key_is_rejected() -> None:
    with pytest.raises(ValueError, match="API key"):
        CompletionClient(None, model="gpt-test")

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from ytscribe.errors import CompletionError, OperationInProgress
from ytscribe.nlp.completion import Completion, Message
from ytscribe.nlp.prompts import CHAT_GREETING, chat_system_prompt

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]
ChatState = Literal["idle", "sending"]


@dataclass(frozen=True, slots=True)
class ChatTurn:
    role: Role
    content: str

    def to_message(self) -> Message:
        return {"role": self.role, "content": self.content}


class ChatSession:
    """Conversation about one summary; the summary text grounds every request.

    Only one ``send`` may be in flight. A failed request keeps the user's turn
    and adds no reply.
    """

    def __init__(
        self,
        summary: str,
        completion: Completion,
        *,
        temperature: float = 0.7,
        max_tokens: int = 500,
        greeting: str = CHAT_GREETING,
    ) -> None:
        self.summary = summary
        self.completion = completion
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.state: ChatState = "idle"
        self._turns: list[ChatTurn] = [ChatTurn(role="assistant", content=greeting)]

    @property
    def turns(self) -> tuple[ChatTurn, ...]:
        return tuple(self._turns)

    def build_messages(self) -> list[Message]:
        messages: list[Message] = [{"role": "system", "content": chat_system_prompt(self.summary)}]
        messages.extend(turn.to_message() for turn in self._turns)
        return messages

    def send(self, content: str) -> ChatTurn | None:
        if not content.strip():
            return None
        if self.state == "sending":
            raise OperationInProgress("A chat message is already being sent")

        self._turns.append(ChatTurn(role="user", content=content))
        self.state = "sending"
        try:
            reply = self.completion.complete(
                self.build_messages(),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except CompletionError as exc:
            logger.error("Error sending chat message: %s", exc)
            raise
        finally:
            self.state = "idle"

        turn = ChatTurn(role="assistant", content=reply)
        self._turns.append(turn)
        return turn

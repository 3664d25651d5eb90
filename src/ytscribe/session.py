from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Literal

from ytscribe.errors import OperationInProgress
from ytscribe.storage.models import VideoRecord

if TYPE_CHECKING:
    from ytscribe.nlp.chat import ChatSession

BusyFlag = Literal["synthesizing", "searching"]


@dataclass(slots=True)
class Session:
    """State of one user session, passed explicitly to each operation."""

    video: VideoRecord | None = None
    summary: str = ""
    summary_language: str = "en"
    synthesizing: bool = False
    searching: bool = False
    chat: "ChatSession | None" = None


@contextmanager
def in_flight(session: Session, flag: BusyFlag) -> Iterator[None]:
    """Hold ``flag`` on the session for the duration of one operation."""

    if getattr(session, flag):
        raise OperationInProgress(f"Session is already {flag}")
    setattr(session, flag, True)
    try:
        yield
    finally:
        setattr(session, flag, False)

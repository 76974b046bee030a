"""Models for the downstream automation webhook."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel


class QueryPayload(BaseModel):
    """Body POSTed to the downstream webhook."""

    query: str
    sessionId: str | None = None
    userId: str | None = None
    locale: str | None = None


class ReplyKind(str, Enum):
    """Shape of a downstream reply."""

    ENVELOPE = "envelope"  # complete Alexa response, passed through
    TEXT = "text"  # answer text to wrap in SSML
    EMPTY = "empty"  # nothing usable


@dataclass(frozen=True)
class DownstreamReply:
    """Classified downstream reply."""

    kind: ReplyKind
    envelope: dict[str, Any] | None = None
    text: str = ""

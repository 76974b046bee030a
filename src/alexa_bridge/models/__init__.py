"""Pydantic models for request/response schemas."""

from .alexa import AlexaRequestEnvelope, AlexaResponse
from .downstream import DownstreamReply, QueryPayload, ReplyKind

__all__ = [
    "AlexaRequestEnvelope",
    "AlexaResponse",
    "QueryPayload",
    "DownstreamReply",
    "ReplyKind",
]

"""Business logic services."""

from .alexa_handler import handle_alexa_request
from .downstream import classify_reply, forward_query
from .verifier import verify_request_signature

__all__ = [
    "handle_alexa_request",
    "forward_query",
    "classify_reply",
    "verify_request_signature",
]

"""Downstream automation webhook client."""

import json
import logging
from typing import Any

import httpx

from ..errors import ConfigurationError, DownstreamError
from ..models.downstream import DownstreamReply, QueryPayload, ReplyKind

logger = logging.getLogger(__name__)

# Fields checked, in order, for answer text in a loosely-shaped reply
ANSWER_FIELDS = ("ssml", "speech", "answer", "message", "text")


def classify_reply(raw_text: str) -> DownstreamReply:
    """
    Classify a downstream reply body.

    - A JSON object with both ``version`` and ``response`` present is a complete
      Alexa envelope.
    - A JSON object with one of ``ANSWER_FIELDS`` carries answer text.
    - A JSON string, or a body that is not JSON at all, is answer text.
    - Anything else is empty.
    """
    try:
        payload: Any = json.loads(raw_text)
    except ValueError:
        logger.warning("Downstream returned non-JSON body, using it as raw text")
        payload = raw_text

    if isinstance(payload, dict):
        if payload.get("version") is not None and payload.get("response") is not None:
            return DownstreamReply(kind=ReplyKind.ENVELOPE, envelope=payload)

        for field in ANSWER_FIELDS:
            if field in payload and payload[field] is not None:
                text = str(payload[field]).strip()
                if text:
                    return DownstreamReply(kind=ReplyKind.TEXT, text=text)
                break
        return DownstreamReply(kind=ReplyKind.EMPTY)

    if isinstance(payload, str) and payload.strip():
        return DownstreamReply(kind=ReplyKind.TEXT, text=payload.strip())

    return DownstreamReply(kind=ReplyKind.EMPTY)


async def forward_query(
    payload: QueryPayload,
    webhook_url: str,
    timeout: float,
    client: httpx.AsyncClient | None = None,
) -> DownstreamReply:
    """
    POST the query to the downstream webhook and classify its reply.

    Args:
        payload: Query and caller identifiers
        webhook_url: Downstream URL
        timeout: Request timeout in seconds
        client: Optional client to use instead of a fresh one

    Returns:
        Classified downstream reply

    Raises:
        ConfigurationError: If no webhook URL is configured
        DownstreamError: On network errors, timeouts or non-2xx status
    """
    if not webhook_url:
        raise ConfigurationError("Downstream webhook URL not configured. Set ALEXA_BRIDGE_WEBHOOK_URL.")

    body = payload.model_dump(exclude_none=True)
    logger.debug(f"Forwarding query to downstream: {body}")

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as fresh_client:
                response = await fresh_client.post(webhook_url, json=body)
        else:
            response = await client.post(webhook_url, json=body, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise DownstreamError(f"Downstream timed out after {timeout}s") from e
    except httpx.HTTPError as e:
        raise DownstreamError(f"Downstream request failed: {e}") from e

    logger.debug(f"Downstream replied {response.status_code}: {response.text[:500]}")

    return classify_reply(response.text)

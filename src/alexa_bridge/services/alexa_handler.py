"""Alexa Skill request handling."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..config import Settings
from ..errors import ConfigurationError, DownstreamError, MalformedRequestError, SignatureVerificationError
from ..models.alexa import AlexaRequestEnvelope
from ..models.downstream import QueryPayload, ReplyKind
from .downstream import forward_query
from .speech import build_message_response, build_response, language_for
from .verifier import verify_request_signature

logger = logging.getLogger(__name__)

HandlerResult = tuple[int, dict[str, Any]]


def decode_envelope(raw_body: bytes) -> AlexaRequestEnvelope:
    """Parse the raw body into a request envelope."""
    try:
        data = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRequestError(f"Body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedRequestError("Body is not a JSON object")

    try:
        return AlexaRequestEnvelope.model_validate(data)
    except ValidationError as e:
        raise MalformedRequestError(f"Body is not an Alexa envelope: {e}") from e


async def handle_alexa_request(
    raw_body: bytes,
    headers: Mapping[str, str],
    settings: Settings,
) -> HandlerResult:
    """
    Process an Alexa skill request and return the HTTP status and response envelope.

    Steps:
    - Verify the request signature (unless disabled in settings)
    - Decode the envelope
    - LaunchRequest: welcome message, session stays open
    - Primary intent: forward the query slot to the downstream webhook
    - Anything else: "not understood"

    Args:
        raw_body: Request body exactly as received
        headers: Request headers (case-insensitive mapping)
        settings: Application settings

    Returns:
        Tuple of (HTTP status code, Alexa response envelope)
    """
    language = settings.default_language

    try:
        if settings.verify_signatures:
            await verify_request_signature(
                headers.get("signaturecertchainurl"),
                headers.get("signature"),
                raw_body,
                signature_256=headers.get("signature-256"),
                tolerance_seconds=settings.signature_tolerance_seconds,
            )
        else:
            logger.debug("Signature verification disabled")

        envelope = decode_envelope(raw_body)
        language = language_for(envelope.request.locale, settings.default_language)

        return 200, await _dispatch(envelope, settings, language)

    except SignatureVerificationError as e:
        logger.warning(f"Alexa signature verification failed: {e}")
        return 401, build_message_response("unverified", language)

    except MalformedRequestError as e:
        logger.error(f"Invalid Alexa request body: {e}")
        return 400, build_message_response("invalid_request", language)

    except ConfigurationError as e:
        logger.error(str(e))
        return 200, build_message_response("not_configured", language)

    except DownstreamError as e:
        logger.error(str(e))
        return 200, build_message_response("error", language)

    except Exception:
        logger.exception("Unexpected error handling Alexa request")
        return 200, build_message_response("error", language)


async def _dispatch(envelope: AlexaRequestEnvelope, settings: Settings, language: str) -> dict[str, Any]:
    request_type = envelope.request_type
    intent_name = envelope.intent_name

    logger.info(f"Alexa request type: {request_type}, intent: {intent_name or '-'}")

    # Launch request - welcome message
    if request_type == "LaunchRequest":
        return build_message_response("launch", language, should_end=False)

    if request_type == "IntentRequest" and intent_name == settings.primary_intent:
        query = envelope.slot_value(settings.query_slot_names)

        if not query:
            return build_message_response("ask_query", language, should_end=False)

        return await _handle_query(envelope, query, settings, language)

    return build_message_response("not_understood", language)


async def _handle_query(
    envelope: AlexaRequestEnvelope,
    query: str,
    settings: Settings,
    language: str,
) -> dict[str, Any]:
    """Forward the query downstream and turn the reply into a response."""
    logger.info(f"Forwarding query ({len(query)} chars)")
    logger.debug(f"Query text: {query}")

    payload = QueryPayload(
        query=query,
        sessionId=envelope.session_id,
        userId=envelope.user_id,
        locale=envelope.request.locale,
    )

    reply = await forward_query(payload, settings.webhook_url, settings.downstream_timeout)

    if reply.kind is ReplyKind.ENVELOPE and reply.envelope is not None:
        logger.info("Downstream returned a complete Alexa envelope")
        return reply.envelope

    if reply.kind is ReplyKind.TEXT:
        return build_response(reply.text)

    logger.error("Downstream reply had no usable answer")
    return build_message_response("no_answer", language)

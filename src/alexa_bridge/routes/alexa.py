"""Alexa Skill webhook endpoint."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..errors import PayloadTooLargeError
from ..services.alexa_handler import handle_alexa_request
from ..services.speech import build_message_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["alexa"])


async def read_raw_body(request: Request, limit: int) -> bytes:
    """Read the request body unmodified, refusing anything larger than ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(limit)

    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise PayloadTooLargeError(limit)
        chunks.append(chunk)

    return b"".join(chunks)


@router.post("/alexa")
async def alexa_webhook(request: Request, settings: Settings = Depends(get_settings)) -> JSONResponse:
    """
    Handle Alexa Skill requests.

    This endpoint receives requests from the Alexa service when users
    interact with the skill. The body is read as raw bytes because the
    signature covers the exact bytes Alexa sent.

    Supported requests:
    - LaunchRequest: "Alexa, open <skill>"
    - Primary intent (AskPerplexityIntent by default): the query slot is
      forwarded to the downstream webhook and its answer is spoken back

    The response is always an Alexa response envelope with speech output.
    """
    try:
        raw_body = await read_raw_body(request, settings.max_body_bytes)
    except PayloadTooLargeError as e:
        logger.warning(str(e))
        return JSONResponse(
            status_code=413,
            content=build_message_response("invalid_request", settings.default_language),
        )

    logger.debug(f"Alexa request body: {raw_body[:2000]!r}")

    status_code, response = await handle_alexa_request(raw_body, request.headers, settings)

    return JSONResponse(status_code=status_code, content=response)

"""Facebook webhook endpoints.

This module handles incoming Facebook Messenger webhooks.

Request handling (in order):
1. Signature verification - rejects callbacks not signed with the App secret
2. Classification - tags every messaging event in the batch
3. Scheduling - hands each event to the EventProcessor as a background task

The POST handler acknowledges as soon as every event is scheduled. Replies
are sent after the response, so a slow Send API never delays the
acknowledgement Facebook waits for.
"""

import json
import logging

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Request,
    Response,
)
from fastapi.responses import PlainTextResponse

from src.config import get_settings
from src.constants import SIGNATURE_HEADER
from src.logging_config import mask_pii
from src.services.event_classifier import classify
from src.services.message_processor import EventProcessor, get_event_processor
from src.services.signature import (
    InvalidSignatureError,
    MissingSignatureError,
    require_valid_signature,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if mode == "subscribe" and token == settings.facebook_verify_token:
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge or "")

    logger.warning("Webhook verification failed, verify token mismatch")
    return Response(status_code=403)


async def verified_body(request: Request) -> bytes:
    """Return the raw request body once its signature has been checked.

    Raises:
        HTTPException: 403 if the signature header is missing or wrong
    """
    settings = get_settings()
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    try:
        require_valid_signature(settings.facebook_app_secret, raw_body, signature)
    except MissingSignatureError:
        logger.warning("Rejected webhook: missing %s header", SIGNATURE_HEADER)
        raise HTTPException(status_code=403)
    except InvalidSignatureError:
        logger.warning(
            "Rejected webhook: signature mismatch (received %s)",
            mask_pii(signature),
        )
        raise HTTPException(status_code=403)

    return raw_body


def get_processor(request: Request) -> EventProcessor:
    """Event processor built at startup, or a fresh one outside the app."""
    processor = getattr(request.app.state, "event_processor", None)
    return processor or get_event_processor()


@router.post("")
async def handle_webhook(
    background_tasks: BackgroundTasks,
    raw_body: bytes = Depends(verified_body),
    processor: EventProcessor = Depends(get_processor),
):
    """Handle incoming Facebook Messenger webhook events."""
    try:
        payload = json.loads(raw_body)
    except ValueError:
        logger.warning("Webhook body is not valid JSON, acknowledging without action")
        return Response(status_code=200)

    events = classify(payload)
    if not events and isinstance(payload, dict) and payload.get("object") != "page":
        logger.info("Ignoring webhook for object %r", payload.get("object"))

    for event in events:
        logger.info(
            "Webhook event %s from %s on page %s",
            event.kind.value,
            event.sender_id,
            event.page_id,
        )
        background_tasks.add_task(processor.process, event)

    return Response(status_code=200)

"""Facebook webhook endpoints.

GET answers Meta's subscription handshake. POST accepts Messenger
deliveries and schedules the relay of image attachments as tracked background
tasks so Facebook gets its 200 quickly.

Checks performed before the relay is invoked (in order):
1. Signature - X-Hub-Signature-256 when FACEBOOK_APP_SECRET is configured
2. Payload shape - must parse as a Messenger payload
3. Subscription object - must be "page"
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.config import get_settings
from src.logging_config import mask_pii
from src.middleware.webhook_signature import (
    FACEBOOK_SIGNATURE_HEADER,
    verify_facebook_signature,
)
from src.models.messenger import MessengerWebhookPayload
from src.services.background_tasks import run_tracked
from src.services.inbound_relay import InboundRelay, get_inbound_relay

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if not mode or not token:
        return Response(status_code=400)

    if (
        mode == "subscribe"
        and settings.facebook_verify_token
        and token == settings.facebook_verify_token
    ):
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge or "")

    logger.warning("Webhook verification failed (token=%s)", mask_pii(token))
    return Response(status_code=403)


@router.post("")
async def handle_webhook(request: Request, background_tasks: BackgroundTasks):
    """Handle incoming Facebook Messenger webhook events."""
    settings = get_settings()
    body = await request.body()

    if settings.facebook_app_secret and not verify_facebook_signature(
        body,
        request.headers.get(FACEBOOK_SIGNATURE_HEADER),
        settings.facebook_app_secret,
    ):
        logger.warning("Rejected Facebook webhook with invalid signature")
        return Response(status_code=403)

    try:
        payload = MessengerWebhookPayload.model_validate_json(body)
    except ValidationError:
        logger.warning("Malformed Facebook webhook payload")
        return Response(status_code=400)

    if payload.object != "page":
        return Response(status_code=404)

    for entry in payload.entry:
        for event in entry.messaging:
            sender_id = event.sender.id
            if not sender_id or event.message is None:
                continue

            message = event.message
            if message.is_echo:
                # Sent by the Page itself
                continue
            if message.text:
                logger.info("Received text from %s (ignored)", sender_id)

            image_urls = message.image_urls
            if not image_urls:
                continue
            if len(image_urls) > 1:
                logger.info(
                    "Relaying first of %d images from %s", len(image_urls), sender_id
                )
            background_tasks.add_task(
                run_tracked,
                process_image,
                sender_id=sender_id,
                image_url=image_urls[0],
            )

    return PlainTextResponse("EVENT_RECEIVED")


async def process_image(
    sender_id: str,
    image_url: str,
    *,
    relay: InboundRelay | None = None,
) -> None:
    """Relay one image; never raises so the server keeps serving.

    Args:
        sender_id: Facebook user ID (PSID) who sent the image
        image_url: Attachment URL
        relay: Optional injected relay (for testing)
    """
    try:
        _relay = relay or get_inbound_relay()
        outcome = await _relay.relay_image(sender_id, image_url)
        logger.info("Image from %s: %s", sender_id, outcome.value)
    except Exception as e:
        logger.error("Error relaying image: %s", e, exc_info=True)

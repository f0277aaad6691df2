"""Telegram webhook endpoint for staff inline button presses."""

import logging

from fastapi import APIRouter, BackgroundTasks, Request, Response
from pydantic import ValidationError

from src.config import get_settings
from src.middleware.webhook_signature import (
    TELEGRAM_SECRET_HEADER,
    verify_telegram_secret,
)
from src.models.messenger import TelegramUpdate
from src.services.background_tasks import run_tracked
from src.services.decision_handler import DecisionHandler, get_decision_handler

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/webhook")
async def handle_telegram_webhook(request: Request, background_tasks: BackgroundTasks):
    """Receive a Telegram update and dispatch callback queries."""
    settings = get_settings()

    if settings.telegram_webhook_secret and not verify_telegram_secret(
        request.headers.get(TELEGRAM_SECRET_HEADER),
        settings.telegram_webhook_secret,
    ):
        logger.warning("Rejected Telegram webhook with invalid secret token")
        return Response(status_code=403)

    try:
        update = TelegramUpdate.model_validate_json(await request.body())
    except ValidationError:
        logger.warning("Malformed Telegram update")
        return {"status": "ignored"}

    callback = update.callback_query
    if callback is None or callback.message is None:
        return {"status": "ignored"}

    background_tasks.add_task(
        run_tracked,
        process_callback,
        notification_ref=callback.message.message_id,
        callback_id=callback.id,
        action_token=callback.data,
    )
    return {"status": "ok"}


async def process_callback(
    notification_ref: int,
    callback_id: str,
    action_token: str | None,
    *,
    handler: DecisionHandler | None = None,
) -> None:
    """Apply one staff decision; never raises so the server keeps serving.

    Args:
        notification_ref: Telegram message id carrying the buttons
        callback_id: Callback query id
        action_token: Callback data
        handler: Optional injected decision handler (for testing)
    """
    try:
        _handler = handler or get_decision_handler()
        outcome = await _handler.handle_decision(
            notification_ref, callback_id, action_token
        )
        logger.info("Callback %s: %s", callback_id, outcome.value)
    except Exception as e:
        logger.error("Error handling callback: %s", e, exc_info=True)

"""Telegram Bot API calls used by the staff notification flow."""

import time
from typing import Any

import httpx
import logfire

from src.config import get_settings
from src.constants import TELEGRAM_API_BASE_URL, TELEGRAM_NOT_MODIFIED_DESCRIPTION
from src.logging_config import redact_secrets
from src.services.provider_errors import MissingCredentialsError, TelegramAPIError


async def call_bot_api(
    bot_token: str | None,
    method: str,
    payload: dict[str, Any],
) -> Any:
    """
    Invoke a Bot API method and return its ``result`` field.

    Args:
        bot_token: Telegram bot token
        method: Bot API method name (e.g. ``sendPhoto``)
        payload: JSON body for the method

    Raises:
        MissingCredentialsError: If no bot token is configured.
        TelegramAPIError: If the Bot API answers with ``ok: false``.
        httpx.HTTPStatusError: On a non-2xx response without a Bot API body.
        httpx.RequestError: On transport failure or timeout.
    """
    if not bot_token:
        raise MissingCredentialsError("TELEGRAM_BOT_TOKEN")

    start_time = time.time()
    url = f"{TELEGRAM_API_BASE_URL}/bot{bot_token}/{method}"

    try:
        settings = get_settings()
        async with httpx.AsyncClient(
            timeout=settings.telegram_api_timeout_seconds
        ) as client:
            response = await client.post(url, json=payload)
    except httpx.RequestError as e:
        logfire.error(
            "Telegram API request error",
            method=method,
            error=redact_secrets(str(e)),
            error_type=type(e).__name__,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        raise

    elapsed = time.time() - start_time
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        logfire.error(
            "Telegram API returned a non-JSON body",
            method=method,
            status_code=response.status_code,
            response_body=response.text[:500],
            response_time_ms=elapsed * 1000,
        )
        response.raise_for_status()
        raise TelegramAPIError(method, response.status_code, "unexpected response body")

    if not data.get("ok"):
        description = str(data.get("description", "unknown error"))
        logfire.error(
            "Telegram API call failed",
            method=method,
            status_code=response.status_code,
            error_code=data.get("error_code"),
            description=description,
            response_time_ms=elapsed * 1000,
        )
        raise TelegramAPIError(method, data.get("error_code"), description)

    logfire.info(
        "Telegram API call succeeded",
        method=method,
        response_time_ms=elapsed * 1000,
    )
    return data.get("result")


def build_inline_keyboard(buttons: list[tuple[str, str]]) -> dict[str, Any]:
    """Single-row inline keyboard from (label, callback_data) pairs."""
    return {
        "inline_keyboard": [
            [{"text": label, "callback_data": data} for label, data in buttons]
        ]
    }


async def send_photo(
    bot_token: str | None,
    chat_id: str,
    photo_url: str,
    caption: str,
    reply_markup: dict[str, Any] | None = None,
) -> int:
    """
    Send a photo by URL to a chat.

    Returns:
        The message_id of the sent message.
    """
    payload: dict[str, Any] = {
        "chat_id": chat_id,
        "photo": photo_url,
        "caption": caption,
    }
    if reply_markup is not None:
        payload["reply_markup"] = reply_markup

    result = await call_bot_api(bot_token, "sendPhoto", payload)
    message_id = result.get("message_id") if isinstance(result, dict) else None
    if not isinstance(message_id, int):
        raise TelegramAPIError("sendPhoto", None, "response has no message_id")
    return message_id


async def answer_callback_query(
    bot_token: str | None,
    callback_query_id: str,
    text: str | None = None,
) -> None:
    """Acknowledge an inline button press so the client stops its spinner."""
    payload: dict[str, Any] = {"callback_query_id": callback_query_id}
    if text:
        payload["text"] = text
    await call_bot_api(bot_token, "answerCallbackQuery", payload)


async def edit_message_caption(
    bot_token: str | None,
    chat_id: str,
    message_id: int,
    caption: str,
) -> None:
    """
    Replace the caption of a sent photo.

    The inline keyboard is dropped because no reply_markup is sent.
    Rewriting an identical caption is not an error.
    """
    payload = {
        "chat_id": chat_id,
        "message_id": message_id,
        "caption": caption,
    }
    try:
        await call_bot_api(bot_token, "editMessageCaption", payload)
    except TelegramAPIError as e:
        if TELEGRAM_NOT_MODIFIED_DESCRIPTION in e.description.lower():
            logfire.info(
                "Caption already up to date",
                chat_id=chat_id,
                message_id=message_id,
            )
            return
        raise

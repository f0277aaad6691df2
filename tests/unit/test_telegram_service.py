"""Tests for the Telegram Bot API wrapper."""

import json

import httpx
import pytest
import respx

from src.services.provider_errors import MissingCredentialsError, TelegramAPIError
from src.services.telegram_service import (
    answer_callback_query,
    build_inline_keyboard,
    edit_message_caption,
    send_photo,
)

TOKEN = "123456:test-bot-token"
BASE = f"https://api.telegram.org/bot{TOKEN}"


def _ok(result):
    return httpx.Response(200, json={"ok": True, "result": result})


class TestSendPhoto:
    @pytest.mark.asyncio
    @respx.mock
    async def test_send_photo_returns_message_id(self, mock_settings):
        route = respx.post(f"{BASE}/sendPhoto").mock(
            return_value=_ok({"message_id": 321, "chat": {"id": -100}})
        )
        keyboard = build_inline_keyboard([("✅ Confirm", "confirm_9001")])

        message_id = await send_photo(
            TOKEN, "-100", "https://cdn.example.com/p.jpg", "caption", keyboard
        )

        assert message_id == 321
        payload = json.loads(route.calls.last.request.content)
        assert payload["chat_id"] == "-100"
        assert payload["photo"] == "https://cdn.example.com/p.jpg"
        assert payload["caption"] == "caption"
        assert payload["reply_markup"] == {
            "inline_keyboard": [[{"text": "✅ Confirm", "callback_data": "confirm_9001"}]]
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_photo_api_error(self, mock_settings):
        respx.post(f"{BASE}/sendPhoto").mock(
            return_value=httpx.Response(
                400,
                json={
                    "ok": False,
                    "error_code": 400,
                    "description": "Bad Request: wrong file identifier",
                },
            )
        )

        with pytest.raises(TelegramAPIError) as exc_info:
            await send_photo(TOKEN, "-100", "bad", "caption")

        assert exc_info.value.error_code == 400
        assert "wrong file identifier" in exc_info.value.description

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_photo_non_json_error(self, mock_settings):
        respx.post(f"{BASE}/sendPhoto").mock(
            return_value=httpx.Response(502, text="Bad Gateway")
        )

        with pytest.raises(httpx.HTTPStatusError):
            await send_photo(TOKEN, "-100", "https://x/p.jpg", "caption")

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_photo_timeout(self, mock_settings):
        respx.post(f"{BASE}/sendPhoto").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(httpx.TimeoutException):
            await send_photo(TOKEN, "-100", "https://x/p.jpg", "caption")

    @pytest.mark.asyncio
    async def test_send_photo_missing_token(self, mock_settings):
        with pytest.raises(MissingCredentialsError):
            await send_photo(None, "-100", "https://x/p.jpg", "caption")


class TestCallbackAndCaption:
    @pytest.mark.asyncio
    @respx.mock
    async def test_answer_callback_query(self, mock_settings):
        route = respx.post(f"{BASE}/answerCallbackQuery").mock(return_value=_ok(True))

        await answer_callback_query(TOKEN, "cb-1")

        assert json.loads(route.calls.last.request.content) == {
            "callback_query_id": "cb-1"
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_edit_caption_drops_keyboard(self, mock_settings):
        route = respx.post(f"{BASE}/editMessageCaption").mock(return_value=_ok({}))

        await edit_message_caption(TOKEN, "-100", 321, "✅ CONFIRMED")

        payload = json.loads(route.calls.last.request.content)
        assert payload == {"chat_id": "-100", "message_id": 321, "caption": "✅ CONFIRMED"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_edit_caption_not_modified_is_success(self, mock_settings):
        respx.post(f"{BASE}/editMessageCaption").mock(
            return_value=httpx.Response(
                400,
                json={
                    "ok": False,
                    "error_code": 400,
                    "description": "Bad Request: message is not modified: specified "
                    "new message content and reply markup are exactly the same",
                },
            )
        )

        await edit_message_caption(TOKEN, "-100", 321, "same")

    @pytest.mark.asyncio
    @respx.mock
    async def test_edit_caption_other_error_raises(self, mock_settings):
        respx.post(f"{BASE}/editMessageCaption").mock(
            return_value=httpx.Response(
                400,
                json={
                    "ok": False,
                    "error_code": 400,
                    "description": "Bad Request: message to edit not found",
                },
            )
        )

        with pytest.raises(TelegramAPIError):
            await edit_message_caption(TOKEN, "-100", 321, "caption")

"""Tests for logging setup and credential hygiene in provider logs."""

import logging

import httpx
import pytest
import respx
from fastapi import FastAPI

from src.logging_config import mask_pii, redact_secrets, setup_logfire
from src.services.messaging_protocol import (
    FacebookMessagingService,
    TelegramStaffNotifier,
)

BOT_TOKEN = "123456:SECRET-BOT-TOKEN"
PAGE_TOKEN = "EAAG-SECRET-PAGE-TOKEN"


def _logged_text(mock_logfire) -> str:
    calls = (
        mock_logfire.info.call_args_list
        + mock_logfire.warning.call_args_list
        + mock_logfire.error.call_args_list
    )
    return " ".join(f"{call.args} {call.kwargs}" for call in calls)


class TestMaskPii:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            ("", ""),
            ("abc", "***"),
            ("abcdef", "ab**ef"),
        ],
    )
    def test_mask_pii(self, value, expected):
        assert mask_pii(value) == expected


class TestRedactSecrets:
    def test_bot_token_in_path(self):
        text = f"Server error '502 Bad Gateway' for url 'https://api.telegram.org/bot{BOT_TOKEN}/sendPhoto'"

        redacted = redact_secrets(text)

        assert "SECRET-BOT-TOKEN" not in redacted
        assert "/bot[REDACTED]/sendPhoto" in redacted

    def test_access_token_query_param(self):
        text = (
            "Client error '400 Bad Request' for url "
            f"'https://graph.facebook.com/v18.0/me/messages?access_token={PAGE_TOKEN}&x=1'"
        )

        redacted = redact_secrets(text)

        assert PAGE_TOKEN not in redacted
        assert "access_token=[REDACTED]&x=1" in redacted

    def test_plain_text_untouched(self):
        assert redact_secrets("connection reset by peer") == "connection reset by peer"


class TestSetupLogfire:
    def test_outbound_http_not_instrumented(self, mock_settings, mock_logfire):
        app = FastAPI()

        setup_logfire(app)

        mock_logfire.configure.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app)
        mock_logfire.instrument_httpx.assert_not_called()
        assert logging.getLogger("httpx").getEffectiveLevel() >= logging.WARNING

    def test_without_token_logs_stay_local(self, mock_settings, mock_logfire):
        mock_settings.logfire_token = None

        setup_logfire(FastAPI())

        assert mock_logfire.configure.call_args.kwargs["send_to_logfire"] is False


class TestProviderErrorsDoNotLeakTokens:
    @pytest.mark.asyncio
    @respx.mock
    async def test_bot_token_absent_from_failure_logs(self, mock_settings, mock_logfire):
        respx.post(f"https://api.telegram.org/bot{BOT_TOKEN}/answerCallbackQuery").mock(
            return_value=httpx.Response(502, text="Bad Gateway")
        )
        notifier = TelegramStaffNotifier(BOT_TOKEN, "-100")

        assert await notifier.answer_callback("cb-1") is False

        mock_logfire.error.assert_called()
        assert "SECRET-BOT-TOKEN" not in _logged_text(mock_logfire)

    @pytest.mark.asyncio
    @respx.mock
    async def test_page_token_absent_from_failure_logs(self, mock_settings, mock_logfire):
        respx.post("https://graph.facebook.com/v18.0/me/messages").mock(
            return_value=httpx.Response(400, json={"error": {"message": "bad"}})
        )

        sent = await FacebookMessagingService(PAGE_TOKEN).send_message("9001", "hi")

        assert sent is False
        mock_logfire.error.assert_called()
        assert PAGE_TOKEN not in _logged_text(mock_logfire)

    @pytest.mark.asyncio
    @respx.mock
    async def test_page_token_absent_from_lookup_logs(self, mock_settings, mock_logfire):
        respx.get("https://graph.facebook.com/v18.0/9001").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        assert await FacebookMessagingService(PAGE_TOKEN).get_user_info("9001") is None
        assert PAGE_TOKEN not in _logged_text(mock_logfire)

"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
import re
from typing import Any

import logfire
from fastapi import FastAPI

from src.config import get_settings


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Environment-aware Python logging

    Outbound httpx calls are not instrumented: Bot API URLs carry the bot
    token in their path and Graph API URLs carry the page access token.
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "service_name": "fb-telegram-order-relay",
    }

    # Without a token Logfire logs locally only
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token
    else:
        logfire_config["send_to_logfire"] = False

    logfire.configure(**logfire_config)

    logfire.instrument_fastapi(app)

    log_level = settings.log_level.upper()

    if settings.env == "local":
        # Local: Console formatting for development
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Production: Logfire handles structured formatting
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(message)s",
            handlers=[logfire.LogfireLoggingHandler()],
        )

    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """
    Mask potentially sensitive data in logs.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    # Show first 2 and last 2 characters, mask the rest
    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


_SECRET_PATTERNS = (
    # Bot API: https://api.telegram.org/bot<token>/<method>
    (re.compile(r"/bot[^/\s]+/"), "/bot[REDACTED]/"),
    # Graph API: ?access_token=<token>
    (re.compile(r"(access_token=)[^&\s'\"]+"), r"\1[REDACTED]"),
)


def redact_secrets(text: str) -> str:
    """
    Remove provider credentials embedded in URLs from a log string.

    httpx error messages quote the request URL, which carries the bot
    token (Telegram) or the page access token (Facebook).
    """
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text

"""Facebook Graph API calls: send a text message, fetch profile fields."""

import time

import httpx
import logfire

from src.config import get_settings
from src.constants import FACEBOOK_GRAPH_API_BASE_URL, FACEBOOK_GRAPH_API_VERSION
from src.logging_config import redact_secrets
from src.models.user_models import FacebookUserInfo
from src.services.provider_errors import MissingCredentialsError

PROFILE_FIELDS = ("name", "first_name", "last_name")


def _graph_url(path: str) -> str:
    return f"{FACEBOOK_GRAPH_API_BASE_URL}/{FACEBOOK_GRAPH_API_VERSION}/{path}"


async def get_user_info(
    page_access_token: str | None,
    user_id: str,
) -> FacebookUserInfo | None:
    """
    Get basic user info from Facebook Graph API (no consent required).

    Fetches name, first_name and last_name. Returns None on any failure,
    including a missing page access token.
    """
    if not page_access_token:
        logfire.error(
            "Cannot fetch user info: Facebook page access token not set",
            user_id=user_id,
        )
        return None

    logfire.info(
        "Fetching basic user info from Facebook",
        user_id=user_id,
        fields=list(PROFILE_FIELDS),
    )
    params = {
        "access_token": page_access_token,
        "fields": ",".join(PROFILE_FIELDS),
    }
    try:
        settings = get_settings()
        async with httpx.AsyncClient(
            timeout=settings.facebook_api_timeout_seconds
        ) as client:
            response = await client.get(_graph_url(user_id), params=params)
            if response.status_code == 200:
                data = response.json()
                logfire.info(
                    "User info fetched successfully",
                    user_id=user_id,
                    has_name=bool(data.get("name") or data.get("first_name")),
                )
                return FacebookUserInfo(
                    id=str(data.get("id", user_id)),
                    name=data.get("name"),
                    first_name=data.get("first_name"),
                    last_name=data.get("last_name"),
                )
            logfire.error(
                "Failed to fetch user info",
                user_id=user_id,
                status_code=response.status_code,
                response_body=response.text[:500],
            )
            return None
    except Exception as e:
        logfire.error(
            "Error fetching user info",
            user_id=user_id,
            error=redact_secrets(str(e)),
            error_type=type(e).__name__,
        )
        return None


async def send_message(
    page_access_token: str | None,
    recipient_id: str,
    text: str,
) -> None:
    """
    Send message via Facebook Graph API.

    Args:
        page_access_token: Facebook Page access token
        recipient_id: Facebook user ID to send message to
        text: Message text to send

    Raises:
        MissingCredentialsError: If no page access token is configured.
        httpx.HTTPStatusError: On a non-2xx response.
        httpx.RequestError: On transport failure or timeout.
    """
    if not page_access_token:
        raise MissingCredentialsError("FACEBOOK_PAGE_ACCESS_TOKEN")

    start_time = time.time()

    logfire.info(
        "Sending Facebook message",
        recipient_id=recipient_id,
        message_length=len(text),
        api_version=FACEBOOK_GRAPH_API_VERSION,
    )

    params = {"access_token": page_access_token}
    payload = {
        "recipient": {"id": recipient_id},
        "messaging_type": "RESPONSE",
        "message": {"text": text},
    }

    try:
        settings = get_settings()
        async with httpx.AsyncClient(
            timeout=settings.facebook_api_timeout_seconds
        ) as client:
            response = await client.post(
                _graph_url("me/messages"), params=params, json=payload
            )
            elapsed = time.time() - start_time

            if response.status_code == 200:
                logfire.info(
                    "Facebook message sent successfully",
                    recipient_id=recipient_id,
                    message_id=response.json().get("message_id"),
                    response_time_ms=elapsed * 1000,
                )
            else:
                logfire.error(
                    "Facebook message send failed",
                    recipient_id=recipient_id,
                    status_code=response.status_code,
                    response_body=response.text[:500],
                    response_time_ms=elapsed * 1000,
                )

            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logfire.error(
            "Facebook API HTTP error",
            recipient_id=recipient_id,
            status_code=e.response.status_code,
            error=redact_secrets(str(e)),
            error_type=type(e).__name__,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        raise
    except httpx.RequestError as e:
        logfire.error(
            "Facebook API request error",
            recipient_id=recipient_id,
            error=redact_secrets(str(e)),
            error_type=type(e).__name__,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        raise

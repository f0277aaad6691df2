"""Messaging abstraction protocols for decoupling from the provider APIs.

This module provides Protocol-based abstractions for both chat platforms,
allowing the relay workflow to:
- Mock messaging in tests without complex httpx mocking
- Support dependency injection for cleaner architecture

MessagingService is the customer-facing side (Facebook Messenger);
StaffNotifier is the staff-facing side (Telegram). Implementations never
raise: failures are logged and reported as False/None.
"""

from typing import Any, Protocol

import logfire

from src.logging_config import redact_secrets
from src.models.user_models import FacebookUserInfo


class MessagingService(Protocol):
    """Protocol for sending messages to customers and fetching their profile."""

    async def send_message(
        self,
        recipient_id: str,
        text: str,
    ) -> bool:
        """Send message to recipient.

        Args:
            recipient_id: Platform-specific user identifier
            text: Message text to send

        Returns:
            True if message sent successfully, False otherwise
        """
        ...

    async def get_user_info(
        self,
        user_id: str,
    ) -> FacebookUserInfo | None:
        """Get user profile information.

        Returns:
            User profile info or None if not found/error
        """
        ...


class StaffNotifier(Protocol):
    """Protocol for the staff chat that receives order photos."""

    async def send_order_photo(
        self,
        photo_url: str,
        caption: str,
        buttons: list[tuple[str, str]],
    ) -> int | None:
        """Post a photo with inline buttons.

        Returns:
            Message id of the notification, or None on error
        """
        ...

    async def answer_callback(self, callback_id: str) -> bool:
        """Acknowledge a button press."""
        ...

    async def edit_caption(self, message_id: int, caption: str) -> bool:
        """Rewrite a notification caption and drop its buttons."""
        ...


class FacebookMessagingService:
    """Facebook Messenger implementation of MessagingService.

    Wraps the facebook_service functions while providing the
    MessagingService protocol interface.

    Example:
        >>> service = FacebookMessagingService(page_access_token="...")
        >>> await service.send_message("user123", "Hello!")
        True
    """

    def __init__(self, page_access_token: str | None):
        """Initialize with Facebook Page access token.

        Args:
            page_access_token: Facebook Page access token; may be None, in
                which case every call fails softly.
        """
        self._token = page_access_token

    async def send_message(self, recipient_id: str, text: str) -> bool:
        """Send message via Facebook Messenger.

        Returns:
            True if message sent successfully, False on error
        """
        from src.services.facebook_service import send_message

        try:
            await send_message(
                page_access_token=self._token,
                recipient_id=recipient_id,
                text=text,
            )
            return True
        except Exception as e:
            logfire.error(
                "FacebookMessagingService.send_message failed",
                recipient_id=recipient_id,
                error=redact_secrets(str(e)),
                error_type=type(e).__name__,
            )
            return False

    async def get_user_info(self, user_id: str) -> FacebookUserInfo | None:
        """Get user info from Facebook Graph API."""
        from src.services.facebook_service import get_user_info

        return await get_user_info(
            page_access_token=self._token,
            user_id=user_id,
        )


class TelegramStaffNotifier:
    """Telegram Bot API implementation of StaffNotifier."""

    def __init__(self, bot_token: str | None, chat_id: str | None):
        self._token = bot_token
        self._chat_id = chat_id

    def _log_failure(self, operation: str, error: Exception, **context: Any) -> None:
        logfire.error(
            f"TelegramStaffNotifier.{operation} failed",
            error=redact_secrets(str(error)),
            error_type=type(error).__name__,
            **context,
        )

    async def send_order_photo(
        self,
        photo_url: str,
        caption: str,
        buttons: list[tuple[str, str]],
    ) -> int | None:
        from src.services.telegram_service import build_inline_keyboard, send_photo

        if not self._chat_id:
            logfire.error("Cannot notify staff: TELEGRAM_CHAT_ID not set")
            return None
        try:
            return await send_photo(
                bot_token=self._token,
                chat_id=self._chat_id,
                photo_url=photo_url,
                caption=caption,
                reply_markup=build_inline_keyboard(buttons),
            )
        except Exception as e:
            self._log_failure("send_order_photo", e)
            return None

    async def answer_callback(self, callback_id: str) -> bool:
        from src.services.telegram_service import answer_callback_query

        try:
            await answer_callback_query(self._token, callback_id)
            return True
        except Exception as e:
            self._log_failure("answer_callback", e, callback_id=callback_id)
            return False

    async def edit_caption(self, message_id: int, caption: str) -> bool:
        from src.services.telegram_service import edit_message_caption

        if not self._chat_id:
            logfire.error(
                "Cannot edit notification: TELEGRAM_CHAT_ID not set",
                message_id=message_id,
            )
            return False
        try:
            await edit_message_caption(
                bot_token=self._token,
                chat_id=self._chat_id,
                message_id=message_id,
                caption=caption,
            )
            return True
        except Exception as e:
            self._log_failure("edit_caption", e, message_id=message_id)
            return False


class MockMessagingService:
    """Mock MessagingService for testing.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send_message("user123", "Test message")
        True
        >>> service.sent_messages
        [('user123', 'Test message')]
    """

    def __init__(
        self,
        user_info: FacebookUserInfo | None = None,
        should_fail_send: bool = False,
        should_fail_lookup: bool = False,
    ):
        self._user_info = user_info
        self._should_fail_send = should_fail_send
        self._should_fail_lookup = should_fail_lookup
        self.sent_messages: list[tuple[str, str]] = []
        self.get_user_info_calls: list[str] = []

    async def send_message(self, recipient_id: str, text: str) -> bool:
        """Record sent message and return configured result."""
        self.sent_messages.append((recipient_id, text))
        return not self._should_fail_send

    async def get_user_info(self, user_id: str) -> FacebookUserInfo | None:
        """Record call and return configured user info (or raise)."""
        self.get_user_info_calls.append(user_id)
        if self._should_fail_lookup:
            raise RuntimeError("profile lookup failed")
        return self._user_info


class MockStaffNotifier:
    """Mock StaffNotifier recording every call for assertions."""

    def __init__(
        self,
        first_message_id: int = 100,
        should_fail_send: bool = False,
        should_fail_answer: bool = False,
    ):
        self._next_message_id = first_message_id
        self._should_fail_send = should_fail_send
        self._should_fail_answer = should_fail_answer
        self.sent_photos: list[dict[str, Any]] = []
        self.answered_callbacks: list[str] = []
        self.edited_captions: list[tuple[int, str]] = []
        self.calls: list[str] = []

    async def send_order_photo(
        self,
        photo_url: str,
        caption: str,
        buttons: list[tuple[str, str]],
    ) -> int | None:
        self.calls.append("send_order_photo")
        if self._should_fail_send:
            return None
        message_id = self._next_message_id
        self._next_message_id += 1
        self.sent_photos.append(
            {
                "message_id": message_id,
                "photo_url": photo_url,
                "caption": caption,
                "buttons": buttons,
            }
        )
        return message_id

    async def answer_callback(self, callback_id: str) -> bool:
        self.calls.append("answer_callback")
        self.answered_callbacks.append(callback_id)
        return not self._should_fail_answer

    async def edit_caption(self, message_id: int, caption: str) -> bool:
        self.calls.append("edit_caption")
        self.edited_captions.append((message_id, caption))
        return True


def get_messaging_service() -> FacebookMessagingService:
    """Factory for the customer-facing MessagingService (Facebook)."""
    from src.config import get_settings

    return FacebookMessagingService(
        page_access_token=get_settings().facebook_page_access_token
    )


def get_staff_notifier() -> TelegramStaffNotifier:
    """Factory for the staff-facing StaffNotifier (Telegram)."""
    from src.config import get_settings

    settings = get_settings()
    return TelegramStaffNotifier(
        bot_token=settings.telegram_bot_token,
        chat_id=settings.telegram_chat_id,
    )

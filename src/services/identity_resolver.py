"""Best-effort display names for Facebook senders."""

import logfire

from src.constants import DEFAULT_DISPLAY_NAME
from src.logging_config import redact_secrets
from src.services.messaging_protocol import MessagingService, get_messaging_service


class IdentityResolver:
    """Resolve a PSID to a human-readable name without ever raising.

    Name lookup is not on the critical path: any provider failure degrades
    to a fixed fallback label so relaying never blocks on it.
    """

    def __init__(
        self,
        messaging_service: MessagingService | None = None,
        fallback_name: str = DEFAULT_DISPLAY_NAME,
    ):
        self._messaging_service = messaging_service
        self._fallback_name = fallback_name

    def _get_messaging_service(self) -> MessagingService:
        if self._messaging_service is None:
            self._messaging_service = get_messaging_service()
        return self._messaging_service

    @property
    def fallback_name(self) -> str:
        return self._fallback_name

    async def resolve_name(self, sender_id: str) -> str:
        """Return the sender's full name, first + last, or the fallback label."""
        try:
            user_info = await self._get_messaging_service().get_user_info(sender_id)
        except Exception as e:
            logfire.warning(
                "Identity lookup failed, using fallback name",
                sender_id=sender_id,
                error=redact_secrets(str(e)),
                error_type=type(e).__name__,
            )
            return self._fallback_name

        name = user_info.display_name if user_info else None
        if not name:
            logfire.info("No profile name available", sender_id=sender_id)
            return self._fallback_name
        return name

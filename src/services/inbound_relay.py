"""Relay inbound Facebook photos to the staff Telegram chat.

Pipeline for one photo:
1. Cooldown check per sender (denied senders get a wait notice)
2. Display name lookup (never fails)
3. Staff notification with confirm/reject buttons
4. Order registered under the notification's message id
"""

from __future__ import annotations

import logfire

from src.constants import RATE_LIMIT_NOTICE_TEMPLATE
from src.middleware.rate_limiter import RateLimiter, get_rate_limiter
from src.models.order_models import RelayOutcome
from src.services.callback_actions import (
    decision_buttons,
    notification_caption,
    reference_tag,
)
from src.services.identity_resolver import IdentityResolver
from src.services.messaging_protocol import (
    MessagingService,
    StaffNotifier,
    get_messaging_service,
    get_staff_notifier,
)
from src.services.order_store import OrderStore, get_order_store


class InboundRelay:
    """Turn an accepted customer photo into an actionable staff notification.

    All collaborators are injectable; anything not supplied is taken from
    the module-level factories on first use.

    Example:
        >>> relay = InboundRelay(
        ...     messaging_service=MockMessagingService(),
        ...     staff_notifier=MockStaffNotifier(),
        ... )
        >>> await relay.relay_image("9001", "https://example.com/p.jpg")
        <RelayOutcome.RELAYED: 'relayed'>
    """

    def __init__(
        self,
        messaging_service: MessagingService | None = None,
        staff_notifier: StaffNotifier | None = None,
        rate_limiter: RateLimiter | None = None,
        order_store: OrderStore | None = None,
        identity_resolver: IdentityResolver | None = None,
    ):
        self._messaging_service = messaging_service or get_messaging_service()
        self._staff_notifier = staff_notifier or get_staff_notifier()
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._order_store = order_store or get_order_store()
        self._identity_resolver = identity_resolver or IdentityResolver(
            messaging_service=self._messaging_service
        )

    async def relay_image(
        self,
        sender_id: str,
        image_url: str,
        now: float | None = None,
    ) -> RelayOutcome:
        """Relay one photo from a sender.

        Args:
            sender_id: Facebook user ID (PSID) who sent the photo
            image_url: URL of the photo attachment
            now: Epoch seconds for the cooldown check (defaults to now)

        Returns:
            RELAYED, RATE_LIMITED or NOTIFICATION_FAILED. A failed
            notification still consumes the sender's cooldown slot.
        """
        admission = self._rate_limiter.admit(sender_id, now=now)
        if not admission.admitted:
            notice = RATE_LIMIT_NOTICE_TEMPLATE.format(
                seconds=admission.retry_after_seconds
            )
            if not await self._messaging_service.send_message(sender_id, notice):
                logfire.warning("Wait notice not delivered", sender_id=sender_id)
            return RelayOutcome.RATE_LIMITED

        display_name = await self._identity_resolver.resolve_name(sender_id)

        message_id = await self._staff_notifier.send_order_photo(
            photo_url=image_url,
            caption=notification_caption(display_name, sender_id),
            buttons=decision_buttons(sender_id),
        )
        if message_id is None:
            logfire.error(
                "Staff notification failed; photo not relayed",
                sender_id=sender_id,
                reference=reference_tag(sender_id),
            )
            return RelayOutcome.NOTIFICATION_FAILED

        self._order_store.create(sender_id, message_id, display_name=display_name)
        logfire.info(
            "Photo relayed to staff",
            sender_id=sender_id,
            notification_ref=message_id,
            reference=reference_tag(sender_id),
        )
        return RelayOutcome.RELAYED


def get_inbound_relay() -> InboundRelay:
    """Build an InboundRelay wired to the shared state and real providers."""
    return InboundRelay()

"""Apply a staff decision from a Telegram inline button.

Handling one callback:
1. Acknowledge the callback (always first; failure does not abort)
2. Parse the callback data; unparseable data stops here
3. Look up the order and take the display name stored at relay time
4. Resolve the order (compare-and-set; repeats skip step 5)
5. Send the confirmation/rejection text to the customer
6. Rewrite the notification caption to the terminal summary

Webhook providers may deliver the same callback more than once, possibly
concurrently. Only the caller that wins OrderStore.resolve() messages the
customer; every caller rewrites the caption with the same content.
"""

from __future__ import annotations

import logfire

from src.constants import ORDER_CONFIRMED_TEXT, ORDER_REJECTED_TEXT
from src.models.order_models import DecisionOutcome, OrderStatus
from src.services.callback_actions import parse_action_token, terminal_caption
from src.services.identity_resolver import IdentityResolver
from src.services.messaging_protocol import (
    MessagingService,
    StaffNotifier,
    get_messaging_service,
    get_staff_notifier,
)
from src.services.order_store import OrderStore, get_order_store

REPLY_TEXTS: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: ORDER_CONFIRMED_TEXT,
    OrderStatus.REJECTED: ORDER_REJECTED_TEXT,
}


class DecisionHandler:
    """Turn a staff callback into a customer reply and a caption update."""

    def __init__(
        self,
        messaging_service: MessagingService | None = None,
        staff_notifier: StaffNotifier | None = None,
        order_store: OrderStore | None = None,
        identity_resolver: IdentityResolver | None = None,
    ):
        self._messaging_service = messaging_service or get_messaging_service()
        self._staff_notifier = staff_notifier or get_staff_notifier()
        self._order_store = order_store or get_order_store()
        self._identity_resolver = identity_resolver or IdentityResolver(
            messaging_service=self._messaging_service
        )

    async def handle_decision(
        self,
        notification_ref: int,
        callback_id: str,
        action_token: str | None,
    ) -> DecisionOutcome:
        """Handle one inline button press.

        Args:
            notification_ref: Telegram message id the button belongs to
            callback_id: Callback query id to acknowledge
            action_token: Callback data, e.g. ``confirm_<psid>``

        Returns:
            IGNORED, ORDER_NOT_FOUND, RESOLVED or REPEAT
        """
        if not await self._staff_notifier.answer_callback(callback_id):
            logfire.warning(
                "Callback acknowledgement failed, continuing",
                callback_id=callback_id,
            )

        action = parse_action_token(action_token)
        if action is None:
            logfire.info(
                "Ignoring unparseable callback data",
                callback_id=callback_id,
                action_token=action_token,
            )
            return DecisionOutcome.IGNORED

        sender_id = action.target_sender_id
        order = self._order_store.lookup(notification_ref)
        if order is None:
            # Unknown notification: nothing safe to do without the order
            logfire.warning(
                "No order for notification",
                notification_ref=notification_ref,
                sender_id=sender_id,
            )
            return DecisionOutcome.ORDER_NOT_FOUND

        if order.sender_id != sender_id:
            logfire.warning(
                "Callback sender does not match order",
                notification_ref=notification_ref,
                order_sender_id=order.sender_id,
                callback_sender_id=sender_id,
            )
            return DecisionOutcome.IGNORED

        # Prefer the name staff saw on the original notification
        display_name = order.display_name or await self._identity_resolver.resolve_name(
            sender_id
        )

        result = self._order_store.resolve(notification_ref, action.kind)
        if result is None:
            logfire.warning(
                "Order evicted before resolution",
                notification_ref=notification_ref,
            )
            return DecisionOutcome.ORDER_NOT_FOUND

        if result.is_repeat:
            logfire.info(
                "Repeated decision for resolved order",
                notification_ref=notification_ref,
                status=result.current_status.value,
                requested=action.kind.value,
            )
            latest = self._order_store.lookup(notification_ref)
            reply_failed = latest.reply_failed if latest else order.reply_failed
            outcome = DecisionOutcome.REPEAT
        else:
            reply_failed = not await self._messaging_service.send_message(
                sender_id, REPLY_TEXTS[result.current_status]
            )
            if reply_failed:
                logfire.error(
                    "Decision reply to customer failed",
                    sender_id=sender_id,
                    notification_ref=notification_ref,
                    status=result.current_status.value,
                )
                self._order_store.mark_reply_failed(notification_ref)
            else:
                logfire.info(
                    "Order decided",
                    sender_id=sender_id,
                    notification_ref=notification_ref,
                    status=result.current_status.value,
                )
            outcome = DecisionOutcome.RESOLVED

        caption = terminal_caption(
            result.current_status,
            display_name,
            order.sender_id,
            reply_failed=reply_failed,
        )
        if not await self._staff_notifier.edit_caption(order.notification_ref, caption):
            logfire.warning(
                "Notification caption not updated",
                notification_ref=order.notification_ref,
            )
        return outcome


def get_decision_handler() -> DecisionHandler:
    """Build a DecisionHandler wired to the shared state and real providers."""
    return DecisionHandler()

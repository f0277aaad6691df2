"""Ephemeral in-memory store of relayed orders.

Orders are keyed by the Telegram message id of their staff notification,
not by sender, so two photos from the same sender are two independent
orders. Every public method is one critical section under a single lock
and never awaits, which makes resolve() a compare-and-set: the first
caller for an order wins and every later caller sees a repeat.
"""

from datetime import datetime, timedelta, timezone
from threading import Lock

import logfire

from src.constants import ORDER_RETENTION_SECONDS
from src.models.order_models import (
    DecisionKind,
    Order,
    OrderStatus,
    ResolveResult,
)


class OrderStore:
    """Thread-safe map from notification message id to Order."""

    def __init__(self, retention_seconds: float = ORDER_RETENTION_SECONDS):
        self._orders: dict[int, Order] = {}
        self._retention = timedelta(seconds=retention_seconds)
        self._lock = Lock()

    def create(
        self,
        sender_id: str,
        notification_ref: int,
        now: datetime | None = None,
        display_name: str | None = None,
    ) -> Order:
        """Register a new PENDING order for a sent notification."""
        order = Order(
            sender_id=sender_id,
            notification_ref=notification_ref,
            display_name=display_name,
            created_at=now or datetime.now(timezone.utc),
        )
        with self._lock:
            if notification_ref in self._orders:
                logfire.warning(
                    "Replacing order with duplicate notification ref",
                    notification_ref=notification_ref,
                )
            self._orders[notification_ref] = order
        logfire.info(
            "Order created",
            sender_id=sender_id,
            notification_ref=notification_ref,
        )
        return order.model_copy()

    def lookup(self, notification_ref: int) -> Order | None:
        """Return a snapshot of the order, or None if unknown."""
        with self._lock:
            order = self._orders.get(notification_ref)
            return order.model_copy() if order else None

    def resolve(
        self, notification_ref: int, decision: DecisionKind
    ) -> ResolveResult | None:
        """Move a PENDING order to its terminal status exactly once.

        Returns:
            ResolveResult with is_repeat=False for the first caller; for an
            order already terminal, is_repeat=True and the status is left
            untouched. None if the order is unknown.
        """
        with self._lock:
            order = self._orders.get(notification_ref)
            if order is None:
                return None

            previous = order.status
            if previous.is_terminal:
                return ResolveResult(
                    previous_status=previous,
                    current_status=previous,
                    is_repeat=True,
                )

            order.status = decision.target_status
            return ResolveResult(
                previous_status=previous,
                current_status=order.status,
                is_repeat=False,
            )

    def mark_reply_failed(self, notification_ref: int) -> None:
        """Remember that the sender-facing reply for this order failed."""
        with self._lock:
            order = self._orders.get(notification_ref)
            if order is not None:
                order.reply_failed = True

    def evict_expired(self, now: datetime | None = None) -> int:
        """Drop orders created before the retention horizon.

        Returns:
            Number of evicted orders.
        """
        cutoff = (now or datetime.now(timezone.utc)) - self._retention
        with self._lock:
            expired = [
                ref for ref, order in self._orders.items() if order.created_at < cutoff
            ]
            for ref in expired:
                del self._orders[ref]
        return len(expired)

    def count_by_status(self, status: OrderStatus) -> int:
        with self._lock:
            return sum(1 for order in self._orders.values() if order.status is status)

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


# Global instance
_order_store: OrderStore | None = None


def get_order_store() -> OrderStore:
    """Get the global order store instance."""
    global _order_store
    if _order_store is None:
        from src.config import get_settings

        _order_store = OrderStore(
            retention_seconds=get_settings().order_retention_seconds
        )
    return _order_store


def reset_order_store() -> None:
    """Reset the global order store (primarily for testing)."""
    global _order_store
    _order_store = None

"""Pydantic models for the order confirmation workflow."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    """Lifecycle of an order; CONFIRMED and REJECTED are terminal."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class DecisionKind(str, Enum):
    """Staff decision carried by an inline button."""

    CONFIRM = "confirm"
    REJECT = "reject"

    @property
    def target_status(self) -> OrderStatus:
        if self is DecisionKind.CONFIRM:
            return OrderStatus.CONFIRMED
        return OrderStatus.REJECTED


class RelayOutcome(str, Enum):
    """Result of relaying one inbound photo."""

    RELAYED = "relayed"
    RATE_LIMITED = "rate_limited"
    NOTIFICATION_FAILED = "notification_failed"


class DecisionOutcome(str, Enum):
    """Result of handling one staff callback."""

    IGNORED = "ignored"
    ORDER_NOT_FOUND = "order_not_found"
    RESOLVED = "resolved"
    REPEAT = "repeat"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(BaseModel):
    """One inbound photo awaiting (or past) a staff decision."""

    sender_id: str = Field(..., description="Facebook User ID (PSID)")
    notification_ref: int = Field(
        ..., description="Telegram message id of the staff notification"
    )
    status: OrderStatus = OrderStatus.PENDING
    display_name: str | None = Field(
        None, description="Name shown to staff when the photo was relayed"
    )
    created_at: datetime = Field(default_factory=_utcnow)
    reply_failed: bool = False


class CallbackAction(BaseModel):
    """Decision parsed from inline button callback data."""

    kind: DecisionKind
    target_sender_id: str


class Admission(BaseModel):
    """Rate limiter verdict for one photo."""

    admitted: bool
    retry_after_seconds: int = 0


class ResolveResult(BaseModel):
    """Outcome of the compare-and-set in OrderStore.resolve()."""

    previous_status: OrderStatus
    current_status: OrderStatus
    is_repeat: bool

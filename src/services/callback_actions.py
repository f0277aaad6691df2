"""Inline button callback data and staff-facing caption text.

Callback data has the form ``<kind>_<sender_id>``. Sender ids may
themselves contain ``_``, so only the first separator is significant.
"""

from src.constants import (
    ACTION_TOKEN_SEPARATOR,
    CONFIRM_BUTTON_LABEL,
    CONFIRMED_LABEL,
    NOTIFICATION_HEADER,
    REFERENCE_TAG_LENGTH,
    REJECT_BUTTON_LABEL,
    REJECTED_LABEL,
    REPLY_FAILED_LABEL,
)
from src.models.order_models import CallbackAction, DecisionKind, OrderStatus


def build_action_token(kind: DecisionKind, sender_id: str) -> str:
    return f"{kind.value}{ACTION_TOKEN_SEPARATOR}{sender_id}"


def parse_action_token(token: str | None) -> CallbackAction | None:
    """Parse callback data into a CallbackAction.

    Returns:
        None when the token has no separator, an unknown kind or an
        empty sender id.
    """
    if not token:
        return None
    prefix, separator, sender_id = token.partition(ACTION_TOKEN_SEPARATOR)
    if not separator or not sender_id:
        return None
    try:
        kind = DecisionKind(prefix)
    except ValueError:
        return None
    return CallbackAction(kind=kind, target_sender_id=sender_id)


def decision_buttons(sender_id: str) -> list[tuple[str, str]]:
    """Confirm/reject (label, callback_data) pairs for one sender."""
    return [
        (CONFIRM_BUTTON_LABEL, build_action_token(DecisionKind.CONFIRM, sender_id)),
        (REJECT_BUTTON_LABEL, build_action_token(DecisionKind.REJECT, sender_id)),
    ]


def reference_tag(sender_id: str) -> str:
    """Short display-only tag: last 6 chars of the sender id, zero padded.

    >>> reference_tag("9001")
    '#009001'
    """
    return "#" + sender_id[-REFERENCE_TAG_LENGTH:].rjust(REFERENCE_TAG_LENGTH, "0")


def _caption(headline: str, display_name: str, sender_id: str) -> str:
    return f"{headline}\nCustomer: {display_name}\nRef: {reference_tag(sender_id)}"


def notification_caption(display_name: str, sender_id: str) -> str:
    return _caption(NOTIFICATION_HEADER, display_name, sender_id)


def terminal_caption(
    status: OrderStatus,
    display_name: str,
    sender_id: str,
    reply_failed: bool = False,
) -> str:
    """Caption shown once an order is decided."""
    if status is OrderStatus.CONFIRMED:
        label = CONFIRMED_LABEL
    elif status is OrderStatus.REJECTED:
        label = REJECTED_LABEL
    else:
        raise ValueError(f"{status} is not a terminal status")

    if reply_failed:
        label = f"{REPLY_FAILED_LABEL} ({label})"
    return _caption(label, display_name, sender_id)

"""Per-sender cooldown for inbound order photos.

A sender may have one photo accepted per cooldown window. Denied attempts
do not refresh the window.
"""

import math
import time
from threading import Lock

import logfire

from src.constants import ORDER_COOLDOWN_SECONDS
from src.models.order_models import Admission


class RateLimiter:
    """Thread-safe in-memory cooldown gate keyed by sender id.

    Uses a single fixed window per sender: the timestamp of the last
    accepted photo. Each check-and-record runs under one lock so two
    concurrent photos from the same sender cannot both be admitted.
    """

    def __init__(self, cooldown_seconds: float = ORDER_COOLDOWN_SECONDS):
        """Initialize rate limiter.

        Args:
            cooldown_seconds: Minimum gap between two accepted photos.
        """
        self._last_accepted: dict[str, float] = {}
        self._cooldown = float(cooldown_seconds)
        self._lock = Lock()

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    def admit(self, sender_id: str, now: float | None = None) -> Admission:
        """Admit or deny a photo from a sender.

        Args:
            sender_id: Facebook user ID (PSID).
            now: Epoch seconds; defaults to the current time.

        Returns:
            Admission with admitted=True, or admitted=False and the whole
            seconds left until the sender may try again.
        """
        if now is None:
            now = time.time()

        with self._lock:
            last = self._last_accepted.get(sender_id)
            if last is not None:
                elapsed = now - last
                if elapsed < self._cooldown:
                    retry_after = max(1, math.ceil(self._cooldown - elapsed))
                    logfire.warning(
                        "Order photo rate limited",
                        sender_id=sender_id,
                        retry_after_seconds=retry_after,
                        cooldown_seconds=self._cooldown,
                    )
                    return Admission(admitted=False, retry_after_seconds=retry_after)

            # Never move the window backwards for out-of-order timestamps
            self._last_accepted[sender_id] = now if last is None else max(last, now)
            return Admission(admitted=True)

    def last_accepted_at(self, sender_id: str) -> float | None:
        """Epoch seconds of the sender's last accepted photo, if any."""
        with self._lock:
            return self._last_accepted.get(sender_id)

    def evict_expired(self, now: float | None = None) -> int:
        """Drop entries whose window has elapsed.

        Returns:
            Number of evicted senders.
        """
        if now is None:
            now = time.time()
        cutoff = now - self._cooldown

        with self._lock:
            expired = [s for s, ts in self._last_accepted.items() if ts <= cutoff]
            for sender_id in expired:
                del self._last_accepted[sender_id]
        return len(expired)

    def reset(self, sender_id: str | None = None) -> None:
        """Reset cooldown tracking.

        Args:
            sender_id: If provided, reset only for this sender. Otherwise reset all.
        """
        with self._lock:
            if sender_id:
                self._last_accepted.pop(sender_id, None)
            else:
                self._last_accepted.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_accepted)


# Global instance
_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get the global rate limiter instance.

    Returns:
        The singleton RateLimiter, configured from settings on first use.
    """
    global _rate_limiter
    if _rate_limiter is None:
        from src.config import get_settings

        _rate_limiter = RateLimiter(
            cooldown_seconds=get_settings().order_cooldown_seconds
        )
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the global rate limiter (primarily for testing)."""
    global _rate_limiter
    _rate_limiter = None

"""
Order Number Generator.

Format: ORD-{YYYYMMDD}-{last 6 digits of epoch millis}-{suffix}

The suffix is a zero-padded daily counter kept in Redis. When Redis is
unreachable the suffix becomes 3 random base-36 characters instead; such
numbers are not guaranteed unique, so callers may pass a unique_check that
is consulted before a fallback number is handed out.
"""

from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import Callable, Protocol

from shared.config.settings import settings
from shared.config.logging import get_logger
from shared.infrastructure.redis.constants import get_order_counter_key

logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_uppercase


class AtomicCounter(Protocol):
    """The slice of the redis.Redis API the generator needs."""

    def incr(self, name: str) -> int: ...

    def expire(self, name: str, time: int) -> object: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderNumberGenerator:
    """
    Generates human-readable order numbers.

    Usage:
        generator = OrderNumberGenerator(get_redis_sync_client())
        generator.generate()  # "ORD-20250101-123456-001"
    """

    def __init__(
        self,
        counter: AtomicCounter,
        clock: Callable[[], datetime] = _utc_now,
        rng: random.Random | None = None,
        counter_ttl: int | None = None,
        fallback_attempts: int | None = None,
    ):
        self._counter = counter
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._counter_ttl = counter_ttl if counter_ttl is not None else settings.order_counter_ttl
        self._fallback_attempts = max(
            1,
            fallback_attempts
            if fallback_attempts is not None
            else settings.order_number_fallback_attempts,
        )

    def generate(self, unique_check: Callable[[str], bool] | None = None) -> str:
        """
        Return the next order number.

        unique_check(number) -> True when the number is unused. It is only
        consulted for fallback numbers; counter numbers are unique per day.
        """
        now = self._clock()
        date_str = now.strftime("%Y%m%d")
        millis6 = str(int(now.timestamp() * 1000))[-6:]

        try:
            key = get_order_counter_key(date_str)
            sequence = self._counter.incr(key)
            if sequence == 1:
                self._counter.expire(key, self._counter_ttl)
            return f"ORD-{date_str}-{millis6}-{sequence:03d}"
        except Exception as e:
            logger.error(
                "Order counter unavailable, using random suffix",
                date=date_str,
                error=str(e),
            )

        number = self._fallback_number(date_str, millis6)
        if unique_check is None:
            return number

        for attempt in range(1, self._fallback_attempts + 1):
            if unique_check(number):
                return number
            logger.warning("Fallback order number collision", order_number=number, attempt=attempt)
            number = self._fallback_number(date_str, millis6)

        # The unique constraint on order_number rejects a remaining collision
        return number

    def _fallback_number(self, date_str: str, millis6: str) -> str:
        suffix = "".join(self._rng.choice(_BASE36) for _ in range(3))
        return f"ORD-{date_str}-{millis6}-{suffix}"

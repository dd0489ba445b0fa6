"""Request budget for the FMP API: a per-minute plan quota plus a per-second burst cap."""

import asyncio
import logging
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)

MAX_PENALTY_SECONDS = 30.0

Clock = Callable[[], float]


class TokenBucket:
    """Continuously refilled bucket holding at most ``capacity`` tokens."""

    def __init__(self, capacity: float, period: float, clock: Clock = time.monotonic):
        self.capacity = float(capacity)
        self.rate = self.capacity / period  # tokens per second
        self.tokens = self.capacity
        self.clock = clock
        self.updated_at = clock()

    def refill(self) -> None:
        now = self.clock()
        self.tokens = min(self.capacity, self.tokens + (now - self.updated_at) * self.rate)
        self.updated_at = now

    def seconds_until_available(self) -> float:
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.rate

    def take(self) -> None:
        self.tokens -= 1


class RateLimiter:
    """
    Token bucket limiter shared by every call of one provider instance.

    One stock detail request fans out into a dozen or more FMP calls at once,
    so the per-second bucket keeps bursts under the plan's cap while the
    per-minute bucket tracks the plan quota. Consecutive 429 responses push
    the next request back exponentially, up to MAX_PENALTY_SECONDS.

    Attributes:
        rpm: Requests per minute limit
        rps: Requests per second limit
        error_429_count: Count of consecutive 429 responses
    """

    def __init__(self, rpm: int = 300, rps: int = 10, clock: Clock = time.monotonic):
        if rpm <= 0 or rps <= 0:
            raise ValueError("rpm and rps must be positive")

        self.rpm = rpm
        self.rps = rps
        self.clock = clock
        self.minute = TokenBucket(rpm, 60.0, clock)
        self.second = TokenBucket(rps, 1.0, clock)

        self.error_429_count = 0
        self.penalty_until = 0.0
        self.total_requests = 0

        self.lock = asyncio.Lock()

    def wait_time(self) -> float:
        """Seconds until a request may be sent, after refilling both buckets."""
        self.minute.refill()
        self.second.refill()
        return max(
            self.minute.seconds_until_available(),
            self.second.seconds_until_available(),
            self.penalty_until - self.clock(),
            0.0,
        )

    async def acquire(self) -> None:
        """Wait until both buckets hold a token, then consume one from each."""
        async with self.lock:
            wait = self.wait_time()
            while wait > 0:
                logger.debug("FMP request budget exhausted, waiting %.2fs", wait)
                await asyncio.sleep(wait)
                wait = self.wait_time()

            self.minute.take()
            self.second.take()
            self.total_requests += 1

    def record_429(self) -> None:
        """Record a 429 response and push the next request back."""
        self.error_429_count += 1
        penalty = min(2.0 ** (self.error_429_count - 1), MAX_PENALTY_SECONDS)
        self.penalty_until = self.clock() + penalty
        logger.warning("FMP returned 429 (%d in a row), pausing requests for %.0fs", self.error_429_count, penalty)

    def reset_429_count(self) -> None:
        """Clear the 429 streak after a successful response."""
        if self.error_429_count > 0:
            logger.info("FMP accepted a request again after %d rate-limited responses", self.error_429_count)
        self.error_429_count = 0
        self.penalty_until = 0.0

    def get_stats(self) -> Dict[str, float]:
        """Get current rate limiter statistics."""
        return {
            "rpm": self.rpm,
            "rps": self.rps,
            "tokens_minute": round(self.minute.tokens, 2),
            "tokens_second": round(self.second.tokens, 2),
            "total_requests": self.total_requests,
            "consecutive_429_errors": self.error_429_count,
        }

from __future__ import annotations

import asyncio
import random
from typing import Optional

RATE_LIMITED = "429"


class BackoffStrategy:
    """Exponential backoff with jitter for fetch retries.

    Sleep duration is base * 2^(attempt-1), capped at max_seconds, plus
    up to jitter_ratio of that value in random jitter. A rate-limited
    failure (error_type "429") starts from twice the base."""

    def __init__(self, base_seconds: float = 0.5, max_seconds: float = 10.0, jitter_ratio: float = 0.1) -> None:
        self._base = base_seconds
        self._max = max_seconds
        self._jitter_ratio = jitter_ratio

    def get_sleep(self, attempt: int, error_type: Optional[str] = None) -> float:
        """Backoff duration in seconds for the given retry attempt (1-based)."""
        base = self._base * 2 if error_type == RATE_LIMITED else self._base
        exp = min(self._max, base * (2 ** max(attempt - 1, 0)))
        return exp + random.uniform(0, exp * self._jitter_ratio)

    async def sleep(self, attempt: int, error_type: Optional[str] = None) -> float:
        seconds = self.get_sleep(attempt, error_type)
        await asyncio.sleep(seconds)
        return seconds

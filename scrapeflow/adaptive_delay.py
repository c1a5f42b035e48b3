from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, TypeVar

from .models import AdaptiveDelayConfig, DelayMode, DelayStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdaptiveDelayController:
    """Thread-safe request pacing driven by observed response times.

    Keeps a sliding window of the last `sample_size` successful response
    times (milliseconds). In adaptive mode the delay before the next request
    is mean(window) * multiplier, clamped to [min_delay_ms, max_delay_ms].
    In fixed mode it is always min_delay_ms."""

    def __init__(self, config: Optional[AdaptiveDelayConfig] = None) -> None:
        self._config = config or AdaptiveDelayConfig()
        self._lock = threading.Lock()
        self._samples: Deque[float] = deque(maxlen=max(1, self._config.sample_size))

    @property
    def config(self) -> AdaptiveDelayConfig:
        return self._config

    def record_response_time(self, duration_ms: float) -> None:
        """Append a sample, evicting the oldest once the window is full."""
        with self._lock:
            self._samples.append(float(duration_ms))
            count = len(self._samples)
        logger.debug("Recorded response time: %.1f ms (samples: %d)", duration_ms, count)

    def calculate_delay(self) -> int:
        """Return the delay in milliseconds to apply before the next request."""
        return self._delay_for(self._snapshot())

    def _delay_for(self, samples: List[float]) -> int:
        cfg = self._config
        if cfg.mode == DelayMode.FIXED:
            return cfg.min_delay_ms
        if not samples:
            return cfg.min_delay_ms
        avg_ms = sum(samples) / len(samples)
        delay = int(avg_ms * cfg.multiplier)
        clamped = min(max(delay, cfg.min_delay_ms), cfg.max_delay_ms)
        logger.debug(
            "Adaptive delay: %d ms (avg response %.0f ms, multiplier %s)",
            clamped,
            avg_ms,
            cfg.multiplier,
        )
        return clamped

    async def wait(self) -> int:
        """Sleep for the current delay and return it in milliseconds."""
        delay_ms = self.calculate_delay()
        await asyncio.sleep(delay_ms / 1000.0)
        return delay_ms

    async def execute_with_timing(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await operation() and record its elapsed time only if it succeeds.

        Exceptions propagate unchanged and leave the window untouched."""
        start = time.perf_counter()
        result = await operation()
        self.record_response_time((time.perf_counter() - start) * 1000.0)
        return result

    def get_stats(self) -> DelayStats:
        samples = self._snapshot()
        if not samples:
            return DelayStats()
        return DelayStats(
            samples=len(samples),
            avg_response_ms=sum(samples) / len(samples),
            min_response_ms=min(samples),
            max_response_ms=max(samples),
            current_delay_ms=self._delay_for(samples),
        )

    def reset(self) -> None:
        with self._lock:
            self._samples.clear()

    def _snapshot(self) -> List[float]:
        with self._lock:
            return list(self._samples)

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from curl_cffi.requests import AsyncSession

from .adaptive_delay import AdaptiveDelayController
from .backoff import BackoffStrategy
from .cache import HtmlCache, cache_key
from .errors import FetchError
from .models import FetchResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "scrapeflow/0.1"


class HttpFetcher:
    """Async HTTP GET client paced by an AdaptiveDelayController.

    Every attempt waits for the controller's current delay first, then runs
    the request inside execute_with_timing(), so only 2xx responses feed
    the latency window. Retryable failures (transport errors, 429, 5xx)
    are retried with exponential backoff up to max_retries attempts.
    With a cache, a fresh cached body is returned without waiting or
    touching the network, and every successful body is stored.
    """

    def __init__(
        self,
        delay: AdaptiveDelayController,
        backoff: Optional[BackoffStrategy] = None,
        max_retries: int = 3,
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        impersonate: Optional[str] = "chrome120",
        session: Optional[Any] = None,
        cache: Optional[HtmlCache] = None,
    ) -> None:
        self._delay = delay
        self._backoff = backoff or BackoffStrategy()
        self._max_retries = max(1, max_retries)
        self._timeout = timeout
        self._user_agent = user_agent
        self._impersonate = impersonate
        self._session = session
        self._owns_session = session is None
        self._cache = cache

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def fetch(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> FetchResult:
        key = cache_key(url, params)
        if self._cache is not None:
            cached = self._cache.get_html(key)
            if cached is not None:
                return FetchResult(url=url, status_code=200, body=cached, latency_ms=0, attempts=0)

        attempt = 0
        while True:
            attempt += 1
            await self._delay.wait()
            start = time.perf_counter()
            try:
                response = await self._delay.execute_with_timing(
                    lambda: self._request(url, params, headers)
                )
            except FetchError as exc:
                if not exc.retryable or attempt >= self._max_retries:
                    raise
                slept = await self._backoff.sleep(attempt, str(exc.status_code or exc.reason))
                logger.warning("Attempt %d for %s failed (%s); retried after %.2fs", attempt, url, exc, slept)
                continue

            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.debug("Fetched %s status=%s latency_ms=%d", url, response.status_code, latency_ms)
            if self._cache is not None:
                self._cache.set_html(key, response.text)
            return FetchResult(
                url=url,
                status_code=int(response.status_code),
                body=response.text,
                latency_ms=latency_ms,
                attempts=attempt,
            )

    async def _request(
        self,
        url: str,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
    ) -> Any:
        merged = {"User-Agent": self._user_agent}
        merged.update(headers or {})
        try:
            response = await self._get_session().get(
                url,
                params=params or None,
                headers=merged,
                timeout=self._timeout,
                impersonate=self._impersonate,
            )
        except Exception as exc:  # noqa: BLE001
            raise FetchError(url, None, type(exc).__name__) from exc

        status_code = getattr(response, "status_code", None)
        if status_code is None or not 200 <= int(status_code) < 300:
            raise FetchError(url, status_code)
        return response

    def _get_session(self) -> Any:
        if self._session is None:
            self._session = AsyncSession()
        return self._session

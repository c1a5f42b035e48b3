from __future__ import annotations

from typing import Optional


class ScrapeflowError(Exception):
    """Base class for errors raised by scrapeflow."""


class ConfigError(ScrapeflowError):
    """Invalid or missing configuration."""


class FetchError(ScrapeflowError):
    """An HTTP request failed or returned a non-2xx status.

    status_code is None for transport-level failures (timeouts, DNS,
    refused connections). Those, 429 and 5xx responses are retryable."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"HTTP_{status_code}" if status_code is not None else (reason or "transport error")
        super().__init__(f"{detail} fetching {url}")

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class ExtractionError(ScrapeflowError):
    """A source payload could not be turned into records."""


class ExportError(ScrapeflowError):
    """A sink rejected the exported batch."""

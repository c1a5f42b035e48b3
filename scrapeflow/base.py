from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .fetcher import HttpFetcher
from .models import Record

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """Abstract base class for a configured scrape target.

    run() validates the source, fetches its base_url through the shared
    fetcher, and hands the body to extract(). Subclasses only decide how
    a body becomes records."""

    kind: str = ""

    def __init__(
        self,
        name: str,
        base_url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.name = name
        self.base_url = base_url
        self.params = dict(params or {})
        self.headers = dict(headers or {})

    async def run(self, fetcher: HttpFetcher) -> List[Record]:
        self.validate()
        result = await fetcher.fetch(self.base_url, params=self.params, headers=self.headers)
        records = self.extract(result.body)
        logger.info("Scraped %d records from %s source %s", len(records), self.kind or "custom", self.name)
        return records

    def validate(self) -> None:
        if not self.name:
            raise ConfigError("source name is required")
        if not self.base_url:
            raise ConfigError(f"source {self.name!r} has no url")

    @abstractmethod
    def extract(self, body: str) -> List[Record]:
        """Turn a fetched response body into raw records."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, base_url={self.base_url!r})"

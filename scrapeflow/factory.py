from __future__ import annotations

from typing import Dict, List

from .base import BaseSource
from .config import SourceConfig
from .errors import ConfigError
from .sources import JsonSource, SelectorSource


class SourceFactory:
    """Builds BaseSource instances from SourceConfig entries.

    Sources are stateless besides their compiled selectors, so instances are
    cached per source name and reused across cycles."""

    def __init__(self) -> None:
        self._cache: Dict[str, BaseSource] = {}

    def create_source(self, config: SourceConfig) -> BaseSource:
        if config.name in self._cache:
            return self._cache[config.name]

        kind = config.kind.lower()
        common = dict(
            name=config.name,
            base_url=config.url,
            metadata=config.metadata,
            params=config.params,
            headers=config.headers,
        )
        if kind == "html":
            source: BaseSource = SelectorSource(selectors=config.selectors, **common)
        elif kind == "json":
            source = JsonSource(fields=config.fields, items_path=config.items_path, **common)
        else:
            raise ConfigError(f"Unknown source kind: {config.kind}")

        self._cache[config.name] = source
        return source

    def create_sources(self, configs: List[SourceConfig]) -> List[BaseSource]:
        """Build every enabled source, in configuration order."""
        return [self.create_source(c) for c in configs if c.enabled]

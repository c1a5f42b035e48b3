"""YAML config loader."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError
from .models import AdaptiveDelayConfig, DelayMode


@dataclass
class ScrapingConfig:
    timeout_seconds: float = 30
    max_retries: int = 3
    user_agent: str = "scrapeflow/0.1"
    impersonate: Optional[str] = "chrome120"


@dataclass
class BackoffConfig:
    base_seconds: float = 0.5
    max_seconds: float = 10.0


@dataclass
class OutputConfig:
    format: str = "json"
    path: str = "output/records.json"
    endpoint: Optional[str] = None
    include_metadata: bool = False
    table: str = "records"


@dataclass
class CacheConfig:
    enabled: bool = True
    max_entries: int = 1000
    ttl_seconds: float = 3600


@dataclass
class SourceConfig:
    name: str = ""
    url: str = ""
    kind: str = "html"
    enabled: bool = True
    selectors: Dict[str, str] = field(default_factory=dict)
    items_path: str = ""
    fields: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class AppConfig:
    scraping: ScrapingConfig = field(default_factory=ScrapingConfig)
    delay: AdaptiveDelayConfig = field(default_factory=AdaptiveDelayConfig)
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    sources: List[SourceConfig] = field(default_factory=list)


def _pick(cls, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (raw or {}).items() if k in cls.__dataclass_fields__}


def parse_delay_config(raw: Optional[Dict[str, Any]]) -> AdaptiveDelayConfig:
    values = _pick(AdaptiveDelayConfig, raw)
    if "mode" in values:
        try:
            values["mode"] = DelayMode(str(values["mode"]).lower())
        except ValueError as exc:
            raise ConfigError(f"invalid delay mode: {values['mode']!r}") from exc
    cfg = AdaptiveDelayConfig(**values)
    if cfg.min_delay_ms > cfg.max_delay_ms:
        raise ConfigError("delay.min_delay_ms must not exceed delay.max_delay_ms")
    if cfg.sample_size < 1:
        raise ConfigError("delay.sample_size must be at least 1")
    return cfg


def parse_cache_config(raw: Optional[Dict[str, Any]]) -> CacheConfig:
    cfg = CacheConfig(**_pick(CacheConfig, raw))
    if cfg.max_entries < 1:
        raise ConfigError("cache.max_entries must be at least 1")
    if cfg.ttl_seconds <= 0:
        raise ConfigError("cache.ttl_seconds must be positive")
    return cfg


def parse_config(raw: Dict[str, Any]) -> AppConfig:
    sources = []
    for src_raw in raw.get("sources") or []:
        src = SourceConfig(**_pick(SourceConfig, src_raw))
        if not src.name or not src.url:
            raise ConfigError(f"every source needs a name and url, got {src_raw!r}")
        sources.append(src)

    return AppConfig(
        scraping=ScrapingConfig(**_pick(ScrapingConfig, raw.get("scraping"))),
        delay=parse_delay_config(raw.get("delay")),
        backoff=BackoffConfig(**_pick(BackoffConfig, raw.get("backoff"))),
        output=OutputConfig(**_pick(OutputConfig, raw.get("output"))),
        cache=parse_cache_config(raw.get("cache")),
        sources=sources,
    )


def load_config(config_path: str = "config.yaml") -> AppConfig:
    if not os.path.exists(config_path):
        raise ConfigError(f"config file not found: {config_path}")
    with open(config_path, encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return parse_config(raw)

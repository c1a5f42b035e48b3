from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _opt_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _parse_timestamp(raw: str) -> datetime:
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on.
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


@dataclass(frozen=True)
class Record:
    """A single extracted item flowing through the processing pipeline.

    Records are immutable; stages produce updated copies with
    dataclasses.replace(), which keeps id and timestamp intact."""

    source: str
    url: str
    title: Optional[str] = None
    content: Optional[str] = None
    price: Optional[float] = None
    author: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready dict representation."""
        return {
            "id": self.id,
            "source": self.source,
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "price": self.price,
            "author": self.author,
            "image_url": self.image_url,
            "category": self.category,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Build a record from a dict shaped like to_dict() output.

        id and timestamp are generated when absent."""
        kwargs: Dict[str, Any] = {
            "source": str(data.get("source", "")),
            "url": str(data.get("url", "")),
            "title": _opt_str(data.get("title")),
            "content": _opt_str(data.get("content")),
            "author": _opt_str(data.get("author")),
            "image_url": _opt_str(data.get("image_url")),
            "category": _opt_str(data.get("category")),
            "metadata": {str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        }
        price = data.get("price")
        kwargs["price"] = float(price) if price is not None else None
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        ts = data.get("timestamp")
        if ts:
            kwargs["timestamp"] = _parse_timestamp(ts) if isinstance(ts, str) else ts
        return cls(**kwargs)


class DelayMode(str, Enum):
    FIXED = "fixed"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class AdaptiveDelayConfig:
    mode: DelayMode = DelayMode.ADAPTIVE
    min_delay_ms: int = 200
    max_delay_ms: int = 2500
    sample_size: int = 10
    multiplier: float = 1.2


@dataclass(frozen=True)
class DelayStats:
    samples: int = 0
    avg_response_ms: float = 0.0
    min_response_ms: float = 0.0
    max_response_ms: float = 0.0
    current_delay_ms: int = 0


@dataclass(frozen=True)
class FetchResult:
    url: str
    status_code: int
    body: str
    latency_ms: int
    attempts: int = 1


@dataclass
class CycleReport:
    """Outcome of one engine run over all sources."""

    records: List[Record] = field(default_factory=list)
    raw_count: int = 0
    per_source: Dict[str, int] = field(default_factory=dict)
    failed_sources: Dict[str, str] = field(default_factory=dict)
    exported: int = 0

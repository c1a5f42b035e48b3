from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional

from .models import Record


def normalize_text(text: str) -> str:
    """Trim, drop non-ASCII characters, and collapse whitespace to single spaces."""
    kept = "".join(c for c in text.strip() if c.isascii() or c.isspace())
    kept = kept.replace("\n", " ").replace("\t", " ")
    return " ".join(kept.split())


def round_price(price: float) -> float:
    """Round to 2 decimal places, halves away from zero. NaN and inf pass through."""
    if not math.isfinite(price):
        return price
    scaled = price * 100.0
    rounded = math.floor(abs(scaled) + 0.5)
    return math.copysign(rounded, scaled) / 100.0


def normalize_url(url: str) -> str:
    # Prefix check on the bare "http" substring, so "httpfoo.com" stays as is.
    if not url.startswith("http"):
        return f"https://{url}"
    return url


class RecordNormalizer:
    """Canonicalizes text, price, and URL fields of each record independently.

    Never drops records: the output always has the same length as the input."""

    def normalize(self, records: List[Record]) -> List[Record]:
        return [self.normalize_record(r) for r in records]

    def normalize_record(self, record: Record) -> Record:
        return replace(
            record,
            title=self._text(record.title),
            content=self._text(record.content),
            author=self._text(record.author),
            price=round_price(record.price) if record.price is not None else None,
            url=normalize_url(record.url),
        )

    @staticmethod
    def _text(value: Optional[str]) -> Optional[str]:
        return normalize_text(value) if value is not None else None

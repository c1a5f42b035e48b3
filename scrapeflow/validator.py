from __future__ import annotations

import logging
from typing import List, Optional

from .models import Record

logger = logging.getLogger(__name__)

MAX_PRICE = 1_000_000.0
MIN_CONTENT_CHARS = 3


class RecordValidator:
    """Filters out records that fail basic structural rules.

    This is a filter, not a checker: rejected records are dropped and
    logged at debug level, never reported as errors."""

    def validate(self, records: List[Record]) -> List[Record]:
        valid = [r for r in records if self._reject_reason(r) is None]
        logger.info("Validation completed: %d/%d valid records", len(valid), len(records))
        return valid

    def is_valid(self, record: Record) -> bool:
        return self._reject_reason(record) is None

    def _reject_reason(self, record: Record) -> Optional[str]:
        reason = None
        if record.title is None and record.content is None:
            reason = "missing both title and content"
        elif not self._is_valid_url(record.url):
            reason = f"invalid url {record.url!r}"
        elif record.price is not None and not (0.0 <= record.price <= MAX_PRICE):
            reason = f"unreasonable price {record.price}"
        elif record.content is not None and len(record.content.strip()) < MIN_CONTENT_CHARS:
            reason = "content too short"

        if reason is not None:
            logger.debug("Record %s invalid: %s", record.id, reason)
        return reason

    @staticmethod
    def _is_valid_url(url: str) -> bool:
        return url.startswith("http://") or url.startswith("https://")

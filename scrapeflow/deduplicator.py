from __future__ import annotations

import logging
from typing import List, Set

from .models import Record

logger = logging.getLogger(__name__)

# Content at or below this many trimmed characters is exempt from content dedup.
MIN_DEDUP_CONTENT_CHARS = 50


class RecordDeduplicator:
    """Removes records whose URL, title, or long content was already seen.

    Single stable pass; the first occurrence of any key wins. Keys are
    compared by exact equality after lower-casing, checked in the order
    url -> title -> content."""

    def deduplicate(self, records: List[Record]) -> List[Record]:
        seen_urls: Set[str] = set()
        seen_titles: Set[str] = set()
        seen_contents: Set[str] = set()
        unique: List[Record] = []

        for record in records:
            url_key = record.url.lower()
            title_key = record.title.lower() if record.title is not None else None
            content_key = None
            if record.content is not None and len(record.content.strip()) > MIN_DEDUP_CONTENT_CHARS:
                content_key = record.content.lower()

            if url_key in seen_urls:
                logger.debug("Dropping %s: duplicate url %s", record.id, record.url)
                continue
            if title_key is not None and title_key in seen_titles:
                logger.debug("Dropping %s: duplicate title %r", record.id, record.title)
                continue
            if content_key is not None and content_key in seen_contents:
                logger.debug("Dropping %s: duplicate content", record.id)
                continue

            seen_urls.add(url_key)
            if title_key is not None:
                seen_titles.add(title_key)
            if content_key is not None:
                seen_contents.add(content_key)
            unique.append(record)

        logger.info("Deduplication completed: %d unique records", len(unique))
        return unique

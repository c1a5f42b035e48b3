from __future__ import annotations

import logging
from typing import List, Optional

from .deduplicator import RecordDeduplicator
from .models import Record
from .normalizer import RecordNormalizer
from .validator import RecordValidator

logger = logging.getLogger(__name__)


class ProcessingPipeline:
    """Runs a batch through validation, normalization, and deduplication.

    Stage groups always run in that order; extra stages added with
    add_validator() and friends run after the existing ones of their group.
    Holds no per-call state, so one instance can serve concurrent callers."""

    def __init__(
        self,
        validators: Optional[List[RecordValidator]] = None,
        normalizers: Optional[List[RecordNormalizer]] = None,
        deduplicators: Optional[List[RecordDeduplicator]] = None,
    ) -> None:
        self._validators = list(validators) if validators is not None else [RecordValidator()]
        self._normalizers = list(normalizers) if normalizers is not None else [RecordNormalizer()]
        self._deduplicators = list(deduplicators) if deduplicators is not None else [RecordDeduplicator()]

    def process(self, records: List[Record]) -> List[Record]:
        """Return the cleaned batch. An empty result is a normal outcome."""
        logger.info("Processing %d records through pipeline", len(records))
        data = list(records)
        for validator in self._validators:
            data = validator.validate(data)
        for normalizer in self._normalizers:
            data = normalizer.normalize(data)
        for deduplicator in self._deduplicators:
            data = deduplicator.deduplicate(data)
        logger.info("Pipeline completed: %d records remaining", len(data))
        return data

    def add_validator(self, validator: RecordValidator) -> None:
        self._validators.append(validator)

    def add_normalizer(self, normalizer: RecordNormalizer) -> None:
        self._normalizers.append(normalizer)

    def add_deduplicator(self, deduplicator: RecordDeduplicator) -> None:
        self._deduplicators.append(deduplicator)

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .base import BaseSource
from .fetcher import HttpFetcher
from .models import CycleReport, Record
from .pipeline import ProcessingPipeline
from .storage import RecordExporter

logger = logging.getLogger(__name__)


class ScrapeEngine:
    """Runs one scrape cycle: fetch + extract every source, process, export.

    Sources are scraped one after another; spacing between requests comes
    from the fetcher's delay controller. A failing source is logged and
    reported in the CycleReport without aborting the cycle."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        pipeline: Optional[ProcessingPipeline] = None,
        exporter: Optional[RecordExporter] = None,
    ) -> None:
        self._fetcher = fetcher
        self._pipeline = pipeline or ProcessingPipeline()
        self._exporter = exporter

    async def scrape_source(self, source: BaseSource) -> List[Record]:
        logger.info("Starting to scrape %s (%s)", source.name, source.base_url)
        return await source.run(self._fetcher)

    async def run_cycle(self, sources: Iterable[BaseSource]) -> CycleReport:
        report = CycleReport()
        raw: List[Record] = []

        for source in sources:
            try:
                records = await self.scrape_source(source)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Source %s failed: %s: %s", source.name, type(exc).__name__, exc)
                report.failed_sources[source.name] = type(exc).__name__
                continue
            report.per_source[source.name] = len(records)
            raw.extend(records)

        report.raw_count = len(raw)
        report.records = self._pipeline.process(raw)

        if not report.records:
            logger.info("No records left after processing; skipping export")
        elif self._exporter is not None:
            report.exported = self._exporter.export(report.records)

        logger.info(
            "Cycle done: raw=%d processed=%d exported=%d failed_sources=%d",
            report.raw_count,
            len(report.records),
            report.exported,
            len(report.failed_sources),
        )
        return report

"""Tests for the ScrapeEngine class."""

import unittest
from typing import List

from scrapeflow.base import BaseSource
from scrapeflow.engine import ScrapeEngine
from scrapeflow.errors import FetchError
from scrapeflow.models import FetchResult, Record
from scrapeflow.storage import RecordExporter


class _FakeFetcher:
    """Serves canned bodies by URL; unknown URLs fail like a 503."""

    def __init__(self, bodies):
        self.bodies = bodies

    async def fetch(self, url, params=None, headers=None):
        if url not in self.bodies:
            raise FetchError(url, 503)
        return FetchResult(url=url, status_code=200, body=self.bodies[url], latency_ms=5)


class _TitleSource(BaseSource):
    """One record per body line, each line being a title."""

    def extract(self, body: str) -> List[Record]:
        return [
            Record(source=self.name, url=f"{self.base_url}/{i}", title=line)
            for i, line in enumerate(body.splitlines())
        ]


class _CollectingExporter(RecordExporter):
    def __init__(self):
        self.batches = []

    def export(self, records):
        self.batches.append(list(records))
        return len(records)


class TestScrapeEngine(unittest.IsolatedAsyncioTestCase):
    """Verify a full cycle over several sources."""

    async def test_cycle_processes_and_exports(self):
        fetcher = _FakeFetcher({
            "https://a.com": "Hello\nWorld",
            "https://b.com": "hello\nOther",
        })
        exporter = _CollectingExporter()
        engine = ScrapeEngine(fetcher, exporter=exporter)
        report = await engine.run_cycle([_TitleSource("a", "https://a.com"), _TitleSource("b", "https://b.com")])

        self.assertEqual(report.raw_count, 4)
        self.assertEqual(report.per_source, {"a": 2, "b": 2})
        # "hello" from b duplicates "Hello" from a by title
        self.assertEqual([r.title for r in report.records], ["Hello", "World", "Other"])
        self.assertEqual(report.exported, 3)
        self.assertEqual(len(exporter.batches), 1)

    async def test_failed_source_does_not_abort_cycle(self):
        fetcher = _FakeFetcher({"https://a.com": "Only"})
        engine = ScrapeEngine(fetcher)
        report = await engine.run_cycle([_TitleSource("down", "https://down.com"), _TitleSource("a", "https://a.com")])
        self.assertEqual(report.failed_sources, {"down": "FetchError"})
        self.assertEqual([r.title for r in report.records], ["Only"])
        self.assertEqual(report.exported, 0)

    async def test_empty_result_skips_export(self):
        exporter = _CollectingExporter()
        engine = ScrapeEngine(_FakeFetcher({"https://a.com": ""}), exporter=exporter)
        report = await engine.run_cycle([_TitleSource("a", "https://a.com")])
        self.assertEqual(report.records, [])
        self.assertEqual(report.exported, 0)
        self.assertEqual(exporter.batches, [])


if __name__ == "__main__":
    unittest.main()

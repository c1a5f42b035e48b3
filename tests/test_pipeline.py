"""Tests for the ProcessingPipeline class."""

import unittest
from typing import List

from scrapeflow.models import Record
from scrapeflow.pipeline import ProcessingPipeline
from scrapeflow.validator import RecordValidator


class _NoAuthorValidator(RecordValidator):
    """Extra validator used to check stage ordering."""

    def validate(self, records: List[Record]) -> List[Record]:
        return [r for r in super().validate(records) if r.author]


class TestProcessingPipeline(unittest.TestCase):
    """Verify the validate -> normalize -> deduplicate composition."""

    def test_full_batch(self):
        records = [
            Record(source="s", url="https://a.com/1", title="  Hello   World \n"),
            Record(source="s", url="https://a.com/2", title="hello world"),
            Record(source="s", url="a.com/3", title="No scheme"),
            Record(source="s", url="https://a.com/4", content="ok content", price=9.999),
        ]
        result = ProcessingPipeline().process(records)
        self.assertEqual(len(result), 2)
        self.assertEqual(result[0].title, "Hello World")
        self.assertEqual(result[1].price, 10.0)

    def test_dedup_runs_after_normalization(self):
        """Titles that only match once normalized are deduplicated."""
        records = [
            Record(source="s", url="https://a.com/1", title="Same\ttitle"),
            Record(source="s", url="https://a.com/2", title="same   TITLE"),
        ]
        self.assertEqual(len(ProcessingPipeline().process(records)), 1)

    def test_validation_runs_before_normalization(self):
        """A bare-host URL is rejected before the normalizer could fix it."""
        records = [Record(source="s", url="example.com", title="Bare")]
        self.assertEqual(ProcessingPipeline().process(records), [])

    def test_all_invalid_yields_empty_list(self):
        records = [Record(source="s", url="https://a.com")]
        self.assertEqual(ProcessingPipeline().process(records), [])

    def test_added_validator_runs(self):
        pipeline = ProcessingPipeline()
        pipeline.add_validator(_NoAuthorValidator())
        records = [
            Record(source="s", url="https://a.com/1", title="A"),
            Record(source="s", url="https://a.com/2", title="B", author="Ann"),
        ]
        result = pipeline.process(records)
        self.assertEqual([r.title for r in result], ["B"])

    def test_pipeline_is_reusable(self):
        """A second call is not affected by the first one's dedup state."""
        pipeline = ProcessingPipeline()
        records = [Record(source="s", url="https://a.com/1", title="A")]
        self.assertEqual(len(pipeline.process(records)), 1)
        self.assertEqual(len(pipeline.process(records)), 1)


if __name__ == "__main__":
    unittest.main()

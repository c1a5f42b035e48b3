"""Tests for the SourceFactory class."""

import unittest

from scrapeflow.config import SourceConfig
from scrapeflow.errors import ConfigError
from scrapeflow.factory import SourceFactory
from scrapeflow.sources import JsonSource, SelectorSource


class TestSourceFactory(unittest.TestCase):
    """Verify that the factory creates the correct source type."""

    def setUp(self):
        """Set up shared factory instance."""
        self.factory = SourceFactory()

    def test_creates_selector_source(self):
        """kind 'html' should produce a SelectorSource instance."""
        config = SourceConfig(name="news", url="https://example.com", kind="html", selectors={"container": "article"})
        self.assertIsInstance(self.factory.create_source(config), SelectorSource)

    def test_creates_json_source(self):
        """kind 'json' should produce a JsonSource instance."""
        config = SourceConfig(name="api", url="https://example.com/api", kind="JSON", fields={"title": "name"})
        self.assertIsInstance(self.factory.create_source(config), JsonSource)

    def test_unknown_kind_raises_error(self):
        """An unrecognized kind should raise ConfigError."""
        config = SourceConfig(name="x", url="https://example.com", kind="ftp")
        with self.assertRaises(ConfigError) as ctx:
            self.factory.create_source(config)
        self.assertIn("ftp", str(ctx.exception))

    def test_caches_by_name(self):
        config = SourceConfig(name="news", url="https://example.com", selectors={"container": "article"})
        self.assertIs(self.factory.create_source(config), self.factory.create_source(config))

    def test_create_sources_skips_disabled(self):
        configs = [
            SourceConfig(name="on", url="https://a.com", selectors={"container": "li"}),
            SourceConfig(name="off", url="https://b.com", selectors={"container": "li"}, enabled=False),
        ]
        self.assertEqual([s.name for s in self.factory.create_sources(configs)], ["on"])


if __name__ == "__main__":
    unittest.main()

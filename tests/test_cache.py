"""Tests for the HtmlCache class."""

import unittest

from scrapeflow.cache import CacheStats, HtmlCache, cache_key


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _make_cache(max_entries: int = 3, ttl_seconds: float = 60):
    clock = _FakeClock()
    return HtmlCache(max_entries=max_entries, ttl_seconds=ttl_seconds, timer=clock), clock


class TestHtmlCache(unittest.TestCase):
    """Verify storage, expiry, eviction and stats."""

    def test_set_then_get(self):
        """A stored body should come back for the same URL."""
        cache, _ = _make_cache()
        cache.set_html("https://a.com", "<html>a</html>")
        self.assertEqual(cache.get_html("https://a.com"), "<html>a</html>")

    def test_missing_url_returns_none(self):
        """Unknown URLs should miss."""
        cache, _ = _make_cache()
        self.assertIsNone(cache.get_html("https://nope.com"))

    def test_entries_expire_after_ttl(self):
        """Entries older than ttl_seconds should no longer be returned."""
        cache, clock = _make_cache(ttl_seconds=10)
        cache.set_html("https://a.com", "body")
        clock.now = 9.0
        self.assertEqual(cache.get_html("https://a.com"), "body")
        clock.now = 10.5
        self.assertIsNone(cache.get_html("https://a.com"))
        self.assertEqual(cache.stats().entry_count, 0)

    def test_capacity_evicts_least_recently_used(self):
        """Inserting past max_entries should drop the least recently used entry."""
        cache, _ = _make_cache(max_entries=2)
        cache.set_html("https://a.com", "a")
        cache.set_html("https://b.com", "b")
        cache.get_html("https://a.com")
        cache.set_html("https://c.com", "c")
        self.assertEqual(cache.get_html("https://a.com"), "a")
        self.assertIsNone(cache.get_html("https://b.com"))
        self.assertEqual(cache.get_html("https://c.com"), "c")
        self.assertEqual(cache.stats().entry_count, 2)

    def test_remove_and_clear(self):
        """remove_html() drops one entry; clear() drops all and resets counters."""
        cache, _ = _make_cache()
        cache.set_html("https://a.com", "a")
        cache.set_html("https://b.com", "b")
        cache.remove_html("https://a.com")
        cache.remove_html("https://never-stored.com")
        self.assertIsNone(cache.get_html("https://a.com"))
        self.assertEqual(cache.get_html("https://b.com"), "b")

        cache.clear()
        self.assertEqual(cache.stats(), CacheStats())

    def test_stats_count_hits_and_misses(self):
        """stats() should report entries, hits, misses and the hit rate."""
        cache, _ = _make_cache()
        cache.set_html("https://a.com", "a")
        cache.get_html("https://a.com")
        cache.get_html("https://a.com")
        cache.get_html("https://b.com")
        stats = cache.stats()
        self.assertEqual(stats, CacheStats(entry_count=1, hits=2, misses=1))
        self.assertAlmostEqual(stats.hit_rate, 2 / 3)

    def test_empty_stats_hit_rate_is_zero(self):
        """A cache that was never read should report a zero hit rate."""
        cache, _ = _make_cache()
        self.assertEqual(cache.stats().hit_rate, 0.0)


class TestCacheKey(unittest.TestCase):
    """Verify key construction from URL and params."""

    def test_url_only(self):
        """Without params the key is the URL itself."""
        self.assertEqual(cache_key("https://a.com/x"), "https://a.com/x")
        self.assertEqual(cache_key("https://a.com/x", {}), "https://a.com/x")

    def test_params_sorted(self):
        """Param order should not change the key."""
        self.assertEqual(
            cache_key("https://a.com", {"b": 2, "a": "x y"}),
            cache_key("https://a.com", {"a": "x y", "b": 2}),
        )
        self.assertEqual(cache_key("https://a.com", {"b": 2, "a": 1}), "https://a.com?a=1&b=2")


if __name__ == "__main__":
    unittest.main()

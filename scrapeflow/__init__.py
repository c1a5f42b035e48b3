"""Scrape-and-clean record pipeline.

Fetches configured sources, extracts records, cleans them through a fixed
validate -> normalize -> deduplicate pipeline, and exports the result.

Key modules:
    models          -- Record, AdaptiveDelayConfig, DelayStats, FetchResult dataclasses
    validator       -- RecordValidator structural filter
    normalizer      -- RecordNormalizer text/price/url canonicalization
    deduplicator    -- RecordDeduplicator url/title/content dedup
    pipeline        -- ProcessingPipeline composing the three stages
    adaptive_delay  -- AdaptiveDelayController latency-driven request pacing
    backoff         -- BackoffStrategy for exponential retry delays
    fetcher         -- HttpFetcher async HTTP client
    cache           -- HtmlCache TTL page cache used by the fetcher
    base            -- BaseSource abstract class
    sources         -- SelectorSource (HTML) and JsonSource implementations
    factory         -- SourceFactory for building sources from config
    storage         -- RecordExporter and JSON/CSV/SQLite/HTTP sinks
    engine          -- ScrapeEngine running one scrape cycle
    config          -- YAML configuration loader
    logger          -- logging setup
"""

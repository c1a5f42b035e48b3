from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from typing import Optional

from scrapeflow.adaptive_delay import AdaptiveDelayController
from scrapeflow.backoff import BackoffStrategy
from scrapeflow.cache import HtmlCache
from scrapeflow.config import AppConfig, OutputConfig, load_config
from scrapeflow.engine import ScrapeEngine
from scrapeflow.factory import SourceFactory
from scrapeflow.fetcher import HttpFetcher
from scrapeflow.logger import setup_logger
from scrapeflow.models import Record
from scrapeflow.pipeline import ProcessingPipeline
from scrapeflow.storage import create_exporter

DEFAULT_CONFIG_PATH = "config.yaml"

logger = logging.getLogger("scrapeflow.main")


def _output_config(config: AppConfig, output: Optional[str], fmt: Optional[str]) -> OutputConfig:
    out = config.output
    return OutputConfig(
        format=fmt or out.format,
        path=output or out.path,
        endpoint=output if fmt == "http" and output else out.endpoint,
        include_metadata=out.include_metadata,
        table=out.table,
    )


async def run_cycle(config: AppConfig, output: OutputConfig) -> int:
    delay = AdaptiveDelayController(config.delay)
    backoff = BackoffStrategy(base_seconds=config.backoff.base_seconds, max_seconds=config.backoff.max_seconds)
    sources = SourceFactory().create_sources(config.sources)
    cache = HtmlCache(config.cache.max_entries, config.cache.ttl_seconds) if config.cache.enabled else None
    if not sources:
        logger.warning("No enabled sources configured")
        return 0

    async with HttpFetcher(
        delay,
        backoff=backoff,
        max_retries=config.scraping.max_retries,
        timeout=config.scraping.timeout_seconds,
        user_agent=config.scraping.user_agent,
        impersonate=config.scraping.impersonate,
        cache=cache,
    ) as fetcher:
        engine = ScrapeEngine(fetcher, ProcessingPipeline(), create_exporter(output))
        report = await engine.run_cycle(sources)

    stats = delay.get_stats()
    print(
        f"\nDONE: raw={report.raw_count} processed={len(report.records)} exported={report.exported} "
        f"failed={len(report.failed_sources)} avg_response_ms={stats.avg_response_ms:.0f} "
        f"delay_ms={stats.current_delay_ms}"
    )
    if cache is not None:
        cache_stats = cache.stats()
        logger.info("Cache: entries=%d hits=%d misses=%d", cache_stats.entry_count, cache_stats.hits, cache_stats.misses)
    return len(report.records)


def process_file(path: str, output: OutputConfig) -> int:
    """Run the pipeline over a JSON array of raw records and export the result."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    records = [Record.from_dict(item) for item in raw]
    processed = ProcessingPipeline().process(records)
    if processed:
        create_exporter(output).export(processed)
    else:
        logger.info("No records left after processing; nothing exported")
    print(f"\nDONE: raw={len(records)} processed={len(processed)}")
    return len(processed)


def main() -> None:
    parser = argparse.ArgumentParser(description="Scrape configured sources and clean the extracted records")
    parser.add_argument("--run", action="store_true", help="Run one scrape cycle over the configured sources")
    parser.add_argument("--process", metavar="FILE", help="Run the pipeline over a JSON array of raw records")

    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to YAML config (config.yaml)")
    parser.add_argument("--output", help="Output path (or endpoint URL for --format http)")
    parser.add_argument("--format", choices=["json", "csv", "sqlite", "http"], help="Override output format")

    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", help="Optional rotating log file path")

    args = parser.parse_args()
    setup_logger(level=getattr(logging, args.log_level.upper(), logging.INFO), log_file=args.log_file)

    if args.run:
        config = load_config(args.config)
        asyncio.run(run_cycle(config, _output_config(config, args.output, args.format)))
        return

    if args.process:
        # Offline mode does not need a config file.
        config = load_config(args.config) if os.path.exists(args.config) else AppConfig()
        process_file(args.process, _output_config(config, args.output, args.format))
        return

    print("Nothing to do. Use --run to scrape or --process FILE to clean saved records.")


if __name__ == "__main__":
    main()

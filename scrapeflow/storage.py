from __future__ import annotations

import csv
import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests

from .config import OutputConfig
from .errors import ConfigError, ExportError
from .models import Record

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id", "source", "url", "title", "content", "price", "image_url", "author", "timestamp", "category"]


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class RecordExporter(ABC):
    """Abstract base class for all record sinks."""

    @abstractmethod
    def export(self, records: List[Record]) -> int:
        """Persist the batch and return how many records were written."""


class JsonExporter(RecordExporter):
    """Writes the batch as one JSON array."""

    def __init__(self, path: str, pretty: bool = True) -> None:
        self._path = path
        self._pretty = pretty

    def export(self, records: List[Record]) -> int:
        _ensure_parent(self._path)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in records], f, ensure_ascii=False, indent=2 if self._pretty else None)
        logger.info("Exported %d records to JSON %s", len(records), self._path)
        return len(records)


class CsvExporter(RecordExporter):
    def __init__(self, path: str, include_metadata: bool = False) -> None:
        self._path = path
        self._include_metadata = include_metadata

    def export(self, records: List[Record]) -> int:
        columns = CSV_COLUMNS + (["metadata"] if self._include_metadata else [])
        _ensure_parent(self._path)
        with open(self._path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
            writer.writeheader()
            for record in records:
                row = {k: ("" if v is None else v) for k, v in record.to_dict().items()}
                if self._include_metadata:
                    row["metadata"] = json.dumps(record.metadata, ensure_ascii=False)
                writer.writerow(row)
        logger.info("Exported %d records to CSV %s", len(records), self._path)
        return len(records)


class SqliteExporter(RecordExporter):
    """Upserts records into a SQLite table keyed on record id."""

    def __init__(self, path: str, table: str = "records") -> None:
        if not table.isidentifier():
            raise ConfigError(f"invalid table name: {table!r}")
        self._path = path
        self._table = table

    def export(self, records: List[Record]) -> int:
        _ensure_parent(self._path)
        conn = sqlite3.connect(self._path)
        try:
            with conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self._table} (
                        id TEXT PRIMARY KEY,
                        source TEXT NOT NULL,
                        url TEXT NOT NULL,
                        title TEXT,
                        content TEXT,
                        price REAL,
                        image_url TEXT,
                        author TEXT,
                        timestamp TEXT NOT NULL,
                        category TEXT,
                        metadata TEXT DEFAULT '{{}}'
                    )
                    """
                )
                conn.executemany(
                    f"INSERT OR REPLACE INTO {self._table} "
                    "(id, source, url, title, content, price, image_url, author, timestamp, category, metadata) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            r.id, r.source, r.url, r.title, r.content, r.price, r.image_url,
                            r.author, r.timestamp.isoformat(), r.category, json.dumps(r.metadata),
                        )
                        for r in records
                    ],
                )
        finally:
            conn.close()
        logger.info("Exported %d records to SQLite %s:%s", len(records), self._path, self._table)
        return len(records)


class HttpExporter(RecordExporter):
    """POSTs the batch as a JSON array to an HTTP endpoint."""

    def __init__(self, endpoint: str, timeout: float = 30, session: Optional[Any] = None) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._session = session or requests.Session()

    def export(self, records: List[Record]) -> int:
        try:
            resp = self._session.post(
                self._endpoint,
                json=[r.to_dict() for r in records],
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ExportError(f"POST {self._endpoint} failed: {type(exc).__name__}") from exc
        if not 200 <= resp.status_code < 300:
            raise ExportError(f"POST {self._endpoint} returned HTTP_{resp.status_code}")
        logger.info("Exported %d records to %s", len(records), self._endpoint)
        return len(records)


def create_exporter(config: OutputConfig) -> RecordExporter:
    fmt = config.format.lower()
    if fmt == "json":
        return JsonExporter(config.path)
    if fmt == "csv":
        return CsvExporter(config.path, include_metadata=config.include_metadata)
    if fmt == "sqlite":
        return SqliteExporter(config.path, table=config.table)
    if fmt == "http":
        if not config.endpoint:
            raise ConfigError("output.endpoint is required for the http format")
        return HttpExporter(config.endpoint)
    raise ConfigError(f"Unknown output format: {config.format}")

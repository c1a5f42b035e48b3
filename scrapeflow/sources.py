from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from lxml import etree, html as lxml_html
from lxml.cssselect import CSSSelector, SelectorError

from .base import BaseSource
from .errors import ConfigError, ExtractionError
from .models import Record

logger = logging.getLogger(__name__)

_PRICE_CHARS = re.compile(r"[^0-9.\-]")

# Record fields a JsonSource may map from payload paths.
JSON_FIELDS = ("url", "title", "content", "author", "price", "image_url", "category")


def parse_price(raw: Any) -> Optional[float]:
    """Best-effort price parsing: '$1,234.50' -> 1234.5; None when unparsable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    cleaned = _PRICE_CHARS.sub("", str(raw))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


class SelectorSource(BaseSource):
    """Extracts records from HTML using CSS selectors.

    Expected selector keys: container (required), and any of title, content,
    author, price, category (text), image (src attribute) and link (href
    attribute). Each container match becomes one record; sub-selectors are
    evaluated relative to it. metadata maps extra names to text selectors.
    """

    kind = "html"

    _TEXT_FIELDS = ("title", "content", "author", "price", "category")

    def __init__(
        self,
        name: str,
        base_url: str,
        selectors: Dict[str, str],
        metadata: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, base_url, **kwargs)
        if not selectors.get("container"):
            raise ConfigError(f"source {name!r} needs a container selector")
        self._compiled: Dict[str, CSSSelector] = {}
        self._metadata: Dict[str, CSSSelector] = {}
        try:
            for key, expr in selectors.items():
                if expr:
                    self._compiled[key] = CSSSelector(expr)
            for key, expr in (metadata or {}).items():
                self._metadata[key] = CSSSelector(expr)
        except SelectorError as exc:
            raise ConfigError(f"source {name!r} has an invalid selector: {exc}") from exc

    def extract(self, body: str) -> List[Record]:
        try:
            tree = lxml_html.fromstring(body)
        except (etree.ParserError, ValueError) as exc:
            logger.warning("Could not parse HTML from %s: %s", self.name, exc)
            return []

        records: List[Record] = []
        for element in self._compiled["container"](tree):
            values = {key: self._text(element, key) for key in self._TEXT_FIELDS}
            link = self._attribute(element, "link", "href")
            image = self._attribute(element, "image", "src")
            metadata = {}
            for key, selector in self._metadata.items():
                matches = selector(element)
                if matches:
                    metadata[key] = matches[0].text_content().strip()
            records.append(
                Record(
                    source=self.name,
                    url=urljoin(self.base_url, link) if link else self.base_url,
                    title=values["title"],
                    content=values["content"],
                    author=values["author"],
                    price=parse_price(values["price"]),
                    image_url=urljoin(self.base_url, image) if image else None,
                    category=values["category"],
                    metadata=metadata,
                )
            )
        return records

    def _text(self, element: Any, key: str) -> Optional[str]:
        selector = self._compiled.get(key)
        if selector is None:
            return None
        matches = selector(element)
        if not matches:
            return None
        text = " ".join(m.text_content() for m in matches).strip()
        return text or None

    def _attribute(self, element: Any, key: str, attribute: str) -> Optional[str]:
        selector = self._compiled.get(key)
        if selector is None:
            return None
        for match in selector(element):
            value = match.get(attribute)
            if value:
                return value.strip()
        return None


def dig(payload: Any, path: str) -> Any:
    """Walk a dotted path ('data.items.0.name') through dicts and lists."""
    current = payload
    if not path:
        return current
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


class JsonSource(BaseSource):
    """Extracts records from a JSON API response.

    items_path points at the list of items; fields maps record fields
    (url, title, content, author, price, image_url, category) to dotted
    paths inside each item."""

    kind = "json"

    def __init__(
        self,
        name: str,
        base_url: str,
        fields: Dict[str, str],
        items_path: str = "",
        metadata: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, base_url, **kwargs)
        unknown = set(fields) - set(JSON_FIELDS)
        if unknown:
            raise ConfigError(f"source {name!r} maps unknown fields: {sorted(unknown)}")
        self._fields = dict(fields)
        self._items_path = items_path
        self._metadata = dict(metadata or {})

    def extract(self, body: str) -> List[Record]:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"{self.name}: invalid JSON payload ({exc})") from exc

        items = dig(payload, self._items_path)
        if items is None:
            logger.warning("No items at %r in %s payload", self._items_path, self.name)
            return []
        if not isinstance(items, list):
            raise ExtractionError(f"{self.name}: {self._items_path!r} is not a list")

        return [self._to_record(item) for item in items if isinstance(item, dict)]

    def _to_record(self, item: Dict[str, Any]) -> Record:
        values = {key: dig(item, path) for key, path in self._fields.items()}
        url = values.get("url")
        return Record(
            source=self.name,
            url=urljoin(self.base_url, str(url)) if url else self.base_url,
            title=self._str(values.get("title")),
            content=self._str(values.get("content")),
            author=self._str(values.get("author")),
            price=parse_price(values.get("price")),
            image_url=self._str(values.get("image_url")),
            category=self._str(values.get("category")),
            metadata={
                key: str(value)
                for key, value in ((k, dig(item, p)) for k, p in self._metadata.items())
                if value is not None
            },
        )

    @staticmethod
    def _str(value: Any) -> Optional[str]:
        return str(value) if value is not None else None

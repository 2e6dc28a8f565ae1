"""Fetch, parse and validate a topics source into an ordered set of topics."""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple

import requests  # type: ignore[import-untyped]
import yaml
from edn_format import EDNDecodeError

from topics.exceptions import ConfigurationError, LoadError
from topics.services.kb.edn_reader import read_edn
from topics.services.kb.models import LoadResult, Topic
from topics.services.kb.tree import (
    flatten_tree,
    is_document_tree,
    tree_from_html,
    tree_from_markdown,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 20.0
USER_AGENT = "topics/0.1"
FORMATS = ("json", "yaml", "edn", "markdown", "html")

_EXTENSIONS = [
    (re.compile(r"\.(yaml|yml)$", re.IGNORECASE), "yaml"),
    (re.compile(r"\.edn$", re.IGNORECASE), "edn"),
    (re.compile(r"\.(md|markdown)$", re.IGNORECASE), "markdown"),
    (re.compile(r"\.(html|htm)$", re.IGNORECASE), "html"),
]


class InputShape(str, Enum):
    TOPIC_LIST = "topic_list"
    SINGLE_TOPIC = "single_topic"
    DOCUMENT_TREE = "document_tree"


def is_http_url(source: str) -> bool:
    return bool(re.match(r"^https?://", source, re.IGNORECASE))


def detect_format(source: str, forced: str = "auto") -> str:
    """Pick a parser from the file extension unless a format is forced."""
    forced = (forced or "auto").lower()
    if forced != "auto":
        if forced not in FORMATS:
            raise ConfigurationError(f"Unsupported format: {forced}", {"format": forced})
        return forced
    # Ignore any query string on URLs.
    name = source.split("?", 1)[0].split("#", 1)[0]
    for pattern, fmt in _EXTENSIONS:
        if pattern.search(name):
            return fmt
    return "json"


def read_source(source: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """Read a local file or GET a remote URL. No retries."""
    if is_http_url(source):
        try:
            resp = requests.get(source, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        except requests.RequestException as exc:
            raise LoadError(f"Error fetching {source}: {exc}", {"source": source}) from exc
        status = getattr(resp, "status_code", None)
        if status is None or not 200 <= status < 300:
            raise LoadError(
                f"HTTP error {status} when fetching {source}",
                {"source": source, "http_status": status},
            )
        return resp.text
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Error reading {source}: {exc}", {"source": source}) from exc


def parse_content(content: str, fmt: str) -> Any:
    try:
        if fmt == "yaml":
            return yaml.safe_load(content)
        if fmt == "edn":
            return read_edn(content)
        if fmt == "markdown":
            return tree_from_markdown(content)
        if fmt == "html":
            return tree_from_html(content)
        return json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError, EDNDecodeError) as exc:
        raise LoadError(f"Cannot parse topics as {fmt}: {exc}", {"format": fmt}) from exc


def classify(parsed: Any) -> InputShape:
    """Map a parsed value onto one of the accepted input shapes."""
    if is_document_tree(parsed):
        return InputShape.DOCUMENT_TREE
    if isinstance(parsed, list):
        return InputShape.TOPIC_LIST
    if isinstance(parsed, dict):
        return InputShape.SINGLE_TOPIC
    raise LoadError(
        "Topics data must be a list or map at the top level",
        {"parsed_type": type(parsed).__name__},
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _path_of(entry: dict) -> Tuple[str, ...]:
    path = entry.get("path")
    if isinstance(path, list):
        return tuple(_text(item) for item in path)
    if isinstance(path, str) and path:
        return (path,)
    return ()


def _explicit_category(entry: dict) -> Optional[str]:
    category = entry.get("category")
    if isinstance(category, str) and category.strip():
        return category.strip()
    return None


def is_valid_entry(entry: Any) -> bool:
    """A record with a non-empty title."""
    return isinstance(entry, dict) and bool(_text(entry.get("title")).strip())


def decode_records(entries: List[Any]) -> Tuple[List[Topic], int, int]:
    """Validate raw records and derive each topic's category.

    Precedence: an explicit ``category`` string, then the first element of a
    ``path`` with two or more elements. Once any record is categorized, records
    whose path has a single element and no explicit category are headers.
    """
    valid = [entry for entry in entries if is_valid_entry(entry)]
    rejected = len(entries) - len(valid)
    nested = any(_explicit_category(e) or len(_path_of(e)) > 1 for e in valid)

    topics: List[Topic] = []
    headers = 0
    for entry in valid:
        path = _path_of(entry)
        category = _explicit_category(entry)
        if category is None and len(path) > 1:
            category = path[0]
        if nested and category is None and len(path) == 1:
            headers += 1
            continue
        topics.append(
            Topic(
                title=_text(entry.get("title")).strip(),
                content=_text(entry.get("content")),
                category=category,
                path=path,
            )
        )
    return topics, rejected, headers


def load(parsed: Any, depth: Optional[int] = None, source: str = "") -> LoadResult:
    """Turn a parsed value of any accepted shape into validated topics."""
    shape = classify(parsed)
    tree_headers = 0
    if shape is InputShape.DOCUMENT_TREE:
        flattened = flatten_tree(parsed, depth)
        logger.debug("Flattened document tree at depth %s", flattened.depth)
        entries: List[Any] = flattened.records
        tree_headers = flattened.headers
    elif shape is InputShape.SINGLE_TOPIC:
        entries = [parsed]
    else:
        entries = list(parsed)

    topics, rejected, headers = decode_records(entries)
    result = LoadResult(
        topics=tuple(topics),
        rejected=rejected,
        headers=headers + tree_headers,
        source=source,
    )
    logger.info(
        "Loaded %d topics (filtered %d invalid entries, %d headers)",
        len(result.topics),
        result.rejected,
        result.headers,
    )
    return result


def load_source(
    source: str,
    fmt: str = "auto",
    depth: Optional[int] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> LoadResult:
    """Read, parse and validate ``source``; every failure surfaces as LoadError."""
    logger.info("Loading topics from %s", source)
    try:
        detected = detect_format(source, fmt)
    except ConfigurationError as exc:
        raise LoadError(exc.message, exc.details) from exc
    logger.debug("Using format: %s", detected)
    content = read_source(source, timeout)
    return load(parse_content(content, detected), depth=depth, source=source)

"""Immutable, ordered topic store built once per process or generation run."""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterator, List, Optional, Sequence

from topics.exceptions import TopicNotFound
from topics.services.kb.cleaner import slugify
from topics.services.kb.loader import REQUEST_TIMEOUT, load_source
from topics.services.kb.models import LoadResult, Topic
from topics.services.kb.search import SearchIndex

FALLBACK_SLUG = "topic"


def assign_slugs(topics: Sequence[Topic]) -> List[Topic]:
    """Give each topic a unique anchor slug; repeats get -2, -3, ... suffixes."""
    seen: Dict[str, int] = {}
    taken: set[str] = set()
    result: List[Topic] = []
    for topic in topics:
        base = slugify(topic.title) or FALLBACK_SLUG
        slug = base
        while slug in taken:
            seen[base] = seen.get(base, 1) + 1
            slug = f"{base}-{seen[base]}"
        taken.add(slug)
        result.append(dataclasses.replace(topic, slug=slug))
    return result


class TopicStore:
    """Read-only view over validated topics; safe to share between requests."""

    def __init__(self, topics: Sequence[Topic], rejected: int = 0, headers: int = 0) -> None:
        self._topics = tuple(assign_slugs(topics))
        self._by_slug = {topic.slug: topic for topic in self._topics}
        self._index = SearchIndex(self._topics)
        self.rejected = rejected
        self.headers = headers

    @classmethod
    def from_result(cls, result: LoadResult) -> "TopicStore":
        return cls(result.topics, rejected=result.rejected, headers=result.headers)

    @classmethod
    def from_source(
        cls,
        source: str,
        fmt: str = "auto",
        depth: Optional[int] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> "TopicStore":
        return cls.from_result(load_source(source, fmt=fmt, depth=depth, timeout=timeout))

    @property
    def topics(self) -> tuple[Topic, ...]:
        return self._topics

    def __len__(self) -> int:
        return len(self._topics)

    def __iter__(self) -> Iterator[Topic]:
        return iter(self._topics)

    def get(self, slug: str) -> Topic:
        try:
            return self._by_slug[slug]
        except KeyError as exc:
            raise TopicNotFound(f"Unknown topic: {slug}", {"slug": slug}) from exc

    def search(self, query: str | None) -> List[Topic]:
        return self._index.search(query)

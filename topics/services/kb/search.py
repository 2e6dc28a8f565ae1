"""Substring search over normalized title, content and category fields."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from topics.services.kb.cleaner import normalize, prepare_query
from topics.services.kb.models import Topic


def haystacks(topic: Topic) -> Tuple[str, ...]:
    fields = [normalize(topic.title), normalize(topic.content, html=True)]
    if topic.category:
        fields.append(normalize(topic.category))
    fields.extend(normalize(segment) for segment in topic.path)
    return tuple(fields)


class SearchIndex:
    """Normalized fields of every topic, computed once per store."""

    def __init__(self, topics: Sequence[Topic]) -> None:
        self.topics = tuple(topics)
        self._fields = [haystacks(topic) for topic in self.topics]

    def search(self, query: str | None) -> List[Topic]:
        """Stable filter in store order; an empty needle matches nothing."""
        needle = prepare_query(query)
        if not needle:
            return []
        return [
            topic
            for topic, fields in zip(self.topics, self._fields)
            if any(needle in field for field in fields)
        ]


def search(query: str | None, topics: Sequence[Topic]) -> List[Topic]:
    return SearchIndex(topics).search(query)

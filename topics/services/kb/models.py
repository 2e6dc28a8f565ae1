"""Typed models for topics, categories and load results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Topic:
    title: str
    content: str = ""
    category: Optional[str] = None
    path: Tuple[str, ...] = ()
    slug: str = ""

    @property
    def has_category(self) -> bool:
        return bool(self.category)

    def as_payload(self) -> Dict[str, Any]:
        """JSON-ready record embedded in the static site."""
        return {
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "path": list(self.path),
            "slug": self.slug,
        }


@dataclass(frozen=True)
class Category:
    name: str
    count: int


@dataclass(frozen=True)
class LoadResult:
    """Validated topics in encounter order plus diagnostics."""

    topics: Tuple[Topic, ...]
    rejected: int = 0
    headers: int = 0
    source: str = ""

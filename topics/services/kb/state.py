"""Decide which view to render for a (query, category) selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from topics.services.kb.cleaner import sanitize_query
from topics.services.kb.index import (
    ALL_CATEGORIES,
    UNCATEGORIZED,
    categories,
    is_single_pseudo_category,
    topics_in_category,
)
from topics.services.kb.models import Category, Topic
from topics.services.kb.store import TopicStore


class View(str, Enum):
    CATEGORIES_GRID = "categories_grid"
    CATEGORY_DETAIL = "category_detail"
    SEARCH_RESULTS = "search_results"


@dataclass(frozen=True)
class RenderState:
    view: View
    query: str
    category: Optional[str]
    topics: Tuple[Topic, ...]
    categories: Tuple[Category, ...]
    implicit_category: bool = False

    @property
    def search_active(self) -> bool:
        return self.view is View.SEARCH_RESULTS

    @property
    def show_back_link(self) -> bool:
        return self.view is View.CATEGORY_DETAIL and not self.implicit_category

    @property
    def empty_message_key(self) -> Optional[str]:
        """UI string key for an empty list; the two empty states never mix."""
        if self.topics or self.view is View.CATEGORIES_GRID:
            return None
        if self.view is View.SEARCH_RESULTS:
            return "no_search_results"
        return "no_category_results"


def resolve(
    store: TopicStore,
    query: Optional[str] = None,
    category: Optional[str] = None,
    all_label: str = ALL_CATEGORIES,
    default_label: str = UNCATEGORIZED,
) -> RenderState:
    """A non-empty sanitized query wins over a category; neither means the grid.

    When every topic lacks a category the grid has a single pseudo-category
    and is skipped: all topics are listed directly.
    """
    cleaned = sanitize_query(query)
    selected = category or None
    found = tuple(categories(store.topics, all_label, default_label))

    if cleaned:
        return RenderState(
            view=View.SEARCH_RESULTS,
            query=cleaned,
            category=selected,
            topics=tuple(store.search(cleaned)),
            categories=found,
        )
    if selected:
        return RenderState(
            view=View.CATEGORY_DETAIL,
            query="",
            category=selected,
            topics=tuple(topics_in_category(store.topics, selected, all_label, default_label)),
            categories=found,
        )
    if is_single_pseudo_category(found, all_label):
        return RenderState(
            view=View.CATEGORY_DETAIL,
            query="",
            category=all_label,
            topics=store.topics,
            categories=found,
            implicit_category=True,
        )
    return RenderState(
        view=View.CATEGORIES_GRID,
        query="",
        category=None,
        topics=(),
        categories=found,
    )

"""Category index derived from the topic store."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from topics.services.kb.models import Category, Topic

ALL_CATEGORIES = "All categories"
UNCATEGORIZED = "Other topics"


def is_flat(topics: Sequence[Topic]) -> bool:
    """Flat mode: no topic carries a category."""
    return not any(topic.has_category for topic in topics)


def group_name(topic: Topic, flat: bool, all_label: str, default_label: str) -> str:
    if topic.category:
        return topic.category
    return all_label if flat else default_label


def categories(
    topics: Sequence[Topic],
    all_label: str = ALL_CATEGORIES,
    default_label: str = UNCATEGORIZED,
) -> List[Category]:
    """Distinct group names sorted by name, each with its topic count.

    In flat mode every topic falls under the single ``all_label``
    pseudo-category. Otherwise uncategorized topics form their own
    ``default_label`` group and are never merged into populated ones.
    """
    flat = is_flat(topics)
    if flat:
        return [Category(name=all_label, count=len(topics))]
    counts = Counter(group_name(t, flat, all_label, default_label) for t in topics)
    return [Category(name=name, count=counts[name]) for name in sorted(counts)]


def is_single_pseudo_category(found: Sequence[Category], all_label: str = ALL_CATEGORIES) -> bool:
    return len(found) == 1 and found[0].name == all_label


def topics_in_category(
    topics: Sequence[Topic],
    name: str,
    all_label: str = ALL_CATEGORIES,
    default_label: str = UNCATEGORIZED,
) -> List[Topic]:
    """Topics of one group, in store order. Flat mode matches every name."""
    flat = is_flat(topics)
    if flat:
        return list(topics)
    return [t for t in topics if group_name(t, flat, all_label, default_label) == name]

"""Structured document trees: building them from HTML/Markdown and lowering them to topics."""

from __future__ import annotations

import html as html_lib
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

DOCUMENT_TYPE = "document"
SECTION_TYPE = "section"
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


def is_document_tree(value: Any) -> bool:
    """A document tree is a mapping whose root is tagged with the document type."""
    return isinstance(value, dict) and value.get("type") == DOCUMENT_TYPE


def _is_section(node: Any) -> bool:
    if not isinstance(node, dict):
        return False
    node_type = node.get("type")
    return node_type == SECTION_TYPE or (node_type is None and "title" in node)


def _children(node: dict) -> list:
    children = node.get("children") or []
    return children if isinstance(children, list) else []


def _iter_blocks(node: Tag) -> Iterator[Tag | str]:
    for child in node.children:
        if isinstance(child, Tag):
            if child.name in HEADING_TAGS:
                yield child
            elif child.find(HEADING_TAGS):
                yield from _iter_blocks(child)
            else:
                yield child
        elif type(child) is NavigableString and child.strip():
            yield str(child).strip()


def tree_from_html(document: str) -> dict:
    """Turn heading structure (h1-h6) into nested sections.

    Heading levels are ranked, so a page that only uses h2 and h3 yields
    sections at depth 1 and 2. Content before the first heading is kept on
    the root and never becomes a topic.
    """
    soup = BeautifulSoup(document, "lxml")
    container = soup.find("main") or soup.find("article") or soup.body or soup
    for tag in container.find_all(["script", "style", "nav"]):
        tag.decompose()

    levels = sorted({int(tag.name[1]) for tag in container.find_all(HEADING_TAGS)})
    rank = {level: idx + 1 for idx, level in enumerate(levels)}

    root: dict = {"type": DOCUMENT_TYPE, "children": []}
    stack: List[Tuple[int, dict]] = [(0, root)]
    for block in _iter_blocks(container):
        if isinstance(block, Tag) and block.name in HEADING_TAGS:
            depth = rank[int(block.name[1])]
            while stack[-1][0] >= depth:
                stack.pop()
            section = {
                "type": SECTION_TYPE,
                "title": block.get_text(" ", strip=True),
                "children": [],
            }
            stack[-1][1]["children"].append(section)
            stack.append((depth, section))
        elif isinstance(block, Tag):
            stack[-1][1]["children"].append({"type": "html", "value": str(block)})
        else:
            stack[-1][1]["children"].append({"type": "text", "value": block})
    return root


def tree_from_markdown(text: str) -> dict:
    return tree_from_html(markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS))


def max_section_depth(tree: dict) -> int:
    """Deepest section level present; 0 when the tree has no sections."""
    deepest = 0
    stack: List[Tuple[int, Any]] = [(0, tree)]
    while stack:
        depth, node = stack.pop()
        for child in _children(node):
            if _is_section(child):
                deepest = max(deepest, depth + 1)
                stack.append((depth + 1, child))
    return deepest


def _render_block(node: Any) -> str:
    if not isinstance(node, dict):
        return html_lib.escape(str(node)) if node is not None else ""
    if node.get("type") == "text":
        return f"<p>{html_lib.escape(str(node.get('value', '')))}</p>"
    return str(node.get("value") or "")


def render_section_body(section: dict) -> str:
    """A section's own content and blocks; nested sections are left out."""
    parts = [str(section.get("content") or "")]
    parts.extend(_render_block(child) for child in _children(section) if not _is_section(child))
    return "".join(parts)


@dataclass
class FlattenResult:
    records: List[dict]
    headers: int
    depth: int


def flatten_tree(tree: dict, depth: Optional[int] = None) -> FlattenResult:
    """Lower a document tree into flat topic records.

    Every section at exactly ``depth`` (default: the deepest level present)
    becomes a record whose category is its parent section's title. Shallower
    sections are headers and only contribute their titles to the path.
    """
    target = depth or max_section_depth(tree)
    records: List[dict] = []
    headers = 0
    stack: List[Tuple[Tuple[str, ...], Any]] = [((), child) for child in reversed(_children(tree))]
    while stack:
        path, node = stack.pop()
        if not _is_section(node):
            continue
        title = str(node.get("title") or "").strip()
        level = len(path) + 1
        if level == target:
            records.append(
                {
                    "title": title,
                    "content": render_section_body(node),
                    "category": path[-1] if path else None,
                    "path": list(path),
                }
            )
        elif level < target:
            headers += 1
            stack.extend((path + (title,), child) for child in reversed(_children(node)))
    return FlattenResult(records=records, headers=headers, depth=target)

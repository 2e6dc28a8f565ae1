"""Static site generation: one HTML document with embedded data and browsing program."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from topics.config import SiteConfig
from topics.services.kb.cleaner import normalization_tables
from topics.services.kb.index import categories, is_flat, topics_in_category
from topics.services.kb.models import Category, Topic
from topics.services.kb.store import TopicStore
from topics.services.render.pages import get_environment, read_static
from topics.services.render.strings import client_strings, strings_for

logger = logging.getLogger(__name__)

CUSTOM_CSS_NAME = "custom.css"
_SCRIPT_ESCAPES = str.maketrans({"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"})


def build_payload(store: TopicStore, lang: str) -> Dict[str, Any]:
    return {
        "topics": [topic.as_payload() for topic in store.topics],
        "strings": client_strings(lang),
        "normalization": normalization_tables(),
    }


def dump_payload(payload: Dict[str, Any]) -> str:
    """JSON safe to embed in a script element.

    `<`, `>` and `&` become `\\u` escapes so no markup, comment opener or
    closing tag survives inside the element.
    """
    text = json.dumps(payload, ensure_ascii=False)
    return text.translate(_SCRIPT_ESCAPES)


def noscript_groups(store: TopicStore, lang: str) -> List[Tuple[Category, List[Topic]]]:
    strings = strings_for(lang)
    all_label, default_label = strings["all_categories"], strings["uncategorized"]
    return [
        (cat, topics_in_category(store.topics, cat.name, all_label, default_label))
        for cat in categories(store.topics, all_label, default_label)
    ]


def build_site(store: TopicStore, config: SiteConfig) -> str:
    lang = config.lang
    template = get_environment().get_template("site.html.j2")
    return template.render(
        config=config,
        lang=lang,
        t=strings_for(lang),
        css=read_static("topics.css"),
        payload=dump_payload(build_payload(store, lang)),
        program=read_static("topics.js"),
        groups=noscript_groups(store, lang),
        flat=is_flat(store.topics),
        home_href=config.url("/") if config.base_path else "./",
    )


def copy_custom_css(css: Path, output_dir: Path) -> Optional[Path]:
    """Copy a custom stylesheet next to the output unless it is already there."""
    target = output_dir / CUSTOM_CSS_NAME
    if not css.exists():
        logger.warning("Skipping CSS copy: %s is missing", css)
        return None
    if target.exists() and css.resolve() == target.resolve():
        logger.info("Skipping CSS copy: source matches destination")
        return target
    output_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(css, target)
    logger.info("Copied: %s -> %s", css, target)
    return target


def write_site(
    store: TopicStore, config: SiteConfig, output: Path, css: Optional[Path] = None
) -> Path:
    if css is not None and copy_custom_css(css, output.parent) is None:
        config = config.model_copy(update={"css_href": None})
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(build_site(store, config), encoding="utf-8")
    return output

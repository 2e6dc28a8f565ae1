"""Server-side rendering of pages and content fragments with Jinja2."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from topics.config import SiteConfig
from topics.services.kb.models import Topic
from topics.services.kb.state import RenderState
from topics.services.render.strings import strings_for

PACKAGE_DIR = Path(__file__).resolve().parents[2]
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"

# Delimit the content region in page.html.j2; fragment responses are the text between them.
CONTENT_START = "<!-- topics:content:start -->"
CONTENT_END = "<!-- topics:content:end -->"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


@lru_cache(maxsize=None)
def read_static(name: str) -> str:
    return (STATIC_DIR / name).read_text(encoding="utf-8")


def _render(template: str, config: SiteConfig, lang: str, **context: Any) -> str:
    env = get_environment()
    return env.get_template(template).render(
        config=config,
        lang=lang,
        t=strings_for(lang),
        css=read_static("topics.css"),
        **context,
    )


def render_page(
    state: RenderState, config: SiteConfig, lang: str, fragment: bool = False
) -> str:
    return _render("page.html.j2", config, lang, state=state, fragment=fragment)


def extract_fragment(page: str) -> str:
    """Cut the content region out of a fully rendered page."""
    start = page.find(CONTENT_START)
    end = page.find(CONTENT_END, start)
    if start == -1 or end == -1:
        raise ValueError("content markers missing from page template")
    return page[start + len(CONTENT_START) : end].strip() + "\n"


def render_fragment(state: RenderState, config: SiteConfig, lang: str) -> str:
    """Content region plus an out-of-band update of the search form state."""
    return extract_fragment(render_page(state, config, lang, fragment=True))


def render_topic(topic: Topic, config: SiteConfig, lang: str) -> str:
    return _render("topic.html.j2", config, lang, topic=topic)


def render_error(status_code: int, config: SiteConfig, lang: str) -> str:
    return _render("error.html.j2", config, lang, status_code=status_code)

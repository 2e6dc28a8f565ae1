"""Page routes: category grid, category detail, search results and single topics."""

from __future__ import annotations

import logging
from urllib.parse import unquote_to_bytes

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse

from topics.config import SiteConfig
from topics.exceptions import QueryDecodeError, TopicNotFound
from topics.services.kb.state import resolve
from topics.services.kb.store import TopicStore
from topics.services.render.pages import render_fragment, render_page, render_topic
from topics.services.render.strings import negotiate_lang, strings_for

logger = logging.getLogger(__name__)

FRAGMENT_HEADER = "HX-Request"

router = APIRouter()


def decode_component(raw: bytes) -> str:
    """Percent-decode one query-string component as strict UTF-8."""
    try:
        return unquote_to_bytes(raw.replace(b"+", b" ")).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise QueryDecodeError(f"Malformed query component: {raw!r}") from exc


def read_query_param(query_string: bytes, name: str) -> str | None:
    """Value of ``name`` in a raw query string; malformed values count as absent."""
    for pair in query_string.split(b"&"):
        if not pair:
            continue
        raw_key, _, raw_value = pair.partition(b"=")
        try:
            if decode_component(raw_key) != name:
                continue
            return decode_component(raw_value)
        except QueryDecodeError as exc:
            logger.warning("Ignoring query parameter: %s", exc.message)
            continue
    return None


def request_lang(request: Request, config: SiteConfig) -> str:
    return negotiate_lang(request.headers.get("accept-language"), default=config.lang)


def wants_fragment(request: Request) -> bool:
    return request.headers.get(FRAGMENT_HEADER, "").lower() == "true"


@router.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    """Full page, or only the content region for fragment-capable requests."""
    store: TopicStore = request.app.state.store
    config: SiteConfig = request.app.state.site_config
    lang = request_lang(request, config)
    strings = strings_for(lang)

    query_string: bytes = request.scope.get("query_string", b"")
    state = resolve(
        store,
        query=read_query_param(query_string, "q"),
        category=read_query_param(query_string, "category"),
        all_label=strings["all_categories"],
        default_label=strings["uncategorized"],
    )
    if wants_fragment(request):
        body = render_fragment(state, config, lang)
    else:
        body = render_page(state, config, lang)
    return HTMLResponse(body, headers={"Vary": f"{FRAGMENT_HEADER}, Accept-Language"})


@router.get("/topic/{slug}", response_class=HTMLResponse)
def topic_page(slug: str, request: Request) -> HTMLResponse:
    store: TopicStore = request.app.state.store
    config: SiteConfig = request.app.state.site_config
    try:
        topic = store.get(slug)
    except TopicNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return HTMLResponse(render_topic(topic, config, request_lang(request, config)))


@router.get("/custom.css", include_in_schema=False)
def custom_css(request: Request) -> FileResponse:
    css = request.app.state.settings.css
    if css is None or not css.exists():
        raise HTTPException(status_code=404, detail="No custom stylesheet configured")
    return FileResponse(css, media_type="text/css")

"""Command-line runners: generate the static site or serve pages over HTTP."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from topics.config import SUPPORTED_FORMATS, Settings, build_settings
from topics.exceptions import ConfigurationError, LoadError
from topics.services.kb.store import TopicStore
from topics.services.render.site import write_site


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", nargs="?", default=None, help="Path or URL to topics file.")
    parser.add_argument("-t", "--topics", default=None, help="Path or URL to topics file.")
    parser.add_argument("-f", "--format", choices=SUPPORTED_FORMATS, default=None)
    parser.add_argument("-d", "--depth", type=int, default=None, help="Document depth to lower.")
    parser.add_argument("-T", "--title", default=None, help="Website title.")
    parser.add_argument("-L", "--tagline", default=None, help="Website tagline.")
    parser.add_argument("-F", "--footer", default=None, help="Footer HTML.")
    parser.add_argument("-s", "--source-url", default=None, help="URL shown as content source.")
    parser.add_argument("-g", "--lang", default=None, help="Language: en or fr.")
    parser.add_argument("-b", "--base-path", default=None, help="URL prefix for sub-paths.")
    parser.add_argument("-C", "--css", default=None, help="Custom CSS file to include.")
    parser.add_argument(
        "-c", "--config", default=None, help="Configuration file (YAML, JSON or EDN)."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="topics", description="Browse topics as a static site or a live server."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Write a single self-contained HTML file.")
    add_common_arguments(generate)
    generate.add_argument("-o", "--output", default=None, help="Output file (default index.html).")

    serve = commands.add_parser("serve", help="Serve pages and fragments over HTTP.")
    add_common_arguments(serve)
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {
        "source": args.topics or args.source,
        "format": args.format,
        "tree_depth": args.depth,
        "title": args.title,
        "tagline": args.tagline,
        "footer": args.footer,
        "source_url": args.source_url,
        "lang": args.lang,
        "base_path": args.base_path,
        "css": args.css,
        "config_file": args.config,
        "output": getattr(args, "output", None),
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
    }
    return build_settings(overrides)


def generate(settings: Settings) -> Path:
    store = _load(settings)
    output = write_site(store, settings.site_config(), settings.output, css=settings.css)
    print(f"[info] Generated: {output} ({len(store)} topics)")
    return output


def serve(settings: Settings) -> None:
    import uvicorn

    from topics.main import create_app

    store = _load(settings)
    print(f"[info] Serving {len(store)} topics on http://{settings.host}:{settings.port}/")
    uvicorn.run(create_app(settings, store), host=settings.host, port=settings.port)


def _load(settings: Settings) -> TopicStore:
    if not settings.source:
        raise ConfigurationError(
            "topics file or URL is required: pass it as a positional argument or with -t/--topics"
        )
    return TopicStore.from_source(
        settings.source,
        fmt=settings.format,
        depth=settings.tree_depth,
        timeout=settings.request_timeout,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        settings = settings_from_args(args)
        if args.command == "generate":
            generate(settings)
        else:
            serve(settings)
    except (LoadError, ConfigurationError) as exc:
        print(f"[error] {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())

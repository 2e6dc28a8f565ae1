"""Application configuration via environment variables and an optional config file."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from edn_format import EDNDecodeError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from topics.exceptions import ConfigurationError
from topics.services.kb.edn_reader import read_edn

logger = logging.getLogger(__name__)

SUPPORTED_LANGS = ("en", "fr")
SUPPORTED_FORMATS = ("auto", "json", "yaml", "edn", "markdown", "html")

# Keys a config file may set; everything else is ignored.
CONFIG_FILE_KEYS = (
    "source",
    "format",
    "tree_depth",
    "title",
    "tagline",
    "footer",
    "source_url",
    "lang",
    "base_path",
    "css",
    "output",
)


class SiteConfig(BaseModel):
    """Pass-through values consumed by both rendering surfaces."""

    model_config = ConfigDict(frozen=True)

    title: str = "Topics"
    tagline: str = "Topics to explore"
    footer: str = '<a href="https://codeberg.org/bzg/topics">Topics</a>'
    source_url: str | None = None
    lang: str = "en"
    base_path: str = ""
    css_href: str | None = None

    def url(self, path: str = "/") -> str:
        """Prefix an absolute site path with the deployment base path."""
        return f"{self.base_path}{path}"


class Settings(BaseSettings):
    """Typed application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="TOPICS_", case_sensitive=False, extra="ignore"
    )

    source: str | None = Field(default=None, description="Path or URL of the topics file")
    format: str = Field("auto", description="auto, json, yaml, markdown or html")
    tree_depth: int | None = Field(default=None, ge=1, description="Forced document depth")
    title: str = "Topics"
    tagline: str = "Topics to explore"
    footer: str = '<a href="https://codeberg.org/bzg/topics">Topics</a>'
    source_url: str | None = None
    lang: str = "en"
    base_path: str = ""
    css: Path | None = None
    config_file: Path | None = None
    request_timeout: float = Field(20.0, gt=0)
    output: Path = Field(default_factory=lambda: Path("index.html"))
    host: str = "127.0.0.1"
    port: int = 8080

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        value = value.lower()
        if value not in SUPPORTED_FORMATS:
            raise ValueError(f"unsupported format: {value}")
        return value

    @field_validator("base_path")
    @classmethod
    def _strip_base_path(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    @property
    def ui_lang(self) -> str:
        """Configured language, falling back to English when unsupported."""
        lang = (self.lang or "").lower()
        if lang not in SUPPORTED_LANGS:
            logger.warning("Unsupported lang %r, defaulting to en", self.lang)
            return "en"
        return lang

    def site_config(self, css_href: str | None = None) -> SiteConfig:
        """Freeze the rendering-relevant values into a SiteConfig."""
        if css_href is None and self.css is not None:
            css_href = "custom.css"
        return SiteConfig(
            title=self.title,
            tagline=self.tagline,
            footer=self.footer,
            source_url=self.source_url,
            lang=self.ui_lang,
            base_path=self.base_path,
            css_href=css_href,
        )


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML, JSON or EDN config file and keep only the known keys.

    Kebab-case keys such as `base-path` are accepted for their snake_case names.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read configuration file {path}: {exc}") from exc
    try:
        suffix = path.suffix.lower()
        if suffix == ".json":
            data = json.loads(text)
        elif suffix == ".edn":
            data = read_edn(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError, EDNDecodeError) as exc:
        raise ConfigurationError(f"Failed to parse configuration file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    data = {str(key).replace("-", "_"): value for key, value in data.items()}

    unknown = sorted(str(key) for key in data if key not in CONFIG_FILE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
    return {key: data[key] for key in CONFIG_FILE_KEYS if key in data}


def build_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Merge defaults/env, then the config file, then explicit overrides."""
    explicit = {key: value for key, value in (overrides or {}).items() if value is not None}
    try:
        base = Settings(**explicit)
        if base.config_file is None:
            return base
        merged = {**load_config_file(base.config_file), **explicit}
        return Settings(**merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return build_settings()

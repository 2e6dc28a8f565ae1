"""Error taxonomy for loading and serving topics."""

from __future__ import annotations

from typing import Any


class TopicsError(Exception):
    """Base class for all topics errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LoadError(TopicsError):
    """Raised when the topics source cannot be fetched, parsed or understood."""


class ConfigurationError(TopicsError):
    pass


class QueryDecodeError(TopicsError):
    """Raised when a query-string parameter is not valid percent-encoded UTF-8."""


class TopicNotFound(TopicsError):
    pass

"""EDN documents read into the plain values JSON and YAML parsing produce."""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

import edn_format


def to_plain(value: Any) -> Any:
    """Keywords and symbols become their names; EDN collections become dicts and lists."""
    if isinstance(value, (edn_format.Keyword, edn_format.Symbol)):
        return value.name
    if isinstance(value, Mapping):
        return {str(to_plain(key)): to_plain(item) for key, item in value.items()}
    if isinstance(value, (edn_format.ImmutableList, list, tuple, Set)):
        return [to_plain(item) for item in value]
    return value


def read_edn(text: str) -> Any:
    return to_plain(edn_format.loads(text))

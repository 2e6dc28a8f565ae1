"""Text normalization helpers shared by search, categories and anchors.

The tables below are closed: the static site embeds them verbatim in its data
payload so the browser folds text exactly like the server does.
"""

from __future__ import annotations

import re
from typing import Final

TAG_PATTERN: Final = re.compile(r"<[^>]*>")
ENTITY_PATTERN: Final = re.compile(r"&(nbsp|lt|gt|amp|quot|apos);")
SPACE_RUN_PATTERN: Final = re.compile(r" {2,}")
NON_ALNUM_PATTERN: Final = re.compile(r"[^a-z0-9]+")

ENTITIES: Final[dict[str, str]] = {
    "nbsp": " ",
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}

FOLD_TABLE: Final[dict[str, str]] = {
    **dict.fromkeys("àáâãäåāăą", "a"),
    "æ": "ae",
    **dict.fromkeys("çćĉċč", "c"),
    **dict.fromkeys("ďđð", "d"),
    **dict.fromkeys("èéêëēĕėęě", "e"),
    **dict.fromkeys("ĝğġģ", "g"),
    **dict.fromkeys("ĥħ", "h"),
    **dict.fromkeys("ìíîïĩīĭįı", "i"),
    "ĵ": "j",
    "ķ": "k",
    **dict.fromkeys("ĺļľŀł", "l"),
    **dict.fromkeys("ñńņň", "n"),
    **dict.fromkeys("òóôõöøōŏő", "o"),
    "œ": "oe",
    **dict.fromkeys("ŕŗř", "r"),
    **dict.fromkeys("śŝşš", "s"),
    "ß": "ss",
    "ς": "σ",
    **dict.fromkeys("ţťŧ", "t"),
    **dict.fromkeys("ùúûüũūŭůűų", "u"),
    "ŵ": "w",
    **dict.fromkeys("ýÿŷ", "y"),
    **dict.fromkeys("źżž", "z"),
}

# Replaced by a space before whitespace is collapsed. `<`, `>`, `&` and `;`
# must stay in this set or normalize() stops being idempotent.
PUNCTUATION: Final[str] = ".,;:!?¡¿'\"‘’“”«»()[]{}<>…–—-_/\\|*~&`"

# Replaced by a space before runs of spaces are collapsed. The union of what
# Python's and JavaScript's `\s` accept, so both surfaces split words alike.
WHITESPACE: Final[str] = (
    "\t\n\v\f\r\x1c\x1d\x1e\x1f \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)

# Stripped from user queries before normalization.
QUERY_UNSAFE: Final[str] = "<>\"'\\`"

_FOLD = str.maketrans(FOLD_TABLE)
_SEPARATORS = str.maketrans(dict.fromkeys(PUNCTUATION + WHITESPACE, " "))
_UNSAFE = str.maketrans(dict.fromkeys(QUERY_UNSAFE, None))


def strip_html(text: str) -> str:
    """Drop markup and decode the fixed entity set."""
    without_tags = TAG_PATTERN.sub(" ", text)
    return ENTITY_PATTERN.sub(lambda match: ENTITIES[match.group(1)], without_tags)


def fold_diacritics(text: str) -> str:
    return text.translate(_FOLD)


def normalize(text: str | None, *, html: bool = False) -> str:
    """Case-fold, strip diacritics and punctuation, collapse whitespace.

    Pass ``html=True`` for content bodies so tags and entities are removed
    first; titles and categories are markup-free.
    """
    cleaned = text or ""
    if html:
        cleaned = strip_html(cleaned)
    cleaned = fold_diacritics(cleaned.lower())
    cleaned = cleaned.translate(_SEPARATORS)
    return SPACE_RUN_PATTERN.sub(" ", cleaned).strip(" ")


def sanitize_query(query: str | None) -> str:
    """Remove characters that could inject markup when a query is echoed back."""
    return (query or "").translate(_UNSAFE).strip(WHITESPACE)


def prepare_query(query: str | None) -> str:
    """Sanitize then normalize a user-supplied search string."""
    return normalize(sanitize_query(query))


def slugify(text: str | None) -> str:
    """Anchor slug: lower-case, folded, non-alphanumerics collapsed to hyphens."""
    folded = fold_diacritics((text or "").lower())
    return NON_ALNUM_PATTERN.sub("-", folded).strip("-")


def normalization_tables() -> dict[str, object]:
    """Tables the browser program needs to reproduce normalize() and slugify()."""
    return {
        "fold": dict(FOLD_TABLE),
        "punctuation": PUNCTUATION,
        "entities": dict(ENTITIES),
        "queryUnsafe": QUERY_UNSAFE,
        "whitespace": WHITESPACE,
    }

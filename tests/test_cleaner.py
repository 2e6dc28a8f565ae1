import json
from pathlib import Path

import pytest

from topics.services.kb.cleaner import (
    FOLD_TABLE,
    PUNCTUATION,
    WHITESPACE,
    normalization_tables,
    normalize,
    prepare_query,
    sanitize_query,
    slugify,
    strip_html,
)

FIXTURES = Path(__file__).parent / "fixtures"
VECTORS = json.loads((FIXTURES / "normalize_vectors.json").read_text(encoding="utf-8"))


@pytest.mark.parametrize("case", VECTORS["normalize"], ids=lambda c: c["input"])
def test_normalize_golden_vectors(case: dict) -> None:
    assert normalize(case["input"], html=case["html"]) == case["expected"]


@pytest.mark.parametrize("case", VECTORS["slugify"], ids=lambda c: c["input"])
def test_slugify_golden_vectors(case: dict) -> None:
    assert slugify(case["input"]) == case["expected"]


@pytest.mark.parametrize("case", VECTORS["sanitize"], ids=lambda c: c["input"])
def test_sanitize_golden_vectors(case: dict) -> None:
    assert sanitize_query(case["input"]) == case["expected"]


@pytest.mark.parametrize(
    "text",
    [
        "Déjà vu &amp;lt;b&amp;gt;",
        "<p>a &lt; b &gt; c</p>",
        "ŒUVRE  Æ  ß",
        "İstanbul",
        "tab\tand\nnewline",
        "",
    ],
)
def test_normalize_is_idempotent(text: str) -> None:
    for html in (False, True):
        once = normalize(text, html=html)
        assert normalize(once, html=html) == once
        assert normalize(once) == once


@pytest.mark.parametrize("text", ["Café au lait", "--x--", "Ünïcödé Tïtle 2", "", "日本"])
def test_slugify_is_idempotent(text: str) -> None:
    assert slugify(slugify(text)) == slugify(text)


def test_strip_html_decodes_only_fixed_entities() -> None:
    assert strip_html("<i>x</i>&amp;&eacute;") == " x &&eacute;"


def test_normalize_handles_none() -> None:
    assert normalize(None) == ""
    assert sanitize_query(None) == ""


def test_prepare_query_sanitizes_before_normalizing() -> None:
    assert prepare_query('  "CAFÉ" <b> ') == "cafe b"


def test_fold_table_maps_latin_to_ascii() -> None:
    latin = {key: value for key, value in FOLD_TABLE.items() if key != "ς"}
    assert all(value.isascii() and value.islower() for value in latin.values())
    assert all(key == key.lower() for key in FOLD_TABLE)
    assert FOLD_TABLE["ς"] == "σ"


@pytest.mark.parametrize("char", ["\x1c", "\x1f", "\x85", "\u2003", "\u3000", "\ufeff"])
def test_whitespace_table_separates_words(char: str) -> None:
    assert char in WHITESPACE
    assert normalize(f"foo{char}bar") == "foo bar"
    assert normalize(f"<p>foo{char}{char}bar</p>", html=True) == "foo bar"


def test_final_sigma_matches_medial_sigma() -> None:
    assert normalize("ΟΔΟΣ") == normalize("οδοσ") == "οδοσ"
    assert normalize("οδος") == "οδοσ"


def test_normalization_tables_are_copies() -> None:
    tables = normalization_tables()
    assert tables["punctuation"] == PUNCTUATION
    assert tables["whitespace"] == WHITESPACE
    assert tables["fold"]["é"] == "e"
    tables["fold"]["é"] = "x"
    assert FOLD_TABLE["é"] == "e"

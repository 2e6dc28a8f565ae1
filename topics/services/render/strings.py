"""Localized UI strings and Accept-Language negotiation."""

from __future__ import annotations

import re
from typing import Dict

UI_STRINGS: Dict[str, Dict[str, str]] = {
    "fr": {
        "search_placeholder": "Rechercher",
        "clear_search": "Effacer la recherche",
        "no_search_results": (
            "Aucun résultat ne correspond à votre recherche. Essayez avec d'autres termes."
        ),
        "no_category_results": "Aucun résultat trouvé dans cette catégorie.",
        "topics_count": "sujets",
        "content_source": "Source des contenus",
        "skip_to_content": "Passer au contenu",
        "all_categories": "Toutes les catégories",
        "uncategorized": "Autres sujets",
        "not_found_title": "Page introuvable",
        "not_found": "La page demandée n'existe pas.",
        "error_title": "Erreur",
        "back_home": "Retour à l'accueil",
    },
    "en": {
        "search_placeholder": "Search",
        "clear_search": "Clear search",
        "no_search_results": "No results match your search. Try with other terms.",
        "no_category_results": "No results found in this category.",
        "topics_count": "topics",
        "content_source": "Content source",
        "skip_to_content": "Skip to content",
        "all_categories": "All categories",
        "uncategorized": "Other topics",
        "not_found_title": "Page not found",
        "not_found": "The requested page does not exist.",
        "error_title": "Error",
        "back_home": "Back to home",
    },
}

# Keys the browser program needs at runtime.
CLIENT_KEYS = (
    "no_search_results",
    "no_category_results",
    "topics_count",
    "all_categories",
    "uncategorized",
)

_LANG_RANGE = re.compile(
    r"^\s*([A-Za-z]{1,8})(?:-[A-Za-z0-9]{1,8})*\s*(?:;\s*q\s*=\s*([0-9.]+))?\s*$"
)


def strings_for(lang: str) -> Dict[str, str]:
    return UI_STRINGS.get(lang, UI_STRINGS["en"])


def client_strings(lang: str) -> Dict[str, str]:
    strings = strings_for(lang)
    return {key: strings[key] for key in CLIENT_KEYS}


def negotiate_lang(header: str | None, default: str = "en") -> str:
    """Highest-quality supported language from an Accept-Language header."""
    if not header:
        return default
    ranked = []
    for position, item in enumerate(header.split(",")):
        match = _LANG_RANGE.match(item)
        if not match:
            continue
        try:
            quality = float(match.group(2)) if match.group(2) else 1.0
        except ValueError:
            continue
        ranked.append((-quality, position, match.group(1).lower()))
    for quality, _, lang in sorted(ranked):
        if quality < 0 and lang in UI_STRINGS:
            return lang
    return default

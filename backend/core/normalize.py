"""
Exercise name normalization.

- normalize_for_cache: cache key form ("Barbell Back-Squat " -> "barbell_back_squat")
- normalize_for_slug: catalog slug form ("Barbell Back Squat" -> "barbell-back-squat")
- normalize: matching form with abbreviations expanded and plurals folded
  ("DB Bench Presses" -> "dumbbell bench press")
"""
import pathlib
import re
from functools import lru_cache
from typing import Any, Dict

import yaml

ROOT = pathlib.Path(__file__).resolve().parents[2]
DICTIONARY_PATH = ROOT / "shared/dictionaries/exercise_normalization.yaml"

_CACHE_SEPARATORS = re.compile(r"[\W_]+")
_SLUG_WHITESPACE = re.compile(r"\s+")
_SLUG_INVALID = re.compile(r"[^a-z0-9-]")


@lru_cache
def _dictionary() -> Dict[str, Any]:
    return yaml.safe_load(DICTIONARY_PATH.read_text())


def normalize_for_cache(name: str) -> str:
    """
    Case-fold and collapse punctuation/whitespace runs to single underscores.

    Examples:
        >>> normalize_for_cache("  Barbell Back-Squat ")
        'barbell_back_squat'
        >>> normalize_for_cache("Farmer's  Walk")
        'farmer_s_walk'
    """
    collapsed = _CACHE_SEPARATORS.sub("_", name.strip().lower())
    return collapsed.strip("_")


def normalize_for_slug(name: str) -> str:
    """
    Build a URL-safe slug.

    Examples:
        >>> normalize_for_slug("Barbell Back Squat")
        'barbell-back-squat'
        >>> normalize_for_slug("Farmer's Walk")
        'farmers-walk'
    """
    slug = _SLUG_WHITESPACE.sub("-", name.strip().lower())
    return _SLUG_INVALID.sub("", slug)


def normalize(text: str) -> str:
    """Normalize an exercise name for fuzzy matching."""
    dictionary = _dictionary()
    t = text.lower()
    t = re.sub(r"[-_/]", " ", t)
    t = re.sub(r"[^\w\s]", "", t)
    stopwords = set(dictionary["stopwords"])
    words = []
    for word in t.split():
        word = dictionary["expand"].get(word, word)
        word = dictionary["plural_to_singular"].get(word, word)
        if word not in stopwords:
            words.append(word)
    return " ".join(words).strip()

from __future__ import annotations

import re
import unicodedata

_NON_ALLOWED = re.compile(r"[^a-z0-9\-]+")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")
# NFKD leaves the Turkish dotless i intact.
_TRANSLITERATE = str.maketrans({"ı": "i", "İ": "I"})

DEFAULT_PRODUCT_SLUG = "urun"
MAX_SLUG_SUFFIX = 10


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def fold_text(value: str) -> str:
    """Accent-free spelling used for slugs and for collation."""
    return strip_diacritics(value.translate(_TRANSLITERATE))


def to_slug(value: str) -> str:
    ascii_value = fold_text(value).lower().strip()
    slug = _WHITESPACE.sub("-", ascii_value)
    slug = _NON_ALLOWED.sub("-", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def slug_candidates(base: str, max_suffix: int = MAX_SLUG_SUFFIX) -> list[str]:
    """Base slug followed by numbered variants ``base-2`` .. ``base-{max_suffix}``."""
    return [base] + [f"{base}-{index}" for index in range(2, max_suffix + 1)]


def _upper_first(word: str) -> str:
    # Turkish dotted/dotless i do not round-trip through str.upper().
    first = word[0]
    if first == "i":
        head = "İ"
    elif first == "ı":
        head = "I"
    else:
        head = first.upper()
    return head + word[1:]


def capitalize_words(value: str | None) -> str:
    if not value:
        return ""
    return " ".join(_upper_first(word) for word in value.strip().split())

"""
Slug helpers for entry paths.

normalize_slug() cleans a slug the model proposed; slugify() derives one from
an arbitrary display name (used by the in-memory store).
"""

import re
import unicodedata

_NON_SLUG = re.compile(r"[^a-z0-9-]+")
_DASH_RUN = re.compile(r"-+")

_ASCII_FOLDS = {"æ": "ae", "œ": "oe", "ø": "o", "ß": "ss", "ð": "d", "þ": "th"}


def normalize_slug(slug: str) -> str:
    """Lower-case, collapse non [a-z0-9-] runs to '-', trim edge dashes.

    Idempotent: normalize_slug(normalize_slug(s)) == normalize_slug(s).
    """
    value = _NON_SLUG.sub("-", slug.lower())
    value = _DASH_RUN.sub("-", value)
    return value.strip("-")


def slugify(name: str, max_length: int = 50) -> str:
    """Build a URL-safe slug from a display name."""
    if not name:
        return ""
    text = name.lower()
    for char, replacement in _ASCII_FOLDS.items():
        text = text.replace(char, replacement)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    slug = normalize_slug(text)
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug

"""Tag normalisation helpers shared by the schemas and the extractors."""

from __future__ import annotations

import re
from typing import Iterable

_UNSAFE_RE = re.compile(r"[^\w\s-]")
_SEPARATOR_RE = re.compile(r"[\s_-]+")


def canonical_tag(term: str | None) -> str:
    """Return the lower-kebab-case form of *term*.

    >>> canonical_tag("Infrastructure Credit")
    'infrastructure-credit'
    >>> canonical_tag("  Private_Equity ")
    'private-equity'
    """
    if not term:
        return ""
    tag = _UNSAFE_RE.sub("", term.strip().lower())
    tag = _SEPARATOR_RE.sub("-", tag)
    return tag.strip("-")


def canonical_tags(terms: Iterable[str | None]) -> list[str]:
    """Canonicalise, drop blanks and de-duplicate, sorted for stable output."""
    return sorted({tag for tag in (canonical_tag(term) for term in terms) if tag})

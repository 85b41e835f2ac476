# scripts/utils/slug.py
import re
from typing import Container

UMLAUTS = {"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"}

_umlaut_re = re.compile("[" + "".join(UMLAUTS) + "]")
_non_alnum_re = re.compile(r"[^a-z0-9]+")


def slugify(s: str) -> str:
    s = (s or "").lower()
    s = _umlaut_re.sub(lambda m: UMLAUTS[m.group(0)], s)
    s = _non_alnum_re.sub("-", s)
    return re.sub(r"(^-|-$)", "", s)


def unique_slug(slug: str, taken: Container[str]) -> str:
    """First of ``slug``, ``slug-2``, ``slug-3`` ... not in ``taken``."""
    if slug not in taken:
        return slug
    n = 2
    while f"{slug}-{n}" in taken:
        n += 1
    return f"{slug}-{n}"


__all__ = ["slugify", "unique_slug"]

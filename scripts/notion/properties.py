# scripts/notion/properties.py
#
# Readers for Notion page property values. Every reader accepts the raw
# property object (or None) and returns None when the shape is not what it
# expects, so callers can fall back to their own defaults.
from typing import Any, List, Optional

Prop = Optional[Any]


def _first(seq) -> Optional[dict]:
    if isinstance(seq, list) and seq and isinstance(seq[0], dict):
        return seq[0]
    return None


def plain_text(prop: Prop) -> Optional[str]:
    """Text of a ``title`` or ``rich_text`` property, fragments joined."""
    if not isinstance(prop, dict):
        return None
    fragments = prop.get("title")
    if fragments is None:
        fragments = prop.get("rich_text")
    if not isinstance(fragments, list):
        return None
    text = "".join(f.get("plain_text") or "" for f in fragments if isinstance(f, dict))
    return text or None


def select_name(prop: Prop) -> Optional[str]:
    if not isinstance(prop, dict) or not isinstance(prop.get("select"), dict):
        return None
    return prop["select"].get("name") or None


def checkbox(prop: Prop) -> bool:
    return isinstance(prop, dict) and prop.get("checkbox") is True


def date_start(prop: Prop) -> Optional[str]:
    if not isinstance(prop, dict) or not isinstance(prop.get("date"), dict):
        return None
    start = prop["date"].get("start")
    return start if isinstance(start, str) and start else None


def people_names(prop: Prop) -> List[str]:
    if not isinstance(prop, dict) or not isinstance(prop.get("people"), list):
        return []
    return [p["name"] for p in prop["people"] if isinstance(p, dict) and p.get("name")]


def file_url(prop: Prop) -> Optional[str]:
    """
    URL of the first attachment of a ``files`` property.

    Uploaded files carry a time-limited ``file.url``; external references
    carry ``external.url``.
    """
    if not isinstance(prop, dict):
        return None
    f = _first(prop.get("files"))
    if f is None:
        return None
    kind = f.get("type")
    if kind not in ("file", "external") or not isinstance(f.get(kind), dict):
        return None
    return f[kind].get("url") or None


__all__ = ["checkbox", "date_start", "file_url", "people_names", "plain_text", "select_name"]

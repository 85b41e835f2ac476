# scripts/news/articles.py
"""
News articles from the Notion database, shaped for the page templates.

All variants of the news listing (home teaser, archive, category pages,
article page) go through ``shape_record``; they differ only in the
FieldMapping they pass.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from scripts.notion.client import NotionClient, date_sort, published_filter
from scripts.notion.properties import checkbox, date_start, file_url, people_names, plain_text, select_name
from scripts.utils.env import IMAGE_MAP_PATH, SITE_AUTHOR
from scripts.utils.log import get_logger
from scripts.utils.slug import slugify

log = get_logger(__name__)

DATE_PLACEHOLDER = "Datum unbekannt"

MONTHS_DE = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]


@dataclass(frozen=True)
class FieldMapping:
    """Notion property names and the defaults used when a property is empty."""
    title: str = "Titel"
    published: str = "Veröffentlicht"
    date: str = "Datum"
    excerpt: str = "Kurztext"
    content: str = "Inhalt"
    image: str = "Bild"
    category: str = "Kategorie"
    author: str = "Autor"
    default_title: str = "Ohne Titel"
    default_category: str = "Verein"
    default_author: str = SITE_AUTHOR


@dataclass
class Article:
    id: str
    slug: str
    title: str
    excerpt: str
    content: str
    image: Optional[str]
    category: str
    author: str
    date: str
    published: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_image_map(path: Path = IMAGE_MAP_PATH) -> Dict[str, str]:
    """page id -> local image path, as written by download_images; {} if unavailable."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        log.warning("Image-Map nicht gefunden, verwende Notion-URLs als Fallback")
        return {}
    except (OSError, ValueError) as e:
        log.warning(f"Image-Map nicht lesbar ({e}), verwende Notion-URLs als Fallback")
        return {}
    if not isinstance(data, dict):
        log.warning("Image-Map hat ein unerwartetes Format, verwende Notion-URLs als Fallback")
        return {}
    log.info(f"Image-Map geladen: {len(data)} Bilder")
    return {str(k): v for k, v in data.items() if isinstance(v, str) and v}


def _author(prop: Any, default: str) -> str:
    names = people_names(prop)
    if names:
        return ", ".join(names)
    return plain_text(prop) or default


def shape_record(page: Mapping[str, Any], image_map: Optional[Mapping[str, str]] = None,
                 mapping: FieldMapping = FieldMapping()) -> Article:
    props = page.get("properties")
    if not isinstance(props, dict):
        props = {}
    page_id = str(page.get("id") or "")
    title = plain_text(props.get(mapping.title)) or mapping.default_title

    # local copy first, Notion's (expiring) file URL second
    image = (image_map or {}).get(page_id) or file_url(props.get(mapping.image))

    return Article(
        id=page_id,
        slug=slugify(title),
        title=title,
        excerpt=plain_text(props.get(mapping.excerpt)) or "",
        content=plain_text(props.get(mapping.content)) or "",
        image=image,
        category=select_name(props.get(mapping.category)) or mapping.default_category,
        author=_author(props.get(mapping.author), mapping.default_author),
        date=date_start(props.get(mapping.date)) or "",
        published=checkbox(props.get(mapping.published)),
    )


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(value: Optional[str]) -> str:
    """'2024-03-05' -> '05. März 2024'; anything unparsable -> DATE_PLACEHOLDER."""
    d = parse_date(value)
    if d is None:
        return DATE_PLACEHOLDER
    return f"{d.day:02d}. {MONTHS_DE[d.month - 1]} {d.year}"


class NewsRepository:
    """
    Read access to published news.

    Nothing is cached between calls: every lookup queries Notion again and
    filters the fresh list.
    """

    def __init__(self, client: NotionClient, image_map: Optional[Mapping[str, str]] = None,
                 mapping: FieldMapping = FieldMapping()):
        self.client = client
        self.image_map = load_image_map() if image_map is None else dict(image_map)
        self.mapping = mapping

    def list_published(self) -> List[Article]:
        pages = self.client.query_database(
            filter=published_filter(self.mapping.published),
            sorts=[date_sort(self.mapping.date)],
        )
        return [shape_record(p, self.image_map, self.mapping) for p in pages]

    def get_by_slug(self, slug: str) -> Optional[Article]:
        return next((a for a in self.list_published() if a.slug == slug), None)

    def list_by_category(self, category: str) -> List[Article]:
        return [a for a in self.list_published() if a.category == category]


__all__ = [
    "Article", "DATE_PLACEHOLDER", "FieldMapping", "NewsRepository",
    "format_date", "load_image_map", "parse_date", "shape_record",
]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Write the published news as JSON for the page templates.

Output: list of articles (id, slug, title, excerpt, content, image, category,
author, date, published) plus a ready-to-print German ``dateDisplay``.
"""

import argparse
import json
from pathlib import Path
from typing import List, Optional

from scripts.news.articles import Article, NewsRepository, format_date, load_image_map
from scripts.notion.client import NotionClient
from scripts.utils.env import IMAGE_MAP_PATH, NEWS_JSON_PATH
from scripts.utils.errors import NotionError
from scripts.utils.log import get_logger

log = get_logger(__name__)


def to_template_rows(articles: List[Article]) -> List[dict]:
    rows = []
    for a in articles:
        row = a.to_dict()
        row["dateDisplay"] = format_date(a.date)
        rows.append(row)
    return rows


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Export published Notion news to JSON.")
    ap.add_argument("--out", default=str(NEWS_JSON_PATH), help="Output JSON (default: src/data/news.json)")
    ap.add_argument("--map", default=str(IMAGE_MAP_PATH), help="Image map written by download_images")
    ap.add_argument("--category", default="", help="Only export this category")
    args = ap.parse_args(argv)

    repo = NewsRepository(NotionClient.from_env(), image_map=load_image_map(Path(args.map)))
    try:
        articles = repo.list_by_category(args.category) if args.category else repo.list_published()
    except NotionError as e:
        log.error(f"Notion-Abfrage fehlgeschlagen: {e}")
        return 1

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(to_template_rows(articles), indent=2, ensure_ascii=False), encoding="utf-8")
    log.info(f"{len(articles)} Artikel geschrieben: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

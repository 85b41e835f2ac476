#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Download the images of all published Notion news entries before the build.

Each image lands in public/images/news/<slug><ext>; the mapping
page id -> /images/news/<file> is written to src/data/image-map.json so the
news pages can use the local copy instead of Notion's expiring file URLs.
"""

from __future__ import annotations

import argparse
import json
import re
from pathlib import Path
from typing import Dict, List, Optional

import requests

from scripts.news.articles import FieldMapping
from scripts.notion.client import NotionClient, published_filter
from scripts.notion.properties import file_url, plain_text
from scripts.utils.env import HTTP_TIMEOUT, IMAGE_MAP_PATH, NEWS_IMAGE_URL_PREFIX, NEWS_IMAGES_DIR
from scripts.utils.errors import NotionError, SiteScriptsError
from scripts.utils.http import RetryPolicy, download_image, make_session
from scripts.utils.log import get_logger
from scripts.utils.slug import slugify, unique_slug

log = get_logger(__name__)

_ext_re = re.compile(r"\.(jpg|jpeg|png|gif|webp|avif)", re.IGNORECASE)


def image_extension(url: str) -> str:
    m = _ext_re.search(url or "")
    return m.group(0).lower() if m else ".jpg"


def write_image_map(image_map: Dict[str, str], map_path: Path):
    map_path.parent.mkdir(parents=True, exist_ok=True)
    map_path.write_text(json.dumps(image_map, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info(f"Image-Map gespeichert: {map_path} ({len(image_map)} Bilder)")


def run(client: NotionClient,
        image_dir: Path = NEWS_IMAGES_DIR,
        map_path: Path = IMAGE_MAP_PATH,
        session: Optional[requests.Session] = None,
        retry: RetryPolicy = RetryPolicy(),
        timeout: float = HTTP_TIMEOUT,
        url_prefix: str = NEWS_IMAGE_URL_PREFIX,
        mapping: FieldMapping = FieldMapping()) -> Dict[str, str]:
    """
    Mirror every published entry's image to ``image_dir``.

    A failed download is logged and the entry left out of the map; the page
    then falls back to the remote URL. Raises NotionError if the database
    query itself fails, in which case the map file is left untouched.
    """
    session = session or make_session()
    if not image_dir.exists():
        image_dir.mkdir(parents=True, exist_ok=True)
        log.info(f"Ordner erstellt: {image_dir}")

    pages = client.query_database(filter=published_filter(mapping.published))
    log.info(f"{len(pages)} veröffentlichte Artikel gefunden")

    image_map: Dict[str, str] = {}
    used: List[str] = []
    for page in pages:
        props = page.get("properties") or {}
        title = plain_text(props.get(mapping.title)) or mapping.default_title
        image_url = file_url(props.get(mapping.image))
        if not image_url:
            log.info(f"Übersprungen (kein Bild): {title}")
            continue

        slug = slugify(title) or "bild"
        stem = unique_slug(slug, used)
        if stem != slug:
            log.warning(f"Slug '{slug}' doppelt vergeben, speichere als '{stem}'")
        filename = f"{stem}{image_extension(image_url)}"
        dest = image_dir / filename

        try:
            log.info(f"Lade: {title}")
            retry.call(lambda: download_image(session, image_url, dest, timeout=timeout))
        except (SiteScriptsError, OSError) as e:
            log.error(f"Fehler bei {title}: {e}")
            continue

        used.append(stem)
        image_map[page["id"]] = f"{url_prefix}/{filename}"
        log.info(f"Gespeichert: {filename}")

    write_image_map(image_map, map_path)
    return image_map


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Download Notion news images and write image-map.json.")
    ap.add_argument("--out-dir", type=Path, default=NEWS_IMAGES_DIR,
                    help="Target directory (default: public/images/news)")
    ap.add_argument("--map", type=Path, default=IMAGE_MAP_PATH,
                    help="Image map JSON (default: src/data/image-map.json)")
    ap.add_argument("--retries", type=int, default=1,
                    help="Attempts per image (default: 1, no retry)")
    ap.add_argument("--timeout", type=float, default=HTTP_TIMEOUT,
                    help="Per-request timeout in seconds")
    args = ap.parse_args(argv)

    client = NotionClient.from_env()
    log.info("Starte Download der Notion-Bilder...")
    try:
        run(client, image_dir=args.out_dir, map_path=args.map,
            retry=RetryPolicy(attempts=args.retries), timeout=args.timeout)
    except NotionError as e:
        log.error(f"Notion-Abfrage fehlgeschlagen: {e}")
        return 0
    log.info("Download abgeschlossen!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

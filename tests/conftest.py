"""
Shared test fixtures for the build scripts.

Fixtures include Notion page factories, a Pillow image factory writing into
tmp_path, and fake HTTP responses for the downloader.
"""

import os
import sys
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from PIL import Image

# Add repository root to path so the ``scripts`` namespace package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Notion Fixtures
# =============================================================================

def rich_text(*fragments: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "plain_text": f} for f in fragments]


def notion_page(page_id: str = "page-1",
                title: Optional[str] = "Vereinsfeier am Sonntag!",
                published: bool = True,
                date: Optional[str] = "2024-03-05",
                category: Optional[str] = "Jugend",
                excerpt: Optional[str] = "Kurz gesagt",
                content: Optional[str] = "Der ganze Text",
                author: Optional[str] = "Max Mustermann",
                file_url: Optional[str] = None,
                external_url: Optional[str] = None) -> Dict[str, Any]:
    """Build a page object shaped like the Notion database query results."""
    files = []
    if file_url:
        files.append({"name": "bild", "type": "file", "file": {"url": file_url, "expiry_time": "2024-03-05T12:00:00.000Z"}})
    if external_url:
        files.append({"name": "bild", "type": "external", "external": {"url": external_url}})

    props: Dict[str, Any] = {
        "Veröffentlicht": {"type": "checkbox", "checkbox": published},
        "Bild": {"type": "files", "files": files},
    }
    if title is not None:
        props["Titel"] = {"type": "title", "title": rich_text(title)}
    if date is not None:
        props["Datum"] = {"type": "date", "date": {"start": date, "end": None}}
    if category is not None:
        props["Kategorie"] = {"type": "select", "select": {"name": category}}
    if excerpt is not None:
        props["Kurztext"] = {"type": "rich_text", "rich_text": rich_text(excerpt)}
    if content is not None:
        props["Inhalt"] = {"type": "rich_text", "rich_text": rich_text(content)}
    if author is not None:
        props["Autor"] = {"type": "rich_text", "rich_text": rich_text(author)}
    return {"object": "page", "id": page_id, "properties": props}


@pytest.fixture
def make_page():
    """Factory fixture returning notion_page()."""
    return notion_page


@pytest.fixture
def fake_client():
    """
    Stand-in for NotionClient.

    Usage:
        def test_x(fake_client, make_page):
            fake_client.query_database.return_value = [make_page()]
    """
    client = MagicMock()
    client.query_database.return_value = []
    return client


# =============================================================================
# HTTP Fixtures
# =============================================================================

def http_response(status: int = 200, body: bytes = b"", headers: Optional[Dict[str, str]] = None):
    r = MagicMock()
    r.status_code = status
    r.headers = headers or {}
    r.iter_content.return_value = [body] if body else []
    return r


@pytest.fixture
def make_response():
    return http_response


# =============================================================================
# Image Fixtures
# =============================================================================

def write_image(path, width: int, height: int = 40, fmt: Optional[str] = None, **save_kwargs):
    """
    Write a noisy test image; noise keeps encoders from producing tiny files.

    Returns the path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.effect_noise((width, height), 64).convert("RGB")
    fmt = fmt or {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG", ".webp": "WEBP"}[path.suffix.lower()]
    img.save(path, format=fmt, **save_kwargs)
    return path


@pytest.fixture
def make_image():
    return write_image

# scripts/notion/client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from scripts.utils.env import HTTP_TIMEOUT, NOTION_VERSION, require_notion_config
from scripts.utils.errors import NotionError
from scripts.utils.http import make_session
from scripts.utils.log import get_logger

log = get_logger(__name__)

API_BASE = "https://api.notion.com/v1"
PAGE_SIZE = 100


def published_filter(prop: str) -> Dict[str, Any]:
    return {"property": prop, "checkbox": {"equals": True}}


def date_sort(prop: str, direction: str = "descending") -> Dict[str, Any]:
    return {"property": prop, "direction": direction}


class NotionClient:
    """Just enough of the Notion REST API to read one database."""

    def __init__(self, api_key: str, database_id: str,
                 session: Optional[requests.Session] = None, timeout: float = HTTP_TIMEOUT):
        self.database_id = database_id
        self.timeout = timeout
        self.session = session or make_session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        })

    @classmethod
    def from_env(cls, session: Optional[requests.Session] = None) -> "NotionClient":
        api_key, database_id = require_notion_config()
        return cls(api_key, database_id, session=session)

    def query_database(self, filter: Optional[Dict[str, Any]] = None,
                       sorts: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        """
        All pages matching ``filter``, in ``sorts`` order.

        Follows ``has_more``/``next_cursor`` until the result set is exhausted.
        """
        url = f"{API_BASE}/databases/{self.database_id}/query"
        body: Dict[str, Any] = {"page_size": PAGE_SIZE}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts

        pages: List[Dict[str, Any]] = []
        while True:
            try:
                r = self.session.post(url, json=body, timeout=self.timeout)
            except requests.RequestException as e:
                raise NotionError(f"Notion nicht erreichbar: {e}") from e
            if r.status_code != 200:
                try:
                    message = r.json().get("message", "")
                except ValueError:
                    message = r.text[:200]
                raise NotionError(f"Notion query failed ({r.status_code}): {message}")

            try:
                data = r.json()
            except ValueError as e:
                raise NotionError(f"Notion lieferte kein JSON: {e}") from e
            if not isinstance(data, dict):
                raise NotionError(f"Unerwartete Notion-Antwort: {type(data).__name__}")
            pages.extend(data.get("results") or [])
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break
            body = dict(body, start_cursor=cursor)

        log.debug(f"Notion: {len(pages)} Seiten aus {self.database_id}")
        return pages

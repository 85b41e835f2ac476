import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from scripts.utils.log import get_logger

log = get_logger(__name__)

ROOT = Path(__file__).resolve().parents[2]   # scripts/utils/ under repo root

# Load .env if present (local runs). On Netlify, variables come from the site settings.
load_dotenv(dotenv_path=ROOT / ".env")


NOTION_VERSION = os.getenv("NOTION_VERSION", "2022-06-28")

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))
SITE_AUTHOR = os.getenv("SITE_AUTHOR", "SV Staden")


# ---------- Paths ----------
PUBLIC_IMAGES_DIR = ROOT / "public" / "images"
NEWS_IMAGES_DIR = PUBLIC_IMAGES_DIR / "news"
DATA_DIR = ROOT / "src" / "data"
IMAGE_MAP_PATH = DATA_DIR / "image-map.json"
NEWS_JSON_PATH = DATA_DIR / "news.json"
IMAGE_CACHE_PATH = ROOT / ".image-cache.json"
SCHEMA_DIR = ROOT / "data" / "schema"

# site-relative URL under which NEWS_IMAGES_DIR is served
NEWS_IMAGE_URL_PREFIX = "/images/news"


USER_AGENT = (
"SVStadenSiteBot/1.0 (+https://sv-staden.de) Requests"
)


def require_notion_config():
    """
    Return (api_key, database_id) or terminate the process.

    Both values are required by every script that talks to Notion; a missing
    one is reported before any work starts.
    """
    api_key = os.getenv("NOTION_API_KEY", "")
    database_id = os.getenv("NOTION_DATABASE_ID", "")
    if not api_key:
        log.error("NOTION_API_KEY nicht gefunden!")
        log.error("Stelle sicher, dass die .env Datei existiert oder die Variablen in Netlify gesetzt sind.")
        sys.exit(1)
    if not database_id:
        log.error("NOTION_DATABASE_ID nicht gefunden!")
        sys.exit(1)
    return api_key, database_id

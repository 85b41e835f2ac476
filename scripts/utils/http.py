# scripts/utils/http.py
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar
from urllib.parse import urljoin

import requests

from scripts.utils.env import HTTP_TIMEOUT, USER_AGENT
from scripts.utils.errors import DownloadError
from scripts.utils.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")

MAX_REDIRECTS = 5
CHUNK_SIZE = 1 << 15


def make_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    return s


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often a single item is attempted before it is given up.

    The default of one attempt is fire-and-skip: a failed download is logged
    by the caller and not retried within the same run.
    """
    attempts: int = 1
    backoff: float = 1.5
    sleep: Callable[[float], None] = time.sleep

    def call(self, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except Exception as e:
                attempt += 1
                if attempt >= max(self.attempts, 1):
                    raise
                delay = self.backoff ** attempt
                log.debug(f"Versuch {attempt} fehlgeschlagen ({e}), neuer Versuch in {delay:.1f}s")
                self.sleep(delay)


def _remove_partial(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def download_image(session: requests.Session, url: str, dest: Path,
                   timeout: float = HTTP_TIMEOUT, max_redirects: int = MAX_REDIRECTS) -> Path:
    """
    Stream ``url`` into ``dest``.

    Redirects (3xx with a Location header) are followed by recursing on the
    target, at most ``max_redirects`` hops. Any other non-2xx status raises
    DownloadError. A transport error while streaming removes whatever was
    written so far; a failure before the body arrives leaves ``dest`` alone.
    """
    try:
        r = session.get(url, timeout=timeout, allow_redirects=False, stream=True)
    except requests.RequestException as e:
        # nothing written yet; an existing dest belongs to an earlier run
        raise DownloadError(f"Request failed: {e}") from e

    with r:
        location = r.headers.get("Location")
        if 300 <= r.status_code < 400 and location:
            if max_redirects <= 0:
                raise DownloadError(f"Too many redirects: {url}")
            return download_image(session, urljoin(url, location), dest,
                                  timeout=timeout, max_redirects=max_redirects - 1)

        if not 200 <= r.status_code < 300:
            raise DownloadError(f"Failed to download: {r.status_code}")

        try:
            with dest.open("wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.RequestException as e:
            _remove_partial(dest)
            raise DownloadError(f"Download interrupted: {e}") from e
    return dest


__all__ = ["RetryPolicy", "download_image", "make_session"]

# scripts/media/image_cache.py
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from scripts.utils.log import get_logger

log = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass
class CacheEntry:
    hash: str
    optimized: bool
    original_size: int
    optimized_size: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "hash": self.hash,
            "optimized": self.optimized,
            "originalSize": self.original_size,
            "optimizedSize": self.optimized_size,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CacheEntry":
        return cls(
            hash=str(d["hash"]),
            optimized=bool(d.get("optimized", False)),
            original_size=int(d.get("originalSize", 0)),
            optimized_size=int(d.get("optimizedSize", 0)),
            timestamp=str(d.get("timestamp", "")),
        )


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_hash(path: PathLike) -> str:
    h = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            h.update(chunk)
    return h.hexdigest()


def is_fresh(entry: Optional[CacheEntry], current_hash: str) -> bool:
    """True when the file is unchanged since it was last marked optimized."""
    return entry is not None and entry.optimized and entry.hash == current_hash


def cache_key(path: PathLike) -> str:
    return str(Path(path).resolve())


class ImageCache:
    """
    Per-file optimisation state, keyed by absolute path.

    Entries are never evicted; an entry for a file that changed on disk simply
    stops being fresh because its hash no longer matches.
    """

    def __init__(self, entries: Optional[Dict[str, CacheEntry]] = None):
        self.entries: Dict[str, CacheEntry] = dict(entries or {})

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path) -> bool:
        return cache_key(path) in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, path: PathLike) -> Optional[CacheEntry]:
        return self.entries.get(cache_key(path))

    def put(self, path: PathLike, entry: CacheEntry):
        self.entries[cache_key(path)] = entry

    def to_dict(self) -> dict:
        return {k: e.to_dict() for k, e in self.entries.items()}

    @classmethod
    def load(cls, path: PathLike) -> "ImageCache":
        """Read the cache file; a missing or unreadable file is an empty cache."""
        p = Path(path)
        if not p.exists():
            log.info("Neuer Cache wird erstellt")
            return cls()
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning(f"Cache nicht lesbar ({e}), neuer Cache wird erstellt")
            return cls()
        if not isinstance(raw, dict):
            log.warning("Cache hat ein unerwartetes Format, neuer Cache wird erstellt")
            return cls()

        entries: Dict[str, CacheEntry] = {}
        for key, value in raw.items():
            try:
                entries[key] = CacheEntry.from_dict(value)
            except (KeyError, TypeError, ValueError, AttributeError):
                log.debug(f"Ungültiger Cache-Eintrag verworfen: {key}")
        log.info(f"Cache geladen: {len(entries)} Einträge")
        return cls(entries)

    def save(self, path: PathLike) -> bool:
        p = Path(path)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            log.error(f"Fehler beim Speichern des Cache: {e}")
            return False
        log.info(f"Cache gespeichert: {len(self)} Einträge")
        return True


__all__ = ["CacheEntry", "ImageCache", "cache_key", "file_hash", "is_fresh", "now_iso"]

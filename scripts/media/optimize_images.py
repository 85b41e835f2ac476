#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Optimise every image under public/images before the site build.

- Shrinks wide images to max 1920px (hero) / 1200px (news), never upscaling
- Re-encodes JPEG (q85, progressive), PNG (lossless, level 9), WebP (q80)
- Keeps the result only if it is smaller than the original
- Writes a WebP sibling next to every shrunk JPEG/PNG
- Skips files whose content hash is already recorded as optimised in .image-cache.json
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from PIL import Image

from scripts.media.image_cache import CacheEntry, ImageCache, file_hash, is_fresh, now_iso
from scripts.utils.env import IMAGE_CACHE_PATH, NEWS_IMAGES_DIR, PUBLIC_IMAGES_DIR
from scripts.utils.errors import ImageProcessingError
from scripts.utils.log import get_logger

log = get_logger(__name__)

OPTIMIZED = "optimized"
SKIPPED = "skipped"
ERROR = "error"


# ---------- Config ----------
@dataclass
class OptimizerConfig:
    image_dirs: List[Path] = field(default_factory=lambda: [PUBLIC_IMAGES_DIR, NEWS_IMAGES_DIR])
    images_root: Path = PUBLIC_IMAGES_DIR
    max_width: int = 1920          # hero images
    news_max_width: int = 1200     # anything below a news/ directory
    jpeg_quality: int = 85
    webp_quality: int = 80
    png_compress_level: int = 9
    supported_formats: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")
    news_dirname: str = "news"


@dataclass
class FileResult:
    status: str
    reason: str = ""
    resized: bool = False
    original_size: int = 0
    optimized_size: int = 0

    @property
    def saved_bytes(self) -> int:
        return self.original_size - self.optimized_size

    @property
    def saved_percent(self) -> int:
        if not self.original_size:
            return 0
        return round(self.saved_bytes / self.original_size * 100)


@dataclass
class Summary:
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    total_bytes_saved: int = 0

    def record(self, result: FileResult):
        if result.status == OPTIMIZED:
            self.processed += 1
            self.total_bytes_saved += result.saved_bytes
        elif result.status == SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    def __add__(self, other: "Summary") -> "Summary":
        return Summary(
            self.processed + other.processed,
            self.skipped + other.skipped,
            self.errors + other.errors,
            self.total_bytes_saved + other.total_bytes_saved,
        )


# ---------- Helpers ----------
def format_bytes(n: int) -> str:
    if n <= 0:
        return "0 Bytes"
    sizes = ["Bytes", "KB", "MB"]
    i = 0
    while n >= 1024 ** (i + 1) and i < len(sizes) - 1:
        i += 1
    value = round(n / (1024 ** i), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {sizes[i]}"


def is_news_image(path: Path, config: OptimizerConfig) -> bool:
    try:
        parts = path.resolve().relative_to(config.images_root.resolve()).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    return config.news_dirname in parts


def max_width_for(path: Path, config: OptimizerConfig) -> int:
    return config.news_max_width if is_news_image(path, config) else config.max_width


def fit_width(img: Image.Image, max_width: int) -> Tuple[Image.Image, bool]:
    # do not upscale
    if img.width <= max_width:
        return img, False
    new_h = max(1, round(img.height * max_width / img.width))
    return img.resize((max_width, new_h), Image.LANCZOS), True


def save_optimized(img: Image.Image, out_path: Path, ext: str, config: OptimizerConfig):
    if ext in (".jpg", ".jpeg"):
        if img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")
        img.save(out_path, format="JPEG", quality=config.jpeg_quality, progressive=True, optimize=True)
    elif ext == ".png":
        img.save(out_path, format="PNG", compress_level=config.png_compress_level, optimize=True)
    elif ext == ".webp":
        img.save(out_path, format="WEBP", quality=config.webp_quality, method=6)
    else:
        raise ImageProcessingError(f"Nicht unterstütztes Format: {ext}")


def save_webp_sibling(path: Path, config: OptimizerConfig) -> Path:
    out_path = path.with_suffix(".webp")
    with Image.open(path) as img:
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if img.mode in ("LA", "P", "PA") else "RGB")
        img.save(out_path, format="WEBP", quality=config.webp_quality, method=6)
    return out_path


def _discard(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass


# ---------- Pipeline ----------
def optimize_image(path: Path, cache: ImageCache, config: OptimizerConfig,
                   clock: Callable[[], str] = now_iso) -> FileResult:
    """
    Run one file through hash check, resize, re-encode and commit.

    The cache is only touched when the file ends up optimised or confirmed as
    not improvable; a decode/encode error leaves both file and cache alone.
    """
    ext = path.suffix.lower()
    if ext not in config.supported_formats:
        return FileResult(SKIPPED, "Nicht unterstütztes Format")

    tmp_path = path.with_name(path.name + ".tmp")
    original_size = 0

    try:
        digest = file_hash(path)
        if is_fresh(cache.get(path), digest):
            return FileResult(SKIPPED, "Bereits optimiert")

        original_size = path.stat().st_size
        with Image.open(path) as img:
            img.load()
            img, resized = fit_width(img, max_width_for(path, config))
            save_optimized(img, tmp_path, ext, config)

        optimized_size = tmp_path.stat().st_size
        if optimized_size < original_size:
            os.replace(tmp_path, path)
            if ext != ".webp":
                # the original is already replaced; a missing sibling must not undo that
                try:
                    save_webp_sibling(path, config)
                except Exception as e:
                    log.warning(f"{path.name} - WebP-Variante fehlgeschlagen: {e}")
            cache.put(path, CacheEntry(
                hash=file_hash(path),
                optimized=True,
                original_size=original_size,
                optimized_size=optimized_size,
                timestamp=clock(),
            ))
            return FileResult(OPTIMIZED, resized=resized,
                              original_size=original_size, optimized_size=optimized_size)

        _discard(tmp_path)
        cache.put(path, CacheEntry(
            hash=digest,
            optimized=True,
            original_size=original_size,
            optimized_size=original_size,
            timestamp=clock(),
        ))
        return FileResult(SKIPPED, "Keine Verbesserung möglich",
                          original_size=original_size, optimized_size=original_size)
    except Exception as e:
        # a single broken image must not stop the run
        _discard(tmp_path)
        return FileResult(ERROR, str(e), original_size=original_size)


def list_images(dir_path: Path, config: OptimizerConfig) -> List[Path]:
    return sorted(
        p for p in dir_path.iterdir()
        if p.is_file() and p.suffix.lower() in config.supported_formats
    )


def optimize_directory(dir_path: Path, cache: ImageCache, config: OptimizerConfig,
                       clock: Callable[[], str] = now_iso) -> Summary:
    stats = Summary()
    if not dir_path.is_dir():
        log.warning(f"Verzeichnis nicht gefunden: {dir_path}")
        return stats

    files = list_images(dir_path, config)
    if not files:
        log.info(f"{dir_path.name}: Keine Bilder gefunden")
        return stats

    log.info(f"{dir_path.name}: {len(files)} Bilder gefunden")
    for path in files:
        result = optimize_image(path, cache, config, clock=clock)
        stats.record(result)
        if result.status == OPTIMIZED:
            action = "verkleinert" if result.resized else "komprimiert"
            log.info(
                f"{path.name} {action}: {format_bytes(result.original_size)} -> "
                f"{format_bytes(result.optimized_size)} (-{result.saved_percent}%)"
            )
        elif result.status == SKIPPED:
            log.info(f"{path.name} - {result.reason}")
        else:
            log.error(f"{path.name} - Fehler: {result.reason}")

    log.info(f"{stats.processed} optimiert | {stats.skipped} übersprungen | {stats.errors} Fehler")
    if stats.total_bytes_saved > 0:
        log.info(f"Gesamt gespart: {format_bytes(stats.total_bytes_saved)}")
    return stats


def run(config: OptimizerConfig, cache: ImageCache,
        clock: Callable[[], str] = now_iso) -> Summary:
    """Optimise every configured directory; ``cache`` is updated in place."""
    log.info(f"Max. Breite: {config.max_width}px (Hero), {config.news_max_width}px (News)")
    log.info(f"JPEG Qualität: {config.jpeg_quality}% | WebP Qualität: {config.webp_quality}%")

    total = Summary()
    for dir_path in config.image_dirs:
        total = total + optimize_directory(Path(dir_path), cache, config, clock=clock)
    return total


def log_summary(summary: Summary):
    log.info("ZUSAMMENFASSUNG")
    log.info(f"Optimiert:    {summary.processed} Bilder")
    log.info(f"Übersprungen: {summary.skipped} Bilder")
    log.info(f"Fehler:       {summary.errors} Bilder")
    if summary.total_bytes_saved > 0:
        log.info(f"Gesamt gespart: {format_bytes(summary.total_bytes_saved)}")


# ---------- Main ----------
def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Optimise site images in place (with hash cache).")
    ap.add_argument("--dir", dest="dirs", action="append", type=Path,
                    help="Image directory to process (repeatable; default: public/images and public/images/news)")
    ap.add_argument("--cache", type=Path, default=IMAGE_CACHE_PATH,
                    help="Cache file (default: .image-cache.json)")
    args = ap.parse_args(argv)

    config = OptimizerConfig()
    if args.dirs:
        config.image_dirs = args.dirs

    cache = ImageCache.load(args.cache)
    summary = run(config, cache)
    cache.save(args.cache)
    log_summary(summary)
    log.info("Optimierung abgeschlossen!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

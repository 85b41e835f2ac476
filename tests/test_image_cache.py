"""
Tests for the image optimisation cache.
"""

import json

from scripts.media.image_cache import CacheEntry, ImageCache, cache_key, file_hash, is_fresh


def entry(hash="abc", optimized=True, original=100, optimized_size=80):
    return CacheEntry(hash=hash, optimized=optimized, original_size=original,
                      optimized_size=optimized_size, timestamp="2024-01-01T00:00:00.000Z")


class TestIsFresh:

    def test_no_entry(self):
        assert is_fresh(None, "abc") is False

    def test_hash_mismatch(self):
        assert is_fresh(entry(hash="abc"), "def") is False

    def test_not_optimized(self):
        assert is_fresh(entry(optimized=False), "abc") is False

    def test_match(self):
        assert is_fresh(entry(), "abc") is True


class TestFileHash:

    def test_md5_of_content(self, tmp_path):
        p = tmp_path / "a.bin"
        p.write_bytes(b"abc")
        assert file_hash(p) == "900150983cd24fb0d6963f7d28e17f72"

    def test_changes_with_content(self, tmp_path):
        p = tmp_path / "a.bin"
        p.write_bytes(b"abc")
        before = file_hash(p)
        p.write_bytes(b"abd")
        assert file_hash(p) != before


class TestImageCache:

    def test_keys_are_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cache = ImageCache()
        cache.put("bild.jpg", entry())
        assert cache.get(tmp_path / "bild.jpg") == entry()
        assert str(tmp_path / "bild.jpg") in cache.entries
        assert tmp_path / "bild.jpg" in cache

    def test_load_missing_file(self, tmp_path):
        cache = ImageCache.load(tmp_path / "missing.json")
        assert len(cache) == 0

    def test_load_unparsable_file(self, tmp_path):
        p = tmp_path / "cache.json"
        p.write_text("{not json", encoding="utf-8")
        assert len(ImageCache.load(p)) == 0

    def test_load_wrong_shape(self, tmp_path):
        p = tmp_path / "cache.json"
        p.write_text("[1, 2, 3]", encoding="utf-8")
        assert len(ImageCache.load(p)) == 0

    def test_load_drops_malformed_entries(self, tmp_path):
        p = tmp_path / "cache.json"
        p.write_text(json.dumps({
            "/a.jpg": {"hash": "h", "optimized": True, "originalSize": 10, "optimizedSize": 5, "timestamp": "t"},
            "/b.jpg": {"optimized": True},
            "/c.jpg": "nonsense",
        }), encoding="utf-8")
        cache = ImageCache.load(p)
        assert list(cache) == ["/a.jpg"]
        assert cache.entries["/a.jpg"].optimized_size == 5

    def test_save_writes_camel_case_json(self, tmp_path):
        p = tmp_path / "sub" / "cache.json"
        cache = ImageCache()
        cache.put(tmp_path / "x.png", entry(hash="h1", original=200, optimized_size=150))

        assert cache.save(p) is True

        data = json.loads(p.read_text(encoding="utf-8"))
        assert data == {
            cache_key(tmp_path / "x.png"): {
                "hash": "h1",
                "optimized": True,
                "originalSize": 200,
                "optimizedSize": 150,
                "timestamp": "2024-01-01T00:00:00.000Z",
            }
        }

    def test_save_then_load(self, tmp_path):
        p = tmp_path / "cache.json"
        cache = ImageCache()
        cache.put(tmp_path / "x.png", entry())
        cache.save(p)

        loaded = ImageCache.load(p)
        assert loaded.get(tmp_path / "x.png") == entry()

    def test_save_failure_is_reported_not_raised(self, tmp_path):
        # target is a directory, so writing must fail
        assert ImageCache().save(tmp_path) is False

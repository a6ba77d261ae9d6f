"""
Unit tests for local storage and the storage-backed TTL cache.

Tests:
- MemoryStorage and FileStorage basics
- JSON helpers tolerate corrupt values
- Cache entries are fresh strictly before the TTL elapses
"""
import json

import pytest
from unittest.mock import patch

from coachsearching.utils.cache import CacheEntry, StorageTTLCache
from coachsearching.utils.storage import FileStorage, MemoryStorage, read_json, write_json


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_set_get_remove(self, storage):
        """Test values round through set, get and remove."""
        storage.set_item("currency", "USD")
        assert storage.get_item("currency") == "USD"
        assert "currency" in storage

        storage.remove_item("currency")
        assert storage.get_item("currency") is None
        assert "currency" not in storage

    def test_values_are_strings(self, storage):
        """Test non-string values are stored as strings."""
        storage.set_item("n", 5)
        assert storage.get_item("n") == "5"

    def test_clear_and_keys(self):
        """Test clear drops every key."""
        storage = MemoryStorage({"a": "1", "b": "2"})
        assert sorted(storage.keys()) == ["a", "b"]
        storage.clear()
        assert storage.keys() == []


class TestFileStorage:
    """Tests for FileStorage persistence."""

    def test_persists_across_instances(self, tmp_path):
        """Test a second instance sees values written by the first."""
        path = tmp_path / "data" / "local_storage.json"
        FileStorage(path).set_item("language", "de")

        assert FileStorage(path).get_item("language") == "de"

    def test_remove_is_persisted(self, tmp_path):
        """Test removals are flushed to disk."""
        path = tmp_path / "storage.json"
        first = FileStorage(path)
        first.set_item("a", "1")
        first.remove_item("a")

        assert FileStorage(path).get_item("a") is None

    def test_unreadable_file_is_ignored(self, tmp_path):
        """Test a corrupt file starts an empty storage."""
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        assert FileStorage(path).keys() == []

    def test_non_object_file_is_ignored(self, tmp_path):
        """Test a JSON file that is not an object is ignored."""
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")

        assert FileStorage(path).keys() == []

    def test_file_contents_are_json(self, tmp_path):
        """Test the file holds a plain JSON object."""
        path = tmp_path / "storage.json"
        FileStorage(path).set_item("k", "v")

        assert json.loads(path.read_text()) == {"k": "v"}

    def test_failed_write_leaves_no_temp_file(self, tmp_path):
        """Test a failed replace removes the temp file and keeps the value in memory."""
        path = tmp_path / "storage.json"
        storage = FileStorage(path)

        with patch("coachsearching.utils.storage.os.replace", side_effect=OSError("disk full")):
            storage.set_item("k", "v")

        assert list(tmp_path.glob("*.tmp")) == []
        assert not path.exists()
        assert storage.get_item("k") == "v"


class TestJsonHelpers:
    """Tests for read_json / write_json."""

    def test_round_trip(self, storage):
        """Test JSON values are decoded on read."""
        assert write_json(storage, "k", {"step": 2}) is True
        assert read_json(storage, "k") == {"step": 2}

    def test_missing_key_returns_default(self, storage):
        """Test absent keys return the default."""
        assert read_json(storage, "missing", default=[]) == []

    def test_corrupt_value_returns_default(self, storage):
        """Test corrupt JSON returns the default instead of raising."""
        storage.set_item("k", "{broken")
        assert read_json(storage, "k", default="fallback") == "fallback"

    def test_unencodable_value_is_rejected(self, storage):
        """Test values json cannot encode are not written."""
        assert write_json(storage, "k", {"bad": object()}) is False
        assert storage.get_item("k") is None


class TestCacheEntry:
    """Tests for CacheEntry decoding and freshness."""

    def test_fresh_before_ttl(self):
        """Test entry is fresh while age < ttl."""
        entry = CacheEntry(data=[1], timestamp=1000)
        assert entry.is_fresh(now=1999, ttl_ms=1000) is True

    def test_stale_at_ttl(self):
        """Test entry is stale once age reaches ttl."""
        entry = CacheEntry(data=[1], timestamp=1000)
        assert entry.is_fresh(now=2000, ttl_ms=1000) is False

    @pytest.mark.parametrize("raw", [
        None,
        "text",
        {"timestamp": 1},
        {"data": [], "timestamp": "yesterday"},
        {"data": [], "timestamp": True},
        {"data": []},
    ])
    def test_malformed_envelopes(self, raw):
        """Test malformed envelopes decode to None."""
        assert CacheEntry.from_dict(raw) is None

    def test_valid_envelope(self):
        """Test a well-formed envelope decodes."""
        entry = CacheEntry.from_dict({"data": ["a"], "timestamp": 42})
        assert entry == CacheEntry(data=["a"], timestamp=42)


class TestStorageTTLCache:
    """Tests for StorageTTLCache expiry."""

    def test_hit_just_before_ttl(self, storage, clock):
        """Test a value read just before the TTL is served from cache."""
        cache = StorageTTLCache(storage, ttl_seconds=86400, clock=clock)
        cache.set("cs_cities", [{"code": "berlin"}])

        clock.advance(86400 * 1000 - 1)
        assert cache.get("cs_cities") == [{"code": "berlin"}]

    def test_miss_after_ttl(self, storage, clock):
        """Test a value read after the TTL is ignored."""
        cache = StorageTTLCache(storage, ttl_seconds=86400, clock=clock)
        cache.set("cs_cities", [{"code": "berlin"}])

        clock.advance(86400 * 1000 + 1)
        assert cache.get("cs_cities") is None
        # Expired entries stay in storage until overwritten
        assert cache.get_entry("cs_cities") is not None

    def test_envelope_format(self, storage, clock):
        """Test entries are stored as {data, timestamp}."""
        cache = StorageTTLCache(storage, clock=clock)
        cache.set("k", [1, 2])

        assert json.loads(storage.get_item("k")) == {"data": [1, 2], "timestamp": clock.now}

    def test_corrupt_entry_is_a_miss(self, storage, clock):
        """Test corrupt stored JSON reads as a miss."""
        storage.set_item("k", "not json")
        cache = StorageTTLCache(storage, clock=clock)

        assert cache.get("k", default="none") == "none"

    def test_invalidate(self, storage, clock):
        """Test invalidate removes the entry."""
        cache = StorageTTLCache(storage, clock=clock)
        cache.set("k", 1)
        cache.invalidate("k")

        assert cache.get_entry("k") is None

    def test_stats(self, storage, clock):
        """Test hit and miss counting."""
        cache = StorageTTLCache(storage, ttl_seconds=10, clock=clock)
        cache.set("k", 1)
        cache.get("k")
        cache.get("other")

        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

"""Tests for cache module."""
from clickerengine.cache import FileCache, MemoryCache


def test_memory_cache_roundtrip():
    cache = MemoryCache()
    assert cache.get("k") is None
    cache.set("k", b"v")
    assert cache.get("k") == b"v"
    cache.delete("k")
    assert cache.get("k") is None
    cache.delete("k")  # deleting twice is fine


def test_file_cache_roundtrip(tmp_path):
    cache = FileCache(tmp_path / "store")
    assert cache.get("cookiePlayerData_p1") is None
    cache.set("cookiePlayerData_p1", b'{"cookies": 1}')
    assert cache.get("cookiePlayerData_p1") == b'{"cookies": 1}'

    # a fresh instance over the same directory sees the value
    assert FileCache(tmp_path / "store").get("cookiePlayerData_p1") == b'{"cookies": 1}'

    cache.delete("cookiePlayerData_p1")
    assert cache.get("cookiePlayerData_p1") is None
    cache.delete("cookiePlayerData_p1")


def test_file_cache_overwrite_leaves_no_temp_files(tmp_path):
    cache = FileCache(tmp_path)
    cache.set("a", b"1")
    cache.set("a", b"2")
    assert cache.get("a") == b"2"
    assert [p.suffix for p in tmp_path.iterdir()] == [".json"]


def test_file_cache_sanitizes_keys(tmp_path):
    cache = FileCache(tmp_path)
    cache.set("../escape/key", b"x")
    assert cache.get("../escape/key") == b"x"
    assert all(p.parent == tmp_path for p in tmp_path.iterdir())

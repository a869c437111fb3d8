import pytest

from conftest import FakeFileReader
from file_indexer.embedding_services.content_cache import CachedFileReader, ContentCache
from file_indexer.errors import FileReadError


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ContentCache(ttl_seconds=60, clock=clock)


def test_get_returns_fresh_entry(cache, clock):
    cache.put("a.txt", "hello", {"size": 5})
    clock.advance(59)

    entry = cache.get("a.txt")

    assert entry.content == "hello"
    assert entry.metadata == {"size": 5}
    assert entry.cached_at == 1000.0


def test_entry_expires_at_ttl(cache, clock):
    cache.put("a.txt", "hello")
    clock.advance(60)

    assert cache.get("a.txt") is None
    # expired entries are evicted on lookup
    assert len(cache) == 0


def test_put_overwrites_and_refreshes(cache, clock):
    cache.put("a.txt", "old")
    clock.advance(50)
    cache.put("a.txt", "new")
    clock.advance(50)

    assert cache.get("a.txt").content == "new"


def test_invalidate_and_clear(cache):
    cache.put("a.txt", "a")
    cache.put("b.txt", "b")

    assert cache.invalidate("a.txt") is True
    assert cache.invalidate("a.txt") is False
    assert cache.get("a.txt") is None

    cache.clear()
    assert len(cache) == 0


def test_cached_reader_miss_then_hit(cache):
    reader = FakeFileReader({"a.txt": "content"})
    cached = CachedFileReader(reader, cache)

    first = cached.read("a.txt")
    second = cached.read("a.txt")

    assert first['from_cache'] is False
    assert second['from_cache'] is True
    assert first['content'] == second['content'] == "content"
    assert first['metadata']['size'] == 7
    assert first['metadata']['encoding'] == 'utf-8'
    assert reader.reads == ["a.txt"]


def test_cached_reader_refetches_after_ttl(cache, clock):
    reader = FakeFileReader({"a.txt": "v1"})
    cached = CachedFileReader(reader, cache)

    cached.read("a.txt")
    reader.contents["a.txt"] = "v2"
    clock.advance(61)
    result = cached.read("a.txt")

    assert result['from_cache'] is False
    assert result['content'] == "v2"
    assert reader.reads == ["a.txt", "a.txt"]


def test_cached_reader_does_not_cache_failures(cache):
    reader = FakeFileReader(errors={"missing.txt": "no such file"})
    cached = CachedFileReader(reader, cache)

    with pytest.raises(FileReadError):
        cached.read("missing.txt")
    with pytest.raises(FileReadError):
        cached.read("missing.txt")

    assert len(cache) == 0
    assert reader.reads == ["missing.txt", "missing.txt"]

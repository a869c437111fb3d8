"""
Content Cache - Read-through TTL cache for file contents
"""
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .interfaces import FileReader
from ..utils.logger import setup_logger

logger = setup_logger('content_cache', 'embedding.log')


@dataclass
class CacheEntry:
    """Cached file content"""
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    cached_at: float = 0.0


class ContentCache:
    """
    File content keyed by path with a fixed time-to-live.

    Expired entries are evicted on lookup; there is no background sweep and no
    size bound, so the cache grows with the number of distinct paths read.
    """

    def __init__(self, ttl_seconds: float = 1800, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> Optional[CacheEntry]:
        """Return the live entry for path, evicting it if expired"""
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            if self._clock() - entry.cached_at < self.ttl_seconds:
                return entry
            del self._entries[path]
            return None

    def put(self, path: str, content: str, metadata: Optional[Dict[str, Any]] = None) -> CacheEntry:
        entry = CacheEntry(content=content, metadata=dict(metadata or {}), cached_at=self._clock())
        with self._lock:
            self._entries[path] = entry
        return entry

    def invalidate(self, path: str) -> bool:
        with self._lock:
            return self._entries.pop(path, None) is not None

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CachedFileReader:
    """Reads files through a ContentCache, fetching with a FileReader on miss"""

    def __init__(self, file_reader: FileReader, cache: ContentCache, encoding: str = 'utf-8'):
        self.file_reader = file_reader
        self.cache = cache
        self.encoding = encoding

    def read(self, path: str) -> Dict[str, Any]:
        """
        Read a file, serving it from cache while fresh

        Returns:
            {'path', 'content', 'metadata', 'from_cache'}
        """
        entry = self.cache.get(path)
        if entry is not None:
            logger.debug(f"Cache hit for file: {path}")
            return {
                'path': path,
                'content': entry.content,
                'metadata': dict(entry.metadata),
                'from_cache': True
            }

        content = self.file_reader.read(path, encoding=self.encoding)
        metadata = {
            'size': len(content),
            'encoding': self.encoding,
            'timestamp': time.time()
        }
        self.cache.put(path, content, metadata)

        return {
            'path': path,
            'content': content,
            'metadata': metadata,
            'from_cache': False
        }

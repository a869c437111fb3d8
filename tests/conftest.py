import json
import os
import tempfile
import threading
from unittest.mock import MagicMock

import pytest

# Keep log files out of the source tree while testing
os.environ.setdefault("FILE_INDEXER_LOG_DIR", tempfile.mkdtemp(prefix="file_indexer_logs_"))

from file_indexer.errors import FileReadError
from file_indexer.embedding_services.interfaces import FileReader, MemoryEngine, PathResolver
from file_indexer.embedding_services.vector_store import VectorStore


@pytest.fixture
def config():
    """Configuration dict equivalent to config.yaml, without touching disk"""
    return {
        'embedding': {
            'model_id': 'test-model',
            'api_endpoint': 'http://embeddings.test/models/test-model',
            'api_key': 'test-key',
            'batch_size': 64,
            'request_timeout': 5,
            'max_text_length': 8192,
        },
        'memory': {'vector': {'similarity_threshold': 0.8, 'persist_timeout': 1}},
        'indexing': {'batch_size': 10, 'show_progress': False},
        'cache': {'ttl_seconds': 1800, 'encoding': 'utf-8'},
        'tools': {
            'glob': {'max_results': 1000, 'default_ignore_patterns': ['.git/**']},
            'view': {'max_size': 1024},
        },
    }


@pytest.fixture
def vector_store(config):
    store = VectorStore(config=config)
    store.initialize()
    return store


def make_response(body=None, status_code=200, text='', chunks=None):
    """Mock of a streamed requests.Response"""
    if chunks is None:
        content = json.dumps(body).encode('utf-8') if body is not None else text.encode('utf-8')
        chunks = [content]
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.iter_content.return_value = chunks
    return response


def fake_embedding(text):
    """Deterministic 3-dimensional embedding for a text"""
    return [float(len(text)), float(sum(map(ord, text)) % 97), 1.0]


class FakeEmbeddingService:
    """Stands in for EmbeddingService inside the pipeline"""

    def __init__(self, fail_on=None):
        self.fail_on = set(fail_on or [])
        self.calls = []
        self._lock = threading.Lock()

    def generate_embedding(self, text):
        with self._lock:
            self.calls.append(text)
        if text in self.fail_on:
            raise RuntimeError(f"embedding backend rejected {text!r}")
        return fake_embedding(text)


class FakePathResolver(PathResolver):
    def __init__(self, paths=None, error=None):
        self.paths = list(paths or [])
        self.error = error
        self.patterns = []

    def resolve(self, pattern, base_dir=None, ignore_patterns=None, max_results=None):
        self.patterns.append(pattern)
        if self.error is not None:
            raise self.error
        return list(self.paths)


class FakeFileReader(FileReader):
    def __init__(self, contents=None, errors=None):
        self.contents = dict(contents or {})
        self.errors = dict(errors or {})
        self.reads = []
        self._lock = threading.Lock()

    def read(self, path, encoding='utf-8'):
        with self._lock:
            self.reads.append(path)
        if path in self.errors:
            raise FileReadError(self.errors[path])
        return self.contents[path]


class FakeMemoryEngine(MemoryEngine):
    def __init__(self, error=None):
        self.error = error
        self.memories = {}

    def store_memory(self, key, value, metadata=None):
        if self.error is not None:
            raise self.error
        self.memories[key] = (value, metadata)
        return True

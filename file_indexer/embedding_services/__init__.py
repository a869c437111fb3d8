"""
Embedding Services Package - File indexing and vector search
Includes:
- Embedding service: Interface with a remote feature-extraction model over HTTP
- Vector store: In-memory vectors with exact cosine similarity search
- Content cache: Read-through TTL cache for file contents
- Document indexer: Batched, concurrent indexing of files matching a pattern
"""
from .embedding_client import EmbeddingService
from .vector_store import VectorStore
from .content_cache import ContentCache, CachedFileReader
from .document_indexer import DocumentIndexer, IndexingReport, IndexingProgress
from .interfaces import PathResolver, FileReader, PersistenceHook, NullPersistenceHook, MemoryEngine

__all__ = [
    "EmbeddingService",
    "VectorStore",
    "ContentCache",
    "CachedFileReader",
    "DocumentIndexer",
    "IndexingReport",
    "IndexingProgress",
    "PathResolver",
    "FileReader",
    "PersistenceHook",
    "NullPersistenceHook",
    "MemoryEngine",
]

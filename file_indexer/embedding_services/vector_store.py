"""
Vector Store - In-memory vector storage with exact cosine similarity search
"""
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from numbers import Real
from typing import List, Dict, Any, Optional, Sequence, Set, Tuple

import numpy as np

from .interfaces import PersistenceHook, NullPersistenceHook
from ..errors import DimensionMismatchError, InvalidInputError, NotInitializedError
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('vector_store', 'embedding.log')


def _validate_vector(vector: Any, what: str = "vector") -> Tuple[float, ...]:
    """Return vector as a tuple of floats or raise InvalidInputError"""
    if isinstance(vector, np.ndarray):
        if vector.ndim != 1:
            raise InvalidInputError(f"Invalid {what}: must be one-dimensional")
        vector = vector.tolist()

    if isinstance(vector, (str, bytes)) or not isinstance(vector, Sequence) or len(vector) == 0:
        raise InvalidInputError(f"Invalid {what}: must be a non-empty array of numbers")

    for value in vector:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidInputError(f"Invalid {what}: must be a non-empty array of numbers")

    return tuple(float(value) for value in vector)


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors of equal length

    A zero-norm vector has similarity 0 with everything.
    """
    a = np.asarray(vector_a, dtype=np.float64)
    b = np.asarray(vector_b, dtype=np.float64)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


class VectorStore:
    """In-memory store of id -> (vector, metadata) with one shared dimension"""

    def __init__(
        self,
        persistence_hook: Optional[PersistenceHook] = None,
        similarity_threshold: Optional[float] = None,
        persist_timeout: Optional[float] = None,
        max_pending_persists: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize vector store

        Args:
            persistence_hook: Durable storage; NullPersistenceHook if None
            similarity_threshold: Default minimum similarity for find_similar
            persist_timeout: Seconds allowed for loading, for each hook call and for flushing on close
            max_pending_persists: Hook calls queued beyond this are dropped with a warning
            config: Configuration dict (if None, loads from config.yaml)
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        vector_config = config.get('memory', {}).get('vector', {})

        if similarity_threshold is None:
            similarity_threshold = vector_config.get('similarity_threshold', 0.8)
        self.similarity_threshold = similarity_threshold
        self.max_results = vector_config.get('max_results', 10)
        self.persist_timeout = persist_timeout or vector_config.get('persist_timeout', 5)
        self.max_pending_persists = max_pending_persists or vector_config.get('max_pending_persists', 100)
        self.persistence_hook = persistence_hook or NullPersistenceHook()

        # Both maps, the timestamps and the dimension are guarded by _lock
        self._lock = threading.RLock()
        self._vectors: Dict[str, Tuple[float, ...]] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}
        self._stored_at: Dict[str, float] = {}
        self._dimensions: Optional[int] = None
        self._matrix: Optional[np.ndarray] = None

        self._persist_executor: Optional[ThreadPoolExecutor] = None
        self._persist_lock = threading.Lock()
        self._pending: Set[Future] = set()
        self.initialized = False

    @property
    def dimensions(self) -> Optional[int]:
        """The fixed vector dimension, or None before the first store"""
        return self._dimensions

    @property
    def pending_persists(self) -> int:
        """Hook calls submitted and not yet finished"""
        with self._persist_lock:
            return len(self._pending)

    def initialize(self):
        """Load persisted vectors and mark the store ready"""
        if self.initialized:
            logger.warning("Vector store already initialized")
            return

        logger.info("Initializing vector store...")

        if not isinstance(self.persistence_hook, NullPersistenceHook):
            self._persist_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='vector-persist')
            self._load_from_persistence()

        self.initialized = True
        logger.info(f"Vector store initialized with {len(self._vectors)} vectors")

    def store_vector(self, vector_id: str, vector: Sequence[float], metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Store a vector with associated metadata, overwriting any record with the same id

        Args:
            vector_id: Unique identifier for the vector
            vector: Embedding vector
            metadata: Associated metadata

        Returns:
            {'id': vector_id, 'success': True}
        """
        self._ensure_initialized()

        if not isinstance(vector_id, str) or not vector_id:
            raise InvalidInputError("Invalid id: must be a non-empty string")

        values = _validate_vector(vector)
        record_metadata = dict(metadata or {})
        stored_at = time.time()

        with self._lock:
            self._insert(vector_id, values, record_metadata, stored_at)

        self._persist('save', {
            'id': vector_id,
            'vector': list(values),
            'metadata': dict(record_metadata),
            'stored_at': stored_at
        })

        return {'id': vector_id, 'success': True}

    def find_similar(
        self,
        query_vector: Sequence[float],
        limit: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Find stored vectors most similar to the query vector

        Args:
            query_vector: Query embedding vector
            limit: Maximum number of results to return (defaults to configured max_results)
            threshold: Minimum cosine similarity (defaults to configured threshold)

        Returns:
            List of {'id', 'similarity', 'metadata'} sorted by similarity descending,
            ties in insertion order
        """
        self._ensure_initialized()

        query = _validate_vector(query_vector, what="query vector")
        if limit is None:
            limit = self.max_results
        if threshold is None:
            threshold = self.similarity_threshold

        with self._lock:
            if self._dimensions is not None and len(query) != self._dimensions:
                raise DimensionMismatchError(self._dimensions, len(query), what="Query vector")

            if not self._vectors or limit <= 0:
                return []

            ids = list(self._vectors.keys())
            similarities = self._similarities(np.asarray(query, dtype=np.float64))
            matches = [
                {
                    'id': vector_id,
                    'similarity': float(similarity),
                    'metadata': dict(self._metadata.get(vector_id, {}))
                }
                for vector_id, similarity in zip(ids, similarities)
                if similarity >= threshold
            ]

        # sorted() is stable, so equal similarities keep insertion order
        matches = sorted(matches, key=lambda match: match['similarity'], reverse=True)
        return matches[:limit]

    def delete_vector(self, vector_id: str) -> Dict[str, Any]:
        """
        Delete a vector from the store

        Returns:
            {'id', 'success': True, 'deleted': whether a record existed}
        """
        self._ensure_initialized()

        with self._lock:
            exists = vector_id in self._vectors
            if exists:
                del self._vectors[vector_id]
                self._metadata.pop(vector_id, None)
                self._stored_at.pop(vector_id, None)
                self._matrix = None

        if exists:
            self._persist('delete', vector_id)

        return {'id': vector_id, 'success': True, 'deleted': exists}

    def get_all_vectors(self) -> List[Dict[str, Any]]:
        """Get every stored record in insertion order"""
        self._ensure_initialized()

        with self._lock:
            return [
                self._to_record(vector_id, vector)
                for vector_id, vector in self._vectors.items()
            ]

    def get_vector(self, vector_id: str) -> Optional[Dict[str, Any]]:
        """Get a single record, or None if the id is unknown"""
        self._ensure_initialized()

        with self._lock:
            vector = self._vectors.get(vector_id)
            if vector is None:
                return None
            return self._to_record(vector_id, vector)

    def count(self) -> int:
        """Number of stored vectors"""
        self._ensure_initialized()
        with self._lock:
            return len(self._vectors)

    def clear(self):
        """Drop every record and release the fixed dimension"""
        self._ensure_initialized()
        with self._lock:
            self._vectors.clear()
            self._metadata.clear()
            self._stored_at.clear()
            self._dimensions = None
            self._matrix = None
        logger.info("Vector store cleared")

    def close(self):
        """Wait up to persist_timeout for queued hook calls, then release the worker"""
        if self._persist_executor is None:
            return

        with self._persist_lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=self.persist_timeout)
        if not_done:
            logger.warning(f"Closing with {len(not_done)} persistence calls unfinished")

        self._persist_executor.shutdown(wait=False, cancel_futures=True)
        self._persist_executor = None

    def _ensure_initialized(self):
        if not self.initialized:
            raise NotInitializedError("Vector store not initialized")

    def _insert(self, vector_id: str, values: Tuple[float, ...], metadata: Dict[str, Any], stored_at: float):
        # Caller holds _lock. Dimension check and all inserts happen together.
        if self._dimensions is not None and len(values) != self._dimensions:
            raise DimensionMismatchError(self._dimensions, len(values))

        if self._dimensions is None:
            self._dimensions = len(values)
            logger.info(f"Vector dimensions set to {self._dimensions}")

        self._vectors[vector_id] = values
        self._metadata[vector_id] = metadata
        self._stored_at[vector_id] = stored_at
        self._matrix = None

    def _to_record(self, vector_id: str, vector: Tuple[float, ...]) -> Dict[str, Any]:
        return {
            'id': vector_id,
            'vector': list(vector),
            'metadata': dict(self._metadata.get(vector_id, {})),
            'stored_at': self._stored_at.get(vector_id)
        }

    def _similarities(self, query: np.ndarray) -> np.ndarray:
        # Caller holds _lock
        if self._matrix is None:
            self._matrix = np.array(list(self._vectors.values()), dtype=np.float64)

        norms = np.linalg.norm(self._matrix, axis=1)
        query_norm = np.linalg.norm(query)
        if query_norm == 0:
            return np.zeros(len(norms))

        dots = self._matrix @ query
        denominators = norms * query_norm
        similarities = np.zeros(len(norms))
        nonzero = denominators != 0
        similarities[nonzero] = dots[nonzero] / denominators[nonzero]
        return similarities

    def _load_from_persistence(self):
        try:
            future = self._persist_executor.submit(self.persistence_hook.load)
            records = future.result(timeout=self.persist_timeout)
        except FutureTimeoutError:
            logger.warning(f"Loading persisted vectors timed out after {self.persist_timeout}s")
            return
        except Exception as e:
            logger.warning(f"Failed to load persisted vectors: {str(e)}")
            return

        loaded = 0
        with self._lock:
            for record in records or []:
                try:
                    vector_id = record['id']
                    values = _validate_vector(record['vector'])
                    metadata = dict(record.get('metadata') or {})
                    self._insert(vector_id, values, metadata, record.get('stored_at') or time.time())
                    loaded += 1
                except (KeyError, TypeError, InvalidInputError, DimensionMismatchError) as e:
                    logger.warning(f"Skipping persisted record: {str(e)}")

        logger.info(f"Loaded {loaded} persisted vectors")

    def _persist(self, operation: str, payload: Any):
        """
        Queue a change for the persistence hook without waiting for it

        Outcomes are logged from a done-callback. A stuck hook holds the single
        worker, so the queue is capped and further changes are dropped.
        """
        if self._persist_executor is None:
            return

        method = getattr(self.persistence_hook, operation)
        with self._persist_lock:
            if len(self._pending) >= self.max_pending_persists:
                logger.warning(
                    f"Persistence queue full ({len(self._pending)} pending), dropping {operation}"
                )
                return
            submitted = time.monotonic()
            future = self._persist_executor.submit(method, payload)
            self._pending.add(future)

        future.add_done_callback(lambda done: self._on_persisted(operation, submitted, done))

    def _on_persisted(self, operation: str, submitted: float, future: Future):
        with self._persist_lock:
            self._pending.discard(future)

        if future.cancelled():
            logger.warning(f"Persistence {operation} cancelled")
            return

        error = future.exception()
        elapsed = time.monotonic() - submitted
        if error is not None:
            logger.warning(f"Failed to persist {operation}: {str(error)}")
        elif elapsed > self.persist_timeout:
            logger.warning(f"Persistence {operation} took {elapsed:.1f}s, over {self.persist_timeout}s")

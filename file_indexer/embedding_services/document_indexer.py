"""
Document Indexer - Resolve, read, embed and store files in concurrent batches
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Callable, Optional, Tuple

from tqdm import tqdm

from .content_cache import ContentCache, CachedFileReader
from .embedding_client import EmbeddingService
from .interfaces import FileReader, MemoryEngine, PathResolver
from .vector_store import VectorStore
from ..errors import InvalidInputError, MissingDependencyError, PatternResolutionError
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('document_indexer', 'embedding.log')

CANCELLED_ERROR = 'Indexing cancelled'


@dataclass(frozen=True)
class IndexingReport:
    """Outcome of one indexing run"""
    pattern: str
    total_files: int
    processed_files: int
    failed_files: int
    details: Tuple[Dict[str, Any], ...]
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['details'] = [dict(detail) for detail in self.details]
        return data


@dataclass(frozen=True)
class IndexingProgress:
    """Progress observation emitted after each batch"""
    batch: int
    total_batches: int
    processed_files: int
    failed_files: int
    total_files: int


class DocumentIndexer:
    """Index files matching a pattern into the vector store"""

    def __init__(
        self,
        embedding_service: Optional[EmbeddingService] = None,
        vector_store: Optional[VectorStore] = None,
        path_resolver: Optional[PathResolver] = None,
        file_reader: Optional[FileReader] = None,
        content_cache: Optional[ContentCache] = None,
        memory_engine: Optional[MemoryEngine] = None,
        batch_size: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize document indexer

        Args:
            embedding_service: EmbeddingService instance
            vector_store: VectorStore instance
            path_resolver: Resolves patterns to file paths
            file_reader: Reads file content on cache miss
            content_cache: Cache shared with other readers (a new one if None)
            memory_engine: Receives the indexing report (optional)
            batch_size: Number of files indexed concurrently
            config: Configuration dict (if None, loads from config.yaml)
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        indexing_config = config.get('indexing', {})
        cache_config = config.get('cache', {})

        self.batch_size = batch_size or indexing_config.get('batch_size', 10)
        self.show_progress = indexing_config.get('show_progress', True)
        if self.batch_size < 1:
            raise InvalidInputError(f"batch_size must be positive, got {self.batch_size}")

        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.path_resolver = path_resolver
        self.memory_engine = memory_engine
        self.content_cache = content_cache or ContentCache(ttl_seconds=cache_config.get('ttl_seconds', 1800))
        self.file_reader = file_reader
        self.reader = CachedFileReader(file_reader, self.content_cache, cache_config.get('encoding', 'utf-8'))

        logger.info(f"Document indexer initialized with batch size {self.batch_size}")

    def index_files(
        self,
        pattern: str,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[IndexingProgress], None]] = None
    ) -> IndexingReport:
        """
        Index every file matching pattern

        Args:
            pattern: Pattern handed to the path resolver
            cancel_event: When set, batches not yet started are skipped
            progress_callback: Called with an IndexingProgress after each batch

        Returns:
            IndexingReport with one detail entry per file, in file-list order
        """
        if not isinstance(pattern, str) or not pattern:
            raise InvalidInputError("Missing required parameter: pattern")

        self._check_dependencies()

        logger.info(f"Indexing files matching pattern: {pattern}")
        files = self._resolve(pattern)
        logger.info(f"Found {len(files)} files to index")

        processed = 0
        failed = 0
        details: List[Dict[str, Any]] = []
        cancelled = False
        total_batches = (len(files) + self.batch_size - 1) // self.batch_size

        with ThreadPoolExecutor(max_workers=self.batch_size, thread_name_prefix='indexer') as executor:
            batch_starts = range(0, len(files), self.batch_size)
            for batch_number, i in enumerate(
                tqdm(batch_starts, desc=f"Indexing {pattern}", disable=not self.show_progress),
                start=1
            ):
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    skipped = files[i:]
                    logger.warning(f"Indexing cancelled, skipping {len(skipped)} files")
                    for path in skipped:
                        failed += 1
                        details.append({'path': path, 'success': False, 'error': CANCELLED_ERROR})
                    break

                batch = files[i:i + self.batch_size]
                futures = [executor.submit(self._index_single_file, path) for path in batch]

                # Batch boundary: every file settles before the next batch starts
                wait(futures)

                for path, future in zip(batch, futures):
                    error = future.exception()
                    if error is None:
                        processed += 1
                        details.append(future.result())
                    else:
                        failed += 1
                        details.append({
                            'path': path,
                            'success': False,
                            'error': str(error) or type(error).__name__
                        })

                logger.info(f"Indexed {processed}/{len(files)} files ({failed} failed)")
                if progress_callback is not None:
                    progress_callback(IndexingProgress(
                        batch=batch_number,
                        total_batches=total_batches,
                        processed_files=processed,
                        failed_files=failed,
                        total_files=len(files)
                    ))

        report = IndexingReport(
            pattern=pattern,
            total_files=len(files),
            processed_files=processed,
            failed_files=failed,
            details=tuple(details),
            cancelled=cancelled
        )

        self._store_report(report)
        return report

    def _check_dependencies(self):
        if self.embedding_service is None:
            raise MissingDependencyError("Embedding service required for file indexing")
        if self.vector_store is None:
            raise MissingDependencyError("Vector store required for file indexing")
        if self.path_resolver is None:
            raise MissingDependencyError("Path resolver required for file indexing")
        if self.file_reader is None:
            raise MissingDependencyError("File reader required for file indexing")

    def _resolve(self, pattern: str) -> List[str]:
        try:
            files = self.path_resolver.resolve(pattern)
        except Exception as e:
            logger.error(f"Failed to find files for indexing: {str(e)}")
            raise PatternResolutionError(f"Failed to find files matching {pattern}: {str(e)}") from e

        if files is None:
            raise PatternResolutionError(f"Path resolver returned no result for {pattern}")
        return list(files)

    def _index_single_file(self, path: str) -> Dict[str, Any]:
        """
        Read, embed and store one file

        Any failure propagates to the caller, which records it for this file only.
        """
        try:
            read_result = self.reader.read(path)
            content = read_result['content']

            embedding = self.embedding_service.generate_embedding(content)

            vector_id = self.vector_id_for(path)
            self.vector_store.store_vector(vector_id, embedding, {
                'type': 'file_content',
                'path': path,
                'content': content,
                'size': len(content)
            })

            return {
                'path': path,
                'id': vector_id,
                'success': True,
                'size': len(content),
                'from_cache': read_result['from_cache'],
                'timestamp': time.time()
            }
        except Exception as e:
            logger.error(f"Failed to index file {path}: {str(e)}")
            raise

    @staticmethod
    def vector_id_for(path: str) -> str:
        """Vector store id for a file path"""
        return f"file_content:{path}"

    def _store_report(self, report: IndexingReport):
        if self.memory_engine is None:
            return
        try:
            self.memory_engine.store_memory(f"file_indexing:{report.pattern}", report.to_dict(), {
                'type': 'file_indexing',
                'pattern': report.pattern,
                'timestamp': time.time()
            })
        except Exception as e:
            logger.warning(f"Failed to store indexing results in memory: {str(e)}")

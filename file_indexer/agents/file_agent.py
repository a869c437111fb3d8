"""
File Agent - Task dispatch for file reading, search, analysis and indexing
"""
import time
from typing import Any, Dict, Optional

from .file_analysis import extract_keywords, determine_file_type, summarize_content
from ..embedding_services.content_cache import ContentCache, CachedFileReader
from ..embedding_services.document_indexer import DocumentIndexer
from ..embedding_services.embedding_client import EmbeddingService
from ..embedding_services.interfaces import MemoryEngine
from ..errors import InvalidInputError, MissingDependencyError, PatternResolutionError
from ..tools.tool_registry import ToolRegistry
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('file_agent', 'agent.log')


class FileAgent:
    """Agent specialised in file operations"""

    OPERATIONS = ('read', 'search', 'analyze', 'index')

    def __init__(
        self,
        tool_registry: ToolRegistry,
        embedding_service: Optional[EmbeddingService] = None,
        memory_engine: Optional[MemoryEngine] = None,
        document_indexer: Optional[DocumentIndexer] = None,
        content_cache: Optional[ContentCache] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize file agent

        Args:
            tool_registry: Registry holding the 'view' and 'glob' tools
            embedding_service: Used to embed files during analysis (optional)
            memory_engine: Receives file analyses (optional)
            document_indexer: Handles 'index' tasks (optional)
            content_cache: Cache for file reads; the indexer's cache if None
            config: Configuration dict (if None, loads from config.yaml)
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        cache_config = config.get('cache', {})

        self.tool_registry = tool_registry
        self.embedding_service = embedding_service
        self.memory_engine = memory_engine
        self.document_indexer = document_indexer

        if content_cache is None:
            if document_indexer is not None:
                content_cache = document_indexer.content_cache
            else:
                content_cache = ContentCache(ttl_seconds=cache_config.get('ttl_seconds', 1800))
        self.content_cache = content_cache
        self.encoding = cache_config.get('encoding', 'utf-8')

    def execute_task(self, task: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a file task

        Args:
            task: {'operation': 'read'|'search'|'analyze'|'index', 'path'?, 'pattern'?}

        Returns:
            {'success': True, 'data': ..., 'timestamp': ...} or
            {'success': False, 'error': message, 'metadata': {...}, 'timestamp': ...}
        """
        logger.info(f"FileAgent executing task: {task}")

        try:
            if not isinstance(task, dict):
                raise InvalidInputError("Invalid task: must be a dict")

            operation = task.get('operation')
            if not operation:
                raise InvalidInputError("Missing required task parameter: operation")

            path = task.get('path')
            pattern = task.get('pattern') or path

            if operation == 'read':
                return self.read_file(path)
            if operation == 'search':
                return self.search_files(pattern)
            if operation == 'analyze':
                return self.analyze_file(path)
            if operation == 'index':
                return self.index_files(pattern)

            raise InvalidInputError(f"Unknown file operation: {operation}")

        except Exception as e:
            logger.error(f"FileAgent task execution failed: {str(e)}")
            return {
                'success': False,
                'error': str(e),
                'metadata': {
                    'error_type': type(e).__name__,
                    'operation': task.get('operation') if isinstance(task, dict) else None
                },
                'timestamp': time.time()
            }

    def read_file(self, path: str) -> Dict[str, Any]:
        """Read a file through the content cache"""
        if not path:
            raise InvalidInputError("Missing required parameter: path")

        logger.debug(f"Reading file: {path}")
        reader = CachedFileReader(self.tool_registry.get_tool('view'), self.content_cache, self.encoding)
        data = reader.read(path)

        return {
            'success': True,
            'data': data,
            'timestamp': time.time()
        }

    def search_files(self, pattern: str) -> Dict[str, Any]:
        """Find files matching a pattern with the glob tool"""
        if not pattern:
            raise InvalidInputError("Missing required parameter: pattern")

        logger.debug(f"Searching for files: {pattern}")
        result = self.tool_registry.get_tool('glob').execute(pattern)

        if not result['success']:
            raise PatternResolutionError(f"Failed to search for files matching {pattern}: {result['error']}")

        return {
            'success': True,
            'data': {
                'pattern': pattern,
                'matches': result['data'],
                'count': len(result['data']),
                'metadata': result['metadata']
            },
            'timestamp': time.time()
        }

    def analyze_file(self, path: str) -> Dict[str, Any]:
        """Read a file and describe it: size, keywords, type and summary"""
        content = self.read_file(path)['data']['content']

        embedding = None
        if self.embedding_service is not None:
            try:
                embedding = self.embedding_service.generate_embedding(content)
            except Exception as e:
                logger.warning(f"Failed to generate embedding for {path}: {str(e)}")

        analysis = {
            'path': path,
            'size': len(content),
            'line_count': len(content.split('\n')),
            'has_embedding': embedding is not None,
            'top_keywords': extract_keywords(content),
            'file_type': determine_file_type(path, content),
            'summary': summarize_content(content)
        }

        if self.memory_engine is not None:
            try:
                self.memory_engine.store_memory(f"file_analysis:{path}", analysis, {
                    'type': 'file_analysis',
                    'path': path,
                    'timestamp': time.time()
                })
            except Exception as e:
                logger.warning(f"Failed to store file analysis in memory: {str(e)}")

        return {
            'success': True,
            'data': analysis,
            'timestamp': time.time()
        }

    def index_files(self, pattern: str) -> Dict[str, Any]:
        """Index files matching a pattern for semantic search"""
        if self.document_indexer is None:
            raise MissingDependencyError("Document indexer required for file indexing")

        report = self.document_indexer.index_files(pattern)
        return {
            'success': True,
            'data': report.to_dict(),
            'timestamp': time.time()
        }

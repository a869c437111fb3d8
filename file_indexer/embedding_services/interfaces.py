"""
Collaborator interfaces for the indexing engine.

The engine only talks to the filesystem, durable storage and the agent memory
through these classes. Implementations are injected; the filesystem ones live
in file_indexer.tools.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class PathResolver(ABC):
    """Resolves a glob-like pattern to an ordered list of file paths."""

    @abstractmethod
    def resolve(
        self,
        pattern: str,
        base_dir: Optional[str] = None,
        ignore_patterns: Optional[List[str]] = None,
        max_results: Optional[int] = None
    ) -> List[str]:
        """Return matching paths, deterministic for a fixed filesystem snapshot."""


class FileReader(ABC):
    """Reads the text content of a file."""

    @abstractmethod
    def read(self, path: str, encoding: str = "utf-8") -> str:
        """Return file content. Raises FileReadError on failure."""


class PersistenceHook(ABC):
    """Durable storage behind the in-memory vector store."""

    @abstractmethod
    def save(self, record: Dict[str, Any]) -> None:
        """Persist one record ({id, vector, metadata, stored_at})."""

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Remove one persisted record."""

    @abstractmethod
    def load(self) -> List[Dict[str, Any]]:
        """Return every persisted record."""


class NullPersistenceHook(PersistenceHook):
    """Keeps nothing. The store then runs purely in memory."""

    def save(self, record: Dict[str, Any]) -> None:
        pass

    def delete(self, record_id: str) -> None:
        pass

    def load(self) -> List[Dict[str, Any]]:
        return []


class MemoryEngine(ABC):
    """Agent memory that receives indexing reports and file analyses."""

    @abstractmethod
    def store_memory(self, key: str, value: Any, metadata: Optional[Dict[str, Any]] = None) -> Any:
        """Store a value under key."""

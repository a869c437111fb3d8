"""
Agents Package - Task-level entry points over the indexing engine
"""
from .file_agent import FileAgent

__all__ = ["FileAgent"]

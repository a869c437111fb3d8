"""
File Indexer - semantic indexing and retrieval over file content
"""

__version__ = "1.0.0"

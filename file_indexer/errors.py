"""
Error types raised by the indexing and retrieval engine
"""


class FileIndexerError(Exception):
    """Base exception for file indexer errors."""

    pass


class InvalidInputError(FileIndexerError, ValueError):
    """Caller passed a malformed argument."""

    pass


class NotInitializedError(FileIndexerError):
    """Component used before initialize() succeeded."""

    pass


class ConfigurationError(FileIndexerError):
    """Missing or unreadable configuration (credentials, config file)."""

    pass


class DimensionMismatchError(FileIndexerError):
    """Vector length does not match the store's fixed dimension."""

    def __init__(self, expected: int, actual: int, what: str = "Vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what} dimension mismatch: expected {expected}, got {actual}")


class BackendUnavailableError(FileIndexerError):
    """Embedding backend failed its liveness probe."""

    pass


class EmbeddingRequestError(FileIndexerError):
    """An embedding request failed upstream."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class EmbeddingTimeoutError(EmbeddingRequestError):
    """An embedding request exceeded its timeout."""

    pass


class PatternResolutionError(FileIndexerError):
    """A file pattern could not be resolved to paths."""

    pass


class MissingDependencyError(FileIndexerError):
    """A collaborator required for the operation is not wired in."""

    pass


class FileReadError(FileIndexerError):
    """A file could not be read."""

    pass


class ToolNotFoundError(FileIndexerError):
    """No tool registered under the requested name."""

    pass

"""
Embedding Service - Interface with a Hugging Face style feature-extraction endpoint
"""
import json
import os
import time
from numbers import Real
from typing import List, Dict, Any, Callable, Optional, Sequence, Union

import requests

from ..errors import (
    BackendUnavailableError,
    ConfigurationError,
    EmbeddingRequestError,
    EmbeddingTimeoutError,
    InvalidInputError,
    NotInitializedError,
)
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('embedding_client', 'embedding.log')

DEFAULT_MODEL_ID = 'sentence-transformers/all-mpnet-base-v2'
DEFAULT_API_ENDPOINT = f'https://api-inference.huggingface.co/models/{DEFAULT_MODEL_ID}'
API_KEY_ENV = 'HUGGINGFACE_API_KEY'
PROBE_TEXT = 'test connection'
READ_CHUNK_SIZE = 64 * 1024


def normalize_text(text: str, max_text_length: int = 8192) -> str:
    """
    Truncate text and collapse whitespace runs to single spaces

    Args:
        text: Raw text input
        max_text_length: Maximum number of characters kept

    Returns:
        Processed text
    """
    return ' '.join(text[:max_text_length].split())


def _is_vector(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(x, Real) and not isinstance(x, bool) for x in value)
    )


class EmbeddingService:
    """Client for a remote embedding model reached over HTTP"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_endpoint: Optional[str] = None,
        model_id: Optional[str] = None,
        max_batch_size: Optional[int] = None,
        request_timeout: Optional[float] = None,
        max_text_length: Optional[int] = None,
        session: Optional[requests.Session] = None,
        config: Optional[Dict[str, Any]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize embedding service

        Args:
            api_key: Bearer token for the backend (falls back to $HUGGINGFACE_API_KEY)
            api_endpoint: Feature-extraction endpoint URL
            model_id: Model name, for logging
            max_batch_size: Maximum number of texts sent in one request
            request_timeout: Request timeout in seconds
            max_text_length: Texts are truncated to this many characters
            session: requests.Session to use (a new one if None)
            config: Configuration dict (if None, loads from config.yaml)
            clock: Monotonic time source for the request deadline
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        embedding_config = config.get('embedding', {})

        self.model_id = model_id or embedding_config.get('model_id', DEFAULT_MODEL_ID)
        self.api_endpoint = api_endpoint or embedding_config.get('api_endpoint', DEFAULT_API_ENDPOINT)
        self.api_key = api_key or embedding_config.get('api_key') or os.getenv(API_KEY_ENV, '')
        self.dimensions = embedding_config.get('dimensions')
        self.max_batch_size = max_batch_size or embedding_config.get('batch_size', 64)
        self.request_timeout = request_timeout or embedding_config.get('request_timeout', 30)
        self.max_text_length = max_text_length or embedding_config.get('max_text_length', 8192)

        if self.max_batch_size < 1:
            raise ConfigurationError(f"max_batch_size must be positive, got {self.max_batch_size}")

        self.session = session or requests.Session()
        self._clock = clock
        self.initialized = False

        logger.info(f"Embedding service configured: {self.api_endpoint} | Model: {self.model_id}")

    def initialize(self):
        """
        Probe the backend once and mark the service ready

        Raises:
            ConfigurationError: No API key configured
            BackendUnavailableError: Probe failed or returned something that is not a vector
        """
        if self.initialized:
            logger.warning("Embedding service already initialized")
            return

        if not self.api_key:
            raise ConfigurationError("Embedding API key not configured")

        try:
            probe = self._call_api(PROBE_TEXT)
        except EmbeddingRequestError as e:
            logger.error(f"Failed to initialize embedding service: {str(e)}")
            raise BackendUnavailableError(f"Embedding service initialization failed: {str(e)}") from e

        if not (_is_vector(probe) or (isinstance(probe, list) and probe and all(_is_vector(v) for v in probe))):
            logger.error("Invalid probe response from embedding backend")
            raise BackendUnavailableError("Invalid response from embedding backend")

        probe_vector = probe if _is_vector(probe) else probe[0]
        if self.dimensions and len(probe_vector) != self.dimensions:
            raise ConfigurationError(
                f"Model {self.model_id} produces {len(probe_vector)} dimensions, configured {self.dimensions}"
            )

        self.initialized = True
        logger.info(f"Embedding service initialized with model: {self.model_id}")

    def preprocess_text(self, text: str) -> str:
        """Truncate to max_text_length and normalize whitespace"""
        return normalize_text(text, self.max_text_length)

    def generate_embedding(self, text: str) -> List[float]:
        """
        Generate embedding for a single text

        Args:
            text: Input text to embed

        Returns:
            Embedding vector as list of floats
        """
        if not self.initialized:
            raise NotInitializedError("Embedding service not initialized")

        if not isinstance(text, str) or not text:
            raise InvalidInputError("Invalid input: text must be a non-empty string")

        processed_text = self.preprocess_text(text)
        if not processed_text:
            raise InvalidInputError("Invalid input: text contains only whitespace")

        try:
            embedding = self._call_api(processed_text)
        except EmbeddingRequestError as e:
            logger.error(f"Error generating embedding: {str(e)}")
            raise

        if not _is_vector(embedding):
            raise EmbeddingRequestError("Embedding backend returned a malformed vector")
        self._check_dimensions(embedding)

        logger.debug(f"Generated embedding for text (length: {len(processed_text)} chars, dim: {len(embedding)})")
        return embedding

    def generate_batch_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts, chunked by max_batch_size

        Args:
            texts: List of input texts to embed

        Returns:
            List of embedding vectors, one per input text and in input order
        """
        if not self.initialized:
            raise NotInitializedError("Embedding service not initialized")

        if isinstance(texts, str) or not isinstance(texts, Sequence) or len(texts) == 0:
            raise InvalidInputError("Invalid input: texts must be a non-empty list of strings")

        if not all(isinstance(text, str) for text in texts):
            raise InvalidInputError("Invalid input: every text must be a string")

        processed_texts = [self.preprocess_text(text) for text in texts]
        empty = [index for index, text in enumerate(processed_texts) if not text]
        if empty:
            raise InvalidInputError(f"Invalid input: texts at positions {empty} are empty or whitespace")

        if len(texts) > self.max_batch_size:
            logger.info(f"Splitting batch of {len(texts)} texts into chunks of {self.max_batch_size}")

        embeddings = []
        for i in range(0, len(processed_texts), self.max_batch_size):
            chunk = processed_texts[i:i + self.max_batch_size]
            try:
                chunk_embeddings = self._call_api(chunk)
            except EmbeddingRequestError as e:
                logger.error(f"Error generating batch embeddings: {str(e)}")
                raise

            if (
                not isinstance(chunk_embeddings, list)
                or len(chunk_embeddings) != len(chunk)
                or not all(_is_vector(v) for v in chunk_embeddings)
            ):
                raise EmbeddingRequestError(
                    f"Embedding backend returned a malformed batch for {len(chunk)} inputs"
                )
            for vector in chunk_embeddings:
                self._check_dimensions(vector)
            embeddings.extend(chunk_embeddings)

        logger.info(f"Generated {len(embeddings)} embeddings (dim: {len(embeddings[0]) if embeddings else 0})")
        return embeddings

    def _check_dimensions(self, vector: List[float]):
        if self.dimensions and len(vector) != self.dimensions:
            raise EmbeddingRequestError(
                f"Embedding backend returned {len(vector)} dimensions, expected {self.dimensions}"
            )

    def _call_api(self, inputs: Union[str, List[str]]) -> Any:
        """
        POST inputs to the embedding endpoint

        request_timeout bounds the whole call: requests only limits each
        connect and socket read, so the body is streamed and checked against
        an overall deadline.

        Args:
            inputs: Text or list of texts

        Returns:
            Decoded JSON body: one vector or a list of vectors
        """
        deadline = self._clock() + self.request_timeout
        try:
            response = self.session.post(
                self.api_endpoint,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json'
                },
                json={
                    'inputs': inputs,
                    'options': {'wait_for_model': True}
                },
                timeout=self.request_timeout,
                stream=True
            )
            try:
                body = self._read_body(response, deadline)
            finally:
                response.close()
        except requests.exceptions.Timeout as e:
            raise EmbeddingTimeoutError(
                f"API request timed out after {self.request_timeout}s", cause=e
            ) from e
        except requests.exceptions.RequestException as e:
            raise EmbeddingRequestError(f"API request failed: {str(e)}", cause=e) from e

        if not response.ok:
            raise EmbeddingRequestError(
                f"API request failed with status {response.status_code}: {body.decode('utf-8', errors='replace')}"
            )

        try:
            return json.loads(body)
        except ValueError as e:
            raise EmbeddingRequestError(f"API returned invalid JSON: {str(e)}", cause=e) from e

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        chunks = []
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            if self._clock() > deadline:
                raise EmbeddingTimeoutError(f"API request exceeded {self.request_timeout}s deadline")
            chunks.append(chunk)
        return b''.join(chunks)

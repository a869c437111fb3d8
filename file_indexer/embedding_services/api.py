"""
API Endpoints for Embedding, Indexing and Search
"""
from typing import List, Dict, Any, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from .embedding_client import EmbeddingService
from .vector_store import VectorStore
from .document_indexer import DocumentIndexer
from ..errors import (
    BackendUnavailableError,
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingRequestError,
    FileIndexerError,
    InvalidInputError,
    MissingDependencyError,
    NotInitializedError,
    PatternResolutionError,
)
from ..tools.glob_tool import GlobTool
from ..tools.view_tool import ViewTool
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

router = APIRouter(prefix="/embedding", tags=["Embedding & Indexing"])
logger = setup_logger('embedding_api', 'embedding.log')


# Global instances (singleton pattern)
_config: Optional[Dict[str, Any]] = None
_embedding_service: Optional[EmbeddingService] = None
_vector_store: Optional[VectorStore] = None
_document_indexer: Optional[DocumentIndexer] = None


def get_config() -> Dict[str, Any]:
    """Get or load configuration"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_embedding_service() -> EmbeddingService:
    """Get or create embedding service singleton"""
    global _embedding_service
    if _embedding_service is None:
        service = EmbeddingService(config=get_config())
        service.initialize()
        _embedding_service = service
    return _embedding_service


def get_vector_store() -> VectorStore:
    """Get or create vector store singleton"""
    global _vector_store
    if _vector_store is None:
        store = VectorStore(config=get_config())
        store.initialize()
        _vector_store = store
    return _vector_store


def get_document_indexer() -> DocumentIndexer:
    """Get or create document indexer singleton"""
    global _document_indexer
    if _document_indexer is None:
        config = get_config()
        _document_indexer = DocumentIndexer(
            embedding_service=get_embedding_service(),
            vector_store=get_vector_store(),
            path_resolver=GlobTool(config=config),
            file_reader=ViewTool(config=config),
            config=config
        )
    return _document_indexer


def _to_http_error(error: FileIndexerError) -> HTTPException:
    if isinstance(error, (InvalidInputError, DimensionMismatchError, PatternResolutionError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (NotInitializedError, BackendUnavailableError, ConfigurationError, MissingDependencyError)):
        return HTTPException(status_code=503, detail=str(error))
    if isinstance(error, EmbeddingRequestError):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


# Request/Response Models
class IndexRequest(BaseModel):
    """Request model for indexing files"""
    pattern: str


class IndexResponse(BaseModel):
    """Response model for an indexing run"""
    pattern: str
    total_files: int
    processed_files: int
    failed_files: int
    details: List[Dict[str, Any]]
    cancelled: bool = False


class SearchRequest(BaseModel):
    """Request model for vector search"""
    query: str
    limit: Optional[int] = None
    threshold: Optional[float] = None


class SearchResponse(BaseModel):
    """Response model for search results"""
    results: List[Dict[str, Any]]
    total: int


# Endpoints
# Blocking endpoints are plain functions so FastAPI runs them in its threadpool
@router.post("/index", response_model=IndexResponse)
def index_files(request: IndexRequest):
    """
    Index every file matching a pattern

    Args:
        pattern: Glob pattern relative to the configured base directory
    """
    try:
        indexer = get_document_indexer()
        report = indexer.index_files(request.pattern)
        return IndexResponse(**report.to_dict())

    except FileIndexerError as e:
        logger.error(f"Error indexing files: {str(e)}")
        raise _to_http_error(e)
    except Exception as e:
        logger.error(f"Error indexing files: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/search", response_model=SearchResponse)
def search_documents(request: SearchRequest):
    """
    Search for indexed content similar to a query

    Args:
        query: Search query text
        limit: Maximum number of results (memory.vector.max_results if omitted)
        threshold: Minimum similarity score
    """
    try:
        embedding_service = get_embedding_service()
        vector_store = get_vector_store()

        # Generate query embedding
        query_vector = embedding_service.generate_embedding(request.query)

        results = vector_store.find_similar(
            query_vector,
            limit=request.limit,
            threshold=request.threshold
        )

        return SearchResponse(
            results=results,
            total=len(results)
        )

    except FileIndexerError as e:
        logger.error(f"Error searching documents: {str(e)}")
        raise _to_http_error(e)
    except Exception as e:
        logger.error(f"Error searching documents: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/vectors")
async def get_vector_stats():
    """
    Number of stored vectors and their dimension
    """
    try:
        vector_store = get_vector_store()
        return {
            "total": vector_store.count(),
            "dimensions": vector_store.dimensions
        }

    except FileIndexerError as e:
        logger.error(f"Error getting vector stats: {str(e)}")
        raise _to_http_error(e)


@router.delete("/vectors/{vector_id:path}")
async def delete_vector(vector_id: str):
    """
    Delete a stored vector
    """
    try:
        vector_store = get_vector_store()
        return vector_store.delete_vector(vector_id)

    except FileIndexerError as e:
        logger.error(f"Error deleting vector: {str(e)}")
        raise _to_http_error(e)


@router.get("/health")
def health_check():
    """
    Check health of embedding service and vector store
    """
    try:
        get_embedding_service()
        embedding_status = "healthy"
    except Exception as e:
        embedding_status = f"unhealthy: {str(e)}"

    try:
        vector_store = get_vector_store()
        vector_store.count()
        vector_store_status = "healthy"
    except Exception as e:
        vector_store_status = f"unhealthy: {str(e)}"

    overall_healthy = embedding_status == "healthy" and vector_store_status == "healthy"

    return {
        "status": "healthy" if overall_healthy else "degraded",
        "embedding_service": embedding_status,
        "vector_store": vector_store_status
    }

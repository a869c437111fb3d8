from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from file_indexer import __version__
from file_indexer.embedding_services.api import router as embedding_router

app = FastAPI(
    title="File Indexer API",
    description="API for indexing file content and searching it by semantic similarity.",
    version=__version__
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(embedding_router)


@app.get("/")
async def root():
    return {
        "message": "Welcome to File Indexer API",
        "docs": "/docs",
        "health": "/embedding/health"
    }

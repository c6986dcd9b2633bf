"""
FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ai_editor import __version__
from ai_editor.config import settings
from ai_editor.middleware.logging import RequestLoggingMiddleware
from ai_editor.api import chat, edits, files
from ai_editor.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="AI Repository Editor",
    description="Chat with an AI assistant that proposes and commits line-based edits to a Git repository",
    version=__version__
)

# In production, restrict to the frontend origin
frontend_origins = [
    "http://localhost:3000",
    "http://localhost",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=frontend_origins if settings.environment == 'production' else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "AI Repository Editor API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(edits.router)
app.include_router(files.router)
app.include_router(chat.router)


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    logger.info("Starting AI Repository Editor API")

    from ai_editor.services.redis_client import get_redis_client
    redis_client = get_redis_client()
    await redis_client.initialize()
    logger.info("Redis client initialized")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup services on application shutdown."""
    logger.info("Shutting down AI Repository Editor API")

    from ai_editor.services.redis_client import get_redis_client
    redis_client = get_redis_client()
    await redis_client.close()
    logger.info("Redis client closed")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

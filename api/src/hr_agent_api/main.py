"""Main FastAPI application for HR Agent API.

This module sets up the FastAPI application with lifespan management,
health check endpoint, and API routing.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from qdrant_client import QdrantClient
from sqlalchemy import create_engine, text

from employee_store import init_database
from hr_agent_config import get_settings

from .routers import chat

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events.

    Startup: Initialize resources (database tables)
    Shutdown: Cleanup resources

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    logger.info("Starting HR Agent API")

    settings = get_settings()
    logger.info(f"Environment: {settings.environment}")

    try:
        init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Don't fail startup - health check will report unhealthy

    yield

    logger.info("Shutting down HR Agent API")


app = FastAPI(
    title="HR Agent API",
    description="LangGraph agent for HR employee questions",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(chat.router, tags=["chat"])


def _check_database(connection_string: str) -> str:
    """Probe the thread database with a trivial query."""
    engine = None
    try:
        engine = create_engine(connection_string)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return "unhealthy"
    finally:
        if engine is not None:
            engine.dispose()


def _check_vector_store(url: str) -> str:
    """Probe the employee vector store by listing collections."""
    try:
        QdrantClient(url=url).get_collections()
        return "healthy"
    except Exception as e:
        logger.error(f"Vector store health check failed: {e}")
        return "unhealthy"


@app.get("/health", tags=["health"])
def health_check():
    """Report readiness of the thread database and the employee vector store.

    Returns:
        JSONResponse with per-component checks; 200 when all are healthy,
        503 otherwise
    """
    settings = get_settings()

    checks = {
        "database": _check_database(settings.database.connection_string),
        "vector_store": _check_vector_store(settings.qdrant.url),
    }
    healthy = all(result == "healthy" for result in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "api",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks
        }
    )


@app.get("/", tags=["root"])
def root():
    """Root endpoint with API information.

    Returns:
        Dict with service banner and available endpoints
    """
    return {
        "service": "LangGraph Agent Server",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
        "chat": "/chat"
    }


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("hr_agent_api.main:app", host="0.0.0.0", port=get_settings().port)

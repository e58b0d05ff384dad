"""
logmongo API - FastAPI application.

Serves the stored request records and logs its own traffic through
RequestLoggerMiddleware.
"""

import os
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from logmongo import __version__
from logmongo.api.routes import router as logs_router
from logmongo.api.schemas import ErrorResponse, HealthResponse
from logmongo.config.settings import Settings, get_settings
from logmongo.database.mongodb import MongoSink
from logmongo.middleware.request_logger import RequestLoggerMiddleware
from logmongo.utils.logger_config import parse_channels, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    
    Flushes in-flight record writes on shutdown.
    """
    logger.info("Starting logmongo API...")
    yield
    logger.info("Shutting down logmongo API...")
    await app.state.sink.drain()


def create_app(
    settings: Optional[Settings] = None,
    sink: Optional[MongoSink] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        settings: Settings to use (environment when omitted)
        sink: Record sink shared by the middleware and the query routes
    
    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    setup_logging(
        settings.log_level,
        settings.log_line_format,
        debug_channels=parse_channels(settings.debug_channels),
    )
    
    if sink is None:
        sink = MongoSink(settings.mongodb_uri, settings.db_name, settings.collection)
    
    app = FastAPI(
        title="logmongo API",
        description="Structured HTTP request records stored in MongoDB.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.sink = sink
    app.state.settings = settings
    
    app.add_middleware(
        RequestLoggerMiddleware,
        format=settings.log_format,
        immediate=settings.immediate,
        sink=sink,
        settings=settings,
        skip=lambda req, res: req.url.startswith("/health"),
    )
    
    app.include_router(logs_router)
    
    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"]
    )
    async def health_check():
        """Report configuration state and in-flight writes."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            target_configured=sink.configured,
            pending_writes=sink.pending,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
    
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc) if os.getenv("DEBUG") else None,
                code="INTERNAL_ERROR",
            ).model_dump()
        )
    
    return app


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        create_app(),
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        log_level="info"
    )

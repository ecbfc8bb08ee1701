# =============================================================================
# File: main.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import signal
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from labboard.app_init import APP_SETTINGS
from labboard.exceptions import LabboardBaseException
from labboard.logger import get_logger
from labboard.routers import health, runs
from labboard.services.experiments_service import get_experiments_service
from labboard.utils.error_handler import ErrorHandler
from labboard.utils.log_sanitizer import sanitize_for_log

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    service = get_experiments_service()
    logger.info(
        "Serving experiments from %s", service.cache.storage.experiments_path
    )

    yield

    # Shutdown
    logger.info("Labboard shutting down, cache stats: %s", service.stats())


app = FastAPI(
    title=APP_SETTINGS.app.name,
    description=APP_SETTINGS.app.description,
    version=APP_SETTINGS.app.version,
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    lifespan=lifespan,
)


# Global exception handlers
@app.exception_handler(LabboardBaseException)
async def labboard_exception_handler(request: Request, exc: LabboardBaseException):
    """Handle custom Labboard exceptions."""
    status_code = ErrorHandler.get_http_status(exc)
    logger.warning(
        "Labboard exception in %s: %s",
        sanitize_for_log(str(request.url)),
        sanitize_for_log(exc.message),
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": exc.message,
            "error_code": exc.error_code,
            "detail": exc.message,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    ErrorHandler.handle_exception(
        exc, f"request to {request.url}", include_traceback=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error_code": "INTERNAL_ERROR",
            "detail": "An unexpected error occurred",
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=APP_SETTINGS.app.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(runs.router, prefix="/api/v1", tags=["Runs"])
app.include_router(health.router, prefix="/api/v1", tags=["Health & Monitoring"])


@app.get("/")
def root() -> dict:
    """Root endpoint for health check."""
    return {
        "message": "Labboard API is running",
        "version": "v1",
        "docs": "/api/v1/docs",
    }


@app.get("/favicon.ico")
def favicon():
    """Return empty response for favicon requests."""
    return Response(status_code=204)


def cleanup_handlers():
    """Clean up logger handlers."""
    import logging

    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)
    logging.shutdown()


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, shutting down gracefully...")
    cleanup_handlers()
    sys.exit(0)


def run_server():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info(
        f"Starting uvicorn server on {APP_SETTINGS.server.host}:{APP_SETTINGS.server.port}"
    )

    import uvicorn

    # Single worker: the run cache lives in this process.
    uvicorn.run(
        "labboard.main:app",
        host=APP_SETTINGS.server.host,
        port=APP_SETTINGS.server.port,
        workers=None,
        reload=not APP_SETTINGS.app.is_production,
        log_level="debug" if APP_SETTINGS.app.debug else "info",
        access_log=True,
        timeout_keep_alive=APP_SETTINGS.server.keepalive_timeout,
        timeout_graceful_shutdown=APP_SETTINGS.server.graceful_timeout,
    )

    logger.info("Labboard server stopped")


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error("Fatal error:", exc_info=e)
        sys.exit(1)

# Run Instruction
# Set Env: $env:LABBOARD_ENV="Development"
# Unit Test : python -m pytest
# Run for terminal: python -m labboard.main

"""Orderhook API - payment webhook ingestion for storefront orders.

This is the main entry point for the Orderhook API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from orderhook import __version__
from orderhook.api.v1.router import api_router
from orderhook.core.config import settings
from orderhook.core.database import init_db
from orderhook.core.exceptions import WebhookError
from orderhook.core.logging import logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    logger.info("Starting Orderhook API", version=__version__, env=settings.app_env)

    # Initialize database (create tables if needed)
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down Orderhook API")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
## Orderhook API

Receives payment provider callbacks and turns them into order state changes
and notifications.

### Key Features
- **Signed Webhooks**: Callbacks are verified against the provider signature before anything is read
- **Idempotent Processing**: Each delivered event is applied at most once, however often it is resent
- **Order Lifecycle**: pending, paid, processing, completed and failed, with guarded transitions
- **Collective Admin Notifications**: One stored row per event for the whole administrator set
- **Notification Repair**: Recreate notifications lost after an order committed

### Authentication
Operator endpoints require an API key header. The webhook endpoint is
authenticated by its payload signature.
    """,
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)


@app.exception_handler(WebhookError)
async def webhook_error_handler(request: Request, exc: WebhookError):
    """Map domain errors that reach the HTTP layer to their status code."""
    logger.warning(
        "webhook_error",
        path=request.url.path,
        error=exc.message,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


# HTTP exception handler (4xx errors)
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Global exception handler (5xx errors)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    # Don't expose internal errors in production
    if settings.is_production:
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
    )


# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint - basic API info."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "operational",
        "payment_provider": settings.payment_provider_name,
    }


# Simple health check for load balancer (no DB required)
@app.get("/health")
async def health():
    """Simple health check for load balancer."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "orderhook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )

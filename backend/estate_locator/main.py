"""Estate Locator FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from estate_locator.api import router
from estate_locator.config import get_settings
from estate_locator.models import ErrorCode, USER_MESSAGES
from estate_locator.services.cache import RedisCacheService
from estate_locator.services.factory import create_cache_store, create_location_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared HTTP client, cache store and location service."""
    settings = get_settings()
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_s)
    store = create_cache_store(settings)
    app.state.location_service = create_location_service(settings, http_client=http_client, store=store)
    logger.info(f"[STARTUP] {settings.app_name} {settings.version} ready")
    try:
        yield
    finally:
        await http_client.aclose()
        if isinstance(store, RedisCacheService):
            await store.disconnect()
        logger.info("[SHUTDOWN] Services closed")


app = FastAPI(
    title="Estate Locator API",
    description="Neighborhood verification and place discovery",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_content(code: ErrorCode, message: str) -> dict:
    return {
        "success": False,
        "error": {
            "code": code.value,
            "message": message,
            "user_message": USER_MESSAGES[code],
        },
    }


# Global exception handlers
@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: Exception):
    """Handle request and Pydantic validation errors."""
    return JSONResponse(status_code=422, content=_error_content(ErrorCode.VALIDATION_ERROR, str(exc)))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"[API] Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content=_error_content(ErrorCode.UNKNOWN, str(exc)))


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

"""Main FastAPI application for the Music Catalog API."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.db import close_db, init_db
from app.errors import AppError
from app.logging_config import logger, redact_sensitive_data
from app.rate_limit import limiter
from app.storage.factory import get_storage_backend
# Import routers
from app.auth.routes import router as auth_router
from app.music.routes import router as music_router
from app.users.routes import router as users_router

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Music Catalog API", version=API_VERSION)
    await init_db()
    # Create the storage backend once (upload dir / bucket checks) before serving
    get_storage_backend()
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down Music Catalog API")
    await close_db()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Music Catalog API",
    description="Music catalog with JWT authentication and pluggable media storage",
    version=API_VERSION,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_log_context(request: Request, call_next):
    """Start every request with a clean structured-logging context."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
    return await call_next(request)


# Exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render taxonomy errors with their status code."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    errors = [redact_sensitive_data(dict(error)) for error in exc.errors()]
    logger.warning(
        "Validation error",
        path=request.url.path,
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": [
            {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
            for error in errors
        ]},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "version": API_VERSION,
        "storage_backend": settings.storage_backend,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Music Catalog API",
        "version": API_VERSION,
        "docs": "/docs" if settings.debug else None,
    }


# Mount Prometheus metrics endpoint
if settings.enable_prometheus:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

# Serve locally stored media; object store locators point at the bucket instead
if settings.storage_backend == "local":
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


# Include routers
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(music_router, prefix="/api/v1/music", tags=["Music"])
app.include_router(users_router, prefix="/api/v1/user", tags=["User"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )

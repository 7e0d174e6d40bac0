"""
LastCall FastAPI Application - Main entry point.

LastCall builds weekly work schedules for venues:

- Organizations: roles, employees, promotion and removal
- Onboarding: invite links, join requests, approval
- Schedules: week generation, role blocks and shifts, publication
- Availability: weekly availability patterns and shift matching
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lastcall import __version__
from lastcall.api.v1 import api_router
from lastcall.core.config import settings
from lastcall.core.exceptions import LastCallError
from lastcall.db.base import init_db
from lastcall.schemas.common import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Note: a single documents table, created on startup
    await init_db()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    description="Scheduling and workforce onboarding for venues.",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(LastCallError)
async def lastcall_exception_handler(request: Request, exc: LastCallError):
    """Map domain errors to their HTTP status."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "lastcall.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )

"""Photo Facets FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.config import get_settings
from api.routers import analytics, filters, history, photos, preferences, presets
from api.services.database import DatabaseService, close_db, get_db
from config.logging_config import get_logger, setup_logging
from src.errors import CatalogUnavailableError

settings = get_settings()
setup_logging(log_level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="API for faceted photo discovery: filtering, counts, presets and history",
    lifespan=lifespan,
)


class CacheHeaderMiddleware(BaseHTTPMiddleware):
    """Sets Cache-Control on GET responses."""

    # Counts are served from the distribution cache, so clients may keep them as long.
    CACHEABLE_PATHS = {
        "/api/filter-counts": settings.cache_ttl_seconds,
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.method != "GET":
            return response

        max_age = next(
            (age for prefix, age in self.CACHEABLE_PATHS.items() if request.url.path.startswith(prefix)),
            None,
        )
        response.headers["Cache-Control"] = f"public, max-age={max_age}" if max_age else "no-cache"
        return response


app.add_middleware(CacheHeaderMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": {"message": "Photo catalog is unavailable", "retryable": exc.retryable}},
    )


app.include_router(photos.router, prefix="/api", tags=["Photos"])
app.include_router(filters.router, prefix="/api", tags=["Filters"])
app.include_router(presets.router, prefix="/api/presets", tags=["Presets"])
app.include_router(history.router, prefix="/api/history", tags=["History"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(preferences.router, prefix="/api/preferences", tags=["Preferences"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs",
        "endpoints": {
            "photos": "/api/photos",
            "filter_counts": "/api/filter-counts",
            "presets": "/api/presets",
            "history": "/api/history",
            "analytics": "/api/analytics",
            "preferences": "/api/preferences",
        },
    }


@app.get("/health")
async def health_check(db: DatabaseService = Depends(get_db)):
    """Health check endpoint."""
    try:
        return {
            "status": "healthy",
            "database": "connected",
            "total_photos": db.photo_count(),
        }
    except CatalogUnavailableError as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        }

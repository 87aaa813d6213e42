# Main application entry point

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.responses import Response
import uvicorn

from dropbox_media.config.settings import get_settings
from dropbox_media.api.routes import router
from dropbox_media.common.logging_config import setup_logging
from dropbox_media.common.metrics import get_metrics, get_metrics_content_type
from dropbox_media.common.middleware import RequestTrackingMiddleware

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging(settings.log_level, json_format=settings.json_logs)
    logger.info(
        f"Media manager API started with '{settings.storage_backend}' backend")
    yield
    logger.info("Media manager API stopped")


app = FastAPI(
    title="Dropbox Media API",
    description="Media manager backend for files stored in Dropbox",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")

# Cached Dropbox thumbnails are plain files served from their own directory
Path(settings.thumbnail_cache_path).mkdir(parents=True, exist_ok=True)
app.mount(
    f"/{settings.thumbnail_url_prefix.strip('/')}",
    StaticFiles(directory=settings.thumbnail_cache_path),
    name="thumbnails",
)

if settings.storage_backend in ("local", "filesystem"):
    Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
    app.mount(
        f"/{settings.local_url_prefix.strip('/')}",
        StaticFiles(directory=settings.storage_path),
        name="media",
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Dropbox Media API",
        "version": "0.1.0",
        "backend": settings.storage_backend,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint (alias for /live)"""
    return {"status": "healthy"}


@app.get("/live")
async def liveness():
    """Liveness check endpoint"""
    return {"status": "alive"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics"""
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


if __name__ == "__main__":
    uvicorn.run(
        "dropbox_media.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug
    )

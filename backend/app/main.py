"""FastAPI application for the listingproxy API."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from listingproxy import __version__
from listingproxy.collectors import BuildoutClient
from listingproxy.config import Settings, config
from listingproxy.storage import MemoryCache, SnapshotStore

from .refresh_worker import RefreshWorker
from .routers import listings, reference

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every API request with its status and response time."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms} ms)"
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[BuildoutClient] = None,
    store: Optional[SnapshotStore] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Configuration; defaults to the environment-loaded settings
        client: Upstream client; built from settings when omitted
        store: Snapshot store; built from settings when omitted
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage startup/shutdown: initial snapshot + refresh worker lifecycle."""
        upstream = client or BuildoutClient(
            settings.api_base_url,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
        )
        worker = RefreshWorker(
            upstream,
            store or SnapshotStore(settings.listings_path),
            interval_hours=settings.refresh_interval_hours,
            enabled=settings.refresh_enabled,
        )
        app.state.settings = settings
        app.state.upstream_client = upstream
        app.state.reference_cache = MemoryCache()
        app.state.refresh_worker = worker

        await worker.start()
        logger.info(f"Proxy ready with {worker.snapshot.count} listings")

        yield

        await worker.stop()
        await upstream.close()

    app = FastAPI(
        title="listingproxy API",
        description="Caching proxy for commercial real-estate listings",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=3600,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(listings.router, prefix="/api", tags=["Listings"])
    app.include_router(reference.router, prefix="/api", tags=["Reference"])

    @app.get("/")
    async def root():
        """API root endpoint."""
        return {
            "name": "listingproxy API",
            "version": __version__,
            "docs": "/docs",
            "endpoints": [
                "/api/listings",
                "/api/refresh",
                "/api/refresh/status",
                "/api/brokers",
                "/api/lease_spaces",
            ],
        }

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint."""
        worker = request.app.state.refresh_worker
        snapshot = worker.snapshot
        return {
            "status": "healthy",
            "state": worker.state.value,
            "listing_count": snapshot.count,
            "last_updated": snapshot.last_updated.isoformat() if snapshot.last_updated else None,
        }

    return app


app = create_app()

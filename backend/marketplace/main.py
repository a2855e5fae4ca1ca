"""
Marketplace Backend API
FastAPI application for browsing, creating, and contacting sellers of listings.
"""

import logging
import os
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.db import get_storage_bucket, get_supabase_client
from marketplace.errors import ConfigurationError
from marketplace.routers import listings, messages
from marketplace.services.catalog import CatalogView, ListingCache
from marketplace.services.storage import check_bucket

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Marketplace API",
    description="Browse, search, and post items for sale",
    version="0.1.0",
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Always includes http://localhost:3000 (Next.js dev server). Additional
    origins are read from the CORS_ORIGINS environment variable as a
    comma-separated list. Duplicates are removed while preserving order.
    """
    always_included = ["http://localhost:3000"]

    extra_origins: List[str] = []
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if cors_env:
        extra_origins = [o.strip() for o in cors_env.split(",") if o.strip()]

    seen: set = set()
    origins: List[str] = []
    for origin in always_included + extra_origins:
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
app.include_router(messages.router, prefix="/api/listings", tags=["messages"])


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.on_event("startup")
async def load_catalog() -> None:
    """
    Perform the initial catalog fetch.

    Missing Supabase settings are not fatal here; they surface on the first
    request that needs the client.
    """
    try:
        client = get_supabase_client()
    except ConfigurationError as exc:
        logger.warning(f"Skipping initial catalog load: {exc}")
        return

    cache = ListingCache(client)
    app.state.listing_cache = cache
    view = CatalogView(cache)
    if view.error:
        logger.warning(f"Initial catalog load failed: {view.error}")


@app.get("/")
async def root():
    return {"message": "Marketplace API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/db")
async def health_db():
    """
    Test the Supabase database connection.

    Executes a lightweight query (SELECT 1 row from listings). Returns 503 on
    failure.
    """
    try:
        get_supabase_client().table("listings").select("id").limit(1).execute()
        return {"status": "ok", "database": "reachable"}
    except Exception as exc:
        logger.error(f"Database health check failed: {exc}")
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(exc)}",
        )


@app.get("/health/storage")
async def health_storage():
    """
    Test Supabase Storage access.

    Verifies the listing image bucket exists. Returns 503 if storage is
    unreachable or the bucket is missing.
    """
    bucket = get_storage_bucket()
    try:
        bucket_found = check_bucket(get_supabase_client(), bucket)
    except Exception as exc:
        logger.error(f"Storage health check failed: {exc}")
        raise HTTPException(
            status_code=503,
            detail=f"Storage check failed: {str(exc)}",
        )

    if not bucket_found:
        raise HTTPException(
            status_code=503,
            detail=f"Storage bucket '{bucket}' not found",
        )

    return {"status": "ok", "storage": "reachable", "bucket": bucket}

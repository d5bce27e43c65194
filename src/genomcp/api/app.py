# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from genomcp import __version__
from genomcp.api.routes import cache, diagnosis, genes, health, registry, variants
from genomcp.core.exceptions import (
    DeadlineExceededError,
    StorageError,
    UpstreamError,
    UpstreamNotFound,
)

logger = logging.getLogger("genomcp.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    from genomcp.cache.manager import get_cache_manager, reset_cache_manager
    from genomcp.core.config import get_settings
    from genomcp.core.logging import setup_logging
    from genomcp.registry.namespace import close_registry_namespace, get_registry_namespace
    from genomcp.services.diagnosis import reset_diagnosis_service
    from genomcp.services.variants import reset_variant_service

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    # Hydrate the default shard before the first request arrives
    await get_registry_namespace().get().hydrate()

    yield

    reset_diagnosis_service()
    reset_variant_service()
    await get_cache_manager().close()
    reset_cache_manager()
    await close_registry_namespace()


def _error(status_code: int, code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "detail": str(exc)})


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UpstreamNotFound)
    async def _not_found(request: Request, exc: UpstreamNotFound) -> JSONResponse:
        return _error(404, "not_found", exc)

    @app.exception_handler(UpstreamError)
    async def _upstream(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning("Upstream failure on %s: %s", request.url.path, exc)
        return _error(502, "upstream_error", exc)

    @app.exception_handler(DeadlineExceededError)
    async def _deadline(request: Request, exc: DeadlineExceededError) -> JSONResponse:
        return _error(504, "timeout", exc)

    @app.exception_handler(StorageError)
    async def _storage(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return _error(503, "storage_error", exc)


def create_app() -> FastAPI:
    from genomcp.core.config import get_settings

    settings = get_settings()
    app = FastAPI(
        title="genomcp",
        description="Caching gateway for public genomic and pharmacogenomic APIs",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(variants.router, prefix="/api/v1", tags=["variants"])
    app.include_router(genes.router, prefix="/api/v1", tags=["genes"])
    app.include_router(diagnosis.router, prefix="/api/v1", tags=["diagnosis"])
    app.include_router(registry.router, prefix="/api/v1", tags=["registry"])
    app.include_router(cache.router, prefix="/api/v1", tags=["cache"])
    _register_exception_handlers(app)

    return app

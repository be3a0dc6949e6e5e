"""cfdetect FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router and require_ready gate — delegated to cfdetect/health.py
  - /detect router — delegated to cfdetect/inference/engine.py
  - /        route  — service discovery root (inline)
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()          → app.state.config
  2. create_http_client()   → app.state.http_client
  3. app.state.ready = True

Shutdown sequence (reverse):
  app.state.ready = False → close shared HTTP client
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from cfdetect.config import Config, load_config
from cfdetect.health import require_ready, router as health_router
from cfdetect.inference.engine import create_http_client, router as detect_router
from cfdetect.limiter import limiter
from cfdetect.middleware import BodySizeLimitMiddleware
from cfdetect.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


root_router = APIRouter(tags=["root"])


# ─── Root Endpoint ────────────────────────────────────────────────────────────


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "cfdetect",
        "tagline": "Public-signal inference of Cloudflare fronting",
        "detect": "/detect?domain=<domain>",
        "health": "/health",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("cfdetect starting up...")

    # load_config() raises SystemExit on an invalid file, before ready=True.
    config: Config = load_config()
    app.state.config = config

    http_client: httpx.AsyncClient = create_http_client(config.timeouts.outbound_s)
    app.state.http_client = http_client
    logger.info(
        "HTTP client created",
        timeout_s=config.timeouts.outbound_s,
        resolver=config.resolver.url,
    )

    app.state.ready = True
    logger.info("cfdetect ready", provider=config.provider.name)

    yield

    logger.info("cfdetect shutting down...")
    app.state.ready = False

    try:
        await http_client.aclose()
        logger.info("HTTP client closed")
    except Exception as exc:
        logger.warning("HTTP client close error (non-fatal)", error=str(exc))

    logger.info("cfdetect shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the cfdetect FastAPI application.

    Call this function directly in tests to get an isolated app instance:
        app = create_app()

    The module-level `app` is created at import time for uvicorn:
        uvicorn cfdetect.main:app --host 127.0.0.1 --port 8787
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="cfdetect",
        description="Infers whether a domain is fronted by Cloudflare from public signals",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    # /health returns 503 for any request that arrives before startup completes.
    application.state.ready = False

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Public read-only lookup; browsers on any origin may call it.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Inference-ID"],
    )

    # In Starlette the LAST-added middleware is OUTERMOST (runs first).
    application.add_middleware(BodySizeLimitMiddleware)
    application.add_middleware(SlowAPIMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(detect_router, dependencies=[Depends(require_ready)])

    # Global exception handlers
    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────

app = create_app()


# ─── Dev Entrypoint ───────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    _startup_config = load_config()
    host = _startup_config.server.host
    port = _startup_config.server.port

    logger.info("Starting cfdetect (dev mode)", host=host, port=port)

    uvicorn.run(
        "cfdetect.main:app",
        host=host,
        port=port,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower(),
    )

"""Health endpoint and readiness gate for cfdetect.

  GET /health   — 503 before ``app.state.ready`` is set, 200 afterwards.
  require_ready — the same 503 check as a FastAPI dependency for /detect.

The 200 body reports static configuration only; it never performs outbound
lookups, so it is safe for frequent container/cloud health probes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from cfdetect.config import Config

router = APIRouter(tags=["health"])


async def require_ready(request: Request) -> None:
    """Raise HTTP 503 until the lifespan has set ``app.state.ready``.

    Rendered by the global error wrapper as
    ``{"error": {"status": "starting", "message": "..."}}``.
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "cfdetect is starting up.",
            },
        )


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok",
          "provider": "cloudflare",
          "resolver": "https://cloudflare-dns.com/dns-query",
          "outbound_timeout_s": 5.0
        }
    """
    await require_ready(request)

    config: Config = request.app.state.config
    return {
        "status": "ok",
        "provider": config.provider.name,
        "resolver": config.resolver.url,
        "outbound_timeout_s": config.timeouts.outbound_s,
    }

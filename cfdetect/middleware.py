"""Request body size limit middleware for cfdetect.

A /detect POST body only ever carries ``{"domain": "..."}``. Anything above
MAX_REQUEST_BODY_BYTES is refused with HTTP 413 before the route runs.
  - Two-phase check:
      1. Content-Length fast path: reject immediately on oversized header value.
      2. Chunked/streaming slow path: accumulate body with rolling cap; reject
         as soon as the cap is exceeded.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from cfdetect.constants import MAX_REQUEST_BODY_BYTES
from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Error response bodies ────────────────────────────────────────────────────

_PAYLOAD_TOO_LARGE_BODY: dict = {
    "error": {
        "message": f"Request body too large. Maximum size: {MAX_REQUEST_BODY_BYTES} bytes",
        "code": "payload_too_large",
    }
}

_INVALID_CONTENT_LENGTH_BODY: dict = {
    "error": {
        "message": "Invalid Content-Length header",
        "code": "bad_request",
    }
}


# ─── Middleware ───────────────────────────────────────────────────────────────


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Starlette middleware enforcing the request body hard cap.

    Registration (in create_app() in cfdetect/main.py):
        application.add_middleware(BodySizeLimitMiddleware)

      - Content-Length > MAX_REQUEST_BODY_BYTES  → HTTP 413 (no body read)
      - Content-Length not an integer            → HTTP 400
      - No Content-Length, accumulated body > cap → HTTP 413 (rolling cap)
      - Otherwise the request passes through, body cached on the request
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        content_length_header = request.headers.get("content-length")

        # ── Phase 1: Content-Length fast path ─────────────────────────────────
        if content_length_header is not None:
            try:
                declared_size = int(content_length_header)
            except ValueError:
                logger.warning(
                    "Invalid Content-Length header",
                    value=content_length_header,
                    path=request.url.path,
                )
                return JSONResponse(
                    status_code=400,
                    content=_INVALID_CONTENT_LENGTH_BODY,
                )

            if declared_size > MAX_REQUEST_BODY_BYTES:
                logger.warning(
                    "Request body too large (Content-Length)",
                    declared_size=declared_size,
                    limit=MAX_REQUEST_BODY_BYTES,
                    path=request.url.path,
                )
                return JSONResponse(
                    status_code=413,
                    content=_PAYLOAD_TOO_LARGE_BODY,
                )

            return await call_next(request)

        # ── Phase 2: Chunked / no Content-Length — rolling cap ───────────────
        body_chunks: list[bytes] = []
        total_size: int = 0

        async for chunk in request.stream():
            total_size += len(chunk)
            if total_size > MAX_REQUEST_BODY_BYTES:
                logger.warning(
                    "Request body too large (chunked)",
                    accumulated_size=total_size,
                    limit=MAX_REQUEST_BODY_BYTES,
                    path=request.url.path,
                )
                return JSONResponse(
                    status_code=413,
                    content=_PAYLOAD_TOO_LARGE_BODY,
                )
            body_chunks.append(chunk)

        # Starlette's Request.body() returns request._body when set, so the
        # route can still read the already-consumed stream.
        request._body = b"".join(body_chunks)  # type: ignore[attr-defined]

        return await call_next(request)

"""Domain extraction from an incoming /detect request.

Precedence: a non-empty ``domain`` query parameter wins; otherwise the body
is parsed as JSON and its ``domain`` field is read. An unparseable body, a
non-object body, or a non-string field all count as absent. The result is
trimmed and lowercased; no other validation is done here.
"""

from __future__ import annotations

import json

from fastapi import HTTPException, Request

MISSING_DOMAIN_DETAIL = "Missing domain"


def normalize_domain(raw: object) -> str:
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()


async def extract_domain(request: Request) -> str:
    """Return the normalised domain for this request.

    Raises:
        HTTPException(400, "Missing domain"): when nothing usable was supplied.
            The global handler renders this as ``{"error": "Missing domain"}``.
    """
    raw: object = request.query_params.get("domain")

    if not raw:
        body = await request.body()
        if body:
            try:
                payload = json.loads(body)
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                raw = payload.get("domain")

    domain = normalize_domain(raw)
    if not domain:
        raise HTTPException(status_code=400, detail=MISSING_DOMAIN_DETAIL)
    return domain

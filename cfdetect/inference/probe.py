"""HTTP HEAD probe of the queried domain.

  probe():              one HEAD request to ``scheme://domain``
  probe_with_fallback(): https first; http once, only if https failed

Redirects are not followed: a 3xx is a normal answer at its own status.
Any network-level failure (DNS, TLS, refused connection, timeout, invalid
URL) becomes ``ProbeResult(ok=False, error=...)`` and is never raised.
``timeout`` bounds each whole attempt, headers and body included, not just
each socket read.
"""

from __future__ import annotations

import asyncio

import httpx

from cfdetect.constants import PROBE_HEADER_ALLOWLIST, PROBE_SCHEMES
from cfdetect.models.report import ProbeResult
from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)

# Ask any intermediary not to answer from cache.
_NO_CACHE_HEADERS: dict[str, str] = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def pick_headers(headers: httpx.Headers) -> dict[str, str]:
    """Keep allow-listed, non-empty response headers (lowercase keys)."""
    picked: dict[str, str] = {}
    for name in PROBE_HEADER_ALLOWLIST:
        value = headers.get(name)
        if value:
            picked[name] = value
    return picked


async def probe(
    client: httpx.AsyncClient,
    domain: str,
    scheme: str,
    timeout: float,
) -> ProbeResult:
    url = f"{scheme}://{domain}"
    try:
        response = await asyncio.wait_for(
            client.head(
                url,
                headers=_NO_CACHE_HEADERS,
                follow_redirects=False,
                timeout=timeout,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.info("HEAD probe exceeded deadline", url=url, timeout_s=timeout)
        return ProbeResult.failed(f"TimeoutError: no response within {timeout}s")
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.info(
            "HEAD probe failed",
            url=url,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return ProbeResult.failed(f"{type(exc).__name__}: {exc}")

    return ProbeResult(
        ok=True,
        status=response.status_code,
        headers=pick_headers(response.headers),
    )


async def probe_with_fallback(
    client: httpx.AsyncClient,
    domain: str,
    timeout: float,
) -> ProbeResult:
    """Probe over https; retry once over http if that failed.

    At most two attempts. The last attempt's result is returned.
    """
    result = ProbeResult.failed("no probe attempted")
    for scheme in PROBE_SCHEMES:
        result = await probe(client, domain, scheme, timeout)
        if result.ok:
            break
    if not result.ok:
        logger.warning("HEAD probe failed on every scheme", domain=domain, error=result.error)
    return result

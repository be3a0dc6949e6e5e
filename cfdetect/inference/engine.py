"""Inference engine for cfdetect — the /detect route and its fan-out.

For one normalised domain:
  1. A lookup          (DoH)                      ┐
  2. NS lookup         (DoH)                      │ issued concurrently,
  3. HEAD probe        (https, then http once)    │ joined with asyncio.gather
  4. Range lists       (IPv4 + IPv6, concurrent)  ┘
  5. Aggregation into an InferenceReport (pure, see verdict.py)

Key design properties:
  - Shared httpx.AsyncClient at app.state.http_client — never instantiated per-request
  - Every outbound call, body included, finishes within config.timeouts.outbound_s
  - Every lookup fails soft: a failure yields "no data", never an error response
  - Nothing is cached between requests; the range lists are refetched every time
"""

import asyncio

import httpx
from fastapi import APIRouter, Request, Response

from cfdetect.config import Config
from cfdetect.inference.doh import extract_ipv4, extract_nameservers, resolve
from cfdetect.inference.domain import extract_domain
from cfdetect.inference.probe import probe_with_fallback
from cfdetect.inference.ranges import fetch_provider_ranges
from cfdetect.inference.verdict import build_report
from cfdetect.limiter import DETECT_RATE_LIMIT, limiter
from cfdetect.models.report import InferenceReport
from cfdetect.models.responses import build_report_response
from cfdetect.utils.logger import InferenceTimer, get_logger, inference_context
from cfdetect.utils.ulid import generate_ulid

logger = get_logger(__name__)

router = APIRouter(tags=["detect"])

# ─── Connection pool ──────────────────────────────────────────────────────────

POOL_MAX_CONNECTIONS: int = 100
POOL_MAX_KEEPALIVE: int = 20
POOL_KEEPALIVE_EXPIRY: float = 30.0  # seconds


def create_http_client(timeout_s: float) -> httpx.AsyncClient:
    """Create the shared httpx.AsyncClient used for all outbound calls.

    Created once at lifespan startup and stored in app.state.http_client.
    The client pools connections only; it holds no response cache.

    Args:
        timeout_s: Per-operation httpx timeout (seconds). Call sites also bound
                   each whole call to the same value with asyncio.wait_for.
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
        ),
        timeout=httpx.Timeout(timeout_s),
        follow_redirects=False,
    )


# ─── Inference ────────────────────────────────────────────────────────────────


async def run_inference(
    domain: str,
    client: httpx.AsyncClient,
    config: Config,
) -> InferenceReport:
    """Gather all evidence for ``domain`` and aggregate it into a report.

    The four independent lookups run concurrently; aggregation only starts once
    every one of them has settled. Each lookup converts its own failures into
    empty results, so this never raises for network reasons. If one raises
    anyway, the remaining lookups are cancelled before the error propagates.
    """
    timeout = config.timeouts.outbound_s
    resolver_url = config.resolver.url

    lookups = [
        asyncio.ensure_future(resolve(client, resolver_url, domain, "A", timeout)),
        asyncio.ensure_future(resolve(client, resolver_url, domain, "NS", timeout)),
        asyncio.ensure_future(probe_with_fallback(client, domain, timeout)),
        asyncio.ensure_future(fetch_provider_ranges(client, config.provider, timeout)),
    ]
    try:
        a_answers, ns_answers, probe_result, ranges = await asyncio.gather(*lookups)
    except BaseException:
        # No lookup outlives this call.
        for task in lookups:
            task.cancel()
        await asyncio.gather(*lookups, return_exceptions=True)
        raise

    report = build_report(
        domain=domain,
        resolved_ips=extract_ipv4(a_answers),
        nameservers=extract_nameservers(ns_answers),
        headers=probe_result.headers,
        ranges=ranges,
        provider=config.provider,
    )

    logger.info(
        "inference_complete",
        domain=domain,
        resolved_ip_count=len(report.resolved_ips),
        nameserver_count=len(report.nameservers),
        probe_ok=probe_result.ok,
        probe_status=probe_result.status,
        range_count=len(ranges),
        ips_in_ranges=len(report.ips_in_provider_ranges),
        ns_using_provider=report.ns_using_provider,
        header_hints=report.header_hints,
        likely_using_provider=report.likely_using_provider,
    )
    return report


# ─── /detect ──────────────────────────────────────────────────────────────────


@router.api_route("/detect", methods=["GET", "POST"])
@limiter.limit(DETECT_RATE_LIMIT)
async def detect(request: Request) -> Response:
    """Infer whether a domain is fronted by the configured CDN provider.

    ``GET /detect?domain=example.com`` or ``POST /detect`` with
    ``{"domain": "example.com"}``.

    Returns:
        200 with the pretty-printed InferenceReport and ``X-Inference-ID``.

    Raises:
        HTTPException(400): no usable domain (rendered as ``{"error": "Missing domain"}``).
    """
    domain = await extract_domain(request)

    config: Config = request.app.state.config
    http_client: httpx.AsyncClient = request.app.state.http_client

    inference_id = generate_ulid()
    with inference_context(inference_id, domain), InferenceTimer(logger=logger):
        report = await run_inference(domain, http_client, config)

    return build_report_response(report, inference_id)

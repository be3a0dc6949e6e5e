"""DNS resolution over a DNS-over-HTTPS JSON endpoint.

  resolve():             one (name, record type) lookup → answer list or None
  extract_ipv4():        A-record addresses from an answer list
  extract_nameservers(): normalised hostnames from an NS answer list

Failure semantics: a non-2xx status, a transport error (timeouts included),
or a body that is not a JSON object all return None — "no data", never an
exception. A successful response without an ``Answer`` field returns [].
The timeout bounds the whole lookup, not each socket read.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from cfdetect.constants import DNS_TYPE_A, DOH_CONTENT_TYPE
from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)

AnswerSet = list[dict[str, Any]]


async def resolve(
    client: httpx.AsyncClient,
    resolver_url: str,
    name: str,
    record_type: str,
    timeout: float,
) -> Optional[AnswerSet]:
    """Query the DoH JSON resolver for ``name``/``record_type``.

    Args:
        client:       Shared httpx client.
        resolver_url: DoH endpoint, e.g. ``https://cloudflare-dns.com/dns-query``.
        name:         Exact name to look up; no CNAME chasing is done here.
        record_type:  ``"A"``, ``"NS"``, ...
        timeout:      Per-call deadline in seconds.

    Returns:
        The ``Answer`` list (``[]`` when absent), or None on any failure.
    """
    try:
        response = await asyncio.wait_for(
            client.get(
                resolver_url,
                params={"name": name, "type": record_type, "ct": DOH_CONTENT_TYPE},
                headers={"Accept": DOH_CONTENT_TYPE},
                timeout=timeout,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "DoH lookup exceeded deadline",
            name=name,
            record_type=record_type,
            timeout_s=timeout,
        )
        return None
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning(
            "DoH lookup failed",
            name=name,
            record_type=record_type,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return None

    if not response.is_success:
        logger.warning(
            "DoH lookup returned non-success status",
            name=name,
            record_type=record_type,
            status_code=response.status_code,
        )
        return None

    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning(
            "DoH response is not valid JSON",
            name=name,
            record_type=record_type,
            error=str(exc),
        )
        return None

    if not isinstance(payload, dict):
        logger.warning("DoH response is not a JSON object", name=name, record_type=record_type)
        return None

    answers = payload.get("Answer")
    if not isinstance(answers, list):
        return []
    return [a for a in answers if isinstance(a, dict)]


def extract_ipv4(answers: Optional[AnswerSet]) -> list[str]:
    """Return the ``data`` of every type-1 (A) record, in answer order."""
    if not answers:
        return []
    return [
        str(a["data"])
        for a in answers
        if a.get("type") == DNS_TYPE_A and a.get("data") is not None
    ]


def extract_nameservers(answers: Optional[AnswerSet]) -> list[str]:
    """Return answer hostnames lowercased with one trailing ``.`` stripped.

    Every record in the NS answer set is taken, whatever its type code.
    """
    if not answers:
        return []
    return [
        str(a["data"]).removesuffix(".").lower()
        for a in answers
        if a.get("data") is not None
    ]

"""Retrieval of the provider's published IP range lists.

Both lists (IPv4 and IPv6) are fetched on every inference — there is no
cache. They are concatenated in that order, split on any line ending, and
blank lines are dropped. A list that cannot be fetched (transport error,
timeout, non-2xx status) contributes no entries; the inference continues
with whatever was retrieved. The timeout bounds each whole fetch.
"""

from __future__ import annotations

import asyncio

import httpx

from cfdetect.config import ProviderConfig
from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)


def split_ranges(text: str) -> list[str]:
    """Split a range list on any line ending and drop blank lines."""
    return [line for line in text.splitlines() if line.strip()]


async def fetch_range_list(client: httpx.AsyncClient, url: str, timeout: float) -> list[str]:
    """GET one plaintext range list; [] on any failure."""
    try:
        response = await asyncio.wait_for(client.get(url, timeout=timeout), timeout=timeout)
        response.raise_for_status()
    except asyncio.TimeoutError:
        logger.warning("Range list fetch exceeded deadline", url=url, timeout_s=timeout)
        return []
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning(
            "Range list fetch failed — continuing without it",
            url=url,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return []
    return split_ranges(response.text)


async def fetch_provider_ranges(
    client: httpx.AsyncClient,
    provider: ProviderConfig,
    timeout: float,
) -> list[str]:
    """Fetch the IPv4 and IPv6 lists concurrently; IPv4 entries come first."""
    ipv4, ipv6 = await asyncio.gather(
        fetch_range_list(client, provider.ipv4_ranges_url, timeout),
        fetch_range_list(client, provider.ipv6_ranges_url, timeout),
    )
    logger.debug("Provider ranges fetched", ipv4_count=len(ipv4), ipv6_count=len(ipv6))
    return ipv4 + ipv6

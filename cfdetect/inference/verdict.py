"""Verdict aggregation — pure functions over the gathered evidence.

Matching is deliberately loose: a nameserver counts if it ends with the
provider's nameserver suffix *or* contains the provider name anywhere, and the
``server`` header counts if it contains the provider name. Both can give false
positives (e.g. ``ns1.notcloudflare.example``); no scoring or weighting is
applied on top of the boolean OR.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from cfdetect.config import ProviderConfig
from cfdetect.inference.cidr import ipv4_in_ranges
from cfdetect.models.report import InferenceReport

RAY_HEADER_HINT = "cf-ray header present"
CACHE_STATUS_HEADER_HINT = "cf-cache-status header present"


def ns_uses_provider(nameservers: Iterable[str], provider: ProviderConfig) -> bool:
    for ns in nameservers:
        normalized = ns.removesuffix(".").lower()
        if normalized.endswith(provider.nameserver_suffix) or provider.name in normalized:
            return True
    return False


def header_hints(headers: Mapping[str, str], provider: ProviderConfig) -> list[str]:
    """Human-readable header evidence, in fixed order: server, ray id, cache status."""
    hints: list[str] = []
    server = headers.get("server")
    if server and provider.name in server.lower():
        hints.append(f"server: {provider.name}")
    if headers.get("cf-ray"):
        hints.append(RAY_HEADER_HINT)
    if headers.get("cf-cache-status"):
        hints.append(CACHE_STATUS_HEADER_HINT)
    return hints


def build_report(
    domain: str,
    resolved_ips: list[str],
    nameservers: list[str],
    headers: Mapping[str, str],
    ranges: list[str],
    provider: ProviderConfig,
) -> InferenceReport:
    """Combine lookup results into the final InferenceReport."""
    ips_in_ranges = [ip for ip in resolved_ips if ipv4_in_ranges(ip, ranges)]
    ns_match = ns_uses_provider(nameservers, provider)
    hints = header_hints(headers, provider)

    return InferenceReport(
        domain=domain,
        resolved_ips=resolved_ips,
        nameservers=nameservers,
        header_hints=hints,
        ips_in_provider_ranges=ips_in_ranges,
        ns_using_provider=ns_match,
        likely_using_provider=ns_match or bool(hints) or bool(ips_in_ranges),
    )

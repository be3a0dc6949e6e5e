"""Request-scoped result types for one inference.

Nothing here outlives a single /detect request. ProbeResult records the
outcome of the HEAD probe; InferenceReport is the final verdict rendered
as the response body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


# ─── ProbeResult ──────────────────────────────────────────────────────────────


@dataclass
class ProbeResult:
    """Outcome of a HEAD probe against ``scheme://domain``.

    ok=True means the server answered (any status, redirects included).
    ok=False means a network-level failure; ``error`` carries the message.
    """

    ok: bool
    status: Optional[int] = None
    headers: dict[str, str] = field(default_factory=dict)
    """Only allow-listed headers, and only those the origin returned."""
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "ProbeResult":
        return cls(ok=False, error=error)


# ─── InferenceReport ──────────────────────────────────────────────────────────


@dataclass
class InferenceReport:
    """Verdict plus the evidence it was derived from.

    Key order in ``to_dict()`` is the wire order of the response body.
    """

    domain: str
    resolved_ips: list[str] = field(default_factory=list)
    nameservers: list[str] = field(default_factory=list)
    header_hints: list[str] = field(default_factory=list)
    ips_in_provider_ranges: list[str] = field(default_factory=list)
    ns_using_provider: bool = False
    likely_using_provider: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "resolved_ips": self.resolved_ips,
            "nameservers": self.nameservers,
            "headerHints": self.header_hints,
            "ips_in_cloudflare_ranges": self.ips_in_provider_ranges,
            "ns_using_cloudflare": self.ns_using_provider,
            "likely_using_cloudflare": self.likely_using_provider,
        }

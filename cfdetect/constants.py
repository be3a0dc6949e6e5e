"""Shared constants for cfdetect.

Default endpoints, header allow-lists and size caps used across modules are
defined here. No magic values in other modules — import from here.
"""

# ─── Provider defaults ───────────────────────────────────────────────────────

# Lowercase name used for substring matching against nameservers and the
# `server` response header.
DEFAULT_PROVIDER_NAME: str = "cloudflare"

# Canonical nameserver suffix; every zone delegated to the provider uses
# <name>.ns.cloudflare.com nameservers.
DEFAULT_NAMESERVER_SUFFIX: str = "ns.cloudflare.com"

# Published address ranges, one CIDR block per line.
DEFAULT_IPV4_RANGES_URL: str = "https://www.cloudflare.com/ips-v4"
DEFAULT_IPV6_RANGES_URL: str = "https://www.cloudflare.com/ips-v6"

# DNS-over-HTTPS JSON endpoint.
DEFAULT_RESOLVER_URL: str = "https://cloudflare-dns.com/dns-query"
DOH_CONTENT_TYPE: str = "application/dns-json"

# DNS record type code for A records in DoH JSON answers.
DNS_TYPE_A: int = 1

# ─── HTTP probe ──────────────────────────────────────────────────────────────

# Response headers kept from the HEAD probe. Anything else is discarded.
PROBE_HEADER_ALLOWLIST: tuple[str, ...] = (
    "server",
    "cf-ray",
    "cf-cache-status",
    "via",
    "x-powered-by",
)

# Secure transport first; plain transport only when the first attempt fails.
PROBE_SCHEMES: tuple[str, ...] = ("https", "http")

# ─── Outbound calls ──────────────────────────────────────────────────────────

# Per-call deadline (seconds) for every resolver, probe and range-list request.
DEFAULT_OUTBOUND_TIMEOUT_S: float = 5.0

# Inference runs slower than this are logged at WARNING.
SLOW_INFERENCE_WARN_MS: float = 10_000.0

# ─── Inbound requests ────────────────────────────────────────────────────────

# A POST body only ever carries {"domain": "..."}; anything larger is refused.
MAX_REQUEST_BODY_BYTES: int = 16_384  # 16 KiB

# Response header carrying the per-inference ULID.
INFERENCE_ID_HEADER: str = "X-Inference-ID"

"""Config loading for cfdetect.

Reads `.cfdetect/config.yaml` (or `~/.cfdetect/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. CFDETECT_CONFIG environment variable (if set)
  3. `.cfdetect/config.yaml` (working directory — for development)
  4. `~/.cfdetect/config.yaml` (home directory — for production deployments)

Environment variable overrides:
  CFDETECT_PORT — overrides server.port (takes precedence over config file value)
  CFDETECT_CONFIG — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from cfdetect.constants import (
    DEFAULT_IPV4_RANGES_URL,
    DEFAULT_IPV6_RANGES_URL,
    DEFAULT_NAMESERVER_SUFFIX,
    DEFAULT_OUTBOUND_TIMEOUT_S,
    DEFAULT_PROVIDER_NAME,
    DEFAULT_RESOLVER_URL,
)
from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Default config search paths (CFDETECT_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".cfdetect/config.yaml",
    os.path.expanduser("~/.cfdetect/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ProviderConfig:
    """CDN provider identity and published range lists.

    name:              lowercase name matched as a substring of nameservers and
                       the `server` header
    nameserver_suffix: canonical suffix of the provider's authoritative nameservers
    ipv4_ranges_url:   plaintext list of IPv4 CIDR blocks, one per line
    ipv6_ranges_url:   plaintext list of IPv6 CIDR blocks, one per line
    """

    name: str = DEFAULT_PROVIDER_NAME
    nameserver_suffix: str = DEFAULT_NAMESERVER_SUFFIX
    ipv4_ranges_url: str = DEFAULT_IPV4_RANGES_URL
    ipv6_ranges_url: str = DEFAULT_IPV6_RANGES_URL


@dataclass
class ResolverConfig:
    """DNS-over-HTTPS JSON resolver."""

    url: str = DEFAULT_RESOLVER_URL


@dataclass
class TimeoutConfig:
    """Outbound call deadlines."""

    outbound_s: float = DEFAULT_OUTBOUND_TIMEOUT_S


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8787


@dataclass
class Config:
    """Root configuration object populated from .cfdetect/config.yaml.

    All fields have safe defaults — cfdetect can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Args:
            raw:  Parsed YAML dict (must already be validated for version field).
            path: Path to the config file (stored in Config.path).

        Returns:
            Config with all fields populated from raw + defaults for missing fields.

        Raises:
            SystemExit(1): On a non-positive or non-numeric timeouts.outbound_s.
        """
        # ── Provider ──────────────────────────────────────────────────────────
        provider_raw = raw.get("provider") or {}
        provider = ProviderConfig(
            name=str(provider_raw.get("name", DEFAULT_PROVIDER_NAME)).lower(),
            nameserver_suffix=str(
                provider_raw.get("nameserver_suffix", DEFAULT_NAMESERVER_SUFFIX)
            ).lower(),
            ipv4_ranges_url=provider_raw.get("ipv4_ranges_url", DEFAULT_IPV4_RANGES_URL),
            ipv6_ranges_url=provider_raw.get("ipv6_ranges_url", DEFAULT_IPV6_RANGES_URL),
        )

        # ── Resolver ──────────────────────────────────────────────────────────
        resolver_raw = raw.get("resolver") or {}
        resolver = ResolverConfig(url=resolver_raw.get("url", DEFAULT_RESOLVER_URL))

        # ── Timeouts ──────────────────────────────────────────────────────────
        timeouts_raw = raw.get("timeouts") or {}
        outbound_s = timeouts_raw.get("outbound_s", DEFAULT_OUTBOUND_TIMEOUT_S)
        if isinstance(outbound_s, bool) or not isinstance(outbound_s, (int, float)) or outbound_s <= 0:
            msg = (
                f"CONFIG ERROR: Invalid timeouts.outbound_s: {outbound_s!r}. "
                "Must be a positive number of seconds."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
        timeouts = TimeoutConfig(outbound_s=float(outbound_s))

        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8787),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            provider=provider,
            resolver=resolver,
            timeouts=timeouts,
            server=server,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate cfdetect configuration.

    Search order:
      1. ``config_path`` argument (if provided)
      2. ``CFDETECT_CONFIG`` environment variable (if set)
      3. ``.cfdetect/config.yaml``
      4. ``~/.cfdetect/config.yaml``

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    After loading (or defaulting), ``CFDETECT_PORT`` is applied as an override
    to ``config.server.port``.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid timeout, or invalid ``CFDETECT_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("CFDETECT_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "cfdetect refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)

    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "cfdetect is configured to bind on 0.0.0.0 (all interfaces). "
            "Every inference triggers outbound requests to the queried domain; "
            "expose it only behind a rate-limiting front end."
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        provider=config.provider.name,
        outbound_timeout_s=config.timeouts.outbound_s,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Currently handles:
      CFDETECT_PORT — overrides config.server.port (integer; SystemExit(1) if invalid)
    """
    env_port = os.environ.get("CFDETECT_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: CFDETECT_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)

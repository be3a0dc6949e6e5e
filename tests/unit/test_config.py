"""Unit tests for cfdetect/config.py — config file loading and validation.

Covers:
  - missing config file → Config.defaults(), not an error
  - sections merged onto defaults; unknown keys ignored
  - missing / unsupported version, invalid YAML, non-mapping → SystemExit(1)
  - invalid timeouts.outbound_s → SystemExit(1)
  - CFDETECT_CONFIG and CFDETECT_PORT environment variables
"""

from __future__ import annotations

import textwrap
from typing import Any

import pytest

from cfdetect.config import (
    SUPPORTED_VERSIONS,
    Config,
    ProviderConfig,
    ResolverConfig,
    ServerConfig,
    TimeoutConfig,
    load_config,
)
from cfdetect.constants import (
    DEFAULT_IPV4_RANGES_URL,
    DEFAULT_IPV6_RANGES_URL,
    DEFAULT_OUTBOUND_TIMEOUT_S,
    DEFAULT_RESOLVER_URL,
)


def _write(tmp_path: Any, text: str) -> str:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(textwrap.dedent(text))
    return str(config_file)


# ─── Defaults ─────────────────────────────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/to/config.yaml")
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_default_provider(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.provider.name == "cloudflare"
        assert config.provider.nameserver_suffix == "ns.cloudflare.com"
        assert config.provider.ipv4_ranges_url == DEFAULT_IPV4_RANGES_URL
        assert config.provider.ipv6_ranges_url == DEFAULT_IPV6_RANGES_URL

    def test_default_resolver_and_timeout(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.resolver.url == DEFAULT_RESOLVER_URL
        assert config.timeouts.outbound_s == DEFAULT_OUTBOUND_TIMEOUT_S

    def test_default_server(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8787


# ─── File parsing ─────────────────────────────────────────────────────────────


class TestValidConfigFile:
    def test_version_only_gives_defaults(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\n")
        config = load_config(config_path=path)
        assert config.provider == ProviderConfig()
        assert config.resolver == ResolverConfig()
        assert config.timeouts == TimeoutConfig()
        assert config.server == ServerConfig()
        assert config.path == path

    def test_sections_override_defaults(self, tmp_path: Any) -> None:
        path = _write(
            tmp_path,
            """
            version: 1
            provider:
              name: Cloudflare
              ipv4_ranges_url: https://mirror.test/v4
            resolver:
              url: https://dns.google/resolve
            timeouts:
              outbound_s: 2.5
            server:
              host: 0.0.0.0
              port: 9000
            """,
        )
        config = load_config(config_path=path)
        assert config.provider.name == "cloudflare"
        assert config.provider.ipv4_ranges_url == "https://mirror.test/v4"
        assert config.provider.ipv6_ranges_url == DEFAULT_IPV6_RANGES_URL
        assert config.resolver.url == "https://dns.google/resolve"
        assert config.timeouts.outbound_s == 2.5
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000

    def test_integer_timeout_accepted(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\ntimeouts:\n  outbound_s: 3\n")
        assert load_config(config_path=path).timeouts.outbound_s == 3.0

    def test_unknown_keys_ignored(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nextra_section:\n  foo: bar\n")
        assert load_config(config_path=path).version == 1

    def test_empty_section_uses_defaults(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nprovider:\n")
        assert load_config(config_path=path).provider == ProviderConfig()


# ─── Invalid files ────────────────────────────────────────────────────────────


class TestInvalidConfigFile:
    def test_missing_version(self, tmp_path: Any, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write(tmp_path, "server:\n  port: 9000\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "version" in capsys.readouterr().err

    def test_unsupported_version(self, tmp_path: Any, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write(tmp_path, "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "Unsupported config version" in capsys.readouterr().err
        assert 2 not in SUPPORTED_VERSIONS

    def test_invalid_yaml(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nprovider: [unclosed\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1

    def test_empty_file(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    def test_scalar_document(self, tmp_path: Any, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write(tmp_path, "just a string\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "not a valid YAML mapping" in capsys.readouterr().err

    @pytest.mark.parametrize("value", ["0", "-1", "fast", "true"])
    def test_invalid_timeout(self, tmp_path: Any, value: str) -> None:
        path = _write(tmp_path, f"version: 1\ntimeouts:\n  outbound_s: {value}\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1


# ─── Environment variables ────────────────────────────────────────────────────


class TestEnvironmentOverrides:
    def test_cfdetect_config_env(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 9100\n")
        monkeypatch.setenv("CFDETECT_CONFIG", path)
        config = load_config()
        assert config.server.port == 9100
        assert config.path == path

    def test_port_override_with_file(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 9100\n")
        monkeypatch.setenv("CFDETECT_PORT", "9200")
        assert load_config(config_path=path).server.port == 9200

    def test_port_override_without_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CFDETECT_PORT", "9300")
        assert load_config(config_path="/nonexistent/config.yaml").server.port == 9300

    def test_invalid_port_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CFDETECT_PORT", "not-a-port")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path="/nonexistent/config.yaml")
        assert exc_info.value.code == 1

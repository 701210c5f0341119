"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from dhgraph.models.config import AnalyzerConfig, DHGraphConfig, LogConfig

_DNS_NAME = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?(\.[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?)*$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"DHGRAPH_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_list(key: str) -> frozenset[str]:
    return frozenset(item.strip() for item in _env(key).split(",") if item.strip())


def _validate_domain(value: str) -> str:
    value = value.strip().lower()
    if not _DNS_NAME.match(value):
        raise ValueError(f"Invalid vendor domain: {value!r}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> DHGraphConfig:
    """Load configuration from DHGRAPH_* environment variables."""
    return DHGraphConfig(
        analyzer=AnalyzerConfig(
            domain_group_enabled=_env_bool("DOMAIN_GROUP_ENABLED", False),
            vendor_domain=_validate_domain(_env("VENDOR_DOMAIN", "deckhouse.io")),
            disabled_detectors=_env_list("DISABLED_DETECTORS"),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel

_SETTINGS: Optional["Settings"] = None


class Settings(BaseModel):
    npm_registry_url: str = "https://registry.npmjs.org"
    npm_downloads_url: str = "https://api.npmjs.org"
    bundlephobia_url: str = "https://bundlephobia.com"
    osv_api_url: str = "https://api.osv.dev"
    npms_api_url: str = "https://api.npms.io"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_token: Optional[str] = None
    upstream_timeout_s: float = 15.0
    user_agent: str = "NPM-Sentinel-MCP"
    log_level: str = "INFO"


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_optional_float_with_default(value: str | None, default: float) -> float:
    parsed = _parse_optional_float(value)
    if parsed is None:
        return default
    return parsed


def _resolve_url(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return (raw or default).rstrip("/")


def load_settings() -> Settings:
    defaults = Settings()
    token = (os.getenv("GITHUB_TOKEN") or "").strip() or None
    return Settings(
        npm_registry_url=_resolve_url("NPM_REGISTRY_URL", defaults.npm_registry_url),
        npm_downloads_url=_resolve_url("NPM_DOWNLOADS_URL", defaults.npm_downloads_url),
        bundlephobia_url=_resolve_url("BUNDLEPHOBIA_URL", defaults.bundlephobia_url),
        osv_api_url=_resolve_url("OSV_API_URL", defaults.osv_api_url),
        npms_api_url=_resolve_url("NPMS_API_URL", defaults.npms_api_url),
        github_api_url=_resolve_url("GITHUB_API_URL", defaults.github_api_url),
        github_raw_url=_resolve_url("GITHUB_RAW_URL", defaults.github_raw_url),
        github_token=token,
        upstream_timeout_s=max(
            1.0,
            _parse_optional_float_with_default(
                os.getenv("UPSTREAM_TIMEOUT_S"), defaults.upstream_timeout_s
            ),
        ),
        user_agent=(os.getenv("NPM_SENTINEL_USER_AGENT") or "").strip() or defaults.user_agent,
        log_level=(os.getenv("LOG_LEVEL") or "").strip().upper() or defaults.log_level,
    )


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def reset_settings() -> None:
    global _SETTINGS
    _SETTINGS = None

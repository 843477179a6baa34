from __future__ import annotations

from typing import Any, Dict

from npm_sentinel.core import upstream_schemas
from npm_sentinel.core.config import get_settings
from npm_sentinel.tools import http_client
from npm_sentinel.tools.common import require_shape

NPM_REGISTRY = "npm registry"
NPM_DOWNLOADS = "npm downloads API"
NPMS = "npms.io API"


def fetch_packument(package: str) -> Dict[str, Any]:
    url = f"{get_settings().npm_registry_url}/{http_client.registry_path(package)}"
    data = http_client.fetch_json(url, source=NPM_REGISTRY)
    return require_shape(
        upstream_schemas.NPM_PACKAGE_INFO, data, NPM_REGISTRY, "Invalid package info format"
    )


def fetch_manifest(package: str) -> Dict[str, Any]:
    url = f"{get_settings().npm_registry_url}/{http_client.registry_path(package)}/latest"
    data = http_client.fetch_json(url, source=NPM_REGISTRY)
    return require_shape(
        upstream_schemas.NPM_PACKAGE_DATA, data, NPM_REGISTRY, "Invalid package data received"
    )


def fetch_downloads(package: str, period: str = "last-month") -> Dict[str, Any]:
    url = f"{get_settings().npm_downloads_url}/downloads/point/{period}/{package.strip()}"
    data = http_client.fetch_json(url, source=NPM_DOWNLOADS)
    return require_shape(
        upstream_schemas.NPM_DOWNLOADS_POINT,
        data,
        NPM_DOWNLOADS,
        "Invalid response format from npm downloads API",
    )


def fetch_npms(package: str) -> Dict[str, Any]:
    url = f"{get_settings().npms_api_url}/v2/package/{http_client.component(package)}"
    data = http_client.fetch_json(url, source=NPMS)
    return require_shape(
        upstream_schemas.NPMS_PACKAGE, data, NPMS, "Invalid response format from npms.io API"
    )


def search(text: str, size: int) -> Dict[str, Any]:
    url = f"{get_settings().npm_registry_url}/-/v1/search"
    data = http_client.fetch_json(url, source=NPM_REGISTRY, params={"text": text, "size": size})
    return require_shape(
        upstream_schemas.NPM_SEARCH_RESULT,
        data,
        NPM_REGISTRY,
        "Invalid search results data received",
    )


def latest_version(packument: Dict[str, Any]) -> str:
    latest = packument.get("dist-tags", {}).get("latest")
    if not latest or latest not in packument.get("versions", {}):
        raise ValueError("No latest version found")
    return latest

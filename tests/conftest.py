from __future__ import annotations

import json
import threading
from typing import Any, Dict, List, Optional, Tuple
from urllib.error import HTTPError
from urllib.request import Request

import pytest

from npm_sentinel.core.config import reset_settings
from npm_sentinel.tools import http_client

REGISTRY = "https://registry.npmjs.org"
DOWNLOADS = "https://api.npmjs.org"
NPMS = "https://api.npms.io"
BUNDLEPHOBIA = "https://bundlephobia.com"
OSV = "https://api.osv.dev"
GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"

_ENV_VARS = (
    "NPM_REGISTRY_URL",
    "NPM_DOWNLOADS_URL",
    "BUNDLEPHOBIA_URL",
    "OSV_API_URL",
    "NPMS_API_URL",
    "GITHUB_API_URL",
    "GITHUB_RAW_URL",
    "GITHUB_TOKEN",
    "UPSTREAM_TIMEOUT_S",
    "NPM_SENTINEL_USER_AGENT",
    "LOG_LEVEL",
)


class FakeUpstream:
    """Stands in for the network: routes full URLs to canned responses.

    Any URL without a route answers 404.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, bytes]] = {}
        self.requests: List[Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: Request, timeout_s: float) -> bytes:
        url = request.full_url
        with self._lock:
            self.requests.append(request)
        status, body = self.routes.get(url, (404, b'{"error":"Not found"}'))
        if status >= 400:
            raise HTTPError(url, status, "Not Found" if status == 404 else "Error", None, None)
        return body

    def json(self, url: str, payload: Any, status: int = 200) -> None:
        self.routes[url] = (status, json.dumps(payload).encode("utf-8"))

    def raw(self, url: str, body: str, status: int = 200) -> None:
        self.routes[url] = (status, body.encode("utf-8"))

    def packument(
        self,
        name: str,
        versions: Optional[Dict[str, Dict[str, Any]]] = None,
        latest: str = "1.0.0",
        **extra: Any,
    ) -> Dict[str, Any]:
        versions = versions if versions is not None else {latest: {}}
        data = {
            "name": name,
            "dist-tags": {"latest": latest},
            "versions": {
                version: {"name": name, "version": version, **manifest}
                for version, manifest in versions.items()
            },
            **extra,
        }
        self.json(f"{REGISTRY}/{http_client.registry_path(name)}", data)
        return data

    def manifest(self, name: str, version: str = "1.0.0", **extra: Any) -> Dict[str, Any]:
        data = {"name": name, "version": version, **extra}
        self.json(f"{REGISTRY}/{http_client.registry_path(name)}/latest", data)
        return data

    def downloads(self, name: str, count: int, period: str = "last-month") -> None:
        self.json(
            f"{DOWNLOADS}/downloads/point/{period}/{name}",
            {"downloads": count, "start": "2024-01-01", "end": "2024-01-31", "package": name},
        )

    def urls(self) -> List[str]:
        return [request.full_url for request in self.requests]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def upstream(monkeypatch: pytest.MonkeyPatch) -> FakeUpstream:
    fake = FakeUpstream()
    monkeypatch.setattr(http_client, "_send", fake)
    return fake

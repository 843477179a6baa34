from __future__ import annotations

import json
import socket
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from npm_sentinel.core import logging as core_logging
from npm_sentinel.core.config import get_settings
from npm_sentinel.core.errors import InvalidUpstreamPayload, UpstreamError, UpstreamNotFound

LOGGER = core_logging.get_logger("http_client")


def registry_path(package: str) -> str:
    """Path segment for a package on the npm registry (``@scope%2Fname``)."""
    return quote(package.strip(), safe="@")


def component(value: str) -> str:
    return quote(value.strip(), safe="")


def fetch_json(
    url: str,
    *,
    source: str,
    method: str = "GET",
    body: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    raw = _request(url, source=source, method=method, body=body, params=params, headers=headers)
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidUpstreamPayload(source, f"Invalid JSON received from {source}") from exc


def fetch_text(
    url: str,
    *,
    source: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> str:
    return _request(url, source=source, params=params, headers=headers, accept="text/plain, */*")


def github_headers() -> Dict[str, str]:
    headers = {"Accept": "application/vnd.github+json"}
    token = get_settings().github_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _request(
    url: str,
    *,
    source: str,
    method: str = "GET",
    body: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    accept: str = "application/json",
) -> str:
    settings = get_settings()
    if params:
        url = f"{url}?{urlencode(params)}"
    request_headers = {"Accept": accept, "User-Agent": settings.user_agent}
    request_headers.update(headers or {})
    data = None
    if body is not None:
        data = json.dumps(body).encode("utf-8")
        request_headers["Content-Type"] = "application/json"
    request = Request(url, data=data, headers=request_headers, method=method)
    try:
        payload = _send(request, settings.upstream_timeout_s)
    except HTTPError as exc:
        reason = exc.reason or "error"
        LOGGER.warning("upstream_request_failed", source=source, url=url, status=exc.code)
        detail = f"{source} returned HTTP {exc.code} ({reason})"
        if exc.code == 404:
            raise UpstreamNotFound(source, detail, status=404) from exc
        raise UpstreamError(source, detail, status=exc.code) from exc
    except (socket.timeout, TimeoutError) as exc:
        LOGGER.warning("upstream_request_failed", source=source, url=url, error="timeout")
        raise UpstreamError(
            source, f"{source} request timed out after {settings.upstream_timeout_s:g}s"
        ) from exc
    except URLError as exc:
        LOGGER.warning("upstream_request_failed", source=source, url=url, error=str(exc.reason))
        raise UpstreamError(source, f"{source} connection failed: {exc.reason}") from exc
    return payload.decode("utf-8", errors="replace")


def _send(request: Request, timeout_s: float) -> bytes:
    with urlopen(request, timeout=timeout_s) as response:
        return response.read()

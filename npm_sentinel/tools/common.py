from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from npm_sentinel.core.errors import InvalidUpstreamPayload
from npm_sentinel.framework.schema import check_shape

_GITHUB_REPO_RE = re.compile(r"github\.com[:/]([^/]+)/([^/.]+)")


def packages_input_schema(description: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "packages": {
                "type": "array",
                "items": {"type": "string", "minLength": 1, "pattern": "\\S"},
                "description": description,
            },
        },
        "required": ["packages"],
        "additionalProperties": False,
    }


def package_list(payload: Dict[str, Any]) -> List[str]:
    packages = payload.get("packages") or []
    return [pkg.strip() for pkg in packages if isinstance(pkg, str)]


def require_shape(schema: Dict[str, Any], data: Any, source: str, detail: str) -> Any:
    check = check_shape(schema, data, source)
    if not check.valid:
        raise InvalidUpstreamPayload(source, detail, check.messages())
    return data


def repository_url(data: Dict[str, Any]) -> Optional[str]:
    repository = data.get("repository")
    if isinstance(repository, str):
        return repository or None
    if isinstance(repository, dict):
        url = repository.get("url")
        if isinstance(url, str) and url:
            return url
    return None


def parse_github_repo(url: str) -> Optional[Tuple[str, str]]:
    match = _GITHUB_REPO_RE.search(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def string_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items()}


def license_name(value: Any) -> Optional[str]:
    """Normalise a manifest ``license`` field; legacy manifests use ``{"type": ...}``."""
    if isinstance(value, dict):
        value = value.get("type")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None

"""Expected shapes of the third-party JSON payloads the tools consume.

Every schema allows additional properties: only the fields a tool actually
reads are pinned down, so upstream additions never turn into failures.
"""

from __future__ import annotations

from typing import Any, Dict

_STRING_MAP: Dict[str, Any] = {"type": "object", "additionalProperties": {"type": "string"}}

_REPOSITORY: Dict[str, Any] = {
    "type": ["object", "string"],
    "properties": {"type": {"type": "string"}, "url": {"type": "string"}},
}

NPM_MAINTAINER: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "email": {"type": "string"},
        "url": {"type": "string"},
    },
    "required": ["name"],
}

NPM_PACKAGE_INFO: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "dist-tags": _STRING_MAP,
        "versions": {"type": "object", "additionalProperties": {"type": "object"}},
        "time": _STRING_MAP,
        "repository": _REPOSITORY,
        "homepage": {"type": "string"},
        "maintainers": {"type": "array", "items": NPM_MAINTAINER},
        "readme": {"type": "string"},
    },
    "required": ["name", "dist-tags", "versions"],
}

NPM_PACKAGE_DATA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "description": {"type": "string"},
        "license": {"type": ["string", "object"]},
        "homepage": {"type": "string"},
        "repository": _REPOSITORY,
        "dependencies": _STRING_MAP,
        "devDependencies": _STRING_MAP,
        "peerDependencies": _STRING_MAP,
        "types": {"type": "string"},
        "typings": {"type": "string"},
    },
    "required": ["name", "version"],
}

BUNDLEPHOBIA_SIZE: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "size": {"type": "number"},
        "gzip": {"type": "number"},
        "dependencyCount": {"type": "number"},
    },
    "required": ["size", "gzip", "dependencyCount"],
}

NPM_DOWNLOADS_POINT: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "downloads": {"type": "number"},
        "start": {"type": "string"},
        "end": {"type": "string"},
        "package": {"type": "string"},
    },
    "required": ["downloads", "start", "end", "package"],
}

_SCORE_DETAIL: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "quality": {"type": "number"},
        "popularity": {"type": "number"},
        "maintenance": {"type": "number"},
    },
    "required": ["quality", "popularity", "maintenance"],
}

NPMS_PACKAGE: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "analyzedAt": {"type": "string"},
        "score": {
            "type": "object",
            "properties": {"final": {"type": "number"}, "detail": _SCORE_DETAIL},
            "required": ["final", "detail"],
        },
        "collected": {
            "type": "object",
            "properties": {
                "metadata": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "version": {"type": "string"},
                        "description": {"type": "string"},
                    },
                    "required": ["name", "version"],
                },
                "npm": {
                    "type": "object",
                    "properties": {
                        "downloads": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "from": {"type": "string"},
                                    "to": {"type": "string"},
                                    "count": {"type": "number"},
                                },
                                "required": ["from", "to", "count"],
                            },
                        },
                        "starsCount": {"type": "number"},
                    },
                    "required": ["downloads", "starsCount"],
                },
                "github": {
                    "type": "object",
                    "properties": {
                        "starsCount": {"type": "number"},
                        "forksCount": {"type": "number"},
                        "subscribersCount": {"type": "number"},
                        "issues": {
                            "type": "object",
                            "properties": {
                                "count": {"type": "number"},
                                "openCount": {"type": "number"},
                            },
                            "required": ["count", "openCount"],
                        },
                    },
                    "required": ["starsCount", "forksCount", "subscribersCount", "issues"],
                },
            },
            "required": ["metadata", "npm"],
        },
    },
    "required": ["score", "collected"],
}

NPM_SEARCH_RESULT: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "objects": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "package": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "version": {"type": "string"},
                            "description": {"type": "string"},
                            "keywords": {"type": "array", "items": {"type": "string"}},
                            "links": _STRING_MAP,
                        },
                        "required": ["name", "version"],
                    },
                    "score": {
                        "type": "object",
                        "properties": {"final": {"type": "number"}},
                        "required": ["final"],
                    },
                },
                "required": ["package", "score"],
            },
        },
        "total": {"type": "number"},
    },
    "required": ["objects", "total"],
}

OSV_QUERY_RESULT: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "vulns": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "summary": {"type": "string"},
                    "severity": {"type": ["string", "array", "object"]},
                    "references": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {"url": {"type": "string"}},
                        },
                    },
                },
            },
        },
    },
}

GITHUB_REPO: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "stargazers_count": {"type": "integer"},
        "forks_count": {"type": "integer"},
        "watchers_count": {"type": "integer"},
        "open_issues_count": {"type": "integer"},
        "created_at": {"type": "string"},
        "updated_at": {"type": "string"},
        "default_branch": {"type": "string"},
        "has_wiki": {"type": "boolean"},
        "topics": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "stargazers_count",
        "forks_count",
        "watchers_count",
        "open_issues_count",
        "created_at",
        "updated_at",
        "default_branch",
    ],
}

GITHUB_RELEASES: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "tag_name": {"type": "string"},
            "name": {"type": ["string", "null"]},
            "published_at": {"type": ["string", "null"]},
        },
    },
}

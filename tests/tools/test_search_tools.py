from __future__ import annotations

import pytest

from npm_sentinel.core.errors import SchemaMismatch
from npm_sentinel.core.tool_registry import default_registry
from npm_sentinel.tools.search_tools import normalize_score

SEARCH = "https://registry.npmjs.org/-/v1/search"


def _hit(name: str, final: float, **package) -> dict:
    return {"package": {"name": name, "version": "1.0.0", **package}, "score": {"final": final}}


def test_search_is_a_single_request(upstream) -> None:
    upstream.json(
        f"{SEARCH}?text=http+client&size=2",
        {
            "objects": [
                _hit("axios", 0.9, description="Promise based HTTP client", keywords=["http"]),
                _hit("got", 45.0, links={"npm": "https://www.npmjs.com/package/got"}),
            ],
            "total": 1234,
        },
    )
    call = default_registry().dispatch("npmSearch", {"query": "http client", "limit": 2})
    assert not call.is_error
    assert len(upstream.requests) == 1
    assert call.text.startswith('🔍 Search results for "http client"\nFound 1,234 packages')
    assert "📦 axios@1.0.0\nPromise based HTTP client\nScore: 90.0%\nKeywords: http" in call.text
    assert "Score: 45.0%\nNpm: https://www.npmjs.com/package/got" in call.text


def test_search_limit_bounds() -> None:
    registry = default_registry()
    with pytest.raises(SchemaMismatch):
        registry.dispatch("npmSearch", {"query": "x", "limit": 51})
    with pytest.raises(SchemaMismatch):
        registry.dispatch("npmSearch", {"query": "x", "limit": 0})


def test_search_failure_is_top_level(upstream) -> None:
    call = default_registry().dispatch("npmSearch", {"query": "react"})
    assert call.is_error
    assert call.text == "Error searching packages: npm registry returned HTTP 404 (Not Found)"
    assert f"{SEARCH}?text=react&size=10" in upstream.urls()


def test_normalize_score() -> None:
    assert normalize_score(0.5) == 0.5
    assert normalize_score(87) == 0.87
    assert normalize_score(250) == 1.0
    assert normalize_score("n/a") == 0.0


def test_alternatives_with_downloads(upstream) -> None:
    upstream.json(
        f"{SEARCH}?text=keywords%3Amoment&size=10",
        {
            "objects": [
                _hit("moment", 0.9),
                _hit(
                    "dayjs",
                    0.8,
                    keywords=["date", "time"],
                    links={"repository": "https://github.com/iamkun/dayjs"},
                ),
                _hit("luxon", 0.7),
            ],
            "total": 3,
        },
    )
    upstream.downloads("moment", 20000)
    upstream.downloads("dayjs", 15000)
    text = default_registry().dispatch("npmAlternatives", {"packages": ["moment"]}).text
    assert text.startswith("🔄 Alternative Packages\n\n📦 moment\nMonthly downloads: 20,000")
    assert "Alternatives (2):" in text
    assert "• dayjs\n  Monthly downloads: 15,000\n  Score: 80.0%" in text
    assert "  Repository: https://github.com/iamkun/dayjs\n  Keywords: date, time" in text
    assert "• luxon\n  Monthly downloads: unavailable" in text

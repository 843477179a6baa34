from __future__ import annotations

import pytest

from npm_sentinel.core.errors import SchemaMismatch
from npm_sentinel.core.tool_registry import default_registry
from npm_sentinel.framework.report import SECTION_DELIMITER

DOWNLOADS = "https://api.npmjs.org"


def test_trends_default_period_and_totals(upstream) -> None:
    upstream.downloads("react", 3000)
    upstream.downloads("vue", 1500)
    call = default_registry().dispatch("npmTrends", {"packages": ["react", "vue", "gone"]})
    text = call.text
    assert text.startswith("📈 Download Trends\n\nPeriod: last-month (30 days)\n\n")
    assert "📦 react\nTotal downloads: 3,000\nAverage daily downloads: 100" in text
    assert "❌ gone: npm downloads API returned HTTP 404 (Not Found)" in text
    assert text.endswith(
        "Total downloads across all packages: 4,500\n"
        "Average daily downloads across all packages: 150\n"
    )
    assert call.output["failed"] == 1


def test_trends_honours_period(upstream) -> None:
    upstream.downloads("react", 700, period="last-week")
    text = default_registry().dispatch(
        "npmTrends", {"packages": ["react"], "period": "last-week"}
    ).text
    assert "Period: last-week (7 days)" in text
    assert f"{DOWNLOADS}/downloads/point/last-week/react" in upstream.urls()


def test_trends_rejects_unknown_period() -> None:
    with pytest.raises(SchemaMismatch):
        default_registry().dispatch("npmTrends", {"packages": ["react"], "period": "forever"})


def test_trends_invalid_download_payload(upstream) -> None:
    upstream.json(f"{DOWNLOADS}/downloads/point/last-month/odd", {"error": "nope"})
    text = default_registry().dispatch("npmTrends", {"packages": ["odd"]}).text
    assert "❌ odd: Invalid response format from npm downloads API" in text


def test_compare_sections_and_winner(upstream) -> None:
    upstream.manifest("react", "18.2.0", dependencies={"loose-envify": "^1.1.0"}, license="MIT")
    upstream.manifest("preact", "10.0.0")
    upstream.downloads("react", 900)
    upstream.downloads("preact", 100)
    text = default_registry().dispatch("npmCompare", {"packages": ["preact", "react"]}).text
    assert text.startswith("📊 Package Comparison\n\n")
    body, footer = text.rsplit("\n\n", 1)
    sections = body.split("\n\n", 1)[1].split(SECTION_DELIMITER)
    assert sections[0].startswith("📦 preact")
    assert "License: N/A" in sections[0]
    assert "Monthly downloads: 900" in sections[1]
    assert "Dependencies: 1" in sections[1]
    assert footer == "🏆 Most downloaded last month: react\n"


def test_compare_missing_downloads_fails_that_item(upstream) -> None:
    upstream.manifest("react", "18.2.0")
    text = default_registry().dispatch("npmCompare", {"packages": ["react"]}).text
    assert "❌ react: npm downloads API returned HTTP 404 (Not Found)" in text
    assert "Most downloaded" not in text

from __future__ import annotations

from npm_sentinel.core.tool_registry import default_registry

BUNDLEPHOBIA = "https://bundlephobia.com"


def test_size_in_kilobytes(upstream) -> None:
    upstream.json(
        f"{BUNDLEPHOBIA}/api/size?package=react",
        {"size": 6513, "gzip": 2621, "dependencyCount": 1},
    )
    text = default_registry().dispatch("npmSize", {"packages": ["react"]}).text
    assert text == "📦 react\nSize: 6.36KB (gzipped: 2.56KB)\nDependencies: 1\n"


def test_size_errors_stay_per_item(upstream) -> None:
    upstream.json(f"{BUNDLEPHOBIA}/api/size?package=react", {"error": "boom"})
    upstream.json(
        f"{BUNDLEPHOBIA}/api/size?package=%40scope%2Fpkg",
        {"size": 1024, "gzip": 512, "dependencyCount": 0},
    )
    call = default_registry().dispatch("npmSize", {"packages": ["react", "@scope/pkg"]})
    assert call.text.startswith("❌ react: Invalid response from bundlephobia")
    assert "Size: 1.0KB (gzipped: 0.5KB)" in call.text
    assert call.output == {"text": call.text, "succeeded": 1, "failed": 1}

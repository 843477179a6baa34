from __future__ import annotations

from typing import Any, Dict, List, Optional

from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out
from npm_sentinel.framework.report import (
    Report,
    format_count,
    format_percent,
    render_report,
    report_output,
)
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import npm_sources
from npm_sentinel.tools.common import package_list, packages_input_schema, string_map

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50
ALTERNATIVES_LIMIT = 10

SEARCH_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "minLength": 1, "description": "Search query"},
        "limit": {
            "type": "integer",
            "minimum": 1,
            "maximum": MAX_SEARCH_LIMIT,
            "default": DEFAULT_SEARCH_LIMIT,
            "description": "Maximum number of results to return (default: 10)",
        },
    },
    "required": ["query"],
    "additionalProperties": False,
}


def register_search_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmSearch",
                description="Search for NPM packages",
                usage_guidance="Runs one registry search; limit is between 1 and 50.",
                input_schema=SEARCH_INPUT_SCHEMA,
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="searching packages",
                tool_intent=ToolIntent.search,
            ),
            handler=_npm_search,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmAlternatives",
                description="Find alternative packages with similar functionality",
                usage_guidance=(
                    "Searches packages sharing the keyword and compares their monthly downloads."
                ),
                input_schema=packages_input_schema(
                    "List of package names to find alternatives for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="finding alternatives",
                tool_intent=ToolIntent.search,
            ),
            handler=_npm_alternatives,
        )
    )


def normalize_score(value: Any) -> float:
    """Search scores arrive either as 0..1 or 0..100; return 0..1."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if score > 1:
        score = score / 100
    return max(0.0, min(score, 1.0))


def _npm_search(payload: Dict[str, Any]) -> Dict[str, Any]:
    query = str(payload["query"]).strip()
    limit = int(payload.get("limit") or DEFAULT_SEARCH_LIMIT)
    data = npm_sources.search(query, limit)
    hits = data["objects"]
    report = Report(
        title=f"🔍 Search results for \"{query}\"\nFound {format_count(data['total'])} packages "
        f"(showing {len(hits)})"
    )
    for hit in hits:
        report.add(_render_hit(hit))
    if not hits:
        report.add("No packages matched the query")
    return {"text": report.render(), "succeeded": len(hits), "failed": 0}


def _render_hit(hit: Dict[str, Any]) -> str:
    package = hit["package"]
    lines = [
        f"📦 {package['name']}@{package['version']}",
        package.get("description") or "No description available",
        f"Score: {format_percent(normalize_score(hit['score']['final']))}",
    ]
    keywords = package.get("keywords") or []
    if keywords:
        lines.append(f"Keywords: {', '.join(keywords)}")
    links = string_map(package.get("links"))
    for key in ("npm", "homepage", "repository"):
        if links.get(key):
            lines.append(f"{key.capitalize()}: {links[key]}")
    return "\n".join(lines)


def _npm_alternatives(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_alternatives)
    text = render_report(results, _render_alternatives, title="🔄 Alternative Packages")
    return report_output(results, text)


def _monthly_downloads(package: str) -> int:
    return int(npm_sources.fetch_downloads(package)["downloads"])


def _fetch_alternatives(package: str) -> Dict[str, Any]:
    data = npm_sources.search(f"keywords:{package}", ALTERNATIVES_LIMIT)
    hits = [hit for hit in data["objects"] if hit["package"]["name"] != package]
    names = [hit["package"]["name"] for hit in hits]
    downloads = {
        result.name: result.value for result in fan_out([package] + names, _monthly_downloads)
    }
    alternatives: List[Dict[str, Any]] = []
    for hit in hits:
        info = hit["package"]
        alternatives.append(
            {
                "name": info["name"],
                "description": info.get("description"),
                "downloads": downloads.get(info["name"]),
                "score": normalize_score(hit["score"]["final"]),
                "repository": string_map(info.get("links")).get("repository"),
                "keywords": list(info.get("keywords") or [])[:5],
            }
        )
    return {"downloads": downloads.get(package), "alternatives": alternatives}


def _render_downloads(value: Optional[int]) -> str:
    return "unavailable" if value is None else format_count(value)


def _render_alternatives(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    lines = [
        f"📦 {result.name}",
        f"Monthly downloads: {_render_downloads(info['downloads'])}",
    ]
    alternatives = info["alternatives"]
    if not alternatives:
        lines.append("No alternatives found")
        return "\n".join(lines)
    lines.append(f"Alternatives ({len(alternatives)}):")
    for alt in alternatives:
        lines.append("")
        lines.append(f"• {alt['name']}")
        if alt["description"]:
            lines.append(f"  {alt['description']}")
        lines.append(f"  Monthly downloads: {_render_downloads(alt['downloads'])}")
        lines.append(f"  Score: {format_percent(alt['score'])}")
        if alt["repository"]:
            lines.append(f"  Repository: {alt['repository']}")
        if alt["keywords"]:
            lines.append(f"  Keywords: {', '.join(alt['keywords'])}")
    return "\n".join(lines)

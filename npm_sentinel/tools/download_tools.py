from __future__ import annotations

from functools import partial
from typing import Any, Dict

from npm_sentinel.core.models import PERIOD_DAYS, ToolIntent, ToolSpec, TrendPeriod
from npm_sentinel.framework.fanout import ItemResult, fan_out, successes
from npm_sentinel.framework.report import format_count, render_report, report_output
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import npm_sources
from npm_sentinel.tools.common import (
    license_name,
    package_list,
    packages_input_schema,
    string_map,
)

DEFAULT_PERIOD = TrendPeriod.last_month


def register_download_tools(registry) -> None:
    trends_schema = packages_input_schema("List of package names to get trends for")
    trends_schema["properties"]["period"] = {
        "type": "string",
        "enum": [period.value for period in TrendPeriod],
        "default": DEFAULT_PERIOD.value,
        "description": (
            'Time period for trends. Options: "last-week" (7 days), '
            '"last-month" (30 days), or "last-year" (365 days)'
        ),
    }
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmTrends",
                description=(
                    "Get download trends and popularity metrics for packages. Available periods: "
                    '"last-week" (7 days), "last-month" (30 days), or "last-year" (365 days)'
                ),
                input_schema=trends_schema,
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching download trends",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_trends,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmCompare",
                description="Compare multiple NPM packages based on various metrics",
                usage_guidance=(
                    "Compares latest version, monthly downloads, dependency count and license."
                ),
                input_schema=packages_input_schema("List of package names to compare"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="comparing packages",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_compare,
        )
    )


def _npm_trends(payload: Dict[str, Any]) -> Dict[str, Any]:
    period = TrendPeriod(payload.get("period") or DEFAULT_PERIOD.value)
    days = PERIOD_DAYS[period]
    results = fan_out(
        package_list(payload), partial(npm_sources.fetch_downloads, period=period.value)
    )
    total = sum(result.value["downloads"] for result in successes(results))
    text = render_report(
        results,
        partial(_render_trend, days=days),
        title=f"📈 Download Trends\n\nPeriod: {period.value} ({days} days)",
        footer=(
            f"Total downloads across all packages: {format_count(total)}\n"
            f"Average daily downloads across all packages: {format_count(total / days)}"
        ),
    )
    return report_output(results, text)


def _render_trend(result: ItemResult[Dict[str, Any]], days: int) -> str:
    downloads = result.value["downloads"]
    return (
        f"📦 {result.name}\n"
        f"Total downloads: {format_count(downloads)}\n"
        f"Average daily downloads: {format_count(downloads / days)}"
    )


def _npm_compare(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_comparison)
    ranked = sorted(successes(results), key=lambda result: result.value["downloads"], reverse=True)
    footer = None
    if ranked:
        footer = f"🏆 Most downloaded last month: {ranked[0].name}"
    text = render_report(results, _render_comparison, title="📊 Package Comparison", footer=footer)
    return report_output(results, text)


def _fetch_comparison(package: str) -> Dict[str, Any]:
    info = npm_sources.fetch_manifest(package)
    downloads = npm_sources.fetch_downloads(package, period=DEFAULT_PERIOD.value)
    return {
        "version": info["version"],
        "description": info.get("description"),
        "license": license_name(info.get("license")),
        "downloads": downloads["downloads"],
        "dependencies": len(string_map(info.get("dependencies"))),
    }


def _render_comparison(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    lines = [f"📦 {result.name}"]
    if info["description"]:
        lines.append(info["description"])
    lines.extend(
        [
            f"Version: {info['version']}",
            f"Monthly downloads: {format_count(info['downloads'])}",
            f"Dependencies: {info['dependencies']}",
            f"License: {info['license'] or 'N/A'}",
        ]
    )
    return "\n".join(lines)

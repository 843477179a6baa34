from __future__ import annotations

from typing import Any, Dict

from npm_sentinel.core.errors import UpstreamNotFound
from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out
from npm_sentinel.framework.report import (
    format_count,
    format_date,
    format_percent,
    render_report,
    report_output,
    rule,
)
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import npm_sources
from npm_sentinel.tools.common import package_list, packages_input_schema


def register_npms_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmScore",
                description=(
                    "Get consolidated package score based on quality, maintenance, "
                    "and popularity metrics"
                ),
                usage_guidance="Scores come from npms.io and include GitHub and download stats.",
                input_schema=packages_input_schema("List of package names to get scores for"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching package scores",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_score,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmQuality",
                description="Analyze package quality metrics",
                input_schema=packages_input_schema("List of package names to analyze"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching quality metrics",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_quality,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmMaintenance",
                description="Analyze package maintenance metrics",
                input_schema=packages_input_schema("List of package names to analyze"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching maintenance metrics",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_maintenance,
        )
    )


def _fetch_scores(package: str) -> Dict[str, Any]:
    try:
        return npm_sources.fetch_npms(package)
    except UpstreamNotFound as exc:
        raise LookupError("Package not found in the npm registry") from exc


def _npm_score(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_scores)
    text = render_report(results, _render_score, title="📊 Package Scores")
    return report_output(results, text)


def _render_score(result: ItemResult[Dict[str, Any]]) -> str:
    score = result.value["score"]
    detail = score["detail"]
    collected = result.value["collected"]
    lines = [
        f"📦 {result.name}",
        rule("-", 40),
        f"Overall Score: {format_percent(score['final'])}",
        "",
        "🎯 Quality Breakdown:",
        f"• Quality: {format_percent(detail['quality'])}",
        f"• Maintenance: {format_percent(detail['maintenance'])}",
        f"• Popularity: {format_percent(detail['popularity'])}",
    ]
    github = collected.get("github")
    if github:
        lines.extend(
            [
                "",
                "📈 GitHub Stats:",
                f"• Stars: {format_count(github['starsCount'])}",
                f"• Forks: {format_count(github['forksCount'])}",
                f"• Watchers: {format_count(github['subscribersCount'])}",
                f"• Total Issues: {format_count(github['issues']['count'])}",
                f"• Open Issues: {format_count(github['issues']['openCount'])}",
            ]
        )
    downloads = collected["npm"]["downloads"]
    if downloads:
        window = downloads[0]
        lines.extend(
            [
                "",
                "📥 NPM Downloads:",
                f"• Last day: {format_count(window['count'])} "
                f"({format_date(window['from'])} - {format_date(window['to'])})",
            ]
        )
    return "\n".join(lines)


def _npm_quality(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_scores)
    text = render_report(
        results,
        _render_quality,
        title="📊 Quality Metrics",
        footer=(
            "Note: Detailed metrics (tests, coverage, linting, types) are no longer "
            "provided by the npms.io API"
        ),
    )
    return report_output(results, text)


def _render_quality(result: ItemResult[Dict[str, Any]]) -> str:
    quality = result.value["score"]["detail"]["quality"]
    return f"📦 {result.name}\n- Overall Score: {round(quality, 2)}"


def _npm_maintenance(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_scores)
    text = render_report(results, _render_maintenance, title="🛠️ Maintenance Metrics")
    return report_output(results, text)


def _render_maintenance(result: ItemResult[Dict[str, Any]]) -> str:
    maintenance = result.value["score"]["detail"]["maintenance"]
    return f"📦 {result.name}\n- Maintenance Score: {round(maintenance, 2)}"

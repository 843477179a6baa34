from __future__ import annotations

from typing import Any, Dict

from npm_sentinel.core import upstream_schemas
from npm_sentinel.core.config import get_settings
from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out
from npm_sentinel.framework.report import render_report, report_output
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import http_client
from npm_sentinel.tools.common import package_list, packages_input_schema, require_shape

BUNDLEPHOBIA = "bundlephobia"


def register_bundle_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmSize",
                description="Get package size information including dependencies and bundle size",
                usage_guidance="Sizes come from bundlephobia and are reported in KB.",
                input_schema=packages_input_schema(
                    "List of package names to get size information for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching package sizes",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_size,
        )
    )


def _npm_size(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_size)
    return report_output(results, render_report(results, _render_size))


def _fetch_size(package: str) -> Dict[str, Any]:
    data = http_client.fetch_json(
        f"{get_settings().bundlephobia_url}/api/size",
        source=BUNDLEPHOBIA,
        params={"package": package},
    )
    require_shape(
        upstream_schemas.BUNDLEPHOBIA_SIZE, data, BUNDLEPHOBIA, "Invalid response from bundlephobia"
    )
    return {
        "size_kb": round(data["size"] / 1024, 2),
        "gzip_kb": round(data["gzip"] / 1024, 2),
        "dependency_count": int(data["dependencyCount"]),
    }


def _render_size(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    return (
        f"📦 {result.name}\n"
        f"Size: {info['size_kb']}KB (gzipped: {info['gzip_kb']}KB)\n"
        f"Dependencies: {info['dependency_count']}"
    )

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from npm_sentinel.core import upstream_schemas
from npm_sentinel.core.config import get_settings
from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out, successes
from npm_sentinel.framework.report import render_report, report_output
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import http_client, npm_sources
from npm_sentinel.tools.common import (
    license_name,
    package_list,
    packages_input_schema,
    require_shape,
    string_map,
)

OSV = "OSV API"
UNKNOWN_LICENSE = "UNKNOWN"

_VERSION_CHARS_RE = re.compile(r"[^0-9.]")


def register_security_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmVulnerabilities",
                description="Check for known vulnerabilities in packages",
                usage_guidance="Advisories come from the OSV database for the npm ecosystem.",
                input_schema=packages_input_schema("List of package names to check"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="checking vulnerabilities",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_vulnerabilities,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmDeprecated",
                description="Check if packages are deprecated",
                usage_guidance=(
                    "Checks the latest version of each package and of its runtime dependencies."
                ),
                input_schema=packages_input_schema("List of package names to check"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="checking deprecated packages",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_deprecated,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmLicenseCompatibility",
                description="Check license compatibility between multiple packages",
                input_schema=packages_input_schema("List of package names to check"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="analyzing license compatibility",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_license_compatibility,
        )
    )


def _npm_vulnerabilities(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_vulnerabilities)
    text = render_report(results, _render_vulnerabilities, title="🔒 Security Analysis")
    return report_output(results, text)


def _fetch_vulnerabilities(package: str) -> List[Dict[str, Any]]:
    data = http_client.fetch_json(
        f"{get_settings().osv_api_url}/v1/query",
        source=OSV,
        method="POST",
        body={"package": {"name": package, "ecosystem": "npm"}},
    )
    require_shape(upstream_schemas.OSV_QUERY_RESULT, data, OSV, "Invalid response from OSV API")
    return list(data.get("vulns") or [])


def severity_label(vuln: Dict[str, Any]) -> str:
    """Best human label for an OSV record's severity, which comes in several shapes."""
    database = vuln.get("database_specific")
    if isinstance(database, dict) and isinstance(database.get("severity"), str):
        return database["severity"]
    severity = vuln.get("severity")
    if isinstance(severity, str) and severity:
        return severity
    if isinstance(severity, dict):
        return str(severity.get("type") or severity.get("score") or "Unknown")
    if isinstance(severity, list):
        labels = [
            str(entry.get("type") or entry.get("score"))
            for entry in severity
            if isinstance(entry, dict) and (entry.get("type") or entry.get("score"))
        ]
        if labels:
            return ", ".join(labels)
    return "Unknown"


def _render_vulnerabilities(result: ItemResult[List[Dict[str, Any]]]) -> str:
    vulns = result.value or []
    if not vulns:
        return f"📦 {result.name}\n✅ No known vulnerabilities"
    lines = [f"📦 {result.name}", f"⚠️ {len(vulns)} vulnerabilities found:"]
    for vuln in vulns:
        lines.append("")
        lines.append(f"- {vuln.get('summary') or vuln.get('id') or 'No summary available'}")
        lines.append(f"  Severity: {severity_label(vuln)}")
        references = [ref for ref in vuln.get("references") or [] if ref.get("url")]
        if references:
            lines.append(f"  More info: {references[0]['url']}")
    return "\n".join(lines)


def clean_version(version: str) -> str:
    """Strip range operators from a dependency spec: ``^1.2.3`` -> ``1.2.3``."""
    return _VERSION_CHARS_RE.sub("", version)


def _npm_deprecated(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_deprecation)
    text = render_report(results, _render_deprecation, title="⚠️ Deprecation Check")
    return report_output(results, text)


def _fetch_deprecation(package: str) -> Dict[str, Any]:
    data = npm_sources.fetch_packument(package)
    version = npm_sources.latest_version(data)
    manifest = data["versions"][version]
    dependencies = string_map(manifest.get("dependencies"))
    deprecated_deps: List[Dict[str, str]] = []
    if dependencies:
        checks = fan_out(
            list(dependencies),
            lambda dep: _dependency_deprecation(dep, clean_version(dependencies[dep])),
        )
        deprecated_deps = [check.value for check in successes(checks) if check.value]
    return {
        "version": version,
        "deprecated": _deprecation_message(manifest),
        "dependency_count": len(dependencies),
        "deprecated_dependencies": deprecated_deps,
    }


def _deprecation_message(manifest: Dict[str, Any]) -> Optional[str]:
    message = manifest.get("deprecated")
    if isinstance(message, str) and message:
        return message
    if message is True:
        return "This package is deprecated"
    return None


def _dependency_deprecation(dep: str, version: str) -> Optional[Dict[str, str]]:
    data = npm_sources.fetch_packument(dep)
    manifest = data["versions"].get(version)
    if manifest is None:
        manifest = data["versions"].get(npm_sources.latest_version(data), {})
    message = _deprecation_message(manifest)
    if message is None:
        return None
    return {"name": dep, "version": version or "latest", "message": message}


def _render_deprecation(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    lines = [f"📦 {result.name}@{info['version']}"]
    if info["deprecated"]:
        lines.append(f"❌ DEPRECATED: {info['deprecated']}")
    else:
        lines.append("✅ Not deprecated")
    deprecated_deps = info["deprecated_dependencies"]
    if deprecated_deps:
        lines.append("")
        lines.append(f"⚠️ Deprecated dependencies ({len(deprecated_deps)}):")
        for dep in deprecated_deps:
            lines.append(f"• {dep['name']}@{dep['version']}: {dep['message']}")
    elif info["dependency_count"]:
        lines.append(f"✅ None of its {info['dependency_count']} dependencies are deprecated")
    return "\n".join(lines)


def _npm_license_compatibility(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_license)
    licenses = [result.value for result in successes(results)]
    text = render_report(
        results,
        _render_license,
        title="📜 License Compatibility Analysis",
        footer=license_analysis(licenses),
    )
    return report_output(results, text)


def _fetch_license(package: str) -> str:
    data = npm_sources.fetch_manifest(package)
    return license_name(data.get("license")) or UNKNOWN_LICENSE


def _render_license(result: ItemResult[str]) -> str:
    return f"📦 {result.name}\nLicense: {result.value}"


def license_analysis(licenses: List[str]) -> str:
    normalized = [item.upper() for item in licenses]
    lines = ["Analysis:"]
    if not normalized:
        lines.append("• No licenses could be determined")
    if any(item == UNKNOWN_LICENSE for item in normalized):
        lines.append(
            "⚠️ Warning: Some packages have unknown licenses. Manual review recommended."
        )
    has_gpl = any("GPL" in item for item in normalized)
    has_mit = any(item == "MIT" for item in normalized)
    has_apache = any("APACHE" in item for item in normalized)
    if has_gpl:
        lines.append(
            "⚠️ Contains GPL licensed code. Resulting work may need to be GPL licensed."
        )
        if has_mit or has_apache:
            lines.append(
                "⚠️ Mixed GPL with MIT/Apache licenses. Review carefully for compliance."
            )
    elif has_mit and has_apache:
        lines.append("✅ MIT and Apache 2.0 licenses are compatible.")
    elif normalized and all(item == "MIT" for item in normalized):
        lines.append("✅ All packages use MIT license. Generally compatible.")
    lines.append("")
    lines.append("Note: This is a basic analysis. For legal compliance, consult a lawyer.")
    return "\n".join(lines)

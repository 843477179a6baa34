from __future__ import annotations

from typing import Any, Dict, List

from npm_sentinel.core.errors import UpstreamError, UpstreamNotFound
from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out
from npm_sentinel.framework.report import render_report, report_output, rule
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import npm_sources
from npm_sentinel.tools.common import (
    license_name,
    package_list,
    packages_input_schema,
    string_map,
)


def register_registry_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmVersions",
                description="Get all available versions of an NPM package",
                usage_guidance="Provide packages as a list of npm package names.",
                input_schema=packages_input_schema("List of package names to get versions for"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching versions",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_versions,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmLatest",
                description="Get the latest version and changelog of an NPM package",
                input_schema=packages_input_schema(
                    "List of package names to get latest versions for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching latest versions",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_latest,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmDeps",
                description="Analyze dependencies and devDependencies of an NPM package",
                input_schema=packages_input_schema(
                    "List of package names to analyze dependencies for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching dependencies",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_deps,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmTypes",
                description="Check TypeScript types availability and version for a package",
                usage_guidance=(
                    "Reports bundled type definitions and the matching DefinitelyTyped "
                    "(@types/*) package when one is published."
                ),
                input_schema=packages_input_schema("List of package names to check types for"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="checking TypeScript types",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_types,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmMaintainers",
                description="Get maintainers information for NPM packages",
                input_schema=packages_input_schema("List of package names to get maintainers for"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching package maintainers",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_maintainers,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmPackageReadme",
                description="Get the README content for NPM packages",
                input_schema=packages_input_schema("List of package names to get READMEs for"),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching READMEs",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_package_readme,
        )
    )


def _npm_versions(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_versions)
    return report_output(results, render_report(results, _render_versions))


def _fetch_versions(package: str) -> Dict[str, Any]:
    data = npm_sources.fetch_packument(package)
    return {
        "versions": list(data["versions"].keys()),
        "latest": data["dist-tags"].get("latest", "unknown"),
    }


def _render_versions(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    return (
        f"📦 {result.name}:\n"
        f"Latest version: {info['latest']}\n"
        f"Available versions: {', '.join(info['versions'])}"
    )


def _npm_latest(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), npm_sources.fetch_manifest)
    return report_output(results, render_report(results, _render_latest))


def _author_name(author: Any) -> str | None:
    if isinstance(author, dict):
        name = author.get("name")
        return name if isinstance(name, str) and name else None
    if isinstance(author, str) and author:
        return author
    return None


def _render_latest(result: ItemResult[Dict[str, Any]]) -> str:
    data = result.value
    return (
        f"📦 Latest version of {result.name}:\n"
        f"Version: {data['version']}\n"
        f"Description: {data.get('description') or 'No description available'}\n"
        f"Author: {_author_name(data.get('author')) or 'Unknown'}\n"
        f"License: {license_name(data.get('license')) or 'Unknown'}\n"
        f"Homepage: {data.get('homepage') or 'Not specified'}"
    )


def _npm_deps(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), npm_sources.fetch_manifest)
    return report_output(results, render_report(results, _render_deps))


_DEPENDENCY_GROUPS = (
    ("dependencies", "Dependencies"),
    ("devDependencies", "Dev Dependencies"),
    ("peerDependencies", "Peer Dependencies"),
)


def _render_deps(result: ItemResult[Dict[str, Any]]) -> str:
    data = result.value
    lines = [f"📦 Dependencies for {result.name}@{data['version']}"]
    listed = False
    for key, label in _DEPENDENCY_GROUPS:
        deps = string_map(data.get(key))
        if not deps:
            continue
        listed = True
        lines.append("")
        lines.append(f"{label}:")
        lines.extend(f"• {dep}: {version}" for dep, version in deps.items())
    if not listed:
        lines.append("")
        lines.append("No dependencies declared")
    return "\n".join(lines)


def types_package_name(package: str) -> str:
    """DefinitelyTyped name for ``package``: ``@scope/name`` -> ``@types/scope__name``."""
    return f"@types/{package.replace('@', '', 1).replace('/', '__')}"


def _npm_types(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_types)
    return report_output(results, render_report(results, _render_types))


def _fetch_types(package: str) -> Dict[str, Any]:
    data = npm_sources.fetch_manifest(package)
    types_name = types_package_name(package)
    try:
        types_version = npm_sources.fetch_manifest(types_name)["version"]
    except UpstreamError:
        types_version = None
    return {
        "version": data["version"],
        "bundled": data.get("types") or data.get("typings"),
        "types_package": types_name,
        "types_version": types_version,
    }


def _render_types(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    lines = [f"📦 TypeScript support for {result.name}@{info['version']}"]
    if info["bundled"]:
        lines.append("✅ Package includes built-in TypeScript types")
        lines.append(f"Types path: {info['bundled']}")
    if info["types_version"]:
        lines.append(
            f"📦 DefinitelyTyped package available: {info['types_package']}@{info['types_version']}"
        )
        lines.append(f"Install with: npm install -D {info['types_package']}")
    elif not info["bundled"]:
        lines.append("❌ No TypeScript type definitions found")
    return "\n".join(lines)


def _npm_maintainers(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_maintainers)
    text = render_report(results, _render_maintainers, title="👥 Package Maintainers")
    return report_output(results, text)


def _fetch_maintainers(package: str) -> List[Dict[str, Any]]:
    try:
        data = npm_sources.fetch_packument(package)
    except UpstreamNotFound as exc:
        raise LookupError("Package not found in the npm registry") from exc
    return list(data.get("maintainers") or [])


def _render_maintainers(result: ItemResult[List[Dict[str, Any]]]) -> str:
    maintainers = result.value or []
    lines = [f"📦 {result.name}", rule("-", 40)]
    if not maintainers:
        lines.append("⚠️ No maintainers found.")
        return "\n".join(lines)
    lines.append(f"👥 Maintainers ({len(maintainers)}):")
    for maintainer in maintainers:
        lines.append("")
        lines.append(f"• {maintainer['name']}")
        if maintainer.get("email"):
            lines.append(f"  📧 {maintainer['email']}")
    return "\n".join(lines)


def _npm_package_readme(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_readme)
    return report_output(results, render_report(results, _render_readme))


def _fetch_readme(package: str) -> Dict[str, Any]:
    data = npm_sources.fetch_packument(package)
    version = npm_sources.latest_version(data)
    readme = data["versions"][version].get("readme") or data.get("readme")
    if not isinstance(readme, str) or not readme.strip():
        readme = "No README found"
    return {"version": version, "readme": readme}


def _render_readme(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    return "\n".join(
        [rule(), f"📖 {result.name}@{info['version']}", rule(), "", info["readme"].rstrip()]
    )

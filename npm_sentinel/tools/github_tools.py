from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from npm_sentinel.core import upstream_schemas
from npm_sentinel.core.config import get_settings
from npm_sentinel.core.errors import UpstreamError
from npm_sentinel.core.models import ToolIntent, ToolSpec
from npm_sentinel.framework.fanout import ItemResult, fan_out
from npm_sentinel.framework.report import format_count, format_date, render_report, report_output
from npm_sentinel.framework.tool_runtime import REPORT_OUTPUT_SCHEMA, Tool
from npm_sentinel.tools import http_client, npm_sources
from npm_sentinel.tools.common import (
    package_list,
    packages_input_schema,
    parse_github_repo,
    repository_url,
    require_shape,
)

GITHUB_API = "GitHub API"
GITHUB_RAW = "GitHub raw content"

CHANGELOG_FILES = (
    "CHANGELOG.md",
    "changelog.md",
    "CHANGES.md",
    "changes.md",
    "HISTORY.md",
    "history.md",
    "NEWS.md",
    "news.md",
    "RELEASES.md",
    "releases.md",
)
CHANGELOG_PREVIEW_LINES = 20
RECENT_RELEASES = 5
RECENT_VERSIONS = 10


def register_github_tools(registry) -> None:
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmRepoStats",
                description="Get repository statistics for NPM packages",
                usage_guidance=(
                    "Reads the repository field of the latest manifest and queries GitHub. "
                    "Set GITHUB_TOKEN to raise the API rate limit."
                ),
                input_schema=packages_input_schema(
                    "List of package names to get repository stats for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="fetching repository stats",
                tool_intent=ToolIntent.lookup,
            ),
            handler=_npm_repo_stats,
        )
    )
    registry.register(
        Tool(
            spec=ToolSpec(
                name="npmChangelogAnalysis",
                description="Analyze changelog and release history of packages",
                usage_guidance=(
                    "Combines registry version history with the repository changelog "
                    "and the most recent GitHub releases."
                ),
                input_schema=packages_input_schema(
                    "List of package names to analyze changelogs for"
                ),
                output_schema=REPORT_OUTPUT_SCHEMA,
                error_action="analyzing changelogs",
                tool_intent=ToolIntent.analyze,
            ),
            handler=_npm_changelog_analysis,
        )
    )


def _github_repo(url: Optional[str]) -> Tuple[Optional[Tuple[str, str]], Optional[str]]:
    if not url:
        return None, "No repository URL found"
    repo = parse_github_repo(url)
    if repo is None:
        return None, f"Repository is not hosted on GitHub or could not be parsed: {url}"
    return repo, None


def _npm_repo_stats(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_repo_stats)
    text = render_report(results, _render_repo_stats, title="📊 Repository Statistics")
    return report_output(results, text)


def _fetch_repo_stats(package: str) -> Dict[str, Any]:
    manifest = npm_sources.fetch_manifest(package)
    repo, note = _github_repo(repository_url(manifest))
    if repo is None:
        return {"repo": None, "note": note}
    owner, name = repo
    settings = get_settings()
    data = http_client.fetch_json(
        f"{settings.github_api_url}/repos/{http_client.component(owner)}/"
        f"{http_client.component(name)}",
        source=GITHUB_API,
        headers=http_client.github_headers(),
    )
    require_shape(upstream_schemas.GITHUB_REPO, data, GITHUB_API, "Invalid GitHub repository data")
    return {"repo": f"{owner}/{name}", "stats": data, "note": None}


def _render_repo_stats(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    if info["repo"] is None:
        return f"📦 {result.name}\n{info['note']}"
    stats = info["stats"]
    lines = [
        f"📦 {result.name}",
        f"Repository: https://github.com/{info['repo']}",
        f"⭐ Stars: {format_count(stats['stargazers_count'])}",
        f"🔄 Forks: {format_count(stats['forks_count'])}",
        f"👀 Watchers: {format_count(stats['watchers_count'])}",
        f"📝 Open Issues: {format_count(stats['open_issues_count'])}",
        f"📅 Created: {format_date(stats['created_at'])}",
        f"🔄 Last Updated: {format_date(stats['updated_at'])}",
        f"📚 Default Branch: {stats['default_branch']}",
        f"📖 Wiki Enabled: {'Yes' if stats.get('has_wiki') else 'No'}",
    ]
    topics = stats.get("topics") or []
    if topics:
        lines.append(f"🏷️ Topics: {', '.join(topics)}")
    return "\n".join(lines)


def version_sort_key(version: str) -> Tuple[Tuple[int, ...], int, str]:
    """Order semver-like strings numerically; prereleases sort before releases."""
    core, _, prerelease = version.partition("-")
    numbers = tuple(int(part) for part in re.findall(r"\d+", core))
    return numbers, 0 if prerelease else 1, prerelease


def _npm_changelog_analysis(payload: Dict[str, Any]) -> Dict[str, Any]:
    results = fan_out(package_list(payload), _fetch_changelog)
    text = render_report(results, _render_changelog, title="📋 Changelog Analysis")
    return report_output(results, text)


def _fetch_changelog(package: str) -> Dict[str, Any]:
    data = npm_sources.fetch_packument(package)
    versions = sorted(data["versions"], key=version_sort_key)
    times = data.get("time") or {}
    history = [
        {"version": version, "date": times.get(version)}
        for version in reversed(versions[-RECENT_VERSIONS:])
    ]
    info: Dict[str, Any] = {
        "latest": data["dist-tags"].get("latest"),
        "version_count": len(versions),
        "first_published": times.get("created"),
        "history": history,
        "repo": None,
        "note": None,
        "changelog": None,
        "releases": None,
    }
    repo, note = _github_repo(repository_url(data))
    if repo is None:
        info["note"] = note
        return info
    owner, name = repo
    info["repo"] = f"{owner}/{name}"
    info["changelog"] = _find_changelog(owner, name)
    info["releases"] = _recent_releases(owner, name)
    return info


def _find_changelog(owner: str, name: str) -> Optional[Dict[str, Any]]:
    base = f"{get_settings().github_raw_url}/{owner}/{name}/HEAD"
    for filename in CHANGELOG_FILES:
        try:
            content = http_client.fetch_text(f"{base}/{filename}", source=GITHUB_RAW)
        except UpstreamError:
            continue
        if content.strip():
            return {"file": filename, "lines": content.splitlines()[:CHANGELOG_PREVIEW_LINES]}
    return None


def _recent_releases(owner: str, name: str) -> Optional[List[Dict[str, Any]]]:
    url = (
        f"{get_settings().github_api_url}/repos/{http_client.component(owner)}/"
        f"{http_client.component(name)}/releases"
    )
    try:
        data = http_client.fetch_json(
            url,
            source=GITHUB_API,
            params={"per_page": RECENT_RELEASES},
            headers=http_client.github_headers(),
        )
        require_shape(
            upstream_schemas.GITHUB_RELEASES, data, GITHUB_API, "Invalid GitHub releases data"
        )
    except UpstreamError:
        # InvalidUpstreamPayload included: releases are optional detail.
        return None
    return list(data)[:RECENT_RELEASES]


def _render_changelog(result: ItemResult[Dict[str, Any]]) -> str:
    info = result.value
    lines = [
        f"📦 {result.name}",
        f"Latest version: {info['latest'] or 'unknown'}",
        f"Total versions: {info['version_count']}",
        f"First published: {format_date(info['first_published'])}",
        "",
        "Version history (most recent):",
    ]
    lines.extend(
        f"• {entry['version']} ({format_date(entry['date'])})" for entry in info["history"]
    )
    if info["repo"] is None:
        lines.extend(["", info["note"]])
        return "\n".join(lines)
    lines.extend(["", f"Repository: https://github.com/{info['repo']}"])
    changelog = info["changelog"]
    if changelog:
        lines.extend(["", f"📄 {changelog['file']} (first {len(changelog['lines'])} lines):"])
        lines.extend(changelog["lines"])
    else:
        lines.extend(["", "No changelog file found"])
    releases = info["releases"]
    if releases is None:
        lines.extend(["", "GitHub releases unavailable"])
    elif not releases:
        lines.extend(["", "No GitHub releases published"])
    else:
        lines.extend(["", f"🚀 Recent releases ({len(releases)}):"])
        for release in releases:
            title = release.get("name") or release.get("tag_name") or "unnamed"
            lines.append(
                f"• {release.get('tag_name') or title}: {title} "
                f"({format_date(release.get('published_at'))})"
            )
    return "\n".join(lines)

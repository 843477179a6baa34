from __future__ import annotations

from npm_sentinel.framework.tool_runtime import Tool, ToolRegistry
from npm_sentinel.tools.bundle_tools import register_bundle_tools
from npm_sentinel.tools.download_tools import register_download_tools
from npm_sentinel.tools.github_tools import register_github_tools
from npm_sentinel.tools.npms_tools import register_npms_tools
from npm_sentinel.tools.registry_tools import register_registry_tools
from npm_sentinel.tools.search_tools import register_search_tools
from npm_sentinel.tools.security_tools import register_security_tools

TOOL_NAMES = (
    "npmVersions",
    "npmLatest",
    "npmDeps",
    "npmTypes",
    "npmSize",
    "npmVulnerabilities",
    "npmTrends",
    "npmCompare",
    "npmMaintainers",
    "npmScore",
    "npmPackageReadme",
    "npmSearch",
    "npmLicenseCompatibility",
    "npmRepoStats",
    "npmDeprecated",
    "npmChangelogAnalysis",
    "npmAlternatives",
    "npmQuality",
    "npmMaintenance",
)


def default_registry() -> ToolRegistry:
    """Registry holding every npm tool, listed in ``TOOL_NAMES`` order."""
    staging = ToolRegistry()
    register_registry_tools(staging)
    register_bundle_tools(staging)
    register_security_tools(staging)
    register_download_tools(staging)
    register_npms_tools(staging)
    register_search_tools(staging)
    register_github_tools(staging)

    registry = ToolRegistry()
    for name in TOOL_NAMES:
        registry.register(staging.get(name))
    return registry


__all__ = ["TOOL_NAMES", "Tool", "ToolRegistry", "default_registry"]

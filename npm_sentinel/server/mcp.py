from __future__ import annotations

from typing import Any, Callable, Dict, List, Literal

from mcp.server.fastmcp import FastMCP

from npm_sentinel.core import logging as core_logging
from npm_sentinel.core.errors import ToolExecutionError
from npm_sentinel.framework.tool_runtime import ToolRegistry
from npm_sentinel.tools.search_tools import DEFAULT_SEARCH_LIMIT

SERVER_NAME = "npm-sentinel-mcp"

LOGGER = core_logging.get_logger("mcp_server")


def call_tool(registry: ToolRegistry, name: str, args: Dict[str, Any]) -> str:
    """Dispatch one MCP call and return the report text.

    Failed dispatches are raised as ``RuntimeError`` so FastMCP marks the
    response as a tool error.
    """
    try:
        call = registry.dispatch(name, args)
    except ToolExecutionError as exc:
        LOGGER.warning("mcp_call_rejected", tool=name, error=str(exc))
        raise RuntimeError(str(exc)) from exc
    if call.is_error:
        raise RuntimeError(call.text)
    return call.text


def _packages_tool(registry: ToolRegistry, name: str) -> Callable[..., str]:
    def tool(packages: List[str]) -> str:
        return call_tool(registry, name, {"packages": packages})

    tool.__name__ = name
    return tool


def _trends_tool(registry: ToolRegistry) -> Callable[..., str]:
    def npmTrends(
        packages: List[str],
        period: Literal["last-week", "last-month", "last-year"] = "last-month",
    ) -> str:
        return call_tool(registry, "npmTrends", {"packages": packages, "period": period})

    return npmTrends


def _search_tool(registry: ToolRegistry) -> Callable[..., str]:
    def npmSearch(query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> str:
        return call_tool(registry, "npmSearch", {"query": query, "limit": limit})

    return npmSearch


def create_mcp_server(registry: ToolRegistry) -> FastMCP:
    mcp = FastMCP(SERVER_NAME)
    for spec in registry.list():
        if spec.name == "npmTrends":
            fn = _trends_tool(registry)
        elif spec.name == "npmSearch":
            fn = _search_tool(registry)
        else:
            fn = _packages_tool(registry, spec.name)
        description = spec.description
        if spec.usage_guidance:
            description = f"{description}. {spec.usage_guidance}"
        description = f"{description} [intent: {spec.tool_intent.value}]"
        mcp.add_tool(fn, name=spec.name, description=description)
    return mcp

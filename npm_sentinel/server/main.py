from __future__ import annotations

from npm_sentinel.core import logging as core_logging
from npm_sentinel.core.config import get_settings
from npm_sentinel.core.tool_registry import default_registry
from npm_sentinel.server.mcp import SERVER_NAME, create_mcp_server


def main() -> None:
    settings = get_settings()
    core_logging.configure_logging(SERVER_NAME, settings.log_level)
    registry = default_registry()
    mcp = create_mcp_server(registry)
    core_logging.log_event(
        core_logging.get_logger(SERVER_NAME),
        "mcp_server_starting",
        {"transport": "stdio", "tools": len(registry.names())},
    )
    mcp.run()


if __name__ == "__main__":
    main()

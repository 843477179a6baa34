__all__ = [
    "config",
    "errors",
    "logging",
    "models",
    "tool_registry",
    "upstream_schemas",
]

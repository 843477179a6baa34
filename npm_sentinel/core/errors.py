from __future__ import annotations

from typing import Optional, Sequence


class ToolExecutionError(Exception):
    pass


class UnknownTool(ToolExecutionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown_tool:{name}")
        self.name = name


class SchemaMismatch(ToolExecutionError):
    def __init__(self, label: str, messages: Sequence[str]) -> None:
        super().__init__(f"{label} schema validation failed: {'; '.join(messages)}")
        self.label = label
        self.messages = list(messages)


class EmptyBatch(ToolExecutionError):
    def __init__(self, detail: str = "No package names provided") -> None:
        super().__init__(detail)


class UpstreamError(ToolExecutionError):
    """A single upstream request did not produce a usable response."""

    def __init__(
        self,
        source: str,
        detail: str,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(detail)
        self.source = source
        self.detail = detail
        self.status = status


class UpstreamNotFound(UpstreamError):
    pass


class InvalidUpstreamPayload(UpstreamError):
    def __init__(self, source: str, detail: str, errors: Sequence[str] = ()) -> None:
        super().__init__(source, detail)
        self.errors = list(errors)

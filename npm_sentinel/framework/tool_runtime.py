from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from npm_sentinel.core import logging as core_logging
from npm_sentinel.core.errors import (
    EmptyBatch,
    SchemaMismatch,
    ToolExecutionError,
    UnknownTool,
    UpstreamError,
)
from npm_sentinel.core.models import ToolCall, ToolSpec
from npm_sentinel.framework.schema import validate_schema

tool_input_type = dict[str, Any]
tool_output_type = dict[str, Any]

LOGGER = core_logging.get_logger("tool_runtime")

REPORT_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "succeeded": {"type": "integer", "minimum": 0},
        "failed": {"type": "integer", "minimum": 0},
    },
    "required": ["text"],
}


@dataclass
class Tool:
    spec: ToolSpec
    handler: Callable[[tool_input_type], tool_output_type]


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.spec.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.spec.name}")
        self._tools[tool.spec.name] = tool

    def list(self) -> list[ToolSpec]:
        return [tool.spec for tool in self._tools.values()]

    list_specs = list

    def names(self) -> list[str]:
        return [name for name in self._tools]

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise UnknownTool(name)
        return self._tools[name]

    def dispatch(self, name: str, args: tool_input_type | None) -> ToolCall:
        """Validate ``args`` for tool ``name`` and run its handler.

        Raises ``UnknownTool`` and ``SchemaMismatch`` before the handler is
        touched. Anything the handler raises is folded into a failed
        ``ToolCall`` whose text is the single top-level error message.
        """
        tool = self.get(name)
        payload = dict(args or {})
        validate_schema(tool.spec.input_schema, payload, "input")
        started_at = time.time()
        core_logging.log_event(
            LOGGER, "tool_dispatch_started", {"tool": name, "intent": tool.spec.tool_intent.value}
        )
        try:
            result = tool.handler(payload)
            validate_schema(tool.spec.output_schema, result, "output")
            status = "completed"
            is_error = False
            error_code = None
            text = str(result.get("text", ""))
            output = result
        except Exception as exc:  # noqa: BLE001
            raw_error = str(exc) or exc.__class__.__name__
            status = "failed"
            is_error = True
            error_code = classify_tool_error(raw_error, exc)
            text = f"Error {tool.spec.error_action}: {raw_error}"
            output = {"error": raw_error, "error_code": error_code}
            LOGGER.warning("tool_dispatch_failed", tool=name, error=raw_error, error_code=error_code)
        finished_at = time.time()
        if not is_error:
            core_logging.log_event(
                LOGGER,
                "tool_dispatch_completed",
                {
                    "tool": name,
                    "duration_ms": int((finished_at - started_at) * 1000),
                    "succeeded": output.get("succeeded"),
                    "failed": output.get("failed"),
                },
            )
        return ToolCall(
            tool_name=name,
            input=sanitize_payload(payload),
            started_at=_to_datetime(started_at),
            finished_at=_to_datetime(finished_at),
            status=status,
            text=text,
            is_error=is_error,
            error_code=error_code,
            output=output,
        )


def classify_tool_error(error_text: str, exc: BaseException | None = None) -> str:
    if isinstance(exc, EmptyBatch):
        return "contract.empty_batch"
    if isinstance(exc, UnknownTool):
        return "contract.tool_not_found"
    if isinstance(exc, UpstreamError):
        return "runtime.upstream_error"
    normalized = (error_text or "").strip()
    lowered = normalized.lower()
    if normalized.startswith("input schema validation failed"):
        return "contract.input_invalid"
    if normalized.startswith("output schema validation failed"):
        return "contract.output_invalid"
    if normalized.startswith("unknown_tool:"):
        return "contract.tool_not_found"
    if lowered.startswith("invalid ") and " schema:" in lowered:
        return "contract.schema_invalid"
    if "timed out" in lowered or "timeout" in lowered:
        return "runtime.timeout"
    return "runtime.tool_error"


def sanitize_payload(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        return {}

    def sanitize(value: Any) -> Any:
        if isinstance(value, (str, int, float, bool)) or value is None:
            return value
        if isinstance(value, dict):
            return {
                key: sanitize(item)
                for key, item in value.items()
                if not (isinstance(key, str) and key.startswith("_"))
            }
        if isinstance(value, (list, tuple)):
            return [sanitize(item) for item in value]
        try:
            json.dumps(value, ensure_ascii=True)
            return value
        except (TypeError, ValueError):
            return str(value)

    return sanitize(payload) or {}


def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


__all__ = [
    "REPORT_OUTPUT_SCHEMA",
    "SchemaMismatch",
    "Tool",
    "ToolExecutionError",
    "ToolRegistry",
    "UnknownTool",
    "classify_tool_error",
    "sanitize_payload",
]

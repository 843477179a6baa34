from __future__ import annotations

import pytest

from npm_sentinel.core.errors import EmptyBatch, SchemaMismatch, UnknownTool, UpstreamError
from npm_sentinel.core.models import ToolSpec
from npm_sentinel.core.tool_registry import TOOL_NAMES, default_registry
from npm_sentinel.framework.tool_runtime import (
    REPORT_OUTPUT_SCHEMA,
    Tool,
    ToolRegistry,
    classify_tool_error,
    sanitize_payload,
)
from npm_sentinel.tools.common import packages_input_schema


def _registry_with(handler, output_schema=REPORT_OUTPUT_SCHEMA) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(
        Tool(
            spec=ToolSpec(
                name="probe",
                description="test",
                input_schema=packages_input_schema("names"),
                output_schema=output_schema,
                error_action="probing",
            ),
            handler=handler,
        )
    )
    return registry


def test_default_registry_lists_every_tool_in_order() -> None:
    registry = default_registry()
    assert registry.names() == list(TOOL_NAMES)
    assert len(registry.list()) == 19
    for spec in registry.list_specs():
        assert spec.description
        assert spec.input_schema["type"] == "object"


def test_register_rejects_duplicates() -> None:
    registry = _registry_with(lambda payload: {"text": "ok"})
    with pytest.raises(ValueError):
        registry.register(registry.get("probe"))


def test_unknown_tool_is_rejected() -> None:
    registry = ToolRegistry()
    with pytest.raises(UnknownTool) as excinfo:
        registry.dispatch("npmNope", {"packages": ["react"]})
    assert str(excinfo.value) == "unknown_tool:npmNope"


def test_input_mismatch_never_reaches_handler() -> None:
    calls = []
    registry = _registry_with(lambda payload: calls.append(payload) or {"text": "ok"})
    with pytest.raises(SchemaMismatch) as excinfo:
        registry.dispatch("probe", {"packages": "react"})
    assert str(excinfo.value).startswith("input schema validation failed")
    with pytest.raises(SchemaMismatch):
        registry.dispatch("probe", {"packages": ["react"], "extra": True})
    assert calls == []


def test_successful_dispatch_returns_report_text() -> None:
    registry = _registry_with(lambda payload: {"text": "report", "succeeded": 1, "failed": 0})
    call = registry.dispatch("probe", {"packages": ["react"]})
    assert call.status == "completed"
    assert not call.is_error
    assert call.text == "report"
    assert call.input == {"packages": ["react"]}
    assert call.finished_at >= call.started_at


def test_handler_error_becomes_single_top_level_error() -> None:
    def handler(payload):
        raise UpstreamError("npm registry", "npm registry returned HTTP 500 (Error)", status=500)

    call = _registry_with(handler).dispatch("probe", {"packages": ["react"]})
    assert call.is_error
    assert call.status == "failed"
    assert call.text == "Error probing: npm registry returned HTTP 500 (Error)"
    assert call.error_code == "runtime.upstream_error"


def test_output_contract_is_enforced() -> None:
    call = _registry_with(lambda payload: {"wrong": 1}).dispatch("probe", {"packages": ["a"]})
    assert call.is_error
    assert call.error_code == "contract.output_invalid"


def test_empty_batch_through_real_tool() -> None:
    call = default_registry().dispatch("npmVersions", {"packages": []})
    assert call.is_error
    assert call.error_code == "contract.empty_batch"
    assert call.text == "Error fetching versions: No package names provided"


def test_classify_tool_error() -> None:
    assert classify_tool_error("x", EmptyBatch()) == "contract.empty_batch"
    assert classify_tool_error("unknown_tool:foo") == "contract.tool_not_found"
    assert classify_tool_error("input schema validation failed: x") == "contract.input_invalid"
    assert classify_tool_error("Invalid input schema: bad") == "contract.schema_invalid"
    assert classify_tool_error("request timed out after 15s") == "runtime.timeout"
    assert classify_tool_error("boom") == "runtime.tool_error"


def test_sanitize_payload_drops_private_keys() -> None:
    assert sanitize_payload({"packages": ["a"], "_token": "x", "n": {"_k": 1, "v": 2}}) == {
        "packages": ["a"],
        "n": {"v": 2},
    }
    assert sanitize_payload("nope") == {}


def test_blank_package_names_are_rejected_before_any_request(upstream) -> None:
    registry = default_registry()
    with pytest.raises(SchemaMismatch) as excinfo:
        registry.dispatch("npmVersions", {"packages": ["  "]})
    assert str(excinfo.value).startswith("input schema validation failed")
    with pytest.raises(SchemaMismatch):
        registry.dispatch("npmSize", {"packages": ["react", "\t"]})
    assert upstream.requests == []

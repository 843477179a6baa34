from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from npm_sentinel.core.errors import SchemaMismatch, ToolExecutionError

MAX_REPORTED_ERRORS = 5


@dataclass(frozen=True)
class ShapeError:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ShapeCheck:
    valid: bool
    errors: List[ShapeError] = field(default_factory=list)

    def messages(self) -> List[str]:
        return [str(error) for error in self.errors]


def _validator(schema: Dict[str, Any], label: str) -> Draft202012Validator:
    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as exc:
        raise ToolExecutionError(f"Invalid {label} schema: {exc.message}") from exc
    return Draft202012Validator(schema)


def check_shape(schema: Dict[str, Any] | None, payload: Any, label: str = "payload") -> ShapeCheck:
    """Check ``payload`` against ``schema`` without raising on a mismatch.

    Only a broken schema raises; a payload that does not fit is reported
    through the returned ``ShapeCheck`` so callers decide what to do with it.
    """
    if not schema:
        return ShapeCheck(valid=True)
    validator = _validator(schema, label)
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(map(str, err.path)))
    if not errors:
        return ShapeCheck(valid=True)
    return ShapeCheck(
        valid=False,
        errors=[
            ShapeError(path="/".join(map(str, err.path)) or "<root>", message=err.message)
            for err in errors[:MAX_REPORTED_ERRORS]
        ],
    )


def validate_schema(schema: Dict[str, Any] | None, payload: Any, label: str) -> None:
    check = check_shape(schema, payload, label)
    if not check.valid:
        raise SchemaMismatch(label, check.messages())

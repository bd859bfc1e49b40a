"""JSON Schema validators for endpoint input and output."""

from __future__ import annotations

from typing import Any

import jsonschema


class SchemaValidator:
    """Callable validator; after a failed call ``errors`` lists what went wrong."""

    def __init__(self, schema: dict[str, Any]) -> None:
        jsonschema.Draft202012Validator.check_schema(schema)
        self.schema = schema
        self._validator = jsonschema.Draft202012Validator(schema)
        self.errors: list[dict[str, Any]] = []

    def __call__(self, value: Any) -> bool:
        found = sorted(self._validator.iter_errors(value), key=lambda e: [str(p) for p in e.path])
        self.errors = [
            {"path": "/".join(str(p) for p in error.path) or "<root>", "message": error.message}
            for error in found
        ]
        return not self.errors


def compile_validator(schema: dict[str, Any] | None) -> SchemaValidator | None:
    if schema is None:
        return None
    return SchemaValidator(schema)


def format_errors(errors: list[dict[str, Any]]) -> str:
    return "; ".join(f"{error.get('path', '<root>')}: {error.get('message', '')}" for error in errors)

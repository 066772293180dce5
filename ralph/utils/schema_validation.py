"""
Schema Validation Utilities
===========================
JSON Schema loading and validation helpers.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError


@lru_cache(maxsize=32)
def _load_schema(schema_filename: str) -> Dict[str, Any]:
    """Load a schema JSON file from ralph/schemas.

    Args:
        schema_filename: File name under ralph/schemas (for example 'derived_plan.schema.json').

    Raises:
        FileNotFoundError: When schema file is missing.
        ValueError: When schema file is not valid JSON or not a JSON object.
    """
    schemas_dir = Path(__file__).resolve().parent.parent / "schemas"
    schema_path = (schemas_dir / schema_filename).resolve()
    if not schema_path.is_relative_to(schemas_dir.resolve()):
        raise ValueError(f"Schema path escapes schemas directory: {schema_filename}")
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_filename}")

    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load schema {schema_filename}: {e}")

    if not isinstance(schema, dict):
        raise ValueError(f"Schema {schema_filename} must be a JSON object")
    return schema


def _format_error(error: ValidationError) -> str:
    path = "/".join(str(p) for p in error.path)
    prefix = f"Validation failed at '{path}': " if path else "Validation failed: "
    return prefix + error.message


def schema_errors(payload: Any, schema_filename: str) -> List[str]:
    """Return every validation error message for payload, sorted by path."""
    schema = _load_schema(schema_filename)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])
    return [_format_error(e) for e in errors]


def validate_against_schema(payload: Any, schema_filename: str) -> None:
    """Validate payload against a JSON Schema.

    Args:
        payload: Any JSON-serializable object.
        schema_filename: File name under ralph/schemas.

    Raises:
        ValueError: When payload fails validation (first error only).
    """
    errors = schema_errors(payload, schema_filename)
    if errors:
        raise ValueError(errors[0])


def derived_plan_errors(plan: Any) -> List[str]:
    """Return all problems with a derived plan payload; empty when valid.

    Uses ralph/schemas/derived_plan.schema.json plus the step id uniqueness
    rule, which JSON Schema cannot express.
    """
    errors = schema_errors(plan, "derived_plan.schema.json")
    if errors:
        return errors

    seen: set[str] = set()
    for i, step in enumerate(plan["steps"]):
        step_id = step["id"]
        if step_id in seen:
            errors.append(f"Validation failed at 'steps/{i}/id': duplicate step id {step_id!r}")
        seen.add(step_id)
    return errors


def validate_run_state(payload: Any) -> None:
    """Validate a reverse_state.json payload.

    Uses ralph/schemas/run_state.schema.json.
    """
    validate_against_schema(payload, "run_state.schema.json")


def validate_prd(payload: Any) -> None:
    """Validate a prd.json feature list.

    Uses ralph/schemas/prd.schema.json.
    """
    validate_against_schema(payload, "prd.schema.json")

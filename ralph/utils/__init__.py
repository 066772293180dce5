"""
Utility Functions
=================
Common utilities for path validation, schema validation, atomic writes and
subprocess environments.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .validation import (
    validate_path,
    validate_context_dir,
    parse_iterations,
)

from .schema_validation import (
    validate_against_schema,
    derived_plan_errors,
    validate_run_state,
    validate_prd,
)

from .atomic_write import (
    write_text_atomic,
    write_json_atomic,
)

from .subprocess_env import build_minimal_subprocess_env

__all__ = [
    # Validation
    "validate_path",
    "validate_context_dir",
    "parse_iterations",
    # Schema validation
    "validate_against_schema",
    "derived_plan_errors",
    "validate_run_state",
    "validate_prd",
    # Atomic writes
    "write_text_atomic",
    "write_json_atomic",
    # Subprocess
    "build_minimal_subprocess_env",
]

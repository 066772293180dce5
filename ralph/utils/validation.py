"""
Validation Utilities
====================
Validation functions for user-supplied paths and iteration counts.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import re
from pathlib import Path
from typing import Union

from ralph.errors import UsageError, WorkspaceError


_NON_NEGATIVE_INT = re.compile(r"^[0-9]+$")


def validate_path(
    path: Union[str, Path],
    must_exist: bool = False,
    must_be_file: bool = False,
    must_be_dir: bool = False,
) -> Path:
    """
    Validate a file path.

    Args:
        path: Path to validate
        must_exist: If True, path must exist
        must_be_file: If True, path must be a file
        must_be_dir: If True, path must be a directory

    Returns:
        Validated Path object

    Raises:
        ValueError: If path fails validation
        FileNotFoundError: If path must exist but doesn't
    """
    if not path:
        raise ValueError("Path cannot be empty")

    path_obj = Path(path)

    if must_exist and not path_obj.exists():
        raise FileNotFoundError(f"Path does not exist: {path}")

    if must_be_file and path_obj.exists() and not path_obj.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if must_be_dir and path_obj.exists() and not path_obj.is_dir():
        raise ValueError(f"Path is not a directory: {path}")

    return path_obj


def validate_context_dir(context_dir: Union[str, Path]) -> Path:
    """
    Validate the directory scanned for repository context.

    Raises:
        WorkspaceError: If the directory is missing or not a directory
    """
    try:
        return validate_path(context_dir, must_exist=True, must_be_dir=True)
    except (ValueError, FileNotFoundError) as e:
        raise WorkspaceError(f"--context-dir does not exist: {context_dir}") from e


def parse_iterations(value: Union[str, int], *, allow_zero: bool = True) -> int:
    """
    Parse an iteration count given on the command line.

    Only plain decimal digits are accepted; signs, spaces and floats are rejected.

    Raises:
        UsageError: If the value is not a (positive, when allow_zero is False) integer
    """
    text = str(value).strip()
    if not _NON_NEGATIVE_INT.match(text):
        raise UsageError("iterations must be an integer")

    iterations = int(text)
    if not allow_zero and iterations <= 0:
        raise UsageError("iterations must be a positive integer")
    return iterations

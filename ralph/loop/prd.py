"""
Ralph Loop Task List
====================
Loading, validation and scaffolding of the loop inputs:

- prd.json     list of features, each with a boolean `passes`
- progress.txt free-form log the agent appends to

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger

from ralph.config import OUTPUTS
from ralph.errors import WorkspaceError
from ralph.utils.atomic_write import write_json_atomic, write_text_atomic
from ralph.utils.schema_validation import validate_prd


PRD_TEMPLATE: List[Dict[str, Any]] = [
    {
        "category": "",
        "description": "",
        "steps": [],
        "passes": False,
    }
]


@dataclass(frozen=True)
class LoopPaths:
    """Loop input files, relative to the working directory."""

    root: Path
    prd: Path
    progress: Path


def loop_paths(root: str | Path = ".") -> LoopPaths:
    r = Path(root)
    return LoopPaths(root=r, prd=r / OUTPUTS.PRD, progress=r / OUTPUTS.PROGRESS)


def load_prd(path: Path) -> List[Dict[str, Any]]:
    """Read and validate prd.json.

    Raises:
        WorkspaceError: When the file is missing, not JSON, or not a feature list.
    """
    if not path.is_file():
        raise WorkspaceError(f"{path} not found; run ralph-init to create it")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        validate_prd(payload)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        raise WorkspaceError(f"{path} is invalid: {e}") from e

    return payload


def incomplete_features(features: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [f for f in features if f.get("passes") is not True]


def check_loop_inputs(paths: LoopPaths) -> List[Dict[str, Any]]:
    """Ensure both loop inputs exist and return the parsed feature list."""
    features = load_prd(paths.prd)
    if not paths.progress.is_file():
        raise WorkspaceError(f"{paths.progress} not found; run ralph-init to create it")
    return features


def init_workspace(root: str | Path = ".", *, force: bool = False) -> LoopPaths:
    """Create an empty progress.txt and a one-feature prd.json template.

    Existing files are left alone unless force is set.
    """
    paths = loop_paths(root)
    paths.root.mkdir(parents=True, exist_ok=True)

    existing = [p for p in (paths.prd, paths.progress) if p.exists()]
    if existing and not force:
        names = ", ".join(str(p) for p in existing)
        raise WorkspaceError(f"Refusing to overwrite {names}; use --force")

    write_text_atomic(paths.progress, "")
    write_json_atomic(paths.prd, PRD_TEMPLATE)
    logger.info("Initialized Ralph loop inputs in {}", paths.root.resolve())
    return paths

"""
Atomic File Writes
==================
Write artifacts through a sibling temporary file so a crash never leaves a
half-written file at the final path.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def write_text_atomic(path: Path, content: str) -> Path:
    """Write content to path via path.tmp and an atomic rename."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
        tmp_path.replace(path)
    except Exception:
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except OSError:
            pass
        raise

    return path


def write_json_atomic(path: Path, payload: Any) -> Path:
    """Serialize payload as indented JSON and write it atomically."""
    return write_text_atomic(path, json.dumps(payload, ensure_ascii=False, indent=2) + "\n")

#!/usr/bin/env python3
"""Run a single Ralph loop iteration.

Allows running from a checkout without installing the package.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parents[1]
root_str = str(ROOT_DIR)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from ralph.cli import once_main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(once_main())

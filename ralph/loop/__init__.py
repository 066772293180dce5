"""Ralph loop: one feature per iteration against prd.json.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .prd import LoopPaths, check_loop_inputs, incomplete_features, init_workspace, load_prd, loop_paths
from .prompts import STOP_MARKER, ralph_loop_prompt
from .runner import LoopReport, run_ralph_loop

__all__ = [
    "LoopPaths",
    "check_loop_inputs",
    "incomplete_features",
    "init_workspace",
    "load_prd",
    "loop_paths",
    "STOP_MARKER",
    "ralph_loop_prompt",
    "LoopReport",
    "run_ralph_loop",
]

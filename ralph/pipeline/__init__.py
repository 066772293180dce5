"""Stage pipeline modules.

This package provides a lightweight, filesystem-first stage runner: an
ordered list of stages, a persisted run state, and a runner that advances
one stage at a time.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .context import RunContext
from .runner import RunReport, StageOutcome, StageRunner
from .stages import Pipeline, Stage
from .state import FileStateStore, MemoryStateStore, RunState, StateStore

__all__ = [
    "RunContext",
    "RunReport",
    "StageOutcome",
    "StageRunner",
    "Pipeline",
    "Stage",
    "FileStateStore",
    "MemoryStateStore",
    "RunState",
    "StateStore",
]

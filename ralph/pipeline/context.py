"""Pipeline run context.

This module defines the explicit state object the stage runner works on. It
is loaded once at process start from a StateStore and committed back to the
store after every completed stage; nothing about the run lives in globals.

Only plain values are kept so the context can be dumped for debugging. The
artifact files in the output directory remain the source of truth for what
each stage produced.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

from ralph.pipeline.state import MemoryStateStore, RunState, StateStore


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class RunContext:
    """Run state plus bookkeeping for one process invocation."""

    out_dir: Path
    store: StateStore = field(default_factory=MemoryStateStore)
    state: RunState = field(default_factory=RunState)
    run_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: str = field(default_factory=_utc_now_iso)

    checkpoints: Dict[str, str] = field(default_factory=dict)
    outcomes: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    # Set from a signal handler; checked between stages only
    stop_requested: bool = False

    @classmethod
    def load(cls, out_dir: Path, store: StateStore) -> "RunContext":
        """Build a context from whatever the store currently holds."""
        return cls(out_dir=Path(out_dir), store=store, state=store.load())

    @property
    def success(self) -> bool:
        return not self.errors

    def commit(self, state: RunState) -> None:
        """Adopt state and persist it immediately."""
        self.store.save(state)
        self.state = state

    def request_stop(self) -> None:
        self.stop_requested = True

    def mark_checkpoint(self, name: str) -> None:
        if not name.strip():
            return
        self.checkpoints[name] = _utc_now_iso()

    def record_outcome(self, stage_index: int, stage_name: str, outcome: str) -> None:
        self.outcomes.append(
            {
                "stage_index": stage_index,
                "stage": stage_name,
                "outcome": outcome,
                "at": _utc_now_iso(),
            }
        )

    def record_error(self, message: str) -> None:
        if message.strip():
            self.errors.append(message)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "created_at": self.created_at,
            "out_dir": str(self.out_dir),
            "stage": self.state.stage,
            "success": self.success,
            "errors": list(self.errors),
            "checkpoints": dict(self.checkpoints),
            "outcomes": list(self.outcomes),
        }

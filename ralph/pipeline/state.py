"""Run state persistence.

The run state is a single integer: the index of the next stage to run. All
stages before it are done; the value equal to the stage count means the
pipeline is complete.

Stores are injected into the runner. FileStateStore persists
`{"stage": <int>}` to reverse_state.json; MemoryStateStore keeps it in
memory for tests and dry runs.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Protocol

from loguru import logger

from ralph.errors import WorkspaceError
from ralph.utils.atomic_write import write_text_atomic
from ralph.utils.schema_validation import validate_run_state


@dataclass(frozen=True)
class RunState:
    """How far the pipeline got."""

    stage: int = 0

    def __post_init__(self) -> None:
        if self.stage < 0:
            raise ValueError(f"Run state must be >= 0, got {self.stage}")

    def is_complete(self, terminal: int) -> bool:
        return self.stage >= terminal

    def advanced(self) -> "RunState":
        return RunState(stage=self.stage + 1)

    def to_payload(self) -> Dict[str, Any]:
        return {"stage": self.stage}


class StateStore(Protocol):
    def load(self) -> RunState:
        ...

    def save(self, state: RunState) -> None:
        ...


class MemoryStateStore:
    """In-memory store; records every saved state in `history`."""

    def __init__(self, initial: RunState | None = None):
        self._state = initial or RunState()
        self.history: List[RunState] = []

    def load(self) -> RunState:
        return self._state

    def save(self, state: RunState) -> None:
        self._state = state
        self.history.append(state)


class FileStateStore:
    """JSON file store. A missing file means stage 0."""

    def __init__(self, path: Path, terminal: int | None = None):
        self.path = Path(path)
        self.terminal = terminal

    def load(self) -> RunState:
        if not self.path.exists():
            return RunState()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            validate_run_state(payload)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            raise WorkspaceError(f"{self.path.name} is invalid: {e}") from e

        state = RunState(stage=int(payload["stage"]))
        if self.terminal is not None and state.stage > self.terminal:
            raise WorkspaceError(
                f"{self.path.name} is invalid: stage {state.stage} exceeds {self.terminal}"
            )
        return state

    def save(self, state: RunState) -> None:
        write_text_atomic(self.path, json.dumps(state.to_payload()) + "\n")
        logger.debug("Run state saved: {} -> {}", self.path.name, state.stage)

"""Pipeline stage definitions.

A Stage is one named step of a linear pipeline. It produces exactly one
artifact file inside the output directory. Stages are defined once, when the
pipeline is built, and never change during a run.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence, Tuple


# Returns the artifact content; raising aborts the stage
StageProducer = Callable[[], str]


@dataclass(frozen=True)
class Stage:
    """One step of the pipeline and the artifact it must produce."""

    name: str
    artifact: Path
    produce: StageProducer
    # Optional check run on the produced content before it is written
    validate: Callable[[str], str] | None = None

    def artifact_exists(self) -> bool:
        return self.artifact.is_file()


@dataclass(frozen=True)
class Pipeline:
    """An ordered, fixed list of stages."""

    name: str
    stages: Tuple[Stage, ...]

    @classmethod
    def of(cls, name: str, stages: Sequence[Stage]) -> "Pipeline":
        if not stages:
            raise ValueError("A pipeline needs at least one stage")
        names = [s.name for s in stages]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate stage names in pipeline {name!r}: {names}")
        return cls(name=name, stages=tuple(stages))

    @property
    def terminal(self) -> int:
        """State value meaning 'every stage done'."""
        return len(self.stages)

    def index_of(self, name_or_index: str | int) -> int:
        """Resolve a stage name or index to an index in [0, terminal]."""
        if isinstance(name_or_index, int) or str(name_or_index).isdigit():
            idx = int(name_or_index)
            if not 0 <= idx <= self.terminal:
                raise ValueError(f"Stage index {idx} out of range 0..{self.terminal}")
            return idx

        for i, stage in enumerate(self.stages):
            if stage.name == name_or_index:
                return i
        raise ValueError(f"Unknown stage {name_or_index!r}; expected one of {[s.name for s in self.stages]}")

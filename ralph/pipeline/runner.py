"""Stage runner.

Advances a linear pipeline by zero or more stages per invocation:

- state == K (stage count): no-op, the pipeline is complete
- otherwise stage `state` runs only if its artifact does not exist yet;
  the artifact is written, then state becomes state + 1 and is persisted

A stage is atomic from the runner's point of view. If its producer or
validator raises, nothing is written, the state is not advanced and the
failure propagates as StageFailedError. Nothing is retried.

Artifacts on disk, not in-memory results, are what later stages read.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from loguru import logger

from ralph.errors import RalphError, StageFailedError
from ralph.pipeline.context import RunContext
from ralph.pipeline.stages import Pipeline, Stage
from ralph.pipeline.state import RunState
from ralph.utils.atomic_write import write_text_atomic


class StageOutcome(Enum):
    GENERATED = "generated"
    SKIPPED = "skipped"          # artifact already present
    COMPLETE = "complete"        # pipeline already at its terminal state
    INTERRUPTED = "interrupted"  # stop requested before the stage started


@dataclass
class RunReport:
    """Summary of one run(n) call."""

    outcomes: List[StageOutcome] = field(default_factory=list)
    state: RunState = field(default_factory=RunState)
    complete: bool = False

    @property
    def interrupted(self) -> bool:
        return StageOutcome.INTERRUPTED in self.outcomes

    @property
    def generated(self) -> int:
        return sum(1 for o in self.outcomes if o is StageOutcome.GENERATED)


class StageRunner:
    """Runs a Pipeline against a RunContext."""

    def __init__(self, pipeline: Pipeline, context: RunContext):
        self.pipeline = pipeline
        self.context = context

    @property
    def is_complete(self) -> bool:
        return self.context.state.is_complete(self.pipeline.terminal)

    @property
    def current_stage(self) -> Optional[Stage]:
        if self.is_complete:
            return None
        return self.pipeline.stages[self.context.state.stage]

    def advance(self) -> StageOutcome:
        """Advance by at most one stage."""
        index = self.context.state.stage
        if self.is_complete:
            logger.info("{} is complete (stage={})", self.pipeline.name, index)
            self.context.record_outcome(index, "done", StageOutcome.COMPLETE.value)
            return StageOutcome.COMPLETE

        stage = self.pipeline.stages[index]

        if stage.artifact_exists():
            logger.info("{} already exists; skipping stage {} ({})", stage.artifact.name, index, stage.name)
            outcome = StageOutcome.SKIPPED
        else:
            logger.info("Generating {} ...", stage.artifact.name)
            try:
                content = stage.produce()
                if stage.validate is not None:
                    content = stage.validate(content)
            except (RalphError, OSError) as e:
                self.context.record_error(f"{stage.name}: {e}")
                logger.error("Stage {} ({}) failed: {}", index, stage.name, e)
                raise StageFailedError(index, stage.name, e) from e

            if not content.endswith("\n"):
                content += "\n"
            write_text_atomic(stage.artifact, content)
            outcome = StageOutcome.GENERATED

        self.context.commit(self.context.state.advanced())
        self.context.mark_checkpoint(f"{stage.name}_complete")
        self.context.record_outcome(index, stage.name, outcome.value)
        return outcome

    def run(self, n: int = 1, *, force: bool = False) -> RunReport:
        """Call advance() exactly n times, persisting after each stage.

        With force, every stage artifact is discarded and the state rewound
        to 0 first. A stop request is honoured between stages only.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")

        if force:
            self.regenerate(0)

        report = RunReport()
        for _ in range(n):
            if self.context.stop_requested:
                logger.warning("Stop requested; not starting stage {}", self.context.state.stage)
                report.outcomes.append(StageOutcome.INTERRUPTED)
                break
            report.outcomes.append(self.advance())

        report.state = self.context.state
        report.complete = self.is_complete
        return report

    def regenerate(self, from_stage: Union[int, str] = 0) -> RunState:
        """Delete artifacts of stages >= from_stage and rewind the state.

        Artifacts of earlier stages are left alone. The new state is
        min(from_stage, current stage): rewinding never moves the state
        forward past stages that have not run, so a pipeline at stage 0
        stays at stage 0.
        """
        index = self.pipeline.index_of(from_stage)

        for stage in self.pipeline.stages[index:]:
            if stage.artifact.exists():
                stage.artifact.unlink()
                logger.info("Removed {} for regeneration", stage.artifact.name)

        rewound = RunState(stage=min(index, self.context.state.stage))
        self.context.commit(rewound)
        self.context.mark_checkpoint(f"regenerate_from_{index}")
        return rewound

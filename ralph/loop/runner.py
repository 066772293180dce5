"""Ralph loop driver.

Runs the single-feature execution contract against prd.json/progress.txt
for up to N iterations. Each iteration is one interactive edit session of
the claude CLI, streamed to the terminal.

By default the loop pauses after the first iteration so a human can review
prd.json and progress.txt before re-running. The loop also ends early once
every feature in prd.json has `passes: true`.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ralph.llm.backend import GenerationBackend, OutputMode
from ralph.loop.prd import check_loop_inputs, incomplete_features, load_prd, loop_paths
from ralph.loop.prompts import ralph_loop_prompt
from ralph.pipeline.context import RunContext


@dataclass
class LoopReport:
    requested: int
    iterations_run: int = 0
    complete: bool = False
    paused: bool = False
    interrupted: bool = False
    remaining_features: int = 0


def run_ralph_loop(
    iterations: int,
    backend: GenerationBackend,
    *,
    root: Union[str, Path] = ".",
    pause_after_each: bool = True,
    stop_marker: bool = False,
    context: Optional[RunContext] = None,
) -> LoopReport:
    """Run up to `iterations` single-feature edit sessions.

    Raises:
        WorkspaceError: prd.json or progress.txt missing or invalid.
        BackendError: An edit session exited non-zero; the loop stops.
    """
    if iterations <= 0:
        raise ValueError("iterations must be a positive integer")

    paths = loop_paths(root)
    features = check_loop_inputs(paths)
    context = context or RunContext(out_dir=paths.root)
    report = LoopReport(requested=iterations)

    prompt = ralph_loop_prompt(Path(paths.prd.name), Path(paths.progress.name), stop_marker=stop_marker)

    for i in range(1, iterations + 1):
        if not incomplete_features(features):
            break
        if context.stop_requested:
            logger.warning("Stop requested; not starting iteration {}", i)
            report.interrupted = True
            break

        logger.info("=== Ralph iteration {}/{} ===", i, iterations)
        backend.generate(prompt, OutputMode.STREAM)
        report.iterations_run += 1
        context.record_outcome(i, "ralph_iteration", "generated")

        features = load_prd(paths.prd)

        if pause_after_each and incomplete_features(features):
            logger.info("Iteration {} complete. Review prd.json/progress.txt, then re-run if desired.", i)
            report.paused = i < iterations
            break

    remaining = incomplete_features(features)
    report.remaining_features = len(remaining)
    report.complete = not remaining
    if report.complete:
        logger.info("All features in {} pass", paths.prd.name)
    return report

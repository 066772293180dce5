"""Reverse Ralph pipeline.

Two stages, advanced one per invocation by default:

    Stage 0: ticket_analysis.md   (markdown, free-text mode)
    Stage 1: derived_plan.json    (JSON mode, schema-validated)
    Stage 2: done

The ticket and the context bundle are inputs, not stages: both are rebuilt
on every run before the runner starts. Only the derived outputs are cached.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

from filelock import FileLock, Timeout
from loguru import logger

from ralph.config import OUTPUTS, TIMEOUTS
from ralph.errors import PlanValidationError, WorkspaceError
from ralph.llm.backend import GenerationBackend, OutputMode
from ralph.pipeline.context import RunContext
from ralph.pipeline.runner import RunReport, StageRunner
from ralph.pipeline.signals import stop_between_stages
from ralph.pipeline.stages import Pipeline, Stage
from ralph.pipeline.state import FileStateStore, RunState, StateStore
from ralph.reverse.context_bundle import BundleSummary, ContextLimits, IgnoreRules, write_context_bundle
from ralph.reverse.layout import ReversePaths, ensure_reverse_layout
from ralph.reverse.plan import PlanValidationFailure, parse_derived_plan
from ralph.reverse.prompts import derived_plan_prompt, ticket_analysis_prompt
from ralph.reverse.ticket import TicketSource, normalize_ticket
from ralph.utils.atomic_write import write_text_atomic
from ralph.utils.validation import validate_context_dir


TICKET_ANALYSIS_STAGE = "ticket_analysis"
DERIVED_PLAN_STAGE = "derived_plan"


@dataclass(frozen=True)
class ReverseOptions:
    """Everything a Reverse Ralph run needs besides the backend."""

    ticket: TicketSource
    out_dir: Path = Path(OUTPUTS.OUT_DIR)
    context_dir: Path = Path(".")
    iterations: int = 1
    include_code: bool = True
    regen: bool = False
    limits: ContextLimits = field(default_factory=ContextLimits)


@dataclass
class ReverseResult:
    paths: ReversePaths
    context: RunContext
    report: RunReport
    bundle: BundleSummary


def build_reverse_pipeline(paths: ReversePaths, backend: GenerationBackend) -> Pipeline:
    """Bind the two Reverse Ralph stages to paths and a backend."""

    def produce_ticket_analysis() -> str:
        return backend.generate(ticket_analysis_prompt(paths), OutputMode.TEXT).text

    def produce_derived_plan() -> str:
        return backend.generate(derived_plan_prompt(paths), OutputMode.JSON).text

    def check_derived_plan(raw: str) -> str:
        result = parse_derived_plan(raw)
        if isinstance(result, PlanValidationFailure):
            write_text_atomic(paths.rejected_plan, raw if raw.endswith("\n") else raw + "\n")
            for err in result.errors:
                logger.error("derived_plan: {}", err)
            logger.error("Raw LLM output saved for inspection: {}", paths.rejected_plan)
            raise PlanValidationError(
                f"Derived plan failed validation ({len(result.errors)} error(s)); raw output in {paths.rejected_plan}",
                raw=raw,
                errors=result.errors,
            )

        if paths.rejected_plan.exists():
            paths.rejected_plan.unlink()
        logger.info("Derived plan validated: {} steps", len(result.plan.steps))
        return result.to_json()

    return Pipeline.of(
        "Reverse Ralph",
        [
            Stage(TICKET_ANALYSIS_STAGE, paths.ticket_analysis, produce_ticket_analysis),
            Stage(DERIVED_PLAN_STAGE, paths.derived_plan, produce_derived_plan, check_derived_plan),
        ],
    )


def _ignore_rules_for(context_dir: Path, out_dir: Path) -> IgnoreRules:
    """Load .ralphignore and also skip the output directory when it sits inside context_dir."""
    rules = IgnoreRules.load(context_dir)
    try:
        rel = out_dir.resolve().relative_to(context_dir.resolve())
    except ValueError:
        return rules
    if rel.parts:
        rules.prefixes.append(rel.as_posix() + "/")
    return rules


def run_reverse_ralph(
    options: ReverseOptions,
    backend: GenerationBackend,
    *,
    store: Optional[StateStore] = None,
    stdin: Optional[TextIO] = None,
    handle_signals: bool = False,
) -> ReverseResult:
    """Rebuild the inputs, then advance the pipeline options.iterations times.

    Raises:
        UsageError: Missing ticket file.
        WorkspaceError: Missing context dir, invalid state file or lock timeout.
        StageFailedError: A stage failed; earlier progress is kept.
    """
    context_dir = validate_context_dir(options.context_dir)
    ticket_text = options.ticket.read(stdin)
    paths = ensure_reverse_layout(options.out_dir)

    lock = FileLock(str(paths.lock), timeout=TIMEOUTS.FILE_LOCK)
    try:
        lock.acquire()
    except Timeout as e:
        raise WorkspaceError(
            f"Timed out acquiring {paths.lock} after {TIMEOUTS.FILE_LOCK}s; is another run using {paths.out_dir}?"
        ) from e

    try:
        normalize_ticket(ticket_text, paths.ticket)
        bundle = write_context_bundle(
            context_dir,
            paths.ticket,
            paths.context_bundle,
            include_code=options.include_code,
            limits=options.limits,
            rules=_ignore_rules_for(context_dir, paths.out_dir),
        )

        pipeline = build_reverse_pipeline(paths, backend)
        state_store = store if store is not None else FileStateStore(paths.state, terminal=pipeline.terminal)
        if options.regen:
            # Rewind before reading so a corrupt state file does not block regeneration
            state_store.save(RunState())
        context = RunContext.load(paths.out_dir, state_store)
        context.mark_checkpoint("start")
        runner = StageRunner(pipeline, context)

        if options.regen:
            runner.regenerate(0)

        if handle_signals:
            with stop_between_stages(context):
                report = runner.run(options.iterations)
        else:
            report = runner.run(options.iterations)

        context.mark_checkpoint("end")
        return ReverseResult(paths=paths, context=context, report=report, bundle=bundle)
    finally:
        lock.release()

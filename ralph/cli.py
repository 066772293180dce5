"""Command-line entry points.

- reverse-ralph   advance the ticket -> analysis -> plan pipeline
- ralph-loop      run single-feature edit iterations against prd.json
- ralph-once      one edit iteration, asking for the STOP marker
- ralph-init      scaffold prd.json and progress.txt

Exit code behavior:
- 0 on success, including "already complete"
- 2 for usage errors (bad or conflicting options, missing external command)
- 1 for backend, validation and workspace failures
- 130 when a signal stopped the run between stages, or a second signal aborted it

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from ralph import __version__
from ralph.config import LLM, OUTPUTS
from ralph.errors import RalphError, UsageError
from ralph.llm import ClaudeCliBackend, GenerationBackend, get_backend
from ralph.loop import init_workspace, run_ralph_loop
from ralph.pipeline.context import RunContext
from ralph.pipeline.runner import StageOutcome
from ralph.pipeline.signals import stop_between_stages
from ralph.reverse import ReverseOptions, TicketSource, run_reverse_ralph
from ralph.reverse.context_bundle import ContextLimits
from ralph.utils.validation import parse_iterations


EXIT_INTERRUPTED = 130

BackendFactory = Callable[..., GenerationBackend]


def configure_logging(verbose: bool = False) -> None:
    """Send loguru output to stderr at INFO (DEBUG when verbose)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<level>{level: <8}</level> | {message}",
    )


def _fail(error: RalphError) -> int:
    logger.error(str(error))
    return error.exit_code


def _aborted() -> int:
    logger.warning("Aborted by signal")
    return EXIT_INTERRUPTED


# ---------------------------------------------------------------------------
# reverse-ralph
# ---------------------------------------------------------------------------


def build_reverse_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reverse-ralph",
        description="Derive a ticket analysis and an implementation plan from a ticket and repo context.",
        epilog=(
            "Outputs (in out-dir): ticket.md, context.bundle.md, ticket_analysis.md, "
            "derived_plan.json, reverse_state.json"
        ),
    )

    ticket = parser.add_argument_group("ticket input (choose one)").add_mutually_exclusive_group(required=True)
    ticket.add_argument("--ticket-file", type=Path, metavar="PATH", help="Read ticket/user story from a file")
    ticket.add_argument("--ticket", metavar="TEXT", help="Ticket text or URL (treated as text; no network fetch)")
    ticket.add_argument("--ticket-stdin", action="store_true", help="Read ticket text from stdin")

    parser.add_argument("--context-dir", type=Path, default=Path("."), help="Directory to scan for context files (default: .)")
    parser.add_argument("--iterations", default="1", help="How many stage-advances to run (default: 1)")
    parser.add_argument("--out-dir", type=Path, default=Path(OUTPUTS.OUT_DIR), help=f"Output state directory (default: {OUTPUTS.OUT_DIR})")

    code = parser.add_mutually_exclusive_group()
    code.add_argument("--include-code", dest="include_code", action="store_true", default=True, help="Include code excerpts in the context bundle (default)")
    code.add_argument("--no-include-code", dest="include_code", action="store_false", help="Docs/config/images only")

    parser.add_argument("--regen", action="store_true", help="Discard generated outputs and rewind to stage 0 (keeps ticket/context)")
    parser.add_argument("--backend", choices=["cli", "api"], default=LLM.BACKEND if LLM.BACKEND in ("cli", "api") else "cli", help="Generation backend (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def reverse_main(argv: Optional[List[str]] = None, *, backend_factory: BackendFactory = get_backend) -> int:
    parser = build_reverse_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        iterations = parse_iterations(args.iterations)
        source = TicketSource(file=args.ticket_file, text=args.ticket, stdin=bool(args.ticket_stdin))
        backend = backend_factory(args.backend)
        backend.check_available()

        options = ReverseOptions(
            ticket=source,
            out_dir=args.out_dir,
            context_dir=args.context_dir,
            iterations=iterations,
            include_code=args.include_code,
            regen=args.regen,
            limits=ContextLimits(),
        )
        result = run_reverse_ralph(options, backend, handle_signals=True)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        return _fail(e)
    except RalphError as e:
        return _fail(e)
    except KeyboardInterrupt:
        return _aborted()

    paths = result.paths
    if StageOutcome.COMPLETE in result.report.outcomes:
        print(f"Reverse Ralph is complete (stage={result.report.state.stage}).")
        print("Outputs:")
        print(f"  - {paths.ticket_analysis}")
        print(f"  - {paths.derived_plan}")

    print()
    print("Artifacts:")
    for artifact in paths.artifacts():
        if artifact.exists():
            print(f"  - {artifact}")

    if result.report.interrupted:
        logger.warning("Stopped before stage {}; re-run to continue", result.report.state.stage)
        return EXIT_INTERRUPTED
    return 0


# ---------------------------------------------------------------------------
# ralph-loop / ralph-once / ralph-init
# ---------------------------------------------------------------------------


def build_loop_parser(prog: str = "ralph-loop", *, once: bool = False) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Implement exactly one incomplete feature from prd.json per iteration.",
    )
    if not once:
        parser.add_argument("iterations", help="Maximum number of iterations (positive integer)")
        parser.add_argument(
            "--no-pause",
            dest="pause",
            action="store_false",
            help="Keep iterating instead of stopping for review after each iteration",
        )
    parser.add_argument("--dir", type=Path, default=Path("."), help="Directory holding prd.json and progress.txt (default: .)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _edit_backend(root: Path) -> GenerationBackend:
    return ClaudeCliBackend(args=LLM.EDIT_ARGS, cwd=root)


def _run_loop(args, parser, iterations_raw: str, *, pause: bool, stop_marker: bool, backend_factory) -> int:
    try:
        iterations = parse_iterations(iterations_raw, allow_zero=False)
        backend = backend_factory(args.dir)
        backend.check_available()

        context = RunContext(out_dir=args.dir)
        with stop_between_stages(context):
            report = run_ralph_loop(
                iterations,
                backend,
                root=args.dir,
                pause_after_each=pause,
                stop_marker=stop_marker,
                context=context,
            )
    except UsageError as e:
        parser.print_usage(sys.stderr)
        return _fail(e)
    except RalphError as e:
        return _fail(e)
    except KeyboardInterrupt:
        return _aborted()

    if report.complete:
        print("All features in prd.json are complete.")
    elif report.paused or report.iterations_run:
        print(f"Iterations run: {report.iterations_run}. Review prd.json/progress.txt, then re-run if desired.")

    if report.interrupted:
        return EXIT_INTERRUPTED
    return 0


def loop_main(argv: Optional[List[str]] = None, *, backend_factory: Callable[[Path], GenerationBackend] = _edit_backend) -> int:
    parser = build_loop_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return _run_loop(args, parser, args.iterations, pause=args.pause, stop_marker=False, backend_factory=backend_factory)


def once_main(argv: Optional[List[str]] = None, *, backend_factory: Callable[[Path], GenerationBackend] = _edit_backend) -> int:
    parser = build_loop_parser("ralph-once", once=True)
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return _run_loop(args, parser, "1", pause=True, stop_marker=True, backend_factory=backend_factory)


def init_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ralph-init", description="Create prd.json and progress.txt for the Ralph loop.")
    parser.add_argument("--dir", type=Path, default=Path("."), help="Target directory (default: .)")
    parser.add_argument("--force", action="store_true", help="Overwrite existing prd.json/progress.txt")
    args = parser.parse_args(argv)
    configure_logging(False)

    try:
        paths = init_workspace(args.dir, force=args.force)
    except RalphError as e:
        return _fail(e)

    print("Ralph initialized:")
    print(f"  - {paths.prd}")
    print(f"  - {paths.progress}")
    return 0

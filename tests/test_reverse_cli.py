"""
Tests for the reverse-ralph command line
========================================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import json

import pytest

from ralph.cli import EXIT_INTERRUPTED, build_reverse_parser, reverse_main
from ralph.errors import UsageError
from ralph.pipeline import StageOutcome


def _argv(tmp_path, repo_dir, ticket_file, *extra):
    return [
        "--ticket-file", str(ticket_file),
        "--context-dir", str(repo_dir),
        "--out-dir", str(tmp_path / "out"),
        *extra,
    ]


@pytest.mark.unit
def test_ticket_sources_are_mutually_exclusive(capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_reverse_parser().parse_args(["--ticket", "x", "--ticket-stdin"])
    assert excinfo.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err


@pytest.mark.unit
def test_a_ticket_source_is_required():
    with pytest.raises(SystemExit) as excinfo:
        reverse_main([])
    assert excinfo.value.code == 2


@pytest.mark.unit
def test_empty_inline_ticket_is_a_usage_error(tmp_path, repo_dir, fake_backend, capsys):
    code = reverse_main(
        ["--ticket", "", "--context-dir", str(repo_dir), "--out-dir", str(tmp_path / "out")],
        backend_factory=lambda kind: fake_backend,
    )

    assert code == 2
    assert "Provide one of" in capsys.readouterr().err
    assert fake_backend.total_calls == 0
    assert not (tmp_path / "out").exists()


@pytest.mark.unit
def test_include_code_flags_conflict():
    with pytest.raises(SystemExit) as excinfo:
        build_reverse_parser().parse_args(["--ticket", "x", "--include-code", "--no-include-code"])
    assert excinfo.value.code == 2


@pytest.mark.unit
def test_defaults():
    args = build_reverse_parser().parse_args(["--ticket", "x"])
    assert args.iterations == "1"
    assert args.include_code is True
    assert args.regen is False
    assert str(args.context_dir) == "."


@pytest.mark.unit
@pytest.mark.parametrize("iterations", ["-1", "abc", "1.5"])
def test_bad_iterations_exit_with_usage_error(tmp_path, repo_dir, ticket_file, fake_backend, iterations, capsys):
    code = reverse_main(
        _argv(tmp_path, repo_dir, ticket_file, "--iterations", iterations),
        backend_factory=lambda kind: fake_backend,
    )
    assert code == 2
    assert "usage: reverse-ralph" in capsys.readouterr().err
    assert fake_backend.total_calls == 0
    assert not (tmp_path / "out").exists()


@pytest.mark.unit
def test_missing_llm_command_is_a_usage_error(tmp_path, repo_dir, ticket_file, fake_backend):
    def unavailable():
        raise UsageError("Required command not found on PATH: claude")

    fake_backend.check_available = unavailable
    code = reverse_main(_argv(tmp_path, repo_dir, ticket_file), backend_factory=lambda kind: fake_backend)
    assert code == 2
    assert not (tmp_path / "out").exists()


@pytest.mark.unit
def test_missing_context_dir_exits_1(tmp_path, ticket_file, fake_backend):
    code = reverse_main(
        _argv(tmp_path, tmp_path / "missing", ticket_file),
        backend_factory=lambda kind: fake_backend,
    )
    assert code == 1


@pytest.mark.integration
def test_runs_advance_then_report_completion(tmp_path, repo_dir, ticket_file, fake_backend, capsys):
    argv = _argv(tmp_path, repo_dir, ticket_file)
    factory = lambda kind: fake_backend  # noqa: E731

    assert reverse_main(argv, backend_factory=factory) == 0
    out = capsys.readouterr().out
    assert "Artifacts:" in out
    assert "ticket_analysis.md" in out
    assert "is complete" not in out

    assert reverse_main(argv, backend_factory=factory) == 0
    assert "is complete" not in capsys.readouterr().out

    assert reverse_main(argv, backend_factory=factory) == 0
    out = capsys.readouterr().out
    assert "Reverse Ralph is complete (stage=2)." in out
    assert "derived_plan.json" in out
    assert fake_backend.total_calls == 2


@pytest.mark.integration
def test_iterations_and_regen(tmp_path, repo_dir, ticket_file, fake_backend):
    argv = _argv(tmp_path, repo_dir, ticket_file, "--iterations", "2")
    factory = lambda kind: fake_backend  # noqa: E731

    assert reverse_main(argv, backend_factory=factory) == 0
    assert reverse_main([*argv, "--regen"], backend_factory=factory) == 0

    assert fake_backend.total_calls == 4
    state = json.loads((tmp_path / "out" / "reverse_state.json").read_text(encoding="utf-8"))
    assert state == {"stage": 2}


@pytest.mark.integration
def test_invalid_plan_exits_1(tmp_path, repo_dir, ticket_file, backend_cls, make_plan, cli_wrapper):
    backend = backend_cls(plan_output=cli_wrapper(make_plan(2)))

    code = reverse_main(
        _argv(tmp_path, repo_dir, ticket_file, "--iterations", "2"),
        backend_factory=lambda kind: backend,
    )

    assert code == 1
    assert not (tmp_path / "out" / "derived_plan.json").exists()
    assert (tmp_path / "out" / "derived_plan.rejected.txt").exists()


@pytest.mark.integration
def test_inline_ticket_and_docs_only_mode(tmp_path, repo_dir, fake_backend):
    argv = [
        "--ticket", "https://github.com/acme/app/issues/42",
        "--context-dir", str(repo_dir),
        "--out-dir", str(tmp_path / "out"),
        "--no-include-code",
        "--iterations", "0",
    ]

    assert reverse_main(argv, backend_factory=lambda kind: fake_backend) == 0

    out_dir = tmp_path / "out"
    assert (out_dir / "ticket.md").read_text(encoding="utf-8") == "https://github.com/acme/app/issues/42\n"
    assert "docs-only mode" in (out_dir / "context.bundle.md").read_text(encoding="utf-8")


@pytest.mark.integration
def test_interrupted_run_exits_130(tmp_path, repo_dir, ticket_file, fake_backend, monkeypatch):
    from ralph import cli
    from ralph.pipeline import RunReport, RunState
    from ralph.reverse import reverse_paths
    from ralph.reverse.pipeline import ReverseResult

    def interrupted_run(options, backend, **kwargs):
        report = RunReport(outcomes=[StageOutcome.INTERRUPTED], state=RunState(0))
        return ReverseResult(paths=reverse_paths(options.out_dir), context=None, report=report, bundle=None)

    monkeypatch.setattr(cli, "run_reverse_ralph", interrupted_run)
    code = reverse_main(_argv(tmp_path, repo_dir, ticket_file), backend_factory=lambda kind: fake_backend)
    assert code == EXIT_INTERRUPTED


@pytest.mark.integration
def test_second_signal_exits_130(tmp_path, repo_dir, ticket_file, fake_backend, monkeypatch):
    from ralph import cli

    def aborted_run(options, backend, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_reverse_ralph", aborted_run)
    code = reverse_main(_argv(tmp_path, repo_dir, ticket_file), backend_factory=lambda kind: fake_backend)
    assert code == EXIT_INTERRUPTED

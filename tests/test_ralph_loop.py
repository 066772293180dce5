"""
Tests for the Ralph Loop
========================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import json
from pathlib import Path

import pytest

from ralph.cli import init_main, loop_main, once_main
from ralph.errors import BackendError, WorkspaceError
from ralph.llm import OutputMode
from ralph.loop import (
    STOP_MARKER,
    incomplete_features,
    init_workspace,
    load_prd,
    ralph_loop_prompt,
    run_ralph_loop,
)
from ralph.loop.prd import PRD_TEMPLATE
from ralph.pipeline import RunContext


def _write_prd(root: Path, passes: list) -> None:
    features = [
        {"category": "feature", "description": f"Feature {i}", "steps": [], "passes": p}
        for i, p in enumerate(passes)
    ]
    (root / "prd.json").write_text(json.dumps(features), encoding="utf-8")
    (root / "progress.txt").write_text("", encoding="utf-8")


def _complete_next_feature(root: Path):
    """Simulate an edit session that implements one feature."""

    def on_stream(prompt) -> None:
        features = json.loads((root / "prd.json").read_text(encoding="utf-8"))
        for feature in features:
            if not feature["passes"]:
                feature["passes"] = True
                break
        (root / "prd.json").write_text(json.dumps(features), encoding="utf-8")
        with open(root / "progress.txt", "a", encoding="utf-8") as f:
            f.write("did one feature\n")

    return on_stream


@pytest.mark.unit
def test_init_creates_template_and_refuses_overwrite(tmp_path):
    paths = init_workspace(tmp_path)

    assert json.loads(paths.prd.read_text(encoding="utf-8")) == PRD_TEMPLATE
    assert paths.progress.read_text(encoding="utf-8") == ""
    assert load_prd(paths.prd) == PRD_TEMPLATE

    with pytest.raises(WorkspaceError, match="Refusing to overwrite"):
        init_workspace(tmp_path)

    paths.progress.write_text("notes\n", encoding="utf-8")
    init_workspace(tmp_path, force=True)
    assert paths.progress.read_text(encoding="utf-8") == ""


@pytest.mark.unit
def test_missing_inputs_are_reported(tmp_path, fake_backend):
    with pytest.raises(WorkspaceError, match="run ralph-init"):
        run_ralph_loop(1, fake_backend, root=tmp_path)

    (tmp_path / "prd.json").write_text("[]", encoding="utf-8")
    with pytest.raises(WorkspaceError, match="progress.txt not found"):
        run_ralph_loop(1, fake_backend, root=tmp_path)


@pytest.mark.unit
def test_invalid_prd_is_reported(tmp_path, fake_backend):
    (tmp_path / "prd.json").write_text('[{"description": "x"}]', encoding="utf-8")
    (tmp_path / "progress.txt").write_text("", encoding="utf-8")

    with pytest.raises(WorkspaceError, match="prd.json is invalid"):
        run_ralph_loop(1, fake_backend, root=tmp_path)


@pytest.mark.unit
def test_iterations_must_be_positive(tmp_path, fake_backend):
    with pytest.raises(ValueError):
        run_ralph_loop(0, fake_backend, root=tmp_path)


@pytest.mark.unit
def test_incomplete_features():
    features = [{"passes": True}, {"passes": False}, {"passes": "true"}]
    assert incomplete_features(features) == [{"passes": False}, {"passes": "true"}]


@pytest.mark.unit
def test_prompt_references_loop_inputs():
    prompt = ralph_loop_prompt(Path("prd.json"), Path("progress.txt"))
    rendered = prompt.render_references()

    assert rendered.startswith("@prd.json @progress.txt\n\n")
    assert "STRICT Ralph Loop" in rendered
    assert STOP_MARKER not in rendered
    assert STOP_MARKER in ralph_loop_prompt(Path("prd.json"), Path("progress.txt"), stop_marker=True).body


@pytest.mark.integration
def test_loop_pauses_after_one_iteration(tmp_path, backend_cls):
    _write_prd(tmp_path, [False, False, False])
    backend = backend_cls(on_stream=_complete_next_feature(tmp_path))

    report = run_ralph_loop(3, backend, root=tmp_path)

    assert report.iterations_run == 1
    assert report.paused is True
    assert report.complete is False
    assert report.remaining_features == 2
    assert backend.calls[OutputMode.STREAM] == 1


@pytest.mark.integration
def test_loop_without_pause_stops_when_prd_is_complete(tmp_path, backend_cls):
    _write_prd(tmp_path, [False, False])
    backend = backend_cls(on_stream=_complete_next_feature(tmp_path))

    report = run_ralph_loop(5, backend, root=tmp_path, pause_after_each=False)

    assert report.iterations_run == 2
    assert report.complete is True
    assert report.remaining_features == 0
    assert (tmp_path / "progress.txt").read_text(encoding="utf-8").count("did one feature") == 2


@pytest.mark.integration
def test_loop_with_complete_prd_runs_nothing(tmp_path, fake_backend):
    _write_prd(tmp_path, [True])

    report = run_ralph_loop(3, fake_backend, root=tmp_path)

    assert report.iterations_run == 0
    assert report.complete is True
    assert fake_backend.total_calls == 0


@pytest.mark.integration
def test_loop_honours_stop_request(tmp_path, fake_backend):
    _write_prd(tmp_path, [False])
    context = RunContext(out_dir=tmp_path)
    context.request_stop()

    report = run_ralph_loop(3, fake_backend, root=tmp_path, context=context)

    assert report.interrupted is True
    assert report.iterations_run == 0


@pytest.mark.integration
def test_backend_failure_stops_the_loop(tmp_path, backend_cls):
    _write_prd(tmp_path, [False])
    backend = backend_cls(fail_modes=(OutputMode.STREAM,))

    with pytest.raises(BackendError):
        run_ralph_loop(3, backend, root=tmp_path, pause_after_each=False)
    assert backend.calls[OutputMode.STREAM] == 1


@pytest.mark.integration
def test_cli_commands(tmp_path, backend_cls, capsys):
    assert init_main(["--dir", str(tmp_path)]) == 0
    assert "Ralph initialized:" in capsys.readouterr().out
    assert init_main(["--dir", str(tmp_path)]) == 1

    _write_prd(tmp_path, [False, False])
    backend = backend_cls(on_stream=_complete_next_feature(tmp_path))
    factory = lambda root: backend  # noqa: E731

    assert loop_main(["0", "--dir", str(tmp_path)], backend_factory=factory) == 2
    assert loop_main(["3", "--dir", str(tmp_path)], backend_factory=factory) == 0
    assert "Iterations run: 1" in capsys.readouterr().out

    assert once_main(["--dir", str(tmp_path)], backend_factory=factory) == 0
    assert "All features in prd.json are complete." in capsys.readouterr().out
    assert STOP_MARKER in backend.prompts[-1].body


@pytest.mark.integration
def test_abort_during_iteration_exits_130(tmp_path, backend_cls):
    _write_prd(tmp_path, [False])

    def abort(prompt) -> None:
        raise KeyboardInterrupt

    backend = backend_cls(on_stream=abort)
    assert loop_main(["2", "--dir", str(tmp_path)], backend_factory=lambda root: backend) == 130
    assert once_main(["--dir", str(tmp_path)], backend_factory=lambda root: backend) == 130

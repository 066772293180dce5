"""
Shared Test Fixtures
====================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import json
from collections import Counter
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from ralph.errors import BackendError
from ralph.llm.backend import GenerationResult, OutputMode, Prompt


ANALYSIS_TEXT = """# Ticket Analysis

## Restated requirement
Users can export their report as CSV.

## Acceptance criteria
- An export button is shown on the report page
- The CSV contains one row per report line
"""


def _make_plan(n_steps: int = 5, **overrides) -> dict:
    plan = {
        "title": "Export reports as CSV",
        "source": "ticket",
        "summary": "Add a CSV export to the report page.",
        "assumptions": ["Reports fit in memory"],
        "open_questions": ["Should totals be included?"],
        "risks": ["Large reports may be slow"],
        "steps": [
            {
                "id": f"S{i}",
                "title": f"Step {i}",
                "details": f"Do part {i} of the export.",
                "acceptance_criteria": [f"Part {i} works"],
                "touched_areas": ["src/reports"],
            }
            for i in range(1, n_steps + 1)
        ],
    }
    plan.update(overrides)
    return plan


def _cli_wrapper(plan: dict, *, structured: bool = False, is_error: bool = False) -> str:
    """Shape a plan the way `claude -p --output-format json` prints it."""
    payload = {
        "type": "result",
        "subtype": "error_during_execution" if is_error else "success",
        "is_error": is_error,
        "result": "" if structured else json.dumps(plan),
        "session_id": "test-session",
    }
    if structured:
        payload["structured_output"] = plan
    return json.dumps(payload)


class FakeBackend:
    """GenerationBackend returning canned output and counting calls per mode."""

    name = "fake"

    def __init__(
        self,
        analysis: str = ANALYSIS_TEXT,
        plan_output: Optional[str] = None,
        fail_modes: tuple = (),
        on_stream: Optional[Callable[[Prompt], None]] = None,
    ):
        self.analysis = analysis
        self.plan_output = plan_output if plan_output is not None else _cli_wrapper(_make_plan())
        self.fail_modes = set(fail_modes)
        self.on_stream = on_stream
        self.calls: Counter = Counter()
        self.prompts: List[Prompt] = []

    def check_available(self) -> None:
        pass

    def generate(self, prompt: Prompt, mode: OutputMode = OutputMode.TEXT) -> GenerationResult:
        self.calls[mode] += 1
        self.prompts.append(prompt)
        if mode in self.fail_modes:
            raise BackendError("claude exited with status 1: boom", returncode=1, stderr="boom")
        if mode is OutputMode.TEXT:
            return GenerationResult(text=self.analysis, mode=mode)
        if mode is OutputMode.JSON:
            return GenerationResult(text=self.plan_output, mode=mode)
        if self.on_stream is not None:
            self.on_stream(prompt)
        return GenerationResult(text="", mode=mode)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """A small repository to collect context from."""
    repo = tmp_path / "repo"
    (repo / "docs").mkdir(parents=True)
    (repo / "src").mkdir()
    (repo / "README.md").write_text("# Demo\n\nA demo service.\n", encoding="utf-8")
    (repo / "docs" / "design.md").write_text("Reports are rendered server-side.\n", encoding="utf-8")
    (repo / "src" / "reports.py").write_text("def render():\n    return []\n", encoding="utf-8")
    return repo


@pytest.fixture
def ticket_file(tmp_path: Path) -> Path:
    path = tmp_path / "TICKET-1.md"
    path.write_text("As a user I want to export my report as CSV.\n", encoding="utf-8")
    return path


@pytest.fixture
def make_plan():
    """Factory for schema-valid plans; pass n_steps or field overrides."""
    return _make_plan


@pytest.fixture
def cli_wrapper():
    """Factory wrapping a plan in the claude CLI JSON envelope."""
    return _cli_wrapper


@pytest.fixture
def backend_cls():
    return FakeBackend

"""
Generation Backend Interface
============================
Narrow interface between the pipelines and whatever produces text.

A backend takes a Prompt (an instruction body plus the artifact files it
refers to) and an OutputMode, and returns a GenerationResult or raises
BackendError. Pipelines never look past this interface, so tests can swap in
a fake that returns canned payloads.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Protocol, Sequence, Tuple, runtime_checkable


class OutputMode(Enum):
    """How the backend should produce and return output."""
    TEXT = "text"      # Free text, captured
    JSON = "json"      # Structured output, captured (possibly wrapped)
    STREAM = "stream"  # Interactive edit session, streamed to the terminal


@dataclass(frozen=True)
class Prompt:
    """An instruction body that refers to files by path."""

    body: str
    attachments: Tuple[Path, ...] = ()

    @classmethod
    def build(cls, body: str, attachments: Sequence[Path] = ()) -> "Prompt":
        return cls(body=body, attachments=tuple(Path(p) for p in attachments))

    def render_references(self) -> str:
        """Render as '@file @file' followed by the body (claude CLI syntax)."""
        refs = " ".join(f"@{p}" for p in self.attachments)
        if not refs:
            return self.body
        return f"{refs}\n\n{self.body}\n"


@dataclass
class GenerationResult:
    """Output of a single backend call."""

    text: str
    mode: OutputMode
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class GenerationBackend(Protocol):
    """Anything that can turn a Prompt into text."""

    name: str

    def check_available(self) -> None:
        """Raise UsageError when the backend cannot run in this environment."""
        ...

    def generate(self, prompt: Prompt, mode: OutputMode = OutputMode.TEXT) -> GenerationResult:
        """Generate output for prompt; raise BackendError on failure."""
        ...

"""
LLM Backend Module
==================
Provides the generation backend interface and its claude CLI and Anthropic
API implementations.
"""

from .backend import GenerationBackend, GenerationResult, OutputMode, Prompt
from .claude_cli import ClaudeCliBackend
from .claude_client import ClaudeApiBackend, ClaudeClient

__all__ = [
    "GenerationBackend",
    "GenerationResult",
    "OutputMode",
    "Prompt",
    "ClaudeCliBackend",
    "ClaudeApiBackend",
    "ClaudeClient",
    "get_backend",
]


def get_backend(kind: str, **kwargs) -> GenerationBackend:
    """Return a configured backend by name ('cli' or 'api')."""
    from ralph.errors import UsageError

    kind = (kind or "cli").strip().lower()
    if kind == "cli":
        return ClaudeCliBackend(**kwargs)
    if kind == "api":
        return ClaudeApiBackend(**kwargs)
    raise UsageError(f"Unknown backend: {kind!r} (expected 'cli' or 'api')")

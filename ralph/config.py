"""
Centralized Configuration
=========================
Centralized configuration values and constants for the Ralph tools.

This module provides:
- Context bundle limits (file counts and byte caps)
- LLM command and backend defaults
- Timeout configuration
- Output directory and artifact file names

Values are read from the environment once, at import time. CLI flags
override them per run.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ContextLimitsConfig:
    """Caps applied while building the context bundle."""

    # Byte caps per excerpt
    MAX_TEXT_BYTES: int = int(os.getenv("MAX_TEXT_BYTES", "120000"))
    MAX_CODE_BYTES: int = int(os.getenv("MAX_CODE_BYTES", "80000"))
    MAX_TICKET_BYTES: int = int(os.getenv("MAX_TICKET_BYTES", "40000"))

    # File-count caps per category
    MAX_FILES_DOCS: int = int(os.getenv("MAX_FILES_DOCS", "45"))
    MAX_FILES_CODE: int = int(os.getenv("MAX_FILES_CODE", "25"))
    MAX_FILES_IMAGES: int = int(os.getenv("MAX_FILES_IMAGES", "25"))


@dataclass(frozen=True)
class LLMConfig:
    """Generation backend configuration."""

    # External CLI used by the default backend
    COMMAND: str = os.getenv("LLM_CMD", "claude")
    PLAN_ARGS: str = os.getenv(
        "LLM_ARGS", "--permission-mode plan --max-turns 3 --no-session-persistence"
    )
    EDIT_ARGS: str = os.getenv("RALPH_LLM_ARGS", "--permission-mode acceptEdits")

    # "cli" shells out to COMMAND, "api" uses the Anthropic SDK
    BACKEND: str = os.getenv("RALPH_BACKEND", "cli").lower()

    # Pass only an allowlist plus provider variables to the CLI subprocess
    SANITIZE_ENV: bool = os.getenv("RALPH_SANITIZE_ENV", "0").strip().lower() in ("1", "true", "yes")

    # API backend
    MODEL: str = os.getenv("RALPH_MODEL", "claude-sonnet-4-5-20250929")
    MAX_TOKENS: int = int(os.getenv("RALPH_MAX_TOKENS", "16384"))


@dataclass(frozen=True)
class TimeoutConfig:
    """Centralized timeout configuration in seconds."""

    # Anthropic API (the CLI backend has no in-process timeout)
    LLM_API: int = 600  # 10 minutes for complex reasoning
    LLM_CONNECT: int = 30  # Connection timeout

    # Output directory lock acquisition
    FILE_LOCK: int = int(os.getenv("RALPH_LOCK_TIMEOUT", "30"))


@dataclass(frozen=True)
class OutputConfig:
    """Default output layout for Reverse Ralph and the edit loop."""

    OUT_DIR: str = os.getenv("OUT_DIR", ".ralph")
    IGNORE_FILENAME: str = ".ralphignore"

    TICKET: str = "ticket.md"
    CONTEXT_BUNDLE: str = "context.bundle.md"
    TICKET_ANALYSIS: str = "ticket_analysis.md"
    DERIVED_PLAN: str = "derived_plan.json"
    REJECTED_PLAN: str = "derived_plan.rejected.txt"
    STATE: str = "reverse_state.json"
    LOCK: str = "reverse.lock"

    # Ralph loop inputs, relative to the working directory
    PRD: str = "prd.json"
    PROGRESS: str = "progress.txt"


# Global singleton instances
CONTEXT_LIMITS = ContextLimitsConfig()
LLM = LLMConfig()
TIMEOUTS = TimeoutConfig()
OUTPUTS = OutputConfig()


def get_timeout(operation: str) -> Optional[int]:
    """Get timeout for a specific operation type.

    Args:
        operation: One of 'llm', 'llm_connect', 'file_lock'

    Returns:
        Timeout in seconds, or None for operations without a timeout
    """
    mapping = {
        "llm": TIMEOUTS.LLM_API,
        "llm_connect": TIMEOUTS.LLM_CONNECT,
        "file_lock": TIMEOUTS.FILE_LOCK,
    }
    return mapping.get(operation)

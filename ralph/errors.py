"""
Error Types
===========
Exception hierarchy shared by the Reverse Ralph pipeline and the Ralph loop.

Each error maps to a process exit code so the CLIs can translate failures
without inspecting messages.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from typing import List, Optional


class RalphError(Exception):
    """Base class for all expected, reportable failures."""

    exit_code: int = 1


class UsageError(RalphError):
    """Missing or conflicting input, or a required external command is absent."""

    exit_code = 2


class WorkspaceError(RalphError):
    """Directories, state files or loop inputs are missing or unusable."""


class BackendError(RalphError):
    """The generation backend failed to produce output."""

    def __init__(self, message: str, *, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class PlanValidationError(RalphError):
    """Backend output parsed, but does not match the derived plan schema."""

    def __init__(self, message: str, *, raw: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.raw = raw
        self.errors = list(errors or [])


class StageFailedError(RalphError):
    """A pipeline stage failed; the run state was not advanced."""

    def __init__(self, stage_index: int, stage_name: str, cause: BaseException):
        super().__init__(f"Stage {stage_index} ({stage_name}) failed: {cause}")
        self.stage_index = stage_index
        self.stage_name = stage_name
        self.cause = cause
        self.exit_code = getattr(cause, "exit_code", 1)

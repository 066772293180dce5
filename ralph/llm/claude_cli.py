"""
Claude CLI Backend
==================
Runs the external `claude` command (or any compatible CLI named by LLM_CMD)
as a subprocess.

- TEXT and JSON modes pipe the rendered prompt to `<cmd> -p <args>` on stdin
  and capture stdout. JSON mode appends `--output-format json`; the CLI then
  prints a wrapper object whose fields are extracted by the caller.
- STREAM mode passes the prompt as the final argument and lets the session
  write straight to the terminal. Nothing is captured.

There is no timeout: a run is stopped only by signals to the process.
RALPH_SANITIZE_ENV=1 limits the subprocess environment to an allowlist.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from ralph.config import LLM
from ralph.errors import BackendError, UsageError
from ralph.llm.backend import GenerationResult, OutputMode, Prompt
from ralph.utils.subprocess_env import build_minimal_subprocess_env


def _split_args(args: Union[str, Sequence[str], None]) -> List[str]:
    if args is None:
        return []
    if isinstance(args, str):
        return shlex.split(args)
    return [str(a) for a in args]


class ClaudeCliBackend:
    """Generation backend that shells out to the claude CLI."""

    name = "cli"

    def __init__(
        self,
        command: str = LLM.COMMAND,
        args: Union[str, Sequence[str], None] = LLM.PLAN_ARGS,
        cwd: Optional[Path] = None,
        sanitize_env: Optional[bool] = None,
    ):
        self.command = command
        self.args = _split_args(args)
        self.cwd = cwd
        self.sanitize_env = LLM.SANITIZE_ENV if sanitize_env is None else sanitize_env

    def check_available(self) -> None:
        if shutil.which(self.command) is None:
            raise UsageError(f"Required command not found on PATH: {self.command}")

    def build_argv(self, prompt: Prompt, mode: OutputMode) -> List[str]:
        if mode is OutputMode.STREAM:
            return [self.command, *self.args, prompt.render_references()]

        argv = [self.command, "-p", *self.args]
        if mode is OutputMode.JSON:
            argv += ["--output-format", "json"]
        return argv

    def generate(self, prompt: Prompt, mode: OutputMode = OutputMode.TEXT) -> GenerationResult:
        argv = self.build_argv(prompt, mode)
        env = build_minimal_subprocess_env(sanitize_env=self.sanitize_env)
        logger.debug("Running {} ({} mode, {} attachment(s))", self.command, mode.value, len(prompt.attachments))

        if mode is OutputMode.STREAM:
            return self._run_streaming(argv, env)

        try:
            result = subprocess.run(
                argv,
                input=prompt.render_references(),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=str(self.cwd) if self.cwd else None,
                env=env,
            )
        except OSError as e:
            raise BackendError(f"Failed to start {self.command}: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise BackendError(
                f"{self.command} exited with status {result.returncode}" + (f": {stderr}" if stderr else ""),
                returncode=result.returncode,
                stderr=stderr,
            )

        text = result.stdout or ""
        if not text.strip():
            raise BackendError(f"{self.command} returned empty output", returncode=0)

        return GenerationResult(text=text, mode=mode, metadata={"returncode": result.returncode})

    def _run_streaming(self, argv: List[str], env: dict) -> GenerationResult:
        try:
            result = subprocess.run(
                argv,
                cwd=str(self.cwd) if self.cwd else None,
                env=env,
            )
        except OSError as e:
            raise BackendError(f"Failed to start {self.command}: {e}") from e

        if result.returncode != 0:
            raise BackendError(
                f"{self.command} execution failed with status {result.returncode}",
                returncode=result.returncode,
            )
        return GenerationResult(text="", mode=OutputMode.STREAM, metadata={"returncode": 0})

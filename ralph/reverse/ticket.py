"""Ticket intake.

Exactly one ticket source is accepted per run: a file, inline text, or
standard input. The ticket is copied verbatim to ticket.md on every run;
it is an input, not a pipeline stage, so it is never cached.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger

from ralph.errors import UsageError
from ralph.utils.atomic_write import write_text_atomic


@dataclass(frozen=True)
class TicketSource:
    """Where the ticket text comes from."""

    file: Optional[Path] = None
    text: Optional[str] = None
    stdin: bool = False

    def __post_init__(self) -> None:
        chosen = sum([self.file is not None, bool(self.text and self.text.strip()), bool(self.stdin)])
        if chosen == 0:
            raise UsageError("Provide one of: --ticket-file, --ticket, --ticket-stdin")
        if chosen > 1:
            raise UsageError("Options --ticket-file, --ticket and --ticket-stdin are mutually exclusive")

    def read(self, stream: Optional[TextIO] = None) -> str:
        if self.file is not None:
            if not self.file.is_file():
                raise UsageError(f"Ticket file not found: {self.file}")
            return self.file.read_text(encoding="utf-8", errors="replace")

        if self.stdin:
            return (stream or sys.stdin).read()

        return f"{self.text}\n"


def normalize_ticket(content: str, dest: Path) -> Path:
    """Write ticket text read from a TicketSource to dest (ticket.md)."""
    if not content.strip():
        logger.warning("Ticket is empty; the analysis will have little to work with")
    write_text_atomic(dest, content)
    logger.debug("Ticket written to {} ({} chars)", dest, len(content))
    return dest

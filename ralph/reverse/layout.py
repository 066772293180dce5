"""
Reverse Ralph Output Layout
===========================
Helpers for standardizing the on-disk layout of the output directory.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ralph.config import OUTPUTS


@dataclass(frozen=True)
class ReversePaths:
    """Resolved artifact paths inside an output directory."""

    out_dir: Path
    ticket: Path
    context_bundle: Path
    ticket_analysis: Path
    derived_plan: Path
    rejected_plan: Path
    state: Path
    lock: Path

    def artifacts(self) -> list[Path]:
        """Artifacts in the order they are reported to the user."""
        return [self.ticket, self.context_bundle, self.ticket_analysis, self.derived_plan, self.state]


def reverse_paths(out_dir: str | Path) -> ReversePaths:
    """Return the canonical artifact paths for an output directory."""

    od = Path(out_dir)

    return ReversePaths(
        out_dir=od,
        ticket=od / OUTPUTS.TICKET,
        context_bundle=od / OUTPUTS.CONTEXT_BUNDLE,
        ticket_analysis=od / OUTPUTS.TICKET_ANALYSIS,
        derived_plan=od / OUTPUTS.DERIVED_PLAN,
        rejected_plan=od / OUTPUTS.REJECTED_PLAN,
        state=od / OUTPUTS.STATE,
        lock=od / OUTPUTS.LOCK,
    )


def ensure_reverse_layout(out_dir: str | Path) -> ReversePaths:
    """Ensure the output directory exists and return its paths.

    The operation is idempotent and creates no files.
    """

    paths = reverse_paths(out_dir)
    paths.out_dir.mkdir(parents=True, exist_ok=True)
    return paths

"""Reverse Ralph: ticket + repository context -> analysis -> implementation plan.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .layout import ReversePaths, ensure_reverse_layout, reverse_paths
from .pipeline import (
    DERIVED_PLAN_STAGE,
    TICKET_ANALYSIS_STAGE,
    ReverseOptions,
    ReverseResult,
    build_reverse_pipeline,
    run_reverse_ralph,
)
from .plan import DerivedPlan, PlanValidationFailure, ValidatedPlan, parse_derived_plan
from .ticket import TicketSource

__all__ = [
    "ReversePaths",
    "ensure_reverse_layout",
    "reverse_paths",
    "DERIVED_PLAN_STAGE",
    "TICKET_ANALYSIS_STAGE",
    "ReverseOptions",
    "ReverseResult",
    "build_reverse_pipeline",
    "run_reverse_ralph",
    "DerivedPlan",
    "PlanValidationFailure",
    "ValidatedPlan",
    "parse_derived_plan",
    "TicketSource",
]

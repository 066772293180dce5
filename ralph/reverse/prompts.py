"""Prompt bodies for the Reverse Ralph stages.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from pathlib import Path

from ralph.llm.backend import Prompt
from ralph.reverse.layout import ReversePaths


TICKET_ANALYSIS_PROMPT = """\
You are operating in a STRICT "Reverse Ralph" ticket analysis phase.

You are at the ROOT of a software repository.
Your job is to turn a Jira ticket / GitHub issue into a clear, implementation-oriented understanding.

You will be given:
- ticket.md (the raw ticket text)
- context.bundle.md (repo context excerpts + image paths you can open)

Rules:
- Output MUST be markdown only.
- Do NOT write an implementation plan yet. Focus on reconstructing intent and requirements.
- Be explicit about unknowns; do not assume details not supported by the inputs.
- If the ticket references UI/behavior and images exist, open them and incorporate findings.

Create a document with these sections:

# Ticket Analysis
## Problem statement (1-3 paragraphs)
## In-scope (bullets)
## Out-of-scope (bullets)
## Requirements (bullets, testable)
## Acceptance criteria (bullets, testable)
## Assumptions (bullets)
## Constraints (bullets: security, performance, compatibility, UX, API)
## Risks (bullets)
## Open questions (bullets, prioritized)
## Suggested repo touchpoints (bullets: folders/files/components to inspect)

Keep it concise and actionable.
"""

DERIVED_PLAN_PROMPT = """\
You are operating in a STRICT "Reverse Ralph" planning phase.

Goal:
Derive a concrete implementation plan from the ticket and the ticket analysis.
This plan should be suitable to feed into an execution loop (one step at a time).

You will be given:
- ticket.md
- ticket_analysis.md
- context.bundle.md (repo excerpts + image paths)

Rules:
- Output MUST be valid JSON ONLY. No prose, no markdown fences.
- Steps must be ordered for incremental progress and early validation.
- Create 5 to 30 steps.
- Each step should be small enough to implement in < 1 day.
- Include acceptance criteria for each step.
- If unknowns remain, include early steps that resolve them (spikes, confirmations, API checks).
- Reference repo locations realistically; do not invent structure if existing structure is implied.

Schema:
{
  "title": string,
  "source": "jira" | "github" | "ticket",
  "summary": string,
  "assumptions": string[],
  "open_questions": string[],
  "risks": string[],
  "steps": [
    {
      "id": "S1" | "S2" | ...,
      "title": string,
      "details": string,
      "acceptance_criteria": string[],
      "touched_areas": string[]
    }
  ]
}
"""


def ticket_analysis_prompt(paths: ReversePaths) -> Prompt:
    return Prompt.build(TICKET_ANALYSIS_PROMPT, [paths.ticket, paths.context_bundle])


def derived_plan_prompt(paths: ReversePaths) -> Prompt:
    attachments: list[Path] = [paths.ticket, paths.ticket_analysis, paths.context_bundle]
    return Prompt.build(DERIVED_PLAN_PROMPT, attachments)

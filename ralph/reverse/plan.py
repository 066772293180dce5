"""
Derived Plan Parsing
====================
Turns raw JSON-mode backend output into a validated plan.

The claude CLI in JSON mode prints a wrapper object, for example:

    {"type": "result", "is_error": false, "result": "<model text>", ...}

The plan is extracted from `structured_output` when present, otherwise from
`result` (which may itself be a JSON string, optionally in a ```json fence).
Output that is already a bare plan object is accepted as is.

parse_derived_plan() never raises for shape problems. It returns either a
ValidatedPlan or a PlanValidationFailure carrying the raw output and every
error found, so the caller can surface the payload for inspection.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from ralph.errors import BackendError
from ralph.utils.schema_validation import derived_plan_errors


_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True)
class PlanStep:
    id: str
    title: str
    details: str
    acceptance_criteria: List[str] = field(default_factory=list)
    touched_areas: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DerivedPlan:
    """A schema-valid implementation plan."""

    title: str
    source: str
    summary: str
    assumptions: List[str]
    open_questions: List[str]
    risks: List[str]
    steps: List[PlanStep]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DerivedPlan":
        return cls(
            title=data["title"],
            source=data["source"],
            summary=data["summary"],
            assumptions=list(data["assumptions"]),
            open_questions=list(data["open_questions"]),
            risks=list(data["risks"]),
            steps=[
                PlanStep(
                    id=s["id"],
                    title=s["title"],
                    details=s["details"],
                    acceptance_criteria=list(s["acceptance_criteria"]),
                    touched_areas=list(s["touched_areas"]),
                )
                for s in data["steps"]
            ],
        )


@dataclass(frozen=True)
class ValidatedPlan:
    plan: DerivedPlan
    payload: Dict[str, Any]
    ok: bool = True

    def to_json(self) -> str:
        return json.dumps(self.payload, ensure_ascii=False, indent=2) + "\n"


@dataclass(frozen=True)
class PlanValidationFailure:
    raw: str
    errors: List[str]
    ok: bool = False


PlanParseResult = Union[ValidatedPlan, PlanValidationFailure]


def _loads_lenient(text: str) -> Any:
    """json.loads, then retry without a markdown fence, then on the outermost braces."""
    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    m = _FENCE_RE.match(text)
    if m:
        try:
            return json.loads(m.group(1))
        except json.JSONDecodeError:
            pass

    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        return json.loads(text[start : end + 1])

    raise ValueError("Output is not valid JSON")


def _is_cli_wrapper(data: Any) -> bool:
    return isinstance(data, dict) and (
        data.get("type") == "result" or ("result" in data and "steps" not in data)
    )


def extract_plan_payload(raw: str) -> Any:
    """Extract the plan object from raw backend output.

    Raises:
        BackendError: When the output is a CLI wrapper reporting an error.
        ValueError: When no JSON can be recovered.
    """
    data = _loads_lenient(raw)

    if not _is_cli_wrapper(data):
        return data

    if data.get("is_error"):
        raise BackendError(f"LLM reported an error: {data.get('subtype') or data.get('result')}")

    structured = data.get("structured_output")
    if isinstance(structured, dict):
        return structured

    result = data.get("result")
    if isinstance(result, str):
        return _loads_lenient(result)
    return result


def parse_derived_plan(raw: str) -> PlanParseResult:
    """Parse and validate raw backend output as a derived plan."""
    try:
        payload = extract_plan_payload(raw)
    except ValueError as e:
        return PlanValidationFailure(raw=raw, errors=[str(e)])

    errors = derived_plan_errors(payload)
    if errors:
        return PlanValidationFailure(raw=raw, errors=errors)

    return ValidatedPlan(plan=DerivedPlan.from_dict(payload), payload=payload)

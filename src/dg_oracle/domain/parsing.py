"""Two-stage parse of free-form model output into a Decision.

Stage 1 (extract_json_object): scan for the first balanced {...} span that
json-decodes to an object. The scan tracks string literals and escapes so
braces inside "reasoning" do not end the span early.

Stage 2 (parse_decision): validate that object against a fixed schema —
decision must be yes/no/void, confidence is clamped to [0, 1].

Anything unparsable becomes an ERROR decision; nothing here raises.
"""

import json
import math
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from src.dg_common.enums import DecisionType
from src.dg_oracle.domain.models import Decision

_ACTIONABLE = {DecisionType.YES.value, DecisionType.NO.value, DecisionType.VOID.value}


def _balanced_span(text: str, start: int) -> str | None:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_json_object(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    while start != -1:
        span = _balanced_span(text, start)
        if span is not None:
            try:
                value = json.loads(span)
            except json.JSONDecodeError:
                value = None
            if isinstance(value, dict):
                return value
        start = text.find("{", start + 1)
    return None


class OracleVerdict(BaseModel):
    decision: str
    confidence: float = 0.0
    reasoning: str = ""

    @field_validator("decision", mode="before")
    @classmethod
    def _normalize_decision(cls, v: Any) -> str:
        return str(v).strip().lower()

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return min(1.0, max(0.0, value))

    @field_validator("reasoning", mode="before")
    @classmethod
    def _coerce_reasoning(cls, v: Any) -> str:
        return "" if v is None else str(v)


def parse_decision(text: str) -> Decision:
    obj = extract_json_object(text)
    if obj is None:
        return Decision.error(f"Failed to parse AI response: {text[:200]}")

    try:
        verdict = OracleVerdict.model_validate(obj)
    except ValidationError as e:
        return Decision.error(f"AI response failed schema validation: {e.errors()[0]['msg']}")

    if verdict.decision not in _ACTIONABLE:
        return Decision(
            decision=DecisionType.ERROR,
            confidence=verdict.confidence,
            reasoning=f"Invalid decision {verdict.decision!r}: {verdict.reasoning}",
        )
    return Decision(
        decision=DecisionType(verdict.decision),
        confidence=verdict.confidence,
        reasoning=verdict.reasoning,
    )

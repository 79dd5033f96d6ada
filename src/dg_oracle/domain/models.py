"""Domain models for dg_oracle — pure dataclasses, no I/O."""

from dataclasses import dataclass

from src.dg_common.enums import DecisionType


@dataclass(frozen=True)
class Decision:
    decision: DecisionType
    confidence: float
    reasoning: str

    @classmethod
    def error(cls, reasoning: str) -> "Decision":
        return cls(decision=DecisionType.ERROR, confidence=0.0, reasoning=reasoning)

    @property
    def is_actionable(self) -> bool:
        """Only an explicit yes/no/void may be submitted to the ledger."""
        return self.decision is not DecisionType.ERROR

    @property
    def outcome(self) -> bool | None:
        """Ledger outcome flag for yes/no decisions, else None."""
        if self.decision is DecisionType.YES:
            return True
        if self.decision is DecisionType.NO:
            return False
        return None

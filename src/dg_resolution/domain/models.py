"""Domain models for dg_resolution — pure dataclasses, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime

from src.dg_common.enums import AttemptOutcome
from src.dg_oracle.domain.models import Decision


@dataclass
class ResolutionLog:
    """One row of the append-only audit trail."""
    id: int
    market_id: int
    source_url: str
    source_text: str | None
    ai_reasoning: str | None
    ai_decision: str
    confidence: float
    tx_signature: str | None
    error_message: str | None
    attempted_at: datetime


@dataclass
class NewResolutionLog:
    market_id: int
    source_url: str
    source_text: str
    ai_reasoning: str
    ai_decision: str
    confidence: float
    error_message: str | None


@dataclass
class AttemptResult:
    market_id: int
    outcome: AttemptOutcome
    decision: Decision | None = None
    log_id: int | None = None
    tx_signature: str | None = None
    error: str | None = None


@dataclass
class SweepResult:
    attempted: int = 0
    resolved: int = 0
    voided: int = 0
    errors: int = 0
    attempts: list[AttemptResult] = field(default_factory=list)

    def record(self, attempt: AttemptResult) -> None:
        self.attempts.append(attempt)
        if attempt.outcome is AttemptOutcome.SKIPPED:
            return
        self.attempted += 1
        if attempt.outcome is AttemptOutcome.RESOLVED:
            self.resolved += 1
        elif attempt.outcome is AttemptOutcome.VOIDED:
            self.voided += 1
        else:
            self.errors += 1

    def counts(self) -> dict[str, int]:
        return {
            "attempted": self.attempted,
            "resolved": self.resolved,
            "voided": self.voided,
            "errors": self.errors,
        }

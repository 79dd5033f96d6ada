"""Global enums — values must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    VOIDED = "voided"

    @classmethod
    def from_ledger_tag(cls, tag: int) -> "MarketStatus":
        """Borsh enum tag as written by the ledger program (declaration order)."""
        return _LEDGER_STATUS_TAGS[tag]


_LEDGER_STATUS_TAGS = {
    0: MarketStatus.OPEN,
    1: MarketStatus.RESOLVED,
    2: MarketStatus.VOIDED,
}


class DecisionType(str, Enum):
    """Oracle verdict. ERROR means 'no decision' and never reaches the ledger."""
    YES = "yes"
    NO = "no"
    VOID = "void"
    ERROR = "error"


class AttemptOutcome(str, Enum):
    """What one scheduler iteration did to one market."""
    RESOLVED = "resolved"
    VOIDED = "voided"
    ERROR = "error"  # oracle error decision or ledger failure; market stays open
    SKIPPED = "skipped"  # re-check failed, nothing logged


class ClaimKind(str, Enum):
    WINNINGS = "winnings"
    REFUND = "refund"
    NONE = "none"

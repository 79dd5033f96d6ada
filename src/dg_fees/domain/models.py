"""Domain models for dg_fees — pure dataclasses, no I/O."""

from dataclasses import dataclass


@dataclass
class FeeUpdateResult:
    sol_price_usd: float
    target_fee_lamports: int
    current_fee_lamports: int
    change_ratio: float
    tx_signature: str | None = None
    skipped_reason: str | None = None

    @property
    def updated(self) -> bool:
        return self.tx_signature is not None

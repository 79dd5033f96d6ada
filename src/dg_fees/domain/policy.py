"""Creation fee policy: a fixed USD amount expressed in lamports.

The fee is only rewritten when it drifts by at least the configured ratio,
so small price moves do not cost a transaction each.
"""

import math

from src.dg_common.lamports import LAMPORTS_PER_SOL


def target_fee_lamports(target_usd: float, sol_price_usd: float) -> int:
    """Lamports worth ``target_usd`` at ``sol_price_usd``, rounded half up."""
    if not sol_price_usd > 0:
        raise ValueError(f"SOL price must be positive, got {sol_price_usd!r}")
    return math.floor(target_usd / sol_price_usd * LAMPORTS_PER_SOL + 0.5)


def fee_change_ratio(current_lamports: int, target_lamports: int) -> float:
    if current_lamports <= 0:
        return math.inf
    return abs(target_lamports - current_lamports) / current_lamports


def needs_update(current_lamports: int, target_lamports: int, min_ratio: float) -> bool:
    return fee_change_ratio(current_lamports, target_lamports) >= min_ratio

"""Off-ledger cost basis — what a wallet paid for the shares it still holds.

The ledger does not track this. Clients report an explicit delta with each
sync (positive on buy, negative on sell). When a sync arrives without a
delta but the ledger shows fewer shares than the mirror, the basis is
reduced in proportion to the shares that left. Replaying the same snapshot
sees no share change, so the reduction is applied once.
"""


def next_cost_basis(
    current: int,
    previous_shares: int,
    new_shares: int,
    delta: int | None,
) -> int:
    if delta is not None:
        return max(0, current + delta)
    if previous_shares > 0 and new_shares < previous_shares:
        return current * new_shares // previous_shares
    return current

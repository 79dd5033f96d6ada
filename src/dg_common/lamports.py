"""Integer arithmetic utilities for lamport amounts.

All reserves, shares, fees and payouts are unsigned integers in lamports.
No float, no Decimal. Division always floors.
"""

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_display(lamports: int) -> str:
    """Render lamports as SOL with 4 decimals: 1_500_000_000 -> '1.5000 SOL'."""
    sign = "-" if lamports < 0 else ""
    whole, frac = divmod(abs(lamports), LAMPORTS_PER_SOL)
    return f"{sign}{whole:,}.{frac // 100_000:04d} SOL"


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator); 0 when the denominator is 0."""
    if denominator == 0:
        return 0
    return (a * b) // denominator

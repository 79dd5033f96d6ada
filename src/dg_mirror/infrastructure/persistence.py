"""MirrorRepository — concrete implementation of MirrorRepositoryProtocol.

All queries use raw text() SQL (no ORM).

Market upsert rules:
  - INSERT takes the full ledger snapshot (this is how new markets appear).
  - UPDATE overwrites AMM state and fee amounts only. Lifecycle columns
    (status/outcome) belong to the resolution scheduler; resolved_at is
    only copied once the row is already 'resolved'.
  - claimed flags are OR-ed so they never revert.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_common.enums import MarketStatus
from src.dg_ledger.domain.layouts import ConfigAccount, MarketAccount, PositionAccount
from src.dg_mirror.domain.models import Market, Position

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

MARKET_COLUMNS = """
    market_id, pubkey, creator, question, resolution_source, resolution_timestamp,
    yes_reserve, no_reserve, total_minted, initial_liquidity, swap_fee_bps,
    status, outcome, resolved_at, ai_reasoning,
    creator_fee_claimed, treasury_fee_claimed, treasury_fee, creator_fee
"""

_GET_MARKET_SQL = text(f"SELECT {MARKET_COLUMNS} FROM markets WHERE market_id = :market_id")

_UPSERT_MARKET_SQL = text("""
    INSERT INTO markets (
        market_id, pubkey, creator, question, resolution_source, resolution_timestamp,
        yes_reserve, no_reserve, total_minted, initial_liquidity, swap_fee_bps,
        status, outcome, resolved_at,
        creator_fee_claimed, treasury_fee_claimed, treasury_fee, creator_fee
    ) VALUES (
        :market_id, :pubkey, :creator, :question, :resolution_source, :resolution_timestamp,
        :yes_reserve, :no_reserve, :total_minted, :initial_liquidity, :swap_fee_bps,
        :status, :outcome, :resolved_at,
        :creator_fee_claimed, :treasury_fee_claimed, :treasury_fee, :creator_fee
    )
    ON CONFLICT (market_id) DO UPDATE SET
        yes_reserve          = EXCLUDED.yes_reserve,
        no_reserve           = EXCLUDED.no_reserve,
        total_minted         = EXCLUDED.total_minted,
        initial_liquidity    = EXCLUDED.initial_liquidity,
        swap_fee_bps         = EXCLUDED.swap_fee_bps,
        treasury_fee         = EXCLUDED.treasury_fee,
        creator_fee          = EXCLUDED.creator_fee,
        creator_fee_claimed  = markets.creator_fee_claimed OR EXCLUDED.creator_fee_claimed,
        treasury_fee_claimed = markets.treasury_fee_claimed OR EXCLUDED.treasury_fee_claimed,
        resolved_at = CASE
            WHEN markets.status = 'resolved' AND CAST(:ledger_resolved_at AS BIGINT) > 0
                THEN CAST(:ledger_resolved_at AS BIGINT)
            ELSE markets.resolved_at
        END
""")

_GET_POSITION_SQL = text("""
    SELECT market_id, pubkey, user_wallet, yes_shares, no_shares, claimed, cost_basis
    FROM positions
    WHERE market_id = :market_id AND user_wallet = :wallet
""")

_GET_POSITION_FOR_UPDATE_SQL = text("""
    SELECT market_id, pubkey, user_wallet, yes_shares, no_shares, claimed, cost_basis
    FROM positions
    WHERE market_id = :market_id AND user_wallet = :wallet
    FOR UPDATE
""")

_UPSERT_POSITION_SQL = text("""
    INSERT INTO positions (market_id, pubkey, user_wallet, yes_shares, no_shares, claimed, cost_basis)
    VALUES (:market_id, :pubkey, :wallet, :yes_shares, :no_shares, :claimed, :cost_basis)
    ON CONFLICT (market_id, user_wallet) DO UPDATE SET
        yes_shares = EXCLUDED.yes_shares,
        no_shares  = EXCLUDED.no_shares,
        claimed    = positions.claimed OR EXCLUDED.claimed,
        -- A reported delta applies to the stored row, so two first syncs racing
        -- on a missing row (nothing to lock yet) both count
        cost_basis = CASE
            WHEN CAST(:delta AS BIGINT) IS NULL THEN EXCLUDED.cost_basis
            ELSE GREATEST(0, positions.cost_basis + CAST(:delta AS BIGINT))
        END
    RETURNING cost_basis
""")

_GET_CONFIG_SQL = text("""
    SELECT authority, treasury, min_liquidity_lamports, treasury_rake_bps, creator_rake_bps,
           market_count, paused, min_trade_lamports, betting_cutoff_seconds,
           challenge_period_seconds, swap_fee_bps, bump
    FROM ledger_config
    WHERE id = 1
""")

_UPSERT_CONFIG_SQL = text("""
    INSERT INTO ledger_config (
        id, authority, treasury, min_liquidity_lamports, treasury_rake_bps, creator_rake_bps,
        market_count, paused, min_trade_lamports, betting_cutoff_seconds,
        challenge_period_seconds, swap_fee_bps, bump
    ) VALUES (
        1, :authority, :treasury, :min_liquidity_lamports, :treasury_rake_bps, :creator_rake_bps,
        :market_count, :paused, :min_trade_lamports, :betting_cutoff_seconds,
        :challenge_period_seconds, :swap_fee_bps, :bump
    )
    ON CONFLICT (id) DO UPDATE SET
        authority                = EXCLUDED.authority,
        treasury                 = EXCLUDED.treasury,
        min_liquidity_lamports   = EXCLUDED.min_liquidity_lamports,
        treasury_rake_bps        = EXCLUDED.treasury_rake_bps,
        creator_rake_bps         = EXCLUDED.creator_rake_bps,
        market_count             = EXCLUDED.market_count,
        paused                   = EXCLUDED.paused,
        min_trade_lamports       = EXCLUDED.min_trade_lamports,
        betting_cutoff_seconds   = EXCLUDED.betting_cutoff_seconds,
        challenge_period_seconds = EXCLUDED.challenge_period_seconds,
        swap_fee_bps             = EXCLUDED.swap_fee_bps,
        bump                     = EXCLUDED.bump
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def row_to_market(row: Any) -> Market:
    return Market(
        market_id=int(row.market_id),
        pubkey=row.pubkey,
        creator=row.creator,
        question=row.question,
        resolution_source=row.resolution_source,
        resolution_timestamp=int(row.resolution_timestamp),
        yes_reserve=int(row.yes_reserve),
        no_reserve=int(row.no_reserve),
        total_minted=int(row.total_minted),
        initial_liquidity=int(row.initial_liquidity),
        swap_fee_bps=int(row.swap_fee_bps),
        status=MarketStatus(row.status),
        outcome=row.outcome,
        resolved_at=int(row.resolved_at),
        ai_reasoning=row.ai_reasoning,
        creator_fee_claimed=bool(row.creator_fee_claimed),
        treasury_fee_claimed=bool(row.treasury_fee_claimed),
        treasury_fee=int(row.treasury_fee),
        creator_fee=int(row.creator_fee),
    )


def _row_to_position(row: Any) -> Position:
    return Position(
        market_id=int(row.market_id),
        pubkey=row.pubkey,
        user_wallet=row.user_wallet,
        yes_shares=int(row.yes_shares),
        no_shares=int(row.no_shares),
        claimed=bool(row.claimed),
        cost_basis=int(row.cost_basis),
    )


def _row_to_config(row: Any) -> ConfigAccount:
    return ConfigAccount(
        authority=row.authority,
        treasury=row.treasury,
        min_liquidity_lamports=int(row.min_liquidity_lamports),
        treasury_rake_bps=int(row.treasury_rake_bps),
        creator_rake_bps=int(row.creator_rake_bps),
        market_count=int(row.market_count),
        paused=bool(row.paused),
        min_trade_lamports=int(row.min_trade_lamports),
        betting_cutoff_seconds=int(row.betting_cutoff_seconds),
        challenge_period_seconds=int(row.challenge_period_seconds),
        swap_fee_bps=int(row.swap_fee_bps),
        bump=int(row.bump),
    )


def _market_params(pubkey: str, account: MarketAccount) -> dict[str, Any]:
    # A first-time insert of a non-open market must still satisfy the
    # outcome/resolved_at CHECK constraints.
    resolved = account.status is MarketStatus.RESOLVED
    return {
        "market_id": account.market_id,
        "pubkey": pubkey,
        "creator": account.creator,
        "question": account.question,
        "resolution_source": account.resolution_source,
        "resolution_timestamp": account.resolution_timestamp,
        "yes_reserve": account.yes_reserve,
        "no_reserve": account.no_reserve,
        "total_minted": account.total_minted,
        "initial_liquidity": account.initial_liquidity,
        "swap_fee_bps": account.swap_fee_bps,
        "status": account.status.value,
        "outcome": account.outcome if resolved else None,
        "resolved_at": account.resolved_at if resolved else 0,
        "ledger_resolved_at": account.resolved_at,
        "creator_fee_claimed": account.creator_fee_claimed,
        "treasury_fee_claimed": account.treasury_fee_claimed,
        "treasury_fee": account.treasury_fee,
        "creator_fee": account.creator_fee,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MirrorRepository:
    async def get_market(self, db: AsyncSession, market_id: int) -> Market | None:
        row = (await db.execute(_GET_MARKET_SQL, {"market_id": market_id})).fetchone()
        return row_to_market(row) if row else None

    async def upsert_market(
        self, db: AsyncSession, pubkey: str, account: MarketAccount
    ) -> None:
        await db.execute(_UPSERT_MARKET_SQL, _market_params(pubkey, account))

    async def get_position(
        self, db: AsyncSession, market_id: int, wallet: str, for_update: bool = False
    ) -> Position | None:
        sql = _GET_POSITION_FOR_UPDATE_SQL if for_update else _GET_POSITION_SQL
        row = (await db.execute(sql, {"market_id": market_id, "wallet": wallet})).fetchone()
        return _row_to_position(row) if row else None

    async def upsert_position(
        self,
        db: AsyncSession,
        market_id: int,
        pubkey: str,
        wallet: str,
        account: PositionAccount,
        cost_basis: int,
        delta: int | None = None,
    ) -> int:
        result = await db.execute(
            _UPSERT_POSITION_SQL,
            {
                "market_id": market_id,
                "pubkey": pubkey,
                "wallet": wallet,
                "yes_shares": account.yes_shares,
                "no_shares": account.no_shares,
                "claimed": account.claimed,
                "cost_basis": cost_basis,
                "delta": delta,
            },
        )
        return int(result.scalar_one())

    async def get_config(self, db: AsyncSession) -> ConfigAccount | None:
        row = (await db.execute(_GET_CONFIG_SQL)).fetchone()
        return _row_to_config(row) if row else None

    async def upsert_config(self, db: AsyncSession, config: ConfigAccount) -> None:
        await db.execute(
            _UPSERT_CONFIG_SQL,
            {
                "authority": config.authority,
                "treasury": config.treasury,
                "min_liquidity_lamports": config.min_liquidity_lamports,
                "treasury_rake_bps": config.treasury_rake_bps,
                "creator_rake_bps": config.creator_rake_bps,
                "market_count": config.market_count,
                "paused": config.paused,
                "min_trade_lamports": config.min_trade_lamports,
                "betting_cutoff_seconds": config.betting_cutoff_seconds,
                "challenge_period_seconds": config.challenge_period_seconds,
                "swap_fee_bps": config.swap_fee_bps,
                "bump": config.bump,
            },
        )

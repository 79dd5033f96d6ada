"""SolanaLedgerGateway — concrete LedgerGatewayProtocol over Solana JSON-RPC.

Reads use `getAccountInfo` at the derived addresses and reject accounts not
owned by PROGRAM_ID. Writes build a single-instruction legacy transaction,
sign it with the platform authority, send it with preflight, and block
until "confirmed". A transaction that lands with an error is a LedgerError.

PROGRAM_ID / AUTHORITY_PRIVATE_KEY are read lazily: a gateway without them
can still be constructed, and raises LedgerNotConfiguredError on first use.
"""

import logging

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction, VersionedTransaction

from config.settings import settings
from src.dg_common.errors import LedgerError, LedgerNotConfiguredError
from src.dg_ledger.domain.addresses import (
    config_address,
    creator_profile_address,
    market_address,
    position_address,
)
from src.dg_ledger.domain.instructions import (
    RESOLVE_MARKET,
    UPDATE_FEE,
    VOID_MARKET,
    build_settlement_instruction,
    build_update_fee_instruction,
    encode_resolve_data,
    encode_update_fee_data,
    encode_void_data,
    instruction_discriminator,
)
from src.dg_ledger.domain.layouts import (
    ConfigAccount,
    MarketAccount,
    PositionAccount,
    decode_config,
    decode_market,
    decode_position,
)

logger = logging.getLogger(__name__)

_RPC_ERRORS = (RPCException, SolanaRpcException, UnconfirmedTxError, httpx.HTTPError)

_SETTLEMENT_DISCRIMINATORS = (
    instruction_discriminator(RESOLVE_MARKET),
    instruction_discriminator(VOID_MARKET),
)
# Settlement is the last authority write on a market; claims may follow it
SIGNATURE_LOOKBACK = 20


class SolanaLedgerGateway:
    def __init__(
        self,
        client: AsyncClient | None = None,
        program_id: str | None = None,
        authority_key: str | None = None,
    ) -> None:
        self._client = client or AsyncClient(settings.SOLANA_RPC_URL, commitment=Confirmed)
        self._program_id_raw = program_id if program_id is not None else settings.PROGRAM_ID
        self._authority_raw = (
            authority_key if authority_key is not None else settings.AUTHORITY_PRIVATE_KEY
        )
        self._program_id: Pubkey | None = None
        self._authority: Keypair | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def program_id(self) -> Pubkey:
        if self._program_id is None:
            if not self._program_id_raw:
                raise LedgerNotConfiguredError(["PROGRAM_ID"])
            try:
                self._program_id = Pubkey.from_string(self._program_id_raw)
            except ValueError:
                raise LedgerError("PROGRAM_ID is not a valid public key") from None
        return self._program_id

    @property
    def authority(self) -> Keypair:
        if self._authority is None:
            missing = [
                name
                for name, value in (
                    ("PROGRAM_ID", self._program_id_raw),
                    ("AUTHORITY_PRIVATE_KEY", self._authority_raw),
                )
                if not value
            ]
            if missing:
                raise LedgerNotConfiguredError(missing)
            try:
                self._authority = Keypair.from_base58_string(self._authority_raw or "")
            except ValueError:
                raise LedgerError("AUTHORITY_PRIVATE_KEY is not a valid base58 keypair") from None
        return self._authority

    def market_pubkey(self, market_id: int) -> str:
        return str(market_address(self.program_id, market_id))

    def position_pubkey(self, market_id: int, wallet: Pubkey) -> str:
        market = market_address(self.program_id, market_id)
        return str(position_address(self.program_id, market, wallet))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _account_data(self, address: Pubkey) -> bytes | None:
        try:
            resp = await self._client.get_account_info(address, commitment=Confirmed)
        except _RPC_ERRORS as e:
            raise LedgerError(f"getAccountInfo failed for {address}: {e}") from e
        account = resp.value
        if account is None:
            return None
        if account.owner != self.program_id:
            raise LedgerError(f"Account {address} is not owned by the program")
        return bytes(account.data)

    async def fetch_config(self) -> ConfigAccount | None:
        data = await self._account_data(config_address(self.program_id))
        return decode_config(data) if data is not None else None

    async def fetch_market(self, market_id: int) -> MarketAccount | None:
        data = await self._account_data(market_address(self.program_id, market_id))
        return decode_market(data) if data is not None else None

    async def fetch_position(self, market_id: int, wallet: Pubkey) -> PositionAccount | None:
        market = market_address(self.program_id, market_id)
        data = await self._account_data(position_address(self.program_id, market, wallet))
        return decode_position(data) if data is not None else None

    async def find_settlement_signature(self, market_id: int) -> str | None:
        """Signature of the confirmed resolve/void transaction for a market.

        Walks the newest SIGNATURE_LOOKBACK signatures on the market account
        and returns the first whose transaction calls resolve_market or
        void_market on this program. None when no such transaction is found.
        """
        program_id = self.program_id
        market_pda = market_address(program_id, market_id)
        try:
            resp = await self._client.get_signatures_for_address(
                market_pda, limit=SIGNATURE_LOOKBACK, commitment=Confirmed
            )
            for entry in resp.value:
                if entry.err is not None:
                    continue
                found = await self._client.get_transaction(
                    entry.signature,
                    encoding="base64",
                    commitment=Confirmed,
                    max_supported_transaction_version=0,
                )
                if found.value is None:
                    continue
                if _calls_settlement(found.value.transaction.transaction, program_id):
                    return str(entry.signature)
        except _RPC_ERRORS as e:
            raise LedgerError(f"Signature lookup failed for market {market_id}: {e}") from e
        return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def submit_resolve(self, market_id: int, outcome: bool) -> str:
        return await self._submit(market_id, RESOLVE_MARKET, encode_resolve_data(outcome))

    async def submit_void(self, market_id: int, reason: str) -> str:
        return await self._submit(market_id, VOID_MARKET, encode_void_data(reason))

    async def _submit(self, market_id: int, name: str, data: bytes) -> str:
        authority = self.authority
        program_id = self.program_id
        market_pda = market_address(program_id, market_id)

        market = await self.fetch_market(market_id)
        if market is None:
            raise LedgerError(f"Market account not found on-chain: {market_pda}")

        ix = build_settlement_instruction(
            program_id,
            data,
            authority=authority.pubkey(),
            config=config_address(program_id),
            market=market_pda,
            creator_profile=creator_profile_address(
                program_id, Pubkey.from_string(market.creator)
            ),
        )
        return await self._send(ix, f"{name} for market {market_id}")

    async def submit_update_fee(self, new_fee_lamports: int) -> str:
        """Set the creation fee stored in the config account."""
        program_id = self.program_id
        ix = build_update_fee_instruction(
            program_id,
            encode_update_fee_data(new_fee_lamports),
            authority=self.authority.pubkey(),
            config=config_address(program_id),
        )
        return await self._send(ix, UPDATE_FEE)

    async def _send(self, ix: Instruction, label: str) -> str:
        authority = self.authority
        try:
            latest = (await self._client.get_latest_blockhash(commitment=Confirmed)).value
            blockhash: Hash = latest.blockhash
            message = Message.new_with_blockhash([ix], authority.pubkey(), blockhash)
            tx = Transaction([authority], message, blockhash)
            sent = await self._client.send_raw_transaction(
                bytes(tx), opts=TxOpts(preflight_commitment=Confirmed)
            )
            signature = sent.value
            confirmed = await self._client.confirm_transaction(
                signature,
                commitment=Confirmed,
                last_valid_block_height=latest.last_valid_block_height,
            )
        except _RPC_ERRORS as e:
            raise LedgerError(f"{label} failed: {e}") from e

        status = confirmed.value[0] if confirmed.value else None
        if status is not None and status.err is not None:
            raise LedgerError(f"{label} failed on-chain: {status.err}")

        logger.info("Ledger %s confirmed: %s", label, signature)
        return str(signature)

    async def close(self) -> None:
        await self._client.close()


_gateway: SolanaLedgerGateway | None = None


def get_ledger_gateway() -> SolanaLedgerGateway:
    """Process-wide gateway sharing one RPC connection pool."""
    global _gateway  # noqa: PLW0603
    if _gateway is None:
        _gateway = SolanaLedgerGateway()
    return _gateway


async def close_ledger_gateway() -> None:
    global _gateway  # noqa: PLW0603
    if _gateway is not None:
        await _gateway.close()
        _gateway = None


def _calls_settlement(tx: object, program_id: Pubkey) -> bool:
    if not isinstance(tx, VersionedTransaction):
        return False
    keys = tx.message.account_keys
    for ix in tx.message.instructions:
        if keys[ix.program_id_index] != program_id:
            continue
        if bytes(ix.data)[:8] in _SETTLEMENT_DISCRIMINATORS:
            return True
    return False

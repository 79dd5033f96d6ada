"""Instruction encoding for the authority-signed settlement calls.

resolve_market(outcome: bool)  data = disc + u8(outcome)
void_market(reason: String)    data = disc + u32_le(len) + utf8(reason)

disc = sha256("global:<name>")[:8]. Both instructions take the same accounts:
authority (signer), config, market (writable), creator profile (writable).

update_fee(new_fee: u64)       data = disc + u64_le(new_fee)

Takes only authority (signer) and config (writable).
"""

import hashlib
import struct

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

RESOLVE_MARKET = "resolve_market"
VOID_MARKET = "void_market"
UPDATE_FEE = "update_fee"
MAX_VOID_REASON_BYTES = 200


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def truncate_utf8(text: str, max_bytes: int) -> bytes:
    """Encode and cut to max_bytes without splitting a multi-byte character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return encoded
    return encoded[:max_bytes].decode("utf-8", errors="ignore").encode("utf-8")


def encode_resolve_data(outcome: bool) -> bytes:
    return instruction_discriminator(RESOLVE_MARKET) + bytes([1 if outcome else 0])


def encode_void_data(reason: str) -> bytes:
    reason_bytes = truncate_utf8(reason, MAX_VOID_REASON_BYTES)
    return (
        instruction_discriminator(VOID_MARKET)
        + struct.pack("<I", len(reason_bytes))
        + reason_bytes
    )


def build_settlement_instruction(
    program_id: Pubkey,
    data: bytes,
    authority: Pubkey,
    config: Pubkey,
    market: Pubkey,
    creator_profile: Pubkey,
) -> Instruction:
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(config, is_signer=False, is_writable=False),
            AccountMeta(market, is_signer=False, is_writable=True),
            AccountMeta(creator_profile, is_signer=False, is_writable=True),
        ],
    )


def encode_update_fee_data(new_fee_lamports: int) -> bytes:
    return instruction_discriminator(UPDATE_FEE) + struct.pack("<Q", new_fee_lamports)


def build_update_fee_instruction(
    program_id: Pubkey, data: bytes, authority: Pubkey, config: Pubkey
) -> Instruction:
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(config, is_signer=False, is_writable=True),
        ],
    )

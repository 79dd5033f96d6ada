"""Program-derived addresses of the ledger accounts.

Seeds:
  config          ["config"]
  market          ["market", u64_le(market_id)]
  position        ["position", market, user]
  creator profile ["creator", creator]
"""

from solders.pubkey import Pubkey


def config_address(program_id: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([b"config"], program_id)[0]


def market_address(program_id: Pubkey, market_id: int) -> Pubkey:
    return Pubkey.find_program_address(
        [b"market", market_id.to_bytes(8, "little")], program_id
    )[0]


def position_address(program_id: Pubkey, market: Pubkey, user: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([b"position", bytes(market), bytes(user)], program_id)[0]


def creator_profile_address(program_id: Pubkey, creator: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([b"creator", bytes(creator)], program_id)[0]

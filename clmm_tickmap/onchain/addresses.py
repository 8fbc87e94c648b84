"""
Program-derived addresses of CLMM accounts.

Tick arrays live at PDA(["tick_array", pool, start_tick as big-endian i32])
and the bitmap extension at PDA(["pool_tick_array_bitmap_extension", pool]),
both under the CLMM program.
"""
from __future__ import annotations

from solders.pubkey import Pubkey

from clmm_tickmap.config.protocol import (
    RAYDIUM_CLMM_PROGRAM_ID,
    TICK_ARRAY_BITMAP_EXTENSION_SEED,
    TICK_ARRAY_SEED,
)

__all__ = ["parse_pubkey", "pubkey_from_bytes", "tick_array_address", "bitmap_extension_address"]

PROGRAM_ID = Pubkey.from_string(RAYDIUM_CLMM_PROGRAM_ID)


def parse_pubkey(value: str | Pubkey) -> Pubkey:
    """Pubkey from a base58 string; raises ValueError when malformed."""
    if isinstance(value, Pubkey):
        return value
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise ValueError(f"Invalid public key '{value}': {e}") from e


def pubkey_from_bytes(raw: bytes) -> str:
    """Base58 form of a 32-byte key read from account data."""
    return str(Pubkey.from_bytes(bytes(raw)))


def tick_array_address(pool: str | Pubkey, start_tick: int, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    seeds = [TICK_ARRAY_SEED, bytes(parse_pubkey(pool)), start_tick.to_bytes(4, "big", signed=True)]
    address, _bump = Pubkey.find_program_address(seeds, program_id)
    return address


def bitmap_extension_address(pool: str | Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    seeds = [TICK_ARRAY_BITMAP_EXTENSION_SEED, bytes(parse_pubkey(pool))]
    address, _bump = Pubkey.find_program_address(seeds, program_id)
    return address

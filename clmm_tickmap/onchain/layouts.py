"""
Byte layouts of the CLMM accounts this tool reads.

Accounts are Anchor-serialized: an 8-byte discriminator
(sha256("account:<Name>")[:8]) followed by packed little-endian Borsh
fields. Trailing bytes past the layout are ignored.
"""
from __future__ import annotations

import hashlib
import logging

from construct import (
    Array,
    Bytes,
    BytesInteger,
    ConstructError,
    Int8ul,
    Int16ul,
    Int32sl,
    Int64ul,
    Padding,
    Struct,
)

from clmm_tickmap.config.protocol import (
    ACCOUNT_DISCRIMINATOR_SIZE,
    DEFAULT_BITMAP_WORDS,
    EXTENSION_CHUNKS,
    TICK_ARRAY_SIZE,
    WORDS_PER_CHUNK,
)
from clmm_tickmap.helpers.bitmap_codec import ExtensionBitmap
from clmm_tickmap.helpers.errors import RecordDecodeError
from clmm_tickmap.helpers.pool_params import PoolParams

logger = logging.getLogger(__name__)

U128 = BytesInteger(16, signed=False, swapped=True)
I128 = BytesInteger(16, signed=True, swapped=True)
PUBKEY = Bytes(32)

REWARD_NUM = 3

REWARD_INFO = Struct(
    "reward_state" / Int8ul,
    "open_time" / Int64ul,
    "end_time" / Int64ul,
    "last_update_time" / Int64ul,
    "emissions_per_second_x64" / U128,
    "reward_total_emissioned" / Int64ul,
    "reward_claimed" / Int64ul,
    "token_mint" / PUBKEY,
    "token_vault" / PUBKEY,
    "authority" / PUBKEY,
    "reward_growth_global_x64" / U128,
)

POOL_STATE = Struct(
    "bump" / Bytes(1),
    "amm_config" / PUBKEY,
    "owner" / PUBKEY,
    "token_mint_0" / PUBKEY,
    "token_mint_1" / PUBKEY,
    "token_vault_0" / PUBKEY,
    "token_vault_1" / PUBKEY,
    "observation_key" / PUBKEY,
    "mint_decimals_0" / Int8ul,
    "mint_decimals_1" / Int8ul,
    "tick_spacing" / Int16ul,
    "liquidity" / U128,
    "sqrt_price_x64" / U128,
    "tick_current" / Int32sl,
    Padding(2),  # padding3
    Padding(2),  # padding4
    "fee_growth_global_0_x64" / U128,
    "fee_growth_global_1_x64" / U128,
    "protocol_fees_token_0" / Int64ul,
    "protocol_fees_token_1" / Int64ul,
    "swap_in_amount_token_0" / U128,
    "swap_out_amount_token_1" / U128,
    "swap_in_amount_token_1" / U128,
    "swap_out_amount_token_0" / U128,
    "status" / Int8ul,
    Padding(7),
    "reward_infos" / Array(REWARD_NUM, REWARD_INFO),
    "tick_array_bitmap" / Array(DEFAULT_BITMAP_WORDS, Int64ul),
    "total_fees_token_0" / Int64ul,
    "total_fees_claimed_token_0" / Int64ul,
    "total_fees_token_1" / Int64ul,
    "total_fees_claimed_token_1" / Int64ul,
    "fund_fees_token_0" / Int64ul,
    "fund_fees_token_1" / Int64ul,
    "open_time" / Int64ul,
    "recent_epoch" / Int64ul,
    Padding(24 * 8),  # padding1
    Padding(32 * 8),  # padding2
)

TICK_ARRAY_BITMAP_EXTENSION = Struct(
    "pool_id" / PUBKEY,
    "positive_tick_array_bitmap" / Array(EXTENSION_CHUNKS, Array(WORDS_PER_CHUNK, Int64ul)),
    "negative_tick_array_bitmap" / Array(EXTENSION_CHUNKS, Array(WORDS_PER_CHUNK, Int64ul)),
)

TICK_STATE = Struct(
    "tick" / Int32sl,
    "liquidity_net" / I128,
    "liquidity_gross" / U128,
    "fee_growth_outside_0_x64" / U128,
    "fee_growth_outside_1_x64" / U128,
    "reward_growths_outside_x64" / Array(REWARD_NUM, U128),
    Padding(13 * 4),
)

TICK_ARRAY_STATE = Struct(
    "pool_id" / PUBKEY,
    "start_tick_index" / Int32sl,
    "ticks" / Array(TICK_ARRAY_SIZE, TICK_STATE),
    "initialized_tick_count" / Int8ul,
    "recent_epoch" / Int64ul,
    Padding(107),
)


def account_discriminator(name: str) -> bytes:
    """Anchor discriminator for an account type name."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:ACCOUNT_DISCRIMINATOR_SIZE]


def _decode(name: str, layout: Struct, data: bytes):
    discriminator = data[:ACCOUNT_DISCRIMINATOR_SIZE]
    if discriminator != account_discriminator(name):
        raise RecordDecodeError(f"Account is not a {name} (discriminator {discriminator.hex()})")
    body = data[ACCOUNT_DISCRIMINATOR_SIZE:]
    if len(body) < layout.sizeof():
        raise RecordDecodeError(f"{name} needs {layout.sizeof()} bytes, got {len(body)}")
    try:
        return layout.parse(body)
    except ConstructError as e:
        raise RecordDecodeError(f"Failed to decode {name}: {e}") from e


def decode_pool_state(data: bytes):
    return _decode("PoolState", POOL_STATE, data)


def decode_bitmap_extension(data: bytes):
    return _decode("TickArrayBitmapExtension", TICK_ARRAY_BITMAP_EXTENSION, data)


def decode_tick_array(data: bytes):
    return _decode("TickArrayState", TICK_ARRAY_STATE, data)


def pool_params_from_state(state) -> PoolParams:
    return PoolParams(
        decimals0=state.mint_decimals_0,
        decimals1=state.mint_decimals_1,
        tick_spacing=state.tick_spacing,
        current_tick=state.tick_current,
    )


def extension_bitmap_from_state(state) -> ExtensionBitmap:
    return ExtensionBitmap(
        [list(chunk) for chunk in state.positive_tick_array_bitmap],
        [list(chunk) for chunk in state.negative_tick_array_bitmap],
    )

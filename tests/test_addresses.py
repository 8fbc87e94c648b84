"""
Tests for CLMM program-derived addresses.
"""

import pytest
from solders.pubkey import Pubkey

from clmm_tickmap.onchain.addresses import (
    PROGRAM_ID,
    bitmap_extension_address,
    parse_pubkey,
    pubkey_from_bytes,
    tick_array_address,
)


class TestTickArrayAddress:

    def test_deterministic(self, pool_id):
        assert tick_array_address(pool_id, -600) == tick_array_address(pool_id, -600)
        assert isinstance(tick_array_address(pool_id, 0), Pubkey)

    def test_differs_per_start_tick(self, pool_id):
        addresses = {tick_array_address(pool_id, start) for start in (-1200, -600, 0, 600)}
        assert len(addresses) == 4

    def test_accepts_pubkey(self, pool_id):
        assert tick_array_address(Pubkey.from_string(pool_id), 600) == tick_array_address(pool_id, 600)

    def test_matches_manual_derivation(self, pool_id):
        seeds = [b"tick_array", bytes(Pubkey.from_string(pool_id)), (-600).to_bytes(4, "big", signed=True)]
        expected, _ = Pubkey.find_program_address(seeds, PROGRAM_ID)
        assert tick_array_address(pool_id, -600) == expected


class TestExtensionAddress:

    def test_differs_from_tick_arrays(self, pool_id):
        assert bitmap_extension_address(pool_id) != tick_array_address(pool_id, 0)
        assert bitmap_extension_address(pool_id) == bitmap_extension_address(pool_id)


class TestPubkeyParsing:

    def test_invalid_key(self):
        with pytest.raises(ValueError):
            parse_pubkey("not-a-key")

    def test_from_bytes(self, pool_id):
        raw = bytes(Pubkey.from_string(pool_id))
        assert pubkey_from_bytes(raw) == pool_id

"""
Test configuration and fixtures
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from construct import Array, Bytes, Renamed, Struct

from clmm_tickmap.helpers.array_indexer import ArrayIndexer
from clmm_tickmap.helpers.pool_params import PoolParams
from clmm_tickmap.helpers.price_converter import PriceConverter
from clmm_tickmap.onchain import layouts

POOL_ID = "So11111111111111111111111111111111111111112"


def _zero_fields(con):
    """Zero-valued build input for a construct layout."""
    if isinstance(con, Renamed):
        return _zero_fields(con.subcon)
    if isinstance(con, Struct):
        return {sc.name: _zero_fields(sc) for sc in con.subcons if sc.name}
    if isinstance(con, Array):
        return [_zero_fields(con.subcon) for _ in range(con.count)]
    if isinstance(con, Bytes):
        return bytes(con.length)
    return 0


def _encode_account(name, layout, fields):
    """Discriminator plus serialized fields, as the decoders expect them."""
    return layouts.account_discriminator(name) + layout.build(fields)


@pytest.fixture
def pool_id():
    return POOL_ID


@pytest.fixture
def params():
    """Pool with tick spacing 10 (600 ticks per array) and 9/6 decimals."""
    return PoolParams(decimals0=9, decimals1=6, tick_spacing=10, current_tick=0)


@pytest.fixture
def indexer():
    return ArrayIndexer(10)


@pytest.fixture
def converter():
    return PriceConverter(9, 6)


@pytest.fixture
def zero_fields():
    return _zero_fields


@pytest.fixture
def encode_account():
    return _encode_account


@pytest.fixture
def pool_state_bytes():
    """Builder for PoolState account data with selected fields overridden."""
    def build(**overrides):
        fields = _zero_fields(layouts.POOL_STATE)
        fields.update(overrides)
        return _encode_account("PoolState", layouts.POOL_STATE, fields)
    return build


@pytest.fixture
def tick_array_bytes():
    """Builder for TickArrayState data; ``ticks`` maps slot -> (tick, liquidity_net, liquidity_gross)."""
    def build(start_tick, ticks=None):
        fields = _zero_fields(layouts.TICK_ARRAY_STATE)
        fields["start_tick_index"] = start_tick
        for slot, (tick, net, gross) in (ticks or {}).items():
            fields["ticks"][slot].update(tick=tick, liquidity_net=net, liquidity_gross=gross)
        fields["initialized_tick_count"] = len(ticks or {})
        return _encode_account("TickArrayState", layouts.TICK_ARRAY_STATE, fields)
    return build


@pytest.fixture(autouse=True)
def tracing_off(monkeypatch):
    """Keep the global tracer disabled and rebuilt for every test."""
    from clmm_tickmap.helpers import tracing

    monkeypatch.delenv("CLMM_TICKMAP_TRACING", raising=False)
    monkeypatch.setattr(tracing, "_global_tracer", None)


@pytest.fixture(autouse=True)
def reset_cli_logger():
    """Drop handlers the CLI attaches so each test logs to its own captured stderr."""
    import logging

    yield
    logger = logging.getLogger("clmm_tickmap")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

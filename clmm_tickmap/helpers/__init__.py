"""
Tick math and tick-array addressing helpers.
"""

from clmm_tickmap.helpers.price_converter import (
    PriceFormat,
    PriceQuotation,
    PriceConverter,
)

from clmm_tickmap.helpers.array_indexer import (
    floor_div,
    TickArrayRange,
    ArrayIndexer,
)

from clmm_tickmap.helpers.bitmap_codec import (
    BitmapCodec,
    ExtensionBitmap,
)

from clmm_tickmap.helpers.pool_params import (
    PoolParams,
    select_start_tick,
)

from clmm_tickmap.helpers.swap_ranges import (
    SwapDirection,
    ArrayRole,
    SwapArray,
    SwapRangePlan,
    SwapRangeResolver,
)

__all__ = [
    # Prices
    'PriceFormat',
    'PriceQuotation',
    'PriceConverter',

    # Arrays
    'floor_div',
    'TickArrayRange',
    'ArrayIndexer',

    # Bitmaps
    'BitmapCodec',
    'ExtensionBitmap',

    # Pool
    'PoolParams',
    'select_start_tick',

    # Swaps
    'SwapDirection',
    'ArrayRole',
    'SwapArray',
    'SwapRangePlan',
    'SwapRangeResolver',
]

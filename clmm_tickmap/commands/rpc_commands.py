"""RPC-backed CLI commands.

Each command reads the pool account (and, where needed, the bitmap
extension and tick arrays) once, then hands the decoded values to the
offline helpers.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from clmm_tickmap.commands import reports
from clmm_tickmap.helpers.bitmap_codec import ExtensionBitmap
from clmm_tickmap.helpers.errors import AccountNotFound
from clmm_tickmap.helpers.liquidity import (
    collect_tick_deltas,
    liquidity_segments,
    max_cumulative_liquidity,
)
from clmm_tickmap.helpers.pool_params import PoolParams, select_start_tick
from clmm_tickmap.helpers.price_converter import PriceFormat, PriceQuotation
from clmm_tickmap.helpers.range_scan import initialized_in_range, percent_price_bounds
from clmm_tickmap.helpers.swap_ranges import SwapDirection, SwapRangeResolver
from clmm_tickmap.onchain.account_source import AccountDataSource
from clmm_tickmap.onchain.addresses import (
    bitmap_extension_address,
    parse_pubkey,
    pubkey_from_bytes,
    tick_array_address,
)
from clmm_tickmap.onchain.layouts import (
    decode_bitmap_extension,
    decode_pool_state,
    decode_tick_array,
    extension_bitmap_from_state,
    pool_params_from_state,
)

logger = logging.getLogger(__name__)

HUMAN_FORMATS = {
    "t0-per-t1": PriceFormat.TOKEN0_PER_TOKEN1_HUMAN,
    "t1-per-t0": PriceFormat.TOKEN1_PER_TOKEN0_HUMAN,
}

DIRECTIONS = {
    "buy-t1": SwapDirection.BUY_TOKEN1,
    "buy-t0": SwapDirection.BUY_TOKEN0,
}


@dataclass
class PoolSnapshot:
    """Decoded pool account plus its bitmap extension (None when the pool has none)"""
    pool_id: str
    state: object
    params: PoolParams
    extension: Optional[ExtensionBitmap] = None

    def populated(self) -> list[int]:
        return self.params.codec().decode_all(self.state.tick_array_bitmap, self.extension)


# --------------------------------------------------------------------------- #
# helpers                                                                     #
# --------------------------------------------------------------------------- #


def _source(args) -> AccountDataSource:
    return AccountDataSource(args.rpc_url)


def _load_pool(source: AccountDataSource, pool_id: str, with_extension: bool = False) -> PoolSnapshot:
    """Fetch and decode the pool account, optionally with its bitmap extension."""
    parse_pubkey(pool_id)
    state = decode_pool_state(source.get_account_data(pool_id))
    snapshot = PoolSnapshot(pool_id, state, pool_params_from_state(state))
    if with_extension:
        address = str(bitmap_extension_address(pool_id))
        try:
            snapshot.extension = extension_bitmap_from_state(
                decode_bitmap_extension(source.get_account_data(address))
            )
        except AccountNotFound:
            logger.warning(f"Pool {pool_id} has no bitmap extension account ({address})")
    return snapshot


def _fetch_tick_arrays(source: AccountDataSource, pool_id: str, starts) -> list:
    """Decoded tick arrays for ``starts``; arrays missing on-chain are skipped."""
    addresses = {str(tick_array_address(pool_id, start)): start for start in starts}
    accounts = source.get_multiple_account_data(list(addresses))
    tick_arrays = []
    for address, start in sorted(addresses.items(), key=lambda item: item[1]):
        data = accounts.get(address)
        if data is None:
            logger.warning(f"Tick array {start} ({address}) not found on-chain")
            continue
        tick_arrays.append(decode_tick_array(data))
    return tick_arrays


def _start_tick(snapshot: PoolSnapshot, args) -> int:
    quotation = None
    if args.price is not None:
        quotation = PriceQuotation(HUMAN_FORMATS[args.format], args.price)
    return select_start_tick(snapshot.params.converter(), tick=args.tick, quotation=quotation,
                             default=snapshot.params.current_tick)


def _print_initialized_range(source, snapshot, tick_lower, tick_upper):
    params = snapshot.params
    result = initialized_in_range(params.indexer(), snapshot.populated(), tick_lower, tick_upper)
    print(reports.initialized_range(result))

    starts = list(result.in_range)
    for start in (result.lower_surrounding, result.upper_surrounding):
        if start is not None:
            starts.append(start)
    converter, indexer = params.converter(), params.indexer()
    for tick_array in _fetch_tick_arrays(source, snapshot.pool_id, starts):
        print()
        print(reports.tick_array_details(tick_array, converter, indexer))


# --------------------------------------------------------------------------- #
# commands                                                                    #
# --------------------------------------------------------------------------- #


def pool_state(args):
    """Show liquidity, spacing and current prices of a pool."""
    snapshot = _load_pool(_source(args), args.pool_id)
    print(f"--- Pool State for {args.pool_id} ---")
    print(f"  - Liquidity: {snapshot.state.liquidity}")
    print(f"  - Tick Spacing: {snapshot.params.tick_spacing}")
    print(f"  - Current Tick: {snapshot.params.current_tick}")
    print(f"  - SqrtPriceX64: {snapshot.state.sqrt_price_x64}")
    print(reports.price_table(snapshot.params.converter(), snapshot.params.current_tick))


def token_mints(args):
    """Show the token mints of a pool."""
    snapshot = _load_pool(_source(args), args.pool_id)
    print(f"--- Token Mints for Pool {args.pool_id} ---")
    print(f"  Token 0 (t0): {pubkey_from_bytes(snapshot.state.token_mint_0)}")
    print(f"  Token 1 (t1): {pubkey_from_bytes(snapshot.state.token_mint_1)}")


def default_bitmap(args):
    """Populated arrays recorded in the pool's default bitmap."""
    snapshot = _load_pool(_source(args), args.pool_id)
    params = snapshot.params
    starts = sorted(params.codec().decode_default(snapshot.state.tick_array_bitmap))
    print(reports.populated_arrays(params.converter(), params.indexer(), starts,
                                   "Initialized Tick Arrays (Default Bitmap)"))


def extension_bitmap(args):
    """Populated arrays recorded in the bitmap extension account."""
    source = _source(args)
    snapshot = _load_pool(source, args.pool_id)
    params = snapshot.params
    extension = decode_bitmap_extension(source.get_account_data(str(bitmap_extension_address(args.pool_id))))
    bitmap = extension_bitmap_from_state(extension)
    starts = sorted(params.codec().decode_extension(bitmap.positive, bitmap.negative))
    print(reports.populated_arrays(params.converter(), params.indexer(), starts,
                                   "Initialized Tick Arrays (Extension Bitmap)"))


def tick_array(args):
    """Decode one tick array by start index."""
    source = _source(args)
    snapshot = _load_pool(source, args.pool_id)
    address = str(tick_array_address(args.pool_id, args.start_index))
    state = decode_tick_array(source.get_account_data(address))
    print(reports.tick_array_details(state, snapshot.params.converter(), snapshot.params.indexer()))


def inspect_array(args):
    """Slot-by-slot view of one tick array, by start index or address."""
    source = _source(args)
    if args.start_index is not None:
        address = str(tick_array_address(args.pool_id, args.start_index))
    else:
        address = str(parse_pubkey(args.address))
    state = decode_tick_array(source.get_account_data(address))
    snapshot = _load_pool(source, args.pool_id)
    print(reports.tick_array_slots(state, snapshot.params.tick_spacing, address))


def full_analysis(args):
    """Every populated array with the current price marked."""
    snapshot = _load_pool(_source(args), args.pool_id, with_extension=True)
    params = snapshot.params
    print(f"--- Full Liquidity Analysis for {args.pool_id} ---")
    print(reports.full_analysis(params.converter(), params.indexer(), snapshot.populated(),
                                params.current_tick, HUMAN_FORMATS[args.format]))


def liquidity_curve(args):
    """Bar chart of active liquidity across all initialized ticks."""
    source = _source(args)
    snapshot = _load_pool(source, args.pool_id, with_extension=True)
    params = snapshot.params
    populated = snapshot.populated()
    logger.info(f"Fetching {len(populated)} initialized tick arrays")

    deltas = collect_tick_deltas(_fetch_tick_arrays(source, args.pool_id, populated))
    if not deltas:
        print("No liquidity boundaries found in this pool.")
        return
    segments = liquidity_segments(deltas, params.current_tick)
    print(reports.liquidity_curve(
        segments,
        params.converter(),
        HUMAN_FORMATS[args.format],
        max_cumulative_liquidity(deltas),
        max_width=args.max_width,
        current_tick=params.current_tick,
        indexer=params.indexer() if args.show_arrays else None,
    ))


def initialized_range(args):
    """Populated arrays within a price range plus their neighbours."""
    source = _source(args)
    snapshot = _load_pool(source, args.pool_id, with_extension=True)
    converter = snapshot.params.converter()
    fmt = HUMAN_FORMATS[args.format]
    tick_lower = converter.to_tick(PriceQuotation(fmt, args.price_lower))
    tick_upper = converter.to_tick(PriceQuotation(fmt, args.price_upper))
    print(f"--- Initialized Array Range Analysis for {args.pool_id} ---")
    print(f"Input Price Range [{args.price_lower:.6f}, {args.price_upper:.6f}] "
          f"maps to Tick Range [{min(tick_lower, tick_upper)}, {max(tick_lower, tick_upper)}]")
    _print_initialized_range(source, snapshot, tick_lower, tick_upper)


def initialized_range_percent(args):
    """Like initialized-range, with the range given as percentages around a price."""
    price_lower, price_upper = percent_price_bounds(args.price, args.lower_pct, args.upper_pct)
    source = _source(args)
    snapshot = _load_pool(source, args.pool_id, with_extension=True)
    converter = snapshot.params.converter()
    fmt = HUMAN_FORMATS[args.format]
    tick_lower = converter.to_tick(PriceQuotation(fmt, price_lower))
    tick_upper = converter.to_tick(PriceQuotation(fmt, price_upper))
    print(f"--- Initialized Array Percent Range Analysis for {args.pool_id} ---")
    print(f"Base Price:   {args.price:.8f}")
    print(f"Range:        -{args.lower_pct:.2f}% to +{args.upper_pct:.2f}%")
    print(f"Calculated Price Range: [{price_lower:.8f}, {price_upper:.8f}]")
    _print_initialized_range(source, snapshot, tick_lower, tick_upper)


def swap_arrays(args):
    """Swap arrays restricted to populated tick arrays."""
    snapshot = _load_pool(_source(args), args.pool_id, with_extension=True)
    plan = SwapRangeResolver(snapshot.params).resolve(
        DIRECTIONS[args.direction], args.favorable_pct, args.impact_pct,
        start_tick=_start_tick(snapshot, args),
        populated=snapshot.populated(),
    )
    print(f"--- Swap Array Calculation for {args.pool_id} ---")
    print(reports.swap_plan(plan, pool=args.pool_id))


def swap_arrays_blind(args):
    """Swap arrays assuming every array in range exists."""
    snapshot = _load_pool(_source(args), args.pool_id)
    plan = SwapRangeResolver(snapshot.params).resolve(
        DIRECTIONS[args.direction], args.favorable_pct, args.impact_pct,
        start_tick=_start_tick(snapshot, args),
    )
    print(f"--- Blind Swap Array Calculation for {args.pool_id} ---")
    print("    (Assumes all arrays in range are initialized)")
    print(reports.swap_plan(plan, pool=args.pool_id))


def register_rpc_commands(subparsers):
    """Attach the ``rpc`` command group to the top-level parser."""
    rpc_parser = subparsers.add_parser('rpc', help='Commands that read live pool accounts')
    rpc_parser.set_defaults(func=lambda args: rpc_parser.print_help())
    rpc = rpc_parser.add_subparsers(dest='rpc_command', help='RPC commands')

    def add(name, func, help_text, human_format=False):
        p = rpc.add_parser(name, help=help_text)
        p.add_argument('--pool-id', required=True, help='Pool account address')
        p.add_argument('--rpc-url', help='RPC endpoint (default: SOLANA_RPC_URL or mainnet-beta)')
        if human_format:
            p.add_argument('--format', choices=sorted(HUMAN_FORMATS), default='t1-per-t0',
                           help='Human price format (default: t1-per-t0)')
        p.set_defaults(func=func)
        return p

    add('pool-state', pool_state, 'Fetch and decode the pool state account')
    add('token-mints', token_mints, 'Show the token 0 and token 1 mints')
    add('default-bitmap', default_bitmap, 'Populated arrays in the default bitmap')
    add('extension-bitmap', extension_bitmap, 'Populated arrays in the bitmap extension')

    p = add('tick-array', tick_array, 'Fetch and decode one tick array')
    p.add_argument('--start-index', type=int, required=True, help='Array start index')

    p = add('inspect-array', inspect_array, 'Slot-by-slot view of one tick array')
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument('--start-index', type=int, help='Array start index')
    target.add_argument('--address', help='Tick array account address')

    add('full-analysis', full_analysis, 'All populated arrays with the current price marked',
        human_format=True)

    p = add('liquidity-curve', liquidity_curve, 'Text chart of the liquidity distribution',
            human_format=True)
    p.add_argument('--max-width', type=int, default=50, help='Widest bar in characters (default: 50)')
    p.add_argument('--show-arrays', action='store_true', help='Mark tick array boundaries')

    p = add('initialized-range', initialized_range, 'Populated arrays in a price range',
            human_format=True)
    p.add_argument('--price-lower', type=float, required=True, help='Lower price')
    p.add_argument('--price-upper', type=float, required=True, help='Upper price')

    p = add('initialized-range-percent', initialized_range_percent,
            'Populated arrays in a percentage range around a price', human_format=True)
    p.add_argument('--price', type=float, required=True, help='Center price')
    p.add_argument('--lower-pct', type=float, required=True, help='Percent below the price (e.g. 10)')
    p.add_argument('--upper-pct', type=float, required=True, help='Percent above the price (e.g. 30)')

    for name, func, help_text in (
        ('swap-arrays', swap_arrays, 'Tick arrays a swap needs (populated arrays only)'),
        ('swap-arrays-blind', swap_arrays_blind, 'Tick arrays a swap needs (assumes all exist)'),
    ):
        p = add(name, func, help_text, human_format=True)
        p.add_argument('--direction', choices=sorted(DIRECTIONS), required=True, help='Swap direction')
        p.add_argument('--favorable-pct', type=float, required=True, help='Max %% move in your favor')
        p.add_argument('--impact-pct', type=float, required=True, help='Max %% move against you')
        start = p.add_mutually_exclusive_group()
        start.add_argument('--tick', type=int, help='Start tick (default: live pool tick)')
        start.add_argument('--price', type=float, help='Start price in --format (default: live pool price)')

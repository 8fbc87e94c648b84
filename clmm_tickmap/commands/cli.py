"""CLI for analysing CLMM tick arrays.

Offline commands work from pool parameters given on the command line.
The ``rpc`` group reads live pool accounts over Solana JSON-RPC.

Usage examples:
  clmm-tickmap tick-to-price --tick -18000 --decimals0 9 --decimals1 6
  clmm-tickmap price-to-tick --decimals0 9 --decimals1 6 --format t1-per-t0-human --price 150.25
  clmm-tickmap swap-arrays-offline --tick-spacing 10 --tick 0 --direction buy-t0 \\
      --favorable-pct 1 --impact-pct 2
  clmm-tickmap rpc full-analysis --pool-id <POOL> --format t1-per-t0
"""

import argparse
import json
import sys

from dotenv import load_dotenv

from clmm_tickmap.commands import reports
from clmm_tickmap.commands.rpc_commands import DIRECTIONS, register_rpc_commands
from clmm_tickmap.config.logging_config import get_cli_logger
from clmm_tickmap.helpers.array_indexer import ArrayIndexer
from clmm_tickmap.helpers.bitmap_codec import BitmapCodec, ExtensionBitmap
from clmm_tickmap.helpers.errors import TickMapError
from clmm_tickmap.helpers.pool_params import PoolParams, select_start_tick
from clmm_tickmap.helpers.price_converter import PriceConverter, PriceFormat, PriceQuotation
from clmm_tickmap.helpers.range_scan import arrays_in_tick_range
from clmm_tickmap.helpers.swap_ranges import SwapRangeResolver
from clmm_tickmap.onchain.addresses import tick_array_address

# Load environment variables from .env if present so commands work out of the box.
load_dotenv()


def _price_format(value):
    """argparse type for the four quotation conventions."""
    try:
        return PriceFormat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid format '{value}' (choose from {', '.join(f.value for f in PriceFormat)})"
        )


def _quotation(args):
    """PriceQuotation from --price/--format, or None when no price was given."""
    if args.price is None:
        return None
    return PriceQuotation(args.format, args.price)


def add_decimals_args(parser):
    parser.add_argument('--decimals0', type=int, required=True, help='Decimals of token 0')
    parser.add_argument('--decimals1', type=int, required=True, help='Decimals of token 1')


def add_format_arg(parser, default=PriceFormat.TOKEN1_PER_TOKEN0_HUMAN):
    parser.add_argument('--format', type=_price_format, default=default,
                        help=f'Price format (default: {default.value})')


# --------------------------------------------------------------------------- #
# offline commands                                                            #
# --------------------------------------------------------------------------- #


def tick_to_price(args):
    """Print every price representation of a tick."""
    converter = PriceConverter(args.decimals0, args.decimals1)
    print(reports.price_table(converter, args.tick))


def price_to_tick(args):
    """Convert a price in any format to its tick."""
    converter = PriceConverter(args.decimals0, args.decimals1)
    quotation = PriceQuotation(args.format, args.price)
    tick = converter.to_tick(quotation)
    print("--- Price to Tick Conversion ---")
    print(f"Input Price: {args.price} ({args.format.value})")
    print(f"Resulting Tick Index: {tick}")


def array_info(args):
    """Show the tick range and slot mapping of an array."""
    print(reports.array_info(ArrayIndexer(args.tick_spacing), args.start_index))


def tick_info(args):
    """Show which array and slot own a tick."""
    print(reports.tick_info(ArrayIndexer(args.tick_spacing), args.tick))


def array_to_price_range(args):
    """Show the prices at both ends of an array."""
    converter = PriceConverter(args.decimals0, args.decimals1)
    print(reports.array_price_range(converter, ArrayIndexer(args.tick_spacing), args.start_index))


def price_range_to_arrays(args):
    """List every array a price range crosses, in travel order."""
    converter = PriceConverter(args.decimals0, args.decimals1)
    indexer = ArrayIndexer(args.tick_spacing)
    tick_lower = converter.to_tick(PriceQuotation(args.format, args.price_lower))
    tick_upper = converter.to_tick(PriceQuotation(args.format, args.price_upper))
    starts = arrays_in_tick_range(indexer, tick_lower, tick_upper)

    print(f"--- Arrays Crossed by Price Range [{args.price_lower:.6f}, {args.price_upper:.6f}] "
          f"(Format: {args.format.value}) ---")
    print(f"  - Corresponding Tick Range: [{tick_lower}, {tick_upper}]")
    print(reports.arrays_table(converter, indexer, starts, args.format))


def derive_address(args):
    """Derive the tick-array PDA for a tick or a price."""
    converter = PriceConverter(args.decimals0, args.decimals1)
    indexer = ArrayIndexer(args.tick_spacing)
    tick = select_start_tick(converter, tick=args.tick, quotation=_quotation(args))
    start = indexer.array_start(tick)
    address = tick_array_address(args.pool_id, start)

    print("--- Tick Array PDA Derivation ---")
    print(f"  - Input Tick Index: {tick}")
    print(f"  - Tick Spacing: {args.tick_spacing}")
    print(f"  - This tick belongs to the array that *starts* at index: {start}")
    print(f"  - Pool ID: {args.pool_id}")
    print(f"  - Derived PDA: {address}")


def decode_bitmap(args):
    """Decode bitmap words given as JSON into populated array starts."""
    codec = BitmapCodec(args.tick_spacing)
    default_words = [int(w) for w in json.loads(args.default)]
    extension = None
    if args.extension:
        with open(args.extension, encoding="utf-8") as f:
            data = json.load(f)
        extension = ExtensionBitmap(data["positive"], data["negative"])
    starts = codec.decode_all(default_words, extension)

    if args.json:
        print(json.dumps(starts))
        return
    print(f"Found {len(starts)} initialized arrays:")
    for start in starts:
        print(f"  - Start Index: {start}")


def swap_arrays_offline(args):
    """Blind swap-array resolution from explicit pool parameters."""
    params = PoolParams(args.decimals0, args.decimals1, args.tick_spacing, args.current_tick)
    start = select_start_tick(params.converter(), tick=args.tick, quotation=_quotation(args),
                              default=params.current_tick)
    plan = SwapRangeResolver(params).resolve(
        DIRECTIONS[args.direction], args.favorable_pct, args.impact_pct, start_tick=start,
    )
    if args.json:
        print(json.dumps([{"start_tick": a.start_tick, "role": a.role.value} for a in plan.ordered()]))
        return
    print(reports.swap_plan(plan, pool=args.pool_id))


def build_parser():
    parser = argparse.ArgumentParser(
        prog='clmm-tickmap',
        description='Tick, price and tick-array analysis for concentrated-liquidity pools'
    )
    parser.add_argument('--debug', action='store_true', help='Verbose logging')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Tick to price
    p = subparsers.add_parser('tick-to-price', help='Convert a tick index to all price formats')
    p.add_argument('--tick', type=int, required=True, help='Tick index')
    add_decimals_args(p)
    p.set_defaults(func=tick_to_price)

    # Price to tick
    p = subparsers.add_parser('price-to-tick', help='Convert a price to a tick index (rounds down)')
    add_decimals_args(p)
    add_format_arg(p)
    p.add_argument('--price', type=float, required=True, help='Price in the chosen format')
    p.set_defaults(func=price_to_tick)

    # Array info
    p = subparsers.add_parser('array-info', help='Show the tick range and slots of a tick array')
    p.add_argument('--start-index', type=int, required=True, help='Array start index')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    p.set_defaults(func=array_info)

    # Tick info
    p = subparsers.add_parser('tick-info', help='Find the array and slot of a tick')
    p.add_argument('--tick', type=int, required=True, help='Tick index')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    p.set_defaults(func=tick_info)

    # Array to price range
    p = subparsers.add_parser('array-to-price-range', help='Price range covered by a tick array')
    p.add_argument('--start-index', type=int, required=True, help='Array start index')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    add_decimals_args(p)
    p.set_defaults(func=array_to_price_range)

    # Price range to arrays
    p = subparsers.add_parser('price-range-to-arrays', help='Tick arrays crossed by a price range')
    p.add_argument('--price-lower', type=float, required=True, help='First price of the range')
    p.add_argument('--price-upper', type=float, required=True, help='Second price of the range')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    add_decimals_args(p)
    add_format_arg(p)
    p.set_defaults(func=price_range_to_arrays)

    # Derive address
    p = subparsers.add_parser('derive-address', help='Derive a tick-array PDA from a tick or price')
    p.add_argument('--pool-id', required=True, help='Pool account address')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    add_decimals_args(p)
    p.add_argument('--tick', type=int, help='Tick index (exclusive with --price)')
    p.add_argument('--price', type=float, help='Price (exclusive with --tick)')
    add_format_arg(p)
    p.set_defaults(func=derive_address)

    # Decode bitmap
    p = subparsers.add_parser('decode-bitmap', help='Decode bitmap words into populated arrays')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    p.add_argument('--default', required=True, help='JSON list of the 16 default bitmap words')
    p.add_argument('--extension', help='JSON file with "positive" and "negative" chunk lists')
    p.add_argument('--json', action='store_true', help='Print the start indices as JSON')
    p.set_defaults(func=decode_bitmap)

    # Offline swap arrays
    p = subparsers.add_parser('swap-arrays-offline',
                              help='Swap arrays from explicit pool parameters (assumes all arrays exist)')
    p.add_argument('--tick-spacing', type=int, required=True, help='Pool tick spacing')
    p.add_argument('--decimals0', type=int, default=0, help='Decimals of token 0 (only used with --price)')
    p.add_argument('--decimals1', type=int, default=0, help='Decimals of token 1 (only used with --price)')
    p.add_argument('--current-tick', type=int, default=0, help='Pool tick used when no start is given')
    p.add_argument('--direction', choices=sorted(DIRECTIONS), required=True, help='Swap direction')
    p.add_argument('--favorable-pct', type=float, required=True, help='Max %% move in your favor')
    p.add_argument('--impact-pct', type=float, required=True, help='Max %% move against you')
    p.add_argument('--tick', type=int, help='Start tick (exclusive with --price)')
    p.add_argument('--price', type=float, help='Start price (exclusive with --tick)')
    add_format_arg(p)
    p.add_argument('--pool-id', help='Pool address; adds tick-array PDAs to the output')
    p.add_argument('--json', action='store_true', help='Print the arrays as JSON')
    p.set_defaults(func=swap_arrays_offline)

    register_rpc_commands(subparsers)
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    logger = get_cli_logger(debug=args.debug)

    # Execute command
    try:
        args.func(args)
    except (TickMapError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.debug)
        sys.exit(1)


if __name__ == '__main__':
    main()

"""Text reports shared by the CLI commands.

Every function returns the rendered text; the command handlers print it.
"""

from typing import Optional, Sequence

from tabulate import tabulate

from clmm_tickmap.helpers.array_indexer import ArrayIndexer
from clmm_tickmap.helpers.liquidity import LiquiditySegment, bar_width, format_liquidity
from clmm_tickmap.helpers.price_converter import PriceConverter, PriceFormat
from clmm_tickmap.helpers.range_scan import InitializedRange
from clmm_tickmap.helpers.swap_ranges import SwapRangePlan
from clmm_tickmap.onchain.addresses import tick_array_address

FORMAT_LABELS = {
    PriceFormat.TOKEN1_PER_TOKEN0_RAW: "Token1/Token0 (Raw)",
    PriceFormat.TOKEN0_PER_TOKEN1_RAW: "Token0/Token1 (Raw)",
    PriceFormat.TOKEN1_PER_TOKEN0_HUMAN: "Token1/Token0 (Human)",
    PriceFormat.TOKEN0_PER_TOKEN1_HUMAN: "Token0/Token1 (Human)",
}

RULE = "-" * 80


def _price_span(converter: PriceConverter, indexer: ArrayIndexer, start: int, fmt: PriceFormat) -> str:
    tick_start, tick_end = indexer.array_range(start)
    return f"[{converter.to_quotation(tick_start, fmt):.8f}, {converter.to_quotation(tick_end, fmt):.8f}]"


def price_table(converter: PriceConverter, tick: int) -> str:
    """All price representations of a tick plus its sqrt_price_x64."""
    rows = [[FORMAT_LABELS[fmt], f"{price:.12f}"] for fmt, price in converter.quotations(tick).items()]
    rows.append(["SqrtPriceX64", converter.sqrt_price_fixed_point(tick)])
    return f"--- Price Representations for Tick Index {tick} ---\n" + tabulate(
        rows, headers=["Format", "Price"], tablefmt="grid", disable_numparse=True
    )


def tick_info(indexer: ArrayIndexer, tick: int) -> str:
    """Which array and slot own a tick."""
    aligned = indexer.align_to_spacing(tick)
    lines = [f"--- Info for Tick Index {tick} ---"]
    if aligned != tick:
        lines.append(f"  - Note: This tick is not a valid boundary. The nearest valid tick is {aligned}.")
    lines.append(f"  - Belongs to Tick Array starting at index: {indexer.array_start(aligned)}")
    lines.append(f"  - Located at Slot (offset) {indexer.slot_offset(aligned)} within that array.")
    lines.append("  - Note: A 'Slot' is the storage position (0-59). A 'Tick Index' is the absolute price level.")
    return "\n".join(lines)


def array_info(indexer: ArrayIndexer, start: int) -> str:
    """Tick range and slot mapping of one array."""
    tick_start, tick_end = indexer.array_range(start)
    header = (
        f"--- Info for Tick Array starting at {start} ---\n"
        f"  - Tick Spacing: {indexer.tick_spacing}\n"
        f"  - Covers Tick Index Range: [{tick_start}, {tick_end}]\n"
    )
    return header + tabulate(indexer.slot_ticks(start), headers=["Slot", "Tick"], tablefmt="grid")


def array_price_range(converter: PriceConverter, indexer: ArrayIndexer, start: int) -> str:
    tick_start, tick_end = indexer.array_range(start)
    return "\n\n".join([
        f"--- Price Range for Tick Array {start} ---",
        f"Start of Range (Tick {tick_start}):\n{price_table(converter, tick_start)}",
        f"End of Range (Tick {tick_end}):\n{price_table(converter, tick_end)}",
    ])


def arrays_table(
    converter: PriceConverter,
    indexer: ArrayIndexer,
    starts: Sequence[int],
    fmt: PriceFormat,
) -> str:
    rows = []
    for start in starts:
        tick_start, tick_end = indexer.array_range(start)
        rows.append([start, f"[{tick_start}, {tick_end}]", _price_span(converter, indexer, start, fmt)])
    return tabulate(rows, headers=["Array Start", "Tick Range", "Price Range"], tablefmt="grid")


def populated_arrays(
    converter: PriceConverter,
    indexer: ArrayIndexer,
    starts: Sequence[int],
    title: str,
) -> str:
    """Populated arrays with their human price ranges in both directions."""
    rows = [
        [
            start,
            _price_span(converter, indexer, start, PriceFormat.TOKEN0_PER_TOKEN1_HUMAN),
            _price_span(converter, indexer, start, PriceFormat.TOKEN1_PER_TOKEN0_HUMAN),
        ]
        for start in starts
    ]
    return f"--- {title} ---\nFound {len(starts)} initialized arrays:\n" + tabulate(
        rows, headers=["Start Index", "T0/T1 Price Range", "T1/T0 Price Range"], tablefmt="grid"
    )


def swap_plan(plan: SwapRangePlan, pool: Optional[str] = None) -> str:
    """Ordered swap arrays, with their addresses when the pool is known."""
    min_tick, max_tick = plan.span
    mode = "STRICT" if plan.strict else "BLIND"
    lines = [
        f"Start Tick:    {plan.start_tick}",
        f"Direction:     {plan.direction.value}",
        f"Calculated Tick Range:  [{min_tick}, {max_tick}]",
        f"Core Range:      [{plan.core_range[0]}, {plan.core_range[1]}]",
        f"Favorable Range: [{plan.favorable_range[0]}, {plan.favorable_range[1]}]",
        "",
        f"--- REQUIRED SWAP ARRAYS ({mode}): {len(plan.ordered())} ---",
    ]
    headers = ["Role", "Array Start", "Tick Range"]
    if pool is not None:
        headers.append("PDA")
    rows = []
    for entry in plan.ordered():
        row = [entry.role.value.upper(), entry.start_tick, f"[{entry.start_tick}, {entry.end_tick}]"]
        if pool is not None:
            row.append(str(tick_array_address(pool, entry.start_tick)))
        rows.append(row)
    lines.append(tabulate(rows, headers=headers, tablefmt="grid"))
    if plan.surrounding is None:
        lines.append("[WARNING] No initialized surrounding array found for the impact direction.")
    return "\n".join(lines)


def full_analysis(
    converter: PriceConverter,
    indexer: ArrayIndexer,
    populated: Sequence[int],
    current_tick: int,
    fmt: PriceFormat,
) -> str:
    """Populated arrays in tick order with the current tick slotted in."""
    here = [f"Tick {current_tick}", f"Price: {converter.to_quotation(current_tick, fmt):.6f}  <-- YOU ARE HERE"]
    rows = []
    placed = False
    for start in populated:
        if not placed and start > current_tick:
            rows.append(here)
            placed = True
        rows.append([start, _price_span(converter, indexer, start, fmt)])
    if not placed:
        rows.append(here)
    return (
        f"Current Tick: {current_tick}\n"
        + tabulate(rows, headers=["Array Start/Tick", "Price / Price Range"], tablefmt="grid")
        + f"\n\nPrice format is: {FORMAT_LABELS[fmt]}"
    )


def liquidity_curve(
    segments: Sequence[LiquiditySegment],
    converter: PriceConverter,
    fmt: PriceFormat,
    max_liquidity: int,
    max_width: int = 50,
    current_tick: Optional[int] = None,
    indexer: Optional[ArrayIndexer] = None,
) -> str:
    """Bar chart of active liquidity; array boundaries are marked when an indexer is given."""
    if not segments:
        return "No active liquidity found in this pool."
    lines = ["--- Exact Liquidity Distribution ---"]
    rows = []
    array_start = None
    for segment in segments:
        if indexer is not None and indexer.array_start(segment.tick_lower) != array_start:
            array_start = indexer.array_start(segment.tick_lower)
            rows.append([f"--- Array Start: {array_start} ---", "", ""])
        low = converter.to_quotation(segment.tick_lower, fmt)
        high = converter.to_quotation(segment.tick_upper, fmt)
        low, high = min(low, high), max(low, high)
        bar = "█" * bar_width(segment.liquidity, max_liquidity, max_width)
        if segment.is_current and current_tick is not None:
            bar += f"  [CURRENT PRICE: {converter.to_quotation(current_tick, fmt):.6f}]"
        rows.append([f"[{low:.6f} - {high:.6f}]", format_liquidity(segment.liquidity), bar])
    lines.append(tabulate(rows, headers=["Price Range", "Liquidity", "Distribution"], tablefmt="simple"))
    return "\n".join(lines)


def tick_array_details(tick_array, converter: PriceConverter, indexer: ArrayIndexer) -> str:
    """Price range and initialized ticks of a decoded tick array."""
    start = tick_array.start_tick_index
    tick_start, tick_end = indexer.array_range(start)
    lines = [
        f"--- Tick Array Details (Start Index: {start}) ---",
        f"Price Range for this Array (Tick {tick_start} to {tick_end}):",
        f"  - T0/T1 (Token0/Token1): {_price_span(converter, indexer, start, PriceFormat.TOKEN0_PER_TOKEN1_HUMAN)}",
        f"  - T1/T0 (Token1/Token0): {_price_span(converter, indexer, start, PriceFormat.TOKEN1_PER_TOKEN0_HUMAN)}",
        f"  - Initialized Ticks: {tick_array.initialized_tick_count}",
    ]
    rows = [
        [state.tick, state.liquidity_net, state.liquidity_gross]
        for state in tick_array.ticks
        if state.liquidity_gross != 0
    ]
    if rows:
        lines.append(tabulate(rows, headers=["Tick", "LiquidityNet", "LiquidityGross"], tablefmt="grid"))
    return "\n".join(lines)


def tick_array_slots(tick_array, tick_spacing: int, address: str) -> str:
    """Slot-by-slot view of a tick array, initialized slots highlighted."""
    start = tick_array.start_tick_index
    lines = [
        f"--- Visual Inspection of Tick Array (Start Index: {start}) ---",
        f"PDA Address: {address}",
        f"{tick_array.initialized_tick_count} initialized ticks found.",
        RULE,
    ]
    for slot, state in enumerate(tick_array.ticks):
        tick = start + slot * tick_spacing
        if state.liquidity_gross != 0:
            lines.append(f"┌─ SLOT {slot:<2} " + "─" * 66 + "┐")
            lines.append(f"│  Tick Index: {tick}")
            lines.append(f"│  Liquidity Net:   {state.liquidity_net}")
            lines.append(f"│  Liquidity Gross: {state.liquidity_gross}")
            lines.append("└" + "─" * 76 + "┘")
        else:
            lines.append(f"- Slot {slot:<2} (Tick {tick}) is empty.")
    lines.append(RULE)
    return "\n".join(lines)


def initialized_range(result: InitializedRange) -> str:
    """Summary of populated arrays in a span and their neighbours."""
    def _fmt(start):
        return "none" if start is None else str(start)

    rows = [
        ["Lower surrounding", _fmt(result.lower_surrounding)],
        [f"In range ({len(result.in_range)})", ", ".join(str(s) for s in result.in_range) or "none"],
        ["Upper surrounding", _fmt(result.upper_surrounding)],
    ]
    return f"Tick Range [{result.min_tick}, {result.max_tick}]\n" + tabulate(rows, tablefmt="grid")

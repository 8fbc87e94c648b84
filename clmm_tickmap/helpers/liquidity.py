"""
Liquidity curve from initialized tick boundaries.

Active liquidity between two consecutive initialized ticks is the running
sum of ``liquidity_net`` for every boundary at or below the lower one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

__all__ = [
    "TickDelta",
    "LiquiditySegment",
    "collect_tick_deltas",
    "liquidity_segments",
    "max_cumulative_liquidity",
    "bar_width",
    "format_liquidity",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickDelta:
    tick: int
    liquidity_net: int


@dataclass(frozen=True)
class LiquiditySegment:
    """Constant-liquidity stretch of ticks, both bounds inclusive"""
    tick_lower: int
    tick_upper: int
    liquidity: int
    is_current: bool = False


def collect_tick_deltas(tick_arrays: Iterable) -> list[TickDelta]:
    """
    TickDeltas for every initialized slot of decoded tick arrays.

    A slot counts as initialized when its liquidity_gross is non-zero.
    """
    deltas = []
    for tick_array in tick_arrays:
        for state in tick_array.ticks:
            if state.liquidity_gross != 0:
                deltas.append(TickDelta(state.tick, state.liquidity_net))
    return sorted(deltas, key=lambda d: d.tick)


def liquidity_segments(
    deltas: Iterable[TickDelta],
    current_tick: Optional[int] = None,
) -> list[LiquiditySegment]:
    """Segments with positive active liquidity, in ascending tick order."""
    ordered = sorted(deltas, key=lambda d: d.tick)
    if len(ordered) < 2:
        logger.warning(f"Need at least two initialized ticks for a curve, got {len(ordered)}")

    segments = []
    cumulative = 0
    last_tick = None
    for delta in ordered:
        if last_tick is not None and cumulative > 0 and delta.tick > last_tick:
            is_current = current_tick is not None and last_tick <= current_tick < delta.tick
            segments.append(LiquiditySegment(last_tick, delta.tick - 1, cumulative, is_current))
        cumulative += delta.liquidity_net
        last_tick = delta.tick
    if cumulative != 0:
        logger.warning(f"Liquidity does not net to zero across the curve ({cumulative})")
    return segments


def max_cumulative_liquidity(deltas: Iterable[TickDelta]) -> int:
    """Largest running liquidity sum, used to scale curve bars."""
    cumulative = 0
    peak = 0
    for delta in sorted(deltas, key=lambda d: d.tick):
        cumulative += delta.liquidity_net
        peak = max(peak, cumulative)
    return peak


def bar_width(liquidity: int, max_liquidity: int, max_width: int) -> int:
    """Bar length for ``liquidity`` scaled against ``max_liquidity``; never below 1."""
    if max_liquidity <= 0:
        return 0
    return max(1, int(liquidity / max_liquidity * max_width))


def format_liquidity(value: int | float) -> str:
    """Compact liquidity figure: 1.50K, 2.00M, 3.25B, 4.00T."""
    magnitude = abs(value)
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return f"{value:.0f}"

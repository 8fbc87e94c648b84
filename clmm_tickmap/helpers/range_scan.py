"""
Queries over populated tick arrays within a tick span.

Populated start indices are expected in ascending order, as returned by
BitmapCodec.decode_all.
"""
from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Optional, Sequence

from clmm_tickmap.helpers.array_indexer import ArrayIndexer

__all__ = [
    "InitializedRange",
    "arrays_in_tick_range",
    "populated_in_range",
    "nearest_populated_below",
    "nearest_populated_above",
    "initialized_in_range",
    "percent_price_bounds",
]


@dataclass
class InitializedRange:
    """Populated arrays inside a span plus the nearest one on each side"""
    min_tick: int
    max_tick: int
    in_range: list[int] = field(default_factory=list)
    lower_surrounding: Optional[int] = None
    upper_surrounding: Optional[int] = None


def arrays_in_tick_range(indexer: ArrayIndexer, from_tick: int, to_tick: int) -> list[int]:
    """Array starts crossed moving from ``from_tick`` to ``to_tick``, in travel order."""
    starts = indexer.arrays_between(from_tick, to_tick)
    if from_tick > to_tick:
        starts.reverse()
    return starts


def populated_in_range(
    indexer: ArrayIndexer,
    populated: Sequence[int],
    min_tick: int,
    max_tick: int,
) -> list[int]:
    """Populated arrays whose window overlaps [min_tick, max_tick]."""
    return [s for s in populated if indexer.tick_array(s).intersects(min_tick, max_tick)]


def nearest_populated_below(indexer: ArrayIndexer, populated: Sequence[int], tick: int) -> Optional[int]:
    """Highest populated array that ends strictly below ``tick``."""
    # end < tick  <=>  start <= tick - ticks_per_array
    index = bisect.bisect_right(populated, tick - indexer.ticks_per_array())
    return populated[index - 1] if index else None


def nearest_populated_above(populated: Sequence[int], tick: int) -> Optional[int]:
    """Lowest populated array that starts strictly above ``tick``."""
    index = bisect.bisect_right(populated, tick)
    return populated[index] if index < len(populated) else None


def initialized_in_range(
    indexer: ArrayIndexer,
    populated: Sequence[int],
    min_tick: int,
    max_tick: int,
) -> InitializedRange:
    """Populated arrays overlapping the span and the nearest populated neighbours outside it."""
    lower, upper = min(min_tick, max_tick), max(min_tick, max_tick)
    return InitializedRange(
        min_tick=lower,
        max_tick=upper,
        in_range=populated_in_range(indexer, populated, lower, upper),
        lower_surrounding=nearest_populated_below(indexer, populated, lower),
        upper_surrounding=nearest_populated_above(populated, upper),
    )


def percent_price_bounds(price: float, lower_pct: float, upper_pct: float) -> tuple[float, float]:
    """Prices ``lower_pct`` below and ``upper_pct`` above ``price``."""
    if lower_pct < 0 or upper_pct < 0:
        raise ValueError("Percentages must be non-negative")
    return price * (1 - lower_pct / 100), price * (1 + upper_pct / 100)

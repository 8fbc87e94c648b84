"""
Swap range resolution: which tick arrays a swap has to touch.

Public API
----------
SwapDirection
    BUY_TOKEN1 pushes the price down (token0 in, token1 out);
    BUY_TOKEN0 pushes it up.
SwapRangeResolver(params).resolve(direction, favorable_pct, impact_pct, ...)
    Returns a SwapRangePlan with every candidate array classified as
    FAVORABLE or CORE, ordered in the direction the swap walks, plus one
    SURROUNDING array beyond the span.

Without a populated set the resolver runs *blind* and assumes every array
exists. With one it runs *strict*: only populated arrays are returned and
the surrounding array is the nearest populated one outside the span.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from clmm_tickmap.helpers.errors import InvalidTolerance, NoSurroundingArrayFound
from clmm_tickmap.helpers.pool_params import PoolParams
from clmm_tickmap.helpers.range_scan import nearest_populated_above, nearest_populated_below

__all__ = ["SwapDirection", "ArrayRole", "SwapArray", "SwapRangePlan", "SwapRangeResolver"]

logger = logging.getLogger(__name__)


class SwapDirection(Enum):
    BUY_TOKEN1 = "buy-token1"
    BUY_TOKEN0 = "buy-token0"


class ArrayRole(Enum):
    FAVORABLE = "Favorable"
    CORE = "Core"
    SURROUNDING = "Surrounding"


@dataclass(frozen=True)
class SwapArray:
    start_tick: int
    end_tick: int
    role: ArrayRole


@dataclass
class SwapRangePlan:
    """Classified tick arrays for one planned swap"""
    direction: SwapDirection
    start_tick: int
    tick_favorable: int
    tick_impact: int
    core_range: tuple[int, int]
    favorable_range: tuple[int, int]
    strict: bool
    arrays: list[SwapArray] = field(default_factory=list)
    surrounding: Optional[SwapArray] = None

    @property
    def span(self) -> tuple[int, int]:
        return min(self.tick_favorable, self.tick_impact), max(self.tick_favorable, self.tick_impact)

    def arrays_with_role(self, role: ArrayRole) -> list[SwapArray]:
        return [a for a in self.arrays if a.role is role]

    def ordered(self) -> list[SwapArray]:
        """Arrays in walk order with the surrounding array (if any) last."""
        if self.surrounding is None:
            return list(self.arrays)
        return [*self.arrays, self.surrounding]

    def start_ticks(self) -> list[int]:
        return [a.start_tick for a in self.ordered()]

    def require_surrounding(self) -> SwapArray:
        """
        The surrounding array.

        Raises:
            NoSurroundingArrayFound: Strict mode found no populated array beyond the span
        """
        if self.surrounding is None:
            raise NoSurroundingArrayFound(self.direction, *self.span)
        return self.surrounding


class SwapRangeResolver:
    """Resolves the tick arrays a swap crosses for one pool."""

    def __init__(self, params: PoolParams):
        self.params = params
        self.converter = params.converter()
        self.indexer = params.indexer()

    def target_ticks(
        self,
        start_tick: int,
        direction: SwapDirection,
        favorable_pct: float,
        impact_pct: float,
    ) -> tuple[int, int]:
        """
        (tick_favorable, tick_impact) for the tolerances around ``start_tick``.

        Raises:
            InvalidTolerance: If a percentage is negative
            InvalidPriceDomain: If the impact price reaches zero (>= 100% on BUY_TOKEN1)
        """
        if favorable_pct < 0 or impact_pct < 0:
            raise InvalidTolerance(
                f"Percentages must be non-negative (favorable={favorable_pct}, impact={impact_pct})"
            )
        start_raw = self.converter.tick_to_raw_price(start_tick)
        if direction is SwapDirection.BUY_TOKEN1:
            favorable_raw = start_raw * (1 + favorable_pct / 100)
            impact_raw = start_raw * (1 - impact_pct / 100)
        else:
            favorable_raw = start_raw * (1 - favorable_pct / 100)
            impact_raw = start_raw * (1 + impact_pct / 100)
        return (
            self.converter.raw_price_to_tick(favorable_raw),
            self.converter.raw_price_to_tick(impact_raw),
        )

    def resolve(
        self,
        direction: SwapDirection,
        favorable_pct: float,
        impact_pct: float,
        start_tick: Optional[int] = None,
        populated: Optional[Iterable[int]] = None,
        require_surrounding: bool = False,
    ) -> SwapRangePlan:
        """
        Classify and order the tick arrays a swap would touch.

        Args:
            direction: Which token the swap buys
            favorable_pct: Tolerance in the favorable direction (%)
            impact_pct: Expected price impact (%)
            start_tick: Tick to start from (defaults to the pool's current tick)
            populated: Populated start indices; None runs blind
            require_surrounding: Raise instead of returning a plan without one

        Returns:
            SwapRangePlan

        Raises:
            NoSurroundingArrayFound: Strict mode, require_surrounding, and nothing beyond the span
        """
        if start_tick is None:
            start_tick = self.params.current_tick
        strict = populated is not None
        populated_starts = sorted(set(populated)) if strict else []

        tick_favorable, tick_impact = self.target_ticks(start_tick, direction, favorable_pct, impact_pct)
        core_range = (min(start_tick, tick_impact), max(start_tick, tick_impact))
        favorable_range = (min(start_tick, tick_favorable), max(start_tick, tick_favorable))
        logger.debug(
            f"{direction.value} from tick {start_tick}: favorable {tick_favorable}, "
            f"impact {tick_impact}, strict={strict}"
        )

        plan = SwapRangePlan(
            direction=direction,
            start_tick=start_tick,
            tick_favorable=tick_favorable,
            tick_impact=tick_impact,
            core_range=core_range,
            favorable_range=favorable_range,
            strict=strict,
        )

        populated_lookup = set(populated_starts)
        core: list[SwapArray] = []
        favorable: list[SwapArray] = []
        for start in self.indexer.arrays_between(tick_favorable, tick_impact):
            window = self.indexer.tick_array(start)
            if window.intersects(*core_range):
                role = ArrayRole.CORE
            elif window.intersects(*favorable_range):
                role = ArrayRole.FAVORABLE
            else:
                continue
            if strict and start not in populated_lookup:
                continue
            entry = SwapArray(window.start_tick, window.end_tick, role)
            (core if role is ArrayRole.CORE else favorable).append(entry)

        descending = direction is SwapDirection.BUY_TOKEN1
        favorable.sort(key=lambda a: a.start_tick, reverse=descending)
        core.sort(key=lambda a: a.start_tick, reverse=descending)
        plan.arrays = favorable + core

        surrounding_start = self._surrounding_start(plan, populated_starts)
        if surrounding_start is not None:
            plan.surrounding = SwapArray(
                *self.indexer.array_range(surrounding_start), ArrayRole.SURROUNDING
            )
        else:
            logger.warning(
                f"No initialized surrounding tick array beyond [{plan.span[0]}, {plan.span[1]}]"
            )
            if require_surrounding:
                plan.require_surrounding()
        return plan

    def _surrounding_start(self, plan: SwapRangePlan, populated: list[int]) -> Optional[int]:
        min_tick, max_tick = plan.span
        below = plan.direction is SwapDirection.BUY_TOKEN1
        if not plan.strict:
            width = self.indexer.ticks_per_array()
            if below:
                return self.indexer.array_start(min_tick) - width
            return self.indexer.array_start(max_tick) + width
        if below:
            return nearest_populated_below(self.indexer, populated, min_tick)
        return nearest_populated_above(populated, max_tick)

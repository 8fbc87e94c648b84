"""
Tests for swap range resolution.

Tests cover:
- Favorable/impact tick targets per direction
- Core vs favorable classification and walk order
- Blind and strict surrounding arrays
- Start tick selection and tolerance validation
"""

import pytest

from clmm_tickmap.helpers.errors import (
    AmbiguousInput,
    InvalidPriceDomain,
    InvalidTickSpacing,
    InvalidTolerance,
    NoSurroundingArrayFound,
)
from clmm_tickmap.helpers.pool_params import PoolParams, select_start_tick
from clmm_tickmap.helpers.price_converter import PriceFormat, PriceQuotation
from clmm_tickmap.helpers.swap_ranges import ArrayRole, SwapDirection, SwapRangeResolver


def _roles(plan):
    return [(a.start_tick, a.role) for a in plan.ordered()]


@pytest.fixture
def resolver(params):
    return SwapRangeResolver(params)


class TestTargetTicks:
    """Tests for the price targets of a swap."""

    def test_buy_token0_targets(self, resolver):
        """Buying token0 moves the price up; favorable is below the start."""
        assert resolver.target_ticks(0, SwapDirection.BUY_TOKEN0, 1, 2) == (-101, 198)

    def test_buy_token1_targets(self, resolver):
        """Buying token1 moves the price down; favorable is above the start."""
        assert resolver.target_ticks(0, SwapDirection.BUY_TOKEN1, 1, 2) == (99, -203)

    def test_zero_tolerances_stay_on_start(self, resolver):
        assert resolver.target_ticks(1234, SwapDirection.BUY_TOKEN0, 0, 0) == (1234, 1234)

    def test_negative_tolerance_rejected(self, resolver):
        with pytest.raises(InvalidTolerance):
            resolver.target_ticks(0, SwapDirection.BUY_TOKEN0, -1, 2)
        with pytest.raises(InvalidTolerance):
            resolver.resolve(SwapDirection.BUY_TOKEN1, 1, -0.5, start_tick=0)

    def test_full_impact_on_buy_token1_has_no_tick(self, resolver):
        """A 100% drop is a zero price."""
        with pytest.raises(InvalidPriceDomain):
            resolver.resolve(SwapDirection.BUY_TOKEN1, 1, 100, start_tick=0)


class TestBlindResolution:
    """Tests for resolution without a populated set."""

    def test_buy_token0_from_zero(self, resolver):
        """Favorable array below, core at the start, surrounding above the impact."""
        plan = resolver.resolve(SwapDirection.BUY_TOKEN0, 1, 2, start_tick=0)

        assert not plan.strict
        assert plan.tick_favorable == -101
        assert plan.tick_impact == 198
        assert plan.core_range == (0, 198)
        assert plan.favorable_range == (-101, 0)
        assert _roles(plan) == [
            (-600, ArrayRole.FAVORABLE),
            (0, ArrayRole.CORE),
            (600, ArrayRole.SURROUNDING),
        ]

    def test_buy_token1_walks_down(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN1, 1, 2, start_tick=590)

        assert (plan.tick_favorable, plan.tick_impact) == (689, 387)
        assert _roles(plan) == [
            (600, ArrayRole.FAVORABLE),
            (0, ArrayRole.CORE),
            (-600, ArrayRole.SURROUNDING),
        ]

    def test_core_wins_over_favorable(self, resolver):
        """The start array lies in both ranges and is classified as core."""
        plan = resolver.resolve(SwapDirection.BUY_TOKEN1, 1, 2, start_tick=0)
        assert _roles(plan) == [
            (0, ArrayRole.CORE),
            (-600, ArrayRole.CORE),
            (-1200, ArrayRole.SURROUNDING),
        ]

    @pytest.mark.parametrize("direction", list(SwapDirection))
    def test_walk_order_is_monotonic(self, resolver, direction):
        plan = resolver.resolve(direction, 5, 7, start_tick=-2345)
        starts = plan.start_ticks()
        expected = sorted(starts, reverse=direction is SwapDirection.BUY_TOKEN1)
        assert starts == expected
        assert len(set(starts)) == len(starts)

    def test_surrounding_entry_fields(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN0, 1, 2, start_tick=0)
        surrounding = plan.require_surrounding()
        assert (surrounding.start_tick, surrounding.end_tick) == (600, 1199)
        assert plan.arrays_with_role(ArrayRole.CORE)[0].end_tick == 599

    def test_defaults_to_pool_tick(self):
        params = PoolParams(decimals0=9, decimals1=6, tick_spacing=10, current_tick=590)
        plan = SwapRangeResolver(params).resolve(SwapDirection.BUY_TOKEN1, 1, 2)
        assert plan.start_tick == 590
        assert plan.start_ticks() == [600, 0, -600]

    def test_zero_tolerances(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN0, 0, 0, start_tick=0)
        assert _roles(plan) == [(0, ArrayRole.CORE), (600, ArrayRole.SURROUNDING)]


class TestStrictResolution:
    """Tests for resolution against a populated set."""

    def test_unpopulated_arrays_dropped(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN0, 1, 2, start_tick=0, populated=[1800, 0])
        assert plan.strict
        assert _roles(plan) == [(0, ArrayRole.CORE), (1800, ArrayRole.SURROUNDING)]

    def test_surrounding_is_nearest_below(self, resolver):
        plan = resolver.resolve(
            SwapDirection.BUY_TOKEN1, 1, 2, start_tick=590, populated=[-1800, 0, 600]
        )
        assert _roles(plan) == [
            (600, ArrayRole.FAVORABLE),
            (0, ArrayRole.CORE),
            (-1800, ArrayRole.SURROUNDING),
        ]

    def test_array_ending_inside_span_is_not_surrounding(self, resolver):
        """Array 0 ends at 599, above the impact tick 387, so it is not below the span."""
        plan = resolver.resolve(SwapDirection.BUY_TOKEN1, 1, 2, start_tick=590, populated=[600])
        assert plan.surrounding is None
        assert _roles(plan) == [(600, ArrayRole.FAVORABLE)]

    def test_missing_surrounding_raises_on_demand(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN1, 1, 2, start_tick=590, populated=[0, 600])
        with pytest.raises(NoSurroundingArrayFound) as exc_info:
            plan.require_surrounding()
        assert "below" in str(exc_info.value)

    def test_require_surrounding_flag(self, resolver):
        with pytest.raises(NoSurroundingArrayFound) as exc_info:
            resolver.resolve(
                SwapDirection.BUY_TOKEN0, 1, 2, start_tick=0, populated=[0], require_surrounding=True
            )
        assert exc_info.value.max_tick == 198

    def test_empty_populated_set_is_strict(self, resolver):
        plan = resolver.resolve(SwapDirection.BUY_TOKEN0, 1, 2, start_tick=0, populated=[])
        assert plan.strict
        assert plan.ordered() == []


class TestStartTickSelection:
    """Tests for select_start_tick and PoolParams validation."""

    def test_tick_passes_through(self, converter):
        assert select_start_tick(converter, tick=-42) == -42

    def test_price_is_floored(self, converter):
        quotation = PriceQuotation(PriceFormat.TOKEN1_PER_TOKEN0_RAW, 1.02)
        assert select_start_tick(converter, quotation=quotation) == 198

    def test_default_used_when_nothing_given(self, converter):
        assert select_start_tick(converter, default=77) == 77

    def test_both_given(self, converter):
        quotation = PriceQuotation(PriceFormat.TOKEN1_PER_TOKEN0_RAW, 1.0)
        with pytest.raises(AmbiguousInput):
            select_start_tick(converter, tick=0, quotation=quotation)

    def test_neither_given(self, converter):
        with pytest.raises(AmbiguousInput):
            select_start_tick(converter)

    def test_pool_params_validation(self):
        with pytest.raises(InvalidTickSpacing):
            PoolParams(decimals0=6, decimals1=6, tick_spacing=0)
        with pytest.raises(ValueError):
            PoolParams(decimals0=-1, decimals1=6, tick_spacing=1)

    def test_pool_params_factories(self, params):
        assert params.indexer().ticks_per_array() == 600
        assert params.converter().decimal_adjustment == pytest.approx(1000)
        assert params.codec().indexer.tick_spacing == 10

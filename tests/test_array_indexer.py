"""
Tests for tick-array addressing.
"""

import pytest

from clmm_tickmap.helpers.array_indexer import ArrayIndexer, TickArrayRange, floor_div
from clmm_tickmap.helpers.errors import InvalidTickSpacing


class TestFloorDiv:
    """Tests for the floor division helper."""

    def test_floors_toward_negative_infinity(self):
        assert floor_div(-1, 600) == -1
        assert floor_div(-600, 600) == -1
        assert floor_div(-601, 600) == -2
        assert floor_div(599, 600) == 0

    def test_rejects_non_positive_divisor(self):
        with pytest.raises(ValueError):
            floor_div(5, 0)


class TestArrayStart:
    """Tests for array_start and array_range."""

    def test_ticks_per_array(self, indexer):
        assert indexer.ticks_per_array() == 600

    @pytest.mark.parametrize(
        "tick, start",
        [(0, 0), (599, 0), (600, 600), (-1, -600), (-600, -600), (-601, -1200)],
    )
    def test_array_start(self, indexer, tick, start):
        """Negative ticks belong to the window below zero."""
        assert indexer.array_start(tick) == start

    @pytest.mark.parametrize("tick", [-12345, -601, -1, 0, 1, 42_000])
    def test_array_start_is_idempotent(self, indexer, tick):
        start = indexer.array_start(tick)
        assert indexer.array_start(start) == start

    @pytest.mark.parametrize("tick", [-12345, -601, -1, 0, 1, 42_000])
    def test_tick_lies_inside_its_array(self, indexer, tick):
        start, end = indexer.array_range(indexer.array_start(tick))
        assert start <= tick <= end
        assert end - start + 1 == indexer.ticks_per_array()

    def test_adjacent_arrays_do_not_overlap(self, indexer):
        _, end = indexer.array_range(-600)
        start, _ = indexer.array_range(0)
        assert end + 1 == start

    def test_tick_array_range(self, indexer):
        window = indexer.tick_array(-600)
        assert window == TickArrayRange(-600, -1)
        assert window.contains(-1)
        assert not window.contains(0)
        assert window.intersects(-1, 5)
        assert not window.intersects(0, 5)

    def test_arrays_between(self, indexer):
        """Every array touched by a span, ascending, whatever the argument order."""
        assert indexer.arrays_between(198, -101) == [-600, 0]
        assert indexer.arrays_between(-101, 198) == [-600, 0]
        assert indexer.arrays_between(5, 5) == [0]


class TestSlots:
    """Tests for spacing alignment and slot offsets."""

    @pytest.mark.parametrize("tick, aligned", [(0, 0), (9, 0), (10, 10), (-1, -10), (-10, -10), (-11, -20)])
    def test_align_to_spacing(self, indexer, tick, aligned):
        assert indexer.align_to_spacing(tick) == aligned
        assert aligned <= tick

    @pytest.mark.parametrize("tick", [-601, -1, 0, 9, 595, 599])
    def test_slot_offset_in_range(self, indexer, tick):
        assert 0 <= indexer.slot_offset(tick) <= 59

    def test_slot_offset_values(self, indexer):
        assert indexer.slot_offset(0) == 0
        assert indexer.slot_offset(595) == 59
        assert indexer.slot_offset(-1) == 59
        assert indexer.slot_offset(-600) == 0

    def test_slot_ticks(self, indexer):
        slots = indexer.slot_ticks(-600)
        assert len(slots) == 60
        assert slots[0] == (0, -600)
        assert slots[-1] == (59, -10)

    def test_offset_conversion(self, indexer):
        assert indexer.array_offset(-1200) == -2
        assert indexer.start_from_offset(-2) == -1200
        with pytest.raises(ValueError):
            indexer.array_offset(10)


class TestSpacingValidation:

    @pytest.mark.parametrize("spacing", [0, -1, 70_000])
    def test_invalid_spacing(self, spacing):
        with pytest.raises(InvalidTickSpacing):
            ArrayIndexer(spacing)

    def test_spacing_one(self):
        indexer = ArrayIndexer(1)
        assert indexer.ticks_per_array() == 60
        assert indexer.array_start(-1) == -60

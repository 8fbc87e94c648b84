"""
Tick-array addressing for a given tick spacing.

Each tick array holds TICK_ARRAY_SIZE initializable ticks, so one array
covers ``60 * tick_spacing`` consecutive ticks starting at a multiple of
that width. Array windows partition the tick line; negative ticks belong
to the window below zero, never the one containing zero.
"""
from __future__ import annotations

from dataclasses import dataclass

from clmm_tickmap.config.protocol import TICK_ARRAY_SIZE
from clmm_tickmap.helpers.errors import InvalidTickSpacing

__all__ = ["floor_div", "TickArrayRange", "ArrayIndexer"]


def floor_div(value: int, divisor: int) -> int:
    """Integer division rounding toward negative infinity (-1 // 600 == -1)."""
    if divisor <= 0:
        raise ValueError(f"Divisor must be positive, got {divisor}")
    return value // divisor


@dataclass(frozen=True)
class TickArrayRange:
    """Inclusive tick window owned by one tick array"""
    start_tick: int
    end_tick: int

    def contains(self, tick: int) -> bool:
        return self.start_tick <= tick <= self.end_tick

    def intersects(self, lower: int, upper: int) -> bool:
        """True when the window overlaps the inclusive range [lower, upper]."""
        return self.start_tick <= upper and self.end_tick >= lower


class ArrayIndexer:
    """Maps ticks to tick arrays and slots for one tick spacing."""

    def __init__(self, tick_spacing: int):
        if not 0 < tick_spacing <= 0xFFFF:
            raise InvalidTickSpacing(f"Tick spacing must be in 1..65535, got {tick_spacing}")
        self.tick_spacing = tick_spacing

    def ticks_per_array(self) -> int:
        return TICK_ARRAY_SIZE * self.tick_spacing

    def array_start(self, tick: int) -> int:
        """Start index of the tick array that owns ``tick``."""
        width = self.ticks_per_array()
        return floor_div(tick, width) * width

    def array_range(self, start_tick: int) -> tuple[int, int]:
        """Inclusive (start, end) of the array beginning at ``start_tick``."""
        return start_tick, start_tick + self.ticks_per_array() - 1

    def tick_array(self, start_tick: int) -> TickArrayRange:
        return TickArrayRange(*self.array_range(start_tick))

    def align_to_spacing(self, tick: int) -> int:
        """Round ``tick`` down to a multiple of the tick spacing."""
        return floor_div(tick, self.tick_spacing) * self.tick_spacing

    def slot_offset(self, tick: int) -> int:
        """Slot (0..59) of ``tick`` inside its tick array."""
        offset = tick - self.array_start(tick)
        return floor_div(offset, self.tick_spacing)

    def slot_ticks(self, start_tick: int) -> list[tuple[int, int]]:
        """(slot, tick) for every slot of the array at ``start_tick``."""
        return [(slot, start_tick + slot * self.tick_spacing) for slot in range(TICK_ARRAY_SIZE)]

    def array_offset(self, start_tick: int) -> int:
        """Bitmap offset of an array: its start index in array widths."""
        width = self.ticks_per_array()
        if start_tick % width != 0:
            raise ValueError(f"{start_tick} is not a tick array start for spacing {self.tick_spacing}")
        return start_tick // width

    def start_from_offset(self, offset: int) -> int:
        return offset * self.ticks_per_array()

    def arrays_between(self, tick_a: int, tick_b: int) -> list[int]:
        """Ascending start indices of every array touched by the span between two ticks."""
        lower, upper = min(tick_a, tick_b), max(tick_a, tick_b)
        first, last = self.array_start(lower), self.array_start(upper)
        return list(range(first, last + 1, self.ticks_per_array()))

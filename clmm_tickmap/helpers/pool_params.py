"""
Pool parameters shared by the converters and resolvers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from clmm_tickmap.helpers.array_indexer import ArrayIndexer
from clmm_tickmap.helpers.bitmap_codec import BitmapCodec
from clmm_tickmap.helpers.errors import AmbiguousInput, InvalidTickSpacing
from clmm_tickmap.helpers.price_converter import PriceConverter, PriceQuotation

__all__ = ["PoolParams", "select_start_tick"]


@dataclass(frozen=True)
class PoolParams:
    """Immutable snapshot of the pool fields the tick math needs"""
    decimals0: int
    decimals1: int
    tick_spacing: int
    current_tick: int = 0

    def __post_init__(self):
        if not 0 < self.tick_spacing <= 0xFFFF:
            raise InvalidTickSpacing(f"Tick spacing must be in 1..65535, got {self.tick_spacing}")
        for name in ("decimals0", "decimals1"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"{name} must be a u8, got {value}")

    def converter(self) -> PriceConverter:
        return PriceConverter(self.decimals0, self.decimals1)

    def indexer(self) -> ArrayIndexer:
        return ArrayIndexer(self.tick_spacing)

    def codec(self) -> BitmapCodec:
        return BitmapCodec(self.tick_spacing)


def select_start_tick(
    converter: PriceConverter,
    tick: Optional[int] = None,
    quotation: Optional[PriceQuotation] = None,
    default: Optional[int] = None,
) -> int:
    """
    Resolve a starting tick from either an explicit tick or a price.

    Args:
        converter: Converter used when a price is given
        tick: Explicit tick
        quotation: Tagged price, converted with floor rounding
        default: Tick used when neither is given; None makes one mandatory

    Raises:
        AmbiguousInput: Both given, or neither given with no default
    """
    if tick is not None and quotation is not None:
        raise AmbiguousInput("Provide either a tick or a price, not both")
    if tick is not None:
        return tick
    if quotation is not None:
        return converter.to_tick(quotation)
    if default is None:
        raise AmbiguousInput("Either a tick or a price is required")
    return default

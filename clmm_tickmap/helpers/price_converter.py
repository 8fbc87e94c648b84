"""
Tick <-> price conversion for a concentrated-liquidity pool.

Public API
----------
PriceFormat
    The four quotation conventions: token1 per token0 or token0 per token1,
    each either raw (smallest units) or human (decimal-adjusted).
PriceQuotation(fmt, price)
    A price tagged with its convention.
PriceConverter(decimals0, decimals1)
    tick_to_raw_price / raw_price_to_tick, to_quotation / to_tick,
    sqrt_price_fixed_point and quotations (all four conventions at once).

Ticks always round down: a price maps to the greatest tick whose price
does not exceed it.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from clmm_tickmap.config.protocol import Q_RATIO, Q64
from clmm_tickmap.helpers.errors import InvalidPriceDomain, TickOutOfDomain

__all__ = ["PriceFormat", "PriceQuotation", "PriceConverter"]

logger = logging.getLogger(__name__)

LOG_Q = math.log(Q_RATIO)

# Relative slack when comparing against a tick boundary; ticks are 1e-4 apart
RATIO_TOLERANCE = 1e-12

# Each correction of the log estimate moves at most this many ticks
MAX_CORRECTION_STEPS = 2


class PriceFormat(Enum):
    TOKEN1_PER_TOKEN0_RAW = "t1-per-t0-raw"
    TOKEN0_PER_TOKEN1_RAW = "t0-per-t1-raw"
    TOKEN1_PER_TOKEN0_HUMAN = "t1-per-t0-human"
    TOKEN0_PER_TOKEN1_HUMAN = "t0-per-t1-human"

    @property
    def is_human(self) -> bool:
        return self in (PriceFormat.TOKEN1_PER_TOKEN0_HUMAN, PriceFormat.TOKEN0_PER_TOKEN1_HUMAN)

    @property
    def is_inverted(self) -> bool:
        return self in (PriceFormat.TOKEN0_PER_TOKEN1_RAW, PriceFormat.TOKEN0_PER_TOKEN1_HUMAN)


@dataclass(frozen=True)
class PriceQuotation:
    """A price magnitude tagged with its quotation convention"""
    fmt: PriceFormat
    price: float


# --------------------------------------------------------------------------- #
# helpers                                                                     #
# --------------------------------------------------------------------------- #


def _tick_ratio(tick: int) -> float:
    """1.0001**tick, saturating to inf instead of raising."""
    try:
        return Q_RATIO ** tick
    except OverflowError:
        return math.inf


def _check_price(price: float) -> None:
    if math.isnan(price) or math.isinf(price) or price <= 0:
        raise InvalidPriceDomain(f"Price must be positive and finite, got {price}")


# --------------------------------------------------------------------------- #
# converter                                                                   #
# --------------------------------------------------------------------------- #


class PriceConverter:
    """Converts between ticks and prices for one token pair."""

    def __init__(self, decimals0: int, decimals1: int):
        """
        Args:
            decimals0: Mint decimals of token0
            decimals1: Mint decimals of token1
        """
        self.decimals0 = decimals0
        self.decimals1 = decimals1

    @property
    def decimal_adjustment(self) -> float:
        """10**decimals0 / 10**decimals1, the raw -> human factor for token1/token0."""
        return 10 ** self.decimals0 / 10 ** self.decimals1

    def tick_to_raw_price(self, tick: int) -> float:
        """
        Raw price (token1 per token0 in smallest units) at a tick.

        Raises:
            TickOutOfDomain: If 1.0001**tick overflows or underflows to zero
        """
        try:
            price = Q_RATIO ** tick
        except OverflowError as e:
            raise TickOutOfDomain(f"Tick {tick} overflows the price domain") from e
        if price == 0.0 or not math.isfinite(price):
            raise TickOutOfDomain(f"Tick {tick} underflows the price domain")
        return price

    def raw_price_to_tick(self, price: float) -> int:
        """
        Greatest tick whose raw price does not exceed ``price``.

        Raises:
            InvalidPriceDomain: If price is non-positive, NaN or infinite
        """
        _check_price(price)
        tick = math.floor(math.log(price) / LOG_Q)
        # the log estimate can land one step off next to a boundary;
        # compare ratios so prices near the float maximum cannot overflow
        limit = 1 + RATIO_TOLERANCE
        for _ in range(MAX_CORRECTION_STEPS):
            if _tick_ratio(tick + 1) / price > limit:
                break
            tick += 1
        for _ in range(MAX_CORRECTION_STEPS):
            if _tick_ratio(tick) / price <= limit:
                break
            tick -= 1
        return tick

    def to_quotation(self, tick: int, fmt: PriceFormat) -> float:
        """
        Price at ``tick`` expressed in ``fmt``.

        Raises:
            TickOutOfDomain: If the price, after decimal adjustment or
                inversion, is not a finite non-zero float
        """
        price = self.tick_to_raw_price(tick)
        if fmt.is_human:
            price *= self.decimal_adjustment
        if fmt.is_inverted:
            price = 1 / price
        if price == 0.0 or not math.isfinite(price):
            raise TickOutOfDomain(f"Tick {tick} has no finite {fmt.value} price")
        return price

    def quotation_to_raw_price(self, quotation: PriceQuotation) -> float:
        """Undo the convention of ``quotation`` to get the raw token1/token0 price."""
        _check_price(quotation.price)
        fmt, price = quotation.fmt, quotation.price
        if fmt.is_inverted:
            price = 1 / price
        if fmt.is_human:
            price /= self.decimal_adjustment
        return price

    def to_tick(self, quotation: PriceQuotation) -> int:
        """Tick for a tagged price, rounding down."""
        raw = self.quotation_to_raw_price(quotation)
        tick = self.raw_price_to_tick(raw)
        logger.debug(f"{quotation.fmt.value} {quotation.price} -> raw {raw} -> tick {tick}")
        return tick

    def sqrt_price_fixed_point(self, tick: int) -> int:
        """floor(sqrt(raw price) * 2**64), the on-chain sqrt_price_x64 encoding."""
        raw = self.tick_to_raw_price(tick)
        return math.floor(math.sqrt(raw) * Q64)

    def quotations(self, tick: int) -> dict[PriceFormat, float]:
        """The price at ``tick`` in every convention."""
        return {fmt: self.to_quotation(tick, fmt) for fmt in PriceFormat}

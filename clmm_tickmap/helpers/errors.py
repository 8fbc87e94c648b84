"""
Exception hierarchy for tick-map computations and account access.

Value-domain errors also derive from ``ValueError`` so callers that only
know the builtin can still catch them.
"""


class TickMapError(Exception):
    """Base exception for tick-map operations"""
    pass


class InvalidPriceDomain(TickMapError, ValueError):
    """Price is non-positive, NaN or infinite and has no tick"""
    pass


class TickOutOfDomain(TickMapError, ValueError):
    """1.0001**tick cannot be represented as a finite, non-zero float"""
    pass


class InvalidBitmapShape(TickMapError, ValueError):
    """Bitmap words or chunks have the wrong count or out-of-range values"""
    pass


class ArrayOutOfBitmapRange(TickMapError, ValueError):
    """Tick array offset lies outside both bitmap tiers"""
    pass


class InvalidTickSpacing(TickMapError, ValueError):
    """Tick spacing must be a positive u16"""
    pass


class InvalidTolerance(TickMapError, ValueError):
    """Favorable or impact percentage is negative"""
    pass


class AmbiguousInput(TickMapError, ValueError):
    """Exactly one of tick or price must be supplied"""
    pass


class NoSurroundingArrayFound(TickMapError):
    """No populated tick array lies beyond the swap span"""

    def __init__(self, direction, min_tick: int, max_tick: int):
        self.direction = direction
        self.min_tick = min_tick
        self.max_tick = max_tick
        side = "below" if direction.value == "buy-token1" else "above"
        super().__init__(
            f"No initialized tick array found {side} tick range [{min_tick}, {max_tick}]"
        )


class RecordDecodeError(TickMapError, ValueError):
    """Account bytes do not match the expected layout"""
    pass


class AccountNotFound(TickMapError):
    """The RPC node has no account at the requested address"""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Account not found: {address}")


class AccountFetchError(TickMapError):
    """HTTP or JSON-RPC failure while fetching account data"""
    pass

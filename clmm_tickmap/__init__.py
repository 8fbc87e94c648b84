"""
Off-chain tick, price and tick-array analysis for Raydium-style
concentrated-liquidity pools.
"""

__version__ = "0.1.0"

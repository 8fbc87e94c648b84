"""
Protocol constants for the Raydium CLMM tick-array layout.

Contains the program id, PDA seeds, tick math constants and the shape of
the two-tier tick-array bitmap stored in PoolState and
TickArrayBitmapExtension.
"""

# =============================================================================
# PROGRAM
# =============================================================================

RAYDIUM_CLMM_PROGRAM_ID: str = "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"

TICK_ARRAY_SEED: bytes = b"tick_array"
TICK_ARRAY_BITMAP_EXTENSION_SEED: bytes = b"pool_tick_array_bitmap_extension"

# Anchor accounts start with an 8-byte discriminator
ACCOUNT_DISCRIMINATOR_SIZE: int = 8


# =============================================================================
# TICK MATH
# =============================================================================

Q_RATIO: float = 1.0001
TICK_ARRAY_SIZE: int = 60  # slots per tick array

# Informational only; conversions accept any tick the float domain can hold
MIN_TICK: int = -443636
MAX_TICK: int = 443636

Q64: int = 2 ** 64


# =============================================================================
# BITMAP SHAPE
# =============================================================================

BITS_PER_WORD: int = 64
DEFAULT_BITMAP_WORDS: int = 16  # PoolState.tick_array_bitmap
DEFAULT_BITMAP_BITS: int = DEFAULT_BITMAP_WORDS * BITS_PER_WORD
DEFAULT_BITMAP_CENTER: int = DEFAULT_BITMAP_BITS // 2  # bit 512 is offset 0

EXTENSION_CHUNKS: int = 14
WORDS_PER_CHUNK: int = 8
BITS_PER_CHUNK: int = WORDS_PER_CHUNK * BITS_PER_WORD

# Array offsets representable across both tiers
MIN_BITMAP_OFFSET: int = -DEFAULT_BITMAP_CENTER - EXTENSION_CHUNKS * BITS_PER_CHUNK
MAX_BITMAP_OFFSET: int = DEFAULT_BITMAP_CENTER + EXTENSION_CHUNKS * BITS_PER_CHUNK - 1

WORD_MAX: int = 2 ** 64 - 1

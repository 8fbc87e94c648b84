"""
Two-tier tick-array bitmap codec.

Notes on bitmap indexing:
- An array's *offset* is ``start_tick // ticks_per_array``.
- Default tier (PoolState.tick_array_bitmap): 16 u64 words, 1024 bits.
  Global bit ``i`` is word ``i // 64``, bit ``i % 64``, and stands for
  offset ``i - 512``, so it covers offsets [-512, 511].
- Extension tier (TickArrayBitmapExtension): 14 chunks of 8 words per side.
  Positive side: chunk ``c`` bit ``b`` is offset ``512 + c*512 + b``.
  Negative side runs backwards: bit 511 of chunk 0 is offset -513, i.e.
  offset ``-513 - c*512 - (511 - b)``.
Together the tiers cover offsets [-7680, 7679] with no gaps.
"""
from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Sequence

from clmm_tickmap.config.protocol import (
    BITS_PER_CHUNK,
    BITS_PER_WORD,
    DEFAULT_BITMAP_CENTER,
    DEFAULT_BITMAP_WORDS,
    EXTENSION_CHUNKS,
    MAX_BITMAP_OFFSET,
    MIN_BITMAP_OFFSET,
    WORD_MAX,
    WORDS_PER_CHUNK,
)
from clmm_tickmap.helpers.array_indexer import ArrayIndexer
from clmm_tickmap.helpers.errors import ArrayOutOfBitmapRange, InvalidBitmapShape

__all__ = [
    "ExtensionBitmap",
    "BitmapCodec",
    "extension_bit_to_offset",
    "offset_to_extension_bit",
    "empty_extension",
]

logger = logging.getLogger(__name__)

POSITIVE = "positive"
NEGATIVE = "negative"


class ExtensionBitmap(NamedTuple):
    positive: list[list[int]]
    negative: list[list[int]]


def empty_extension() -> ExtensionBitmap:
    return ExtensionBitmap(
        [[0] * WORDS_PER_CHUNK for _ in range(EXTENSION_CHUNKS)],
        [[0] * WORDS_PER_CHUNK for _ in range(EXTENSION_CHUNKS)],
    )


# --------------------------------------------------------------------------- #
# offset mapping                                                              #
# --------------------------------------------------------------------------- #


def extension_bit_to_offset(side: str, chunk: int, bit: int) -> int:
    """Array offset for bit ``bit`` (0..511) of extension chunk ``chunk``."""
    if side == POSITIVE:
        return DEFAULT_BITMAP_CENTER + chunk * BITS_PER_CHUNK + bit
    return -DEFAULT_BITMAP_CENTER - 1 - chunk * BITS_PER_CHUNK - (BITS_PER_CHUNK - 1 - bit)


def offset_to_extension_bit(offset: int) -> tuple[str, int, int]:
    """Inverse of extension_bit_to_offset for offsets outside the default tier."""
    if offset >= DEFAULT_BITMAP_CENTER:
        distance = offset - DEFAULT_BITMAP_CENTER
        return POSITIVE, distance // BITS_PER_CHUNK, distance % BITS_PER_CHUNK
    if offset < -DEFAULT_BITMAP_CENTER:
        distance = -DEFAULT_BITMAP_CENTER - 1 - offset
        return NEGATIVE, distance // BITS_PER_CHUNK, BITS_PER_CHUNK - 1 - distance % BITS_PER_CHUNK
    raise ValueError(f"Offset {offset} belongs to the default bitmap")


# --------------------------------------------------------------------------- #
# helpers                                                                     #
# --------------------------------------------------------------------------- #


def _check_words(words: Sequence[int], expected: int, what: str) -> None:
    if len(words) != expected:
        raise InvalidBitmapShape(f"{what} must have {expected} words, got {len(words)}")
    for word in words:
        if not isinstance(word, int) or not 0 <= word <= WORD_MAX:
            raise InvalidBitmapShape(f"{what} word {word!r} is not a u64")


def _check_chunks(chunks: Sequence[Sequence[int]], what: str) -> None:
    if len(chunks) != EXTENSION_CHUNKS:
        raise InvalidBitmapShape(f"{what} must have {EXTENSION_CHUNKS} chunks, got {len(chunks)}")
    for index, chunk in enumerate(chunks):
        _check_words(chunk, WORDS_PER_CHUNK, f"{what} chunk {index}")


def _set_bits(words: Sequence[int]) -> Iterable[int]:
    """Indices of set bits across a word list, word 0 bit 0 first."""
    for word_index, word in enumerate(words):
        while word:
            low = word & -word
            yield word_index * BITS_PER_WORD + low.bit_length() - 1
            word ^= low


# --------------------------------------------------------------------------- #
# codec                                                                       #
# --------------------------------------------------------------------------- #


class BitmapCodec:
    """Decodes and encodes populated tick-array start indices for one tick spacing."""

    def __init__(self, tick_spacing: int):
        self.indexer = ArrayIndexer(tick_spacing)

    def decode_default(self, words: Sequence[int]) -> set[int]:
        """Start indices marked in the 16-word default bitmap."""
        _check_words(words, DEFAULT_BITMAP_WORDS, "Default bitmap")
        return {
            self.indexer.start_from_offset(bit - DEFAULT_BITMAP_CENTER)
            for bit in _set_bits(words)
        }

    def decode_extension(
        self,
        positive: Sequence[Sequence[int]],
        negative: Sequence[Sequence[int]],
    ) -> set[int]:
        """Start indices marked in both sides of the extension bitmap."""
        _check_chunks(positive, "Positive extension")
        _check_chunks(negative, "Negative extension")
        starts = set()
        for side, chunks in ((POSITIVE, positive), (NEGATIVE, negative)):
            for chunk_index, chunk in enumerate(chunks):
                for bit in _set_bits(chunk):
                    offset = extension_bit_to_offset(side, chunk_index, bit)
                    starts.add(self.indexer.start_from_offset(offset))
        return starts

    def decode_all(
        self,
        default_words: Sequence[int],
        extension: ExtensionBitmap | None = None,
    ) -> list[int]:
        """Every populated start index, sorted ascending without duplicates."""
        starts = self.decode_default(default_words)
        if extension is not None:
            starts |= self.decode_extension(extension.positive, extension.negative)
        logger.debug(f"Decoded {len(starts)} populated tick arrays")
        return sorted(starts)

    def encode(self, start_indices: Iterable[int]) -> tuple[list[int], ExtensionBitmap]:
        """
        Build the bitmap words that mark exactly ``start_indices``.

        Returns:
            (default_words, ExtensionBitmap)

        Raises:
            ValueError: If a start index is not a multiple of ticks_per_array
            ArrayOutOfBitmapRange: If an offset is outside both tiers
        """
        default = [0] * DEFAULT_BITMAP_WORDS
        extension = empty_extension()
        for start in start_indices:
            offset = self.indexer.array_offset(start)
            if not MIN_BITMAP_OFFSET <= offset <= MAX_BITMAP_OFFSET:
                raise ArrayOutOfBitmapRange(
                    f"Tick array {start} (offset {offset}) is outside "
                    f"[{MIN_BITMAP_OFFSET}, {MAX_BITMAP_OFFSET}]"
                )
            if -DEFAULT_BITMAP_CENTER <= offset < DEFAULT_BITMAP_CENTER:
                bit = offset + DEFAULT_BITMAP_CENTER
                default[bit // BITS_PER_WORD] |= 1 << (bit % BITS_PER_WORD)
                continue
            side, chunk, bit = offset_to_extension_bit(offset)
            words = extension.positive[chunk] if side == POSITIVE else extension.negative[chunk]
            words[bit // BITS_PER_WORD] |= 1 << (bit % BITS_PER_WORD)
        return default, extension

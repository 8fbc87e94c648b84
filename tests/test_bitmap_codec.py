"""
Tests for the two-tier tick-array bitmap codec.

Tests cover:
- Default bitmap bit -> start index mapping
- Positive and negative extension mapping
- encode as the inverse of decode
- Shape and range validation
"""

import pytest

from clmm_tickmap.config.protocol import MAX_BITMAP_OFFSET, MIN_BITMAP_OFFSET
from clmm_tickmap.helpers.bitmap_codec import (
    BitmapCodec,
    ExtensionBitmap,
    empty_extension,
    extension_bit_to_offset,
    offset_to_extension_bit,
)
from clmm_tickmap.helpers.errors import ArrayOutOfBitmapRange, InvalidBitmapShape


def _default_with_bit(bit):
    words = [0] * 16
    words[bit // 64] |= 1 << (bit % 64)
    return words


@pytest.fixture
def codec():
    return BitmapCodec(10)


class TestDefaultBitmap:
    """Tests for the 16-word default tier."""

    def test_center_bit_is_array_zero(self, codec):
        """Bit 512 (word 8, bit 0) marks the array starting at tick 0."""
        assert codec.decode_default(_default_with_bit(512)) == {0}

    def test_bit_below_center(self, codec):
        assert codec.decode_default(_default_with_bit(511)) == {-600}

    def test_lowest_and_highest_bits(self, codec):
        assert codec.decode_default(_default_with_bit(0)) == {-512 * 600}
        assert codec.decode_default(_default_with_bit(1023)) == {511 * 600}

    def test_empty_bitmap(self, codec):
        assert codec.decode_default([0] * 16) == set()

    def test_several_bits_in_one_word(self, codec):
        words = [0] * 16
        words[8] = 0b1011
        assert codec.decode_default(words) == {0, 600, 1800}


class TestExtensionBitmap:
    """Tests for the positive and negative extension tiers."""

    def test_positive_first_bit(self):
        assert extension_bit_to_offset("positive", 0, 0) == 512
        assert extension_bit_to_offset("positive", 1, 3) == 1027

    def test_negative_side_runs_backwards(self):
        """Bit 511 of negative chunk 0 is the first offset below the default tier."""
        assert extension_bit_to_offset("negative", 0, 511) == -513
        assert extension_bit_to_offset("negative", 0, 0) == -1024
        assert extension_bit_to_offset("negative", 13, 0) == MIN_BITMAP_OFFSET

    def test_positive_last_bit(self):
        assert extension_bit_to_offset("positive", 13, 511) == MAX_BITMAP_OFFSET

    @pytest.mark.parametrize("offset", [512, 1000, 7679, -513, -1024, -1025, -7680])
    def test_offset_mapping_inverts(self, offset):
        assert extension_bit_to_offset(*offset_to_extension_bit(offset)) == offset

    def test_default_offsets_have_no_extension_bit(self):
        with pytest.raises(ValueError):
            offset_to_extension_bit(0)

    def test_decode_negative_chunk(self, codec):
        extension = empty_extension()
        extension.negative[0][7] = 1 << 63  # bit 511
        assert codec.decode_extension(extension.positive, extension.negative) == {-513 * 600}

    def test_decode_positive_chunk(self, codec):
        extension = empty_extension()
        extension.positive[0][0] = 1
        assert codec.decode_extension(extension.positive, extension.negative) == {512 * 600}

    def test_decode_all_merges_tiers_sorted(self, codec):
        extension = empty_extension()
        extension.positive[0][0] = 1
        extension.negative[0][7] = 1 << 63
        starts = codec.decode_all(_default_with_bit(512), extension)
        assert starts == [-513 * 600, 0, 512 * 600]


class TestEncode:
    """Tests for encode as the inverse of decode."""

    def test_encode_default_tier(self, codec):
        default, extension = codec.encode([0, -600])
        assert default[8] == 1
        assert default[7] == 1 << 63
        assert extension == empty_extension()

    def test_encode_round_trip(self, codec):
        starts = [-7680 * 600, -513 * 600, -600, 0, 511 * 600, 512 * 600, 7679 * 600]
        default, extension = codec.encode(starts)
        assert codec.decode_all(default, extension) == sorted(starts)

    def test_decode_then_encode_restores_words(self, codec):
        extension = empty_extension()
        extension.positive[3][5] = 0xF0F0
        extension.negative[12][0] = 0x8000000000000001
        default = [0] * 16
        default[2] = 0xDEADBEEF
        starts = codec.decode_all(default, extension)
        assert codec.encode(starts) == (default, extension)

    def test_encode_outside_range(self, codec):
        with pytest.raises(ArrayOutOfBitmapRange):
            codec.encode([(MAX_BITMAP_OFFSET + 1) * 600])
        with pytest.raises(ArrayOutOfBitmapRange):
            codec.encode([(MIN_BITMAP_OFFSET - 1) * 600])

    def test_encode_misaligned_start(self, codec):
        with pytest.raises(ValueError):
            codec.encode([10])


class TestShapeValidation:

    def test_wrong_word_count(self, codec):
        with pytest.raises(InvalidBitmapShape):
            codec.decode_default([0] * 15)

    @pytest.mark.parametrize("word", [-1, 2 ** 64])
    def test_word_outside_u64(self, codec, word):
        words = [0] * 16
        words[0] = word
        with pytest.raises(InvalidBitmapShape):
            codec.decode_default(words)

    def test_wrong_chunk_count(self, codec):
        extension = empty_extension()
        with pytest.raises(InvalidBitmapShape):
            codec.decode_extension(extension.positive[:13], extension.negative)

    def test_wrong_chunk_width(self, codec):
        extension = empty_extension()
        extension.negative[4] = [0] * 7
        with pytest.raises(InvalidBitmapShape):
            codec.decode_all([0] * 16, ExtensionBitmap(extension.positive, extension.negative))

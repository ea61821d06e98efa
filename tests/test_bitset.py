# tests/test_bitset.py
from __future__ import annotations

import numpy as np
import pytest

from primetree.bitset import PackedBitSet

INDICES = [0, 1, 2, 5, 63, 64, 65, 127, 500, 999]


class TestConstruction:

    @pytest.mark.parametrize("n, words", [(0, 0), (1, 1), (64, 1), (65, 2), (1000, 16)])
    def test_word_count(self, n, words):
        assert len(PackedBitSet.all_zero(n).words) == words
        assert len(PackedBitSet.all_one(n).words) == words

    def test_len_is_requested_capacity(self):
        assert len(PackedBitSet.all_zero(70)) == 70

    def test_all_zero_and_all_one(self):
        zeros = PackedBitSet.all_zero(1000)
        ones = PackedBitSet.all_one(1000)
        assert not any(zeros[i] for i in range(1000))
        assert all(ones[i] for i in range(1000))

    def test_negative_capacity(self):
        with pytest.raises(ValueError):
            PackedBitSet.all_zero(-1)


class TestCheckedAccess:

    @pytest.mark.parametrize("i", INDICES)
    def test_set_then_get(self, i):
        bits = PackedBitSet.all_zero(1000)
        assert bits.set(i) is True
        assert bits.get(i) is True
        assert bits[i] is True

    @pytest.mark.parametrize("i", INDICES)
    def test_reset_after_set(self, i):
        bits = PackedBitSet.all_zero(1000)
        bits.set(i)
        assert bits.reset(i) is True
        assert bits.get(i) is False

    @pytest.mark.parametrize("i", INDICES)
    @pytest.mark.parametrize("value", [True, False])
    def test_set_value(self, i, value):
        for bits in (PackedBitSet.all_zero(1000), PackedBitSet.all_one(1000)):
            assert bits.set_value(i, value) is True
            assert bits.get(i) is value

    def test_neighbours_untouched(self):
        bits = PackedBitSet.all_zero(1000)
        bits.set(65)
        assert bits[65]
        assert not bits[64]
        assert not bits[66]
        assert not bits[1]

    def test_slack_in_last_word_is_accepted(self):
        # 70 flags -> two words -> indices 70..127 are slack but addressable
        bits = PackedBitSet.all_zero(70)
        assert bits.get(127) is False
        assert bits.set(127) is True
        assert bits.get(127) is True

    @pytest.mark.parametrize("i", [128, 129, 10_000, -1])
    def test_outside_storage_is_rejected(self, i):
        bits = PackedBitSet.all_zero(70)
        assert bits.get(i) is None
        assert bits.set(i) is False
        assert bits.reset(i) is False
        assert bits.set_value(i, True) is False
        assert not bits.words.any()

    def test_unchecked_past_storage_raises(self):
        bits = PackedBitSet.all_zero(70)
        with pytest.raises(IndexError):
            bits.get_unchecked(128)


class TestUncheckedAccess:

    def test_round_trip(self):
        bits = PackedBitSet.all_one(200)
        bits.reset_unchecked(100)
        assert bits.get_unchecked(100) is False
        bits.set_unchecked(100)
        assert bits.get_unchecked(100) is True
        bits.set_value_unchecked(7, False)
        assert bits.get_unchecked(7) is False

    def test_top_bit_of_word(self):
        bits = PackedBitSet.all_zero(128)
        bits.set_unchecked(63)
        assert bits.words[0] == np.uint64(1 << 63)
        bits.reset_unchecked(63)
        assert bits.words[0] == 0


class TestBulk:

    @pytest.mark.parametrize("start, stop, step", [(4, 1000, 2), (9, 1000, 3), (0, 64, 1), (121, 1000, 11), (5, 5, 7)])
    def test_reset_range_matches_loop(self, start, stop, step):
        bulk = PackedBitSet.all_one(1000)
        loop = PackedBitSet.all_one(1000)
        bulk.reset_range(start, stop, step)
        for j in range(start, stop, step):
            loop.reset_unchecked(j)
        assert np.array_equal(bulk.words, loop.words)

    def test_reset_range_bad_step(self):
        with pytest.raises(ValueError):
            PackedBitSet.all_one(10).reset_range(0, 10, 0)

    def test_count(self):
        bits = PackedBitSet.all_zero(300)
        for i in (1, 64, 299):
            bits.set(i)
        assert bits.count() == 3
        assert PackedBitSet.all_one(70).count() == 128  # slack included


class TestIteration:

    def test_covers_whole_words(self):
        bits = PackedBitSet.all_zero(70)
        flags = list(bits.iter())
        assert len(flags) == 128
        assert not any(flags)

    def test_slack_of_all_one_is_set(self):
        assert all(PackedBitSet.all_one(70))

    def test_restartable(self):
        bits = PackedBitSet.all_zero(100)
        bits.set(3)
        bits.set(99)
        first = list(bits)
        second = list(bits)
        assert first == second
        assert [i for i, f in enumerate(first) if f] == [3, 99]

    def test_lazy(self):
        it = PackedBitSet.all_one(10_000_000).iter()
        assert next(it) is True

    def test_to_flags_matches_iter(self):
        bits = PackedBitSet.all_zero(150)
        for i in (0, 31, 64, 100, 149, 191):
            bits.set(i)
        assert bits.to_flags().tolist() == list(bits.iter())

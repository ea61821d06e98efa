# src/primetree/bitset.py
"""
Packed boolean flags stored in 64-bit words.

Storage is rounded up to whole words, so a set created for ``n`` flags
really holds ``64 * ceil(n / 64)`` of them. The slack at the end of the last
word is ordinary storage: the checked accessors accept it and ``iter()`` /
``to_flags()`` include it.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from primetree.utility import WORD_BITS

_ONE = np.uint64(1)
_ALL_ONES = np.uint64((1 << WORD_BITS) - 1)
_WORD_SHIFT = WORD_BITS.bit_length() - 1   # 6
_BIT_MASK = WORD_BITS - 1                  # 63

# Multiples cleared per numpy batch in reset_range()
_CHUNK = 1 << 20


def _word_count(n: int) -> int:
    if n < 0:
        raise ValueError(f"capacity must be non-negative, got {n}")
    return -(-n // WORD_BITS)


class PackedBitSet:
    __slots__ = ("_n", "words")

    def __init__(self, n: int, words: np.ndarray):
        self._n = n
        self.words = words

    # --- Construction --------------------------------------------------------

    @classmethod
    def all_zero(cls, n: int) -> PackedBitSet:
        return cls(n, np.zeros(_word_count(n), dtype=np.uint64))

    @classmethod
    def all_one(cls, n: int) -> PackedBitSet:
        return cls(n, np.full(_word_count(n), _ALL_ONES, dtype=np.uint64))

    # --- Unchecked access ----------------------------------------------------
    # No bounds check. An index inside the last word's slack touches slack
    # bits; an index past the storage raises IndexError from numpy.

    def get_unchecked(self, index: int) -> bool:
        word = self.words[index >> _WORD_SHIFT]
        return bool((word >> np.uint64(index & _BIT_MASK)) & _ONE)

    def set_unchecked(self, index: int) -> None:
        w = index >> _WORD_SHIFT
        self.words[w] = self.words[w] | (_ONE << np.uint64(index & _BIT_MASK))

    def reset_unchecked(self, index: int) -> None:
        w = index >> _WORD_SHIFT
        self.words[w] = self.words[w] & ~(_ONE << np.uint64(index & _BIT_MASK))

    def set_value_unchecked(self, index: int, value: bool) -> None:
        if value:
            self.set_unchecked(index)
        else:
            self.reset_unchecked(index)

    # --- Checked access ------------------------------------------------------
    # The check is on the word index, not on the requested capacity.

    def _in_storage(self, index: int) -> bool:
        return 0 <= index and (index >> _WORD_SHIFT) < len(self.words)

    def get(self, index: int) -> bool | None:
        if self._in_storage(index):
            return self.get_unchecked(index)
        return None

    def set(self, index: int) -> bool:
        if self._in_storage(index):
            self.set_unchecked(index)
            return True
        return False

    def reset(self, index: int) -> bool:
        if self._in_storage(index):
            self.reset_unchecked(index)
            return True
        return False

    def set_value(self, index: int, value: bool) -> bool:
        if self._in_storage(index):
            self.set_value_unchecked(index, value)
            return True
        return False

    # --- Bulk ----------------------------------------------------------------

    def reset_range(self, start: int, stop: int, step: int = 1) -> None:
        """
        Reset every index in range(start, stop, step).
        Unchecked like reset_unchecked(); callers keep stop within storage.
        """
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        for lo in range(start, stop, step * _CHUNK):
            hi = min(stop, lo + step * _CHUNK)
            idx = np.arange(lo, hi, step, dtype=np.int64)
            masks = ~(_ONE << (idx & _BIT_MASK).astype(np.uint64))
            # several indices may share a word; .at applies each of them
            np.bitwise_and.at(self.words, idx >> _WORD_SHIFT, masks)

    def to_flags(self) -> np.ndarray:
        """All flags (slack included) as a boolean array of length 64 * len(words)."""
        raw = self.words.astype("<u8", copy=False).view(np.uint8)
        return np.unpackbits(raw, bitorder="little").astype(bool)

    def count(self) -> int:
        return int(np.count_nonzero(self.to_flags()))

    # --- Iteration -----------------------------------------------------------

    def iter(self) -> Iterator[bool]:
        """Lazily yield every flag from index 0 through the end of the last word."""
        for index in range(len(self.words) * WORD_BITS):
            yield self.get_unchecked(index)

    def __iter__(self) -> Iterator[bool]:
        return self.iter()

    def __getitem__(self, index: int) -> bool:
        return self.get_unchecked(index)

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return f"PackedBitSet(n={self._n}, words={len(self.words)}, set={self.count()})"

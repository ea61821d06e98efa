# src/primetree/primes.py
"""
Prime cache, sieve and trial-division factorizer.

The cache file holds a single ``.npy`` record: the ascending ``uint64`` array
of every prime below the sieve limit that produced it.
"""

from __future__ import annotations

import math
import os
import sys
import tokenize
import zipfile
from collections.abc import Iterator
from pathlib import Path
from time import perf_counter
from typing import BinaryIO

import numpy as np
from colorama import Fore, Style

from primetree.bitset import PackedBitSet
from primetree.runtime import debug
from primetree.utility import (
    CacheFormatError,
    CacheIOError,
    InsufficientBoundError,
    check_word,
)

# n * (ln n + ln ln n) bounds the n-th prime only from n = 6 on;
# below that sieve up to 14, which holds the first six primes.
_SMALL_N = 6
_SMALL_LIMIT = 14


def _notice(msg: str) -> None:
    print(f"{Fore.YELLOW}{msg}{Style.RESET_ALL}", file=sys.stderr)


# --- Serialization -----------------------------------------------------------


def _read_primes(f: BinaryIO, path: Path) -> np.ndarray:
    try:
        arr = np.load(f, allow_pickle=False)
    except (ValueError, EOFError, SyntaxError, tokenize.TokenError, zipfile.BadZipFile) as e:
        # np.load reports bad headers and archives through several exception types
        raise CacheFormatError(f"{path} is not a primes cache: {e}") from None

    if not isinstance(arr, np.ndarray):
        # e.g. an .npz archive
        raise CacheFormatError(f"{path} is not a primes cache: expected a single array.")
    if arr.ndim != 1 or arr.dtype.kind not in "ui":
        raise CacheFormatError(
            f"{path} is not a primes cache: expected a 1-D integer array, "
            f"got shape {arr.shape} of {arr.dtype}."
        )
    if arr.size and (arr[0] < 2 or np.any(arr[1:] <= arr[:-1])):
        raise CacheFormatError(f"{path} is not a primes cache: values are not ascending primes.")
    return arr.astype(np.uint64, copy=False)


def _write_primes(f: BinaryIO, primes: np.ndarray) -> None:
    np.save(f, primes, allow_pickle=False)


# --- Table -------------------------------------------------------------------


class PrimeTable:
    """
    Ordered list of the primes below some sieve limit.

    Factorizations are keyed by prime *index* into this table (0 -> 2,
    1 -> 3, ...), not by prime value.
    """

    def __init__(self, primes: np.ndarray | list[int]):
        self.primes = np.asarray(primes, dtype=np.uint64)
        # Python ints for the trial-division loop
        self._values: list[int] = self.primes.tolist()

    @classmethod
    def try_new(cls, bound: int, cache_path: str | os.PathLike[str]) -> PrimeTable:
        """
        Load the cache at ``cache_path``, regenerating and rewriting it when it
        holds fewer than ``bound`` primes, or create it when it does not exist.

        Raises CacheIOError / CacheFormatError; a missing file is not an error.
        """
        path = Path(cache_path)
        try:
            f = path.open("r+b")
        except FileNotFoundError:
            return cls._create(bound, path)
        except OSError as e:
            raise CacheIOError(f"opening {path}: {e.strerror or e}") from e

        with f:
            try:
                table = cls(_read_primes(f, path))
                debug(f"loaded {table.extent()} primes from {path}")
                if table.extent() < bound:
                    _notice(f"New bound ({bound}) is larger than the extent of {path}. Regenerating")
                    table = cls(cls.approx_to_nth(bound))
                    f.seek(0)
                    _write_primes(f, table.primes)
                    # drop the tail of a previously longer cache
                    f.truncate()
            except OSError as e:
                raise CacheIOError(f"reading/writing {path}: {e.strerror or e}") from e
        return table

    @classmethod
    def _create(cls, bound: int, path: Path) -> PrimeTable:
        _notice(f"Cache not found on {path}. Generating new cache file.")
        table = cls(cls.approx_to_nth(bound))
        try:
            with path.open("wb") as f:
                _write_primes(f, table.primes)
        except OSError as e:
            raise CacheIOError(f"creating {path}: {e.strerror or e}") from e
        return table

    def extent(self) -> int:
        return len(self._values)

    # --- Generation ----------------------------------------------------------

    @staticmethod
    def approx_to_nth(n: int) -> np.ndarray:
        """
        All primes below an approximate upper bound of the n-th prime
        (0-indexed), n * (ln n + ln ln n).
        """
        if n < _SMALL_N:
            limit = _SMALL_LIMIT
        else:
            nf = float(n)
            limit = int(nf * (math.log(nf) + math.log(math.log(nf))))
        return PrimeTable.all_less_than(limit)

    @staticmethod
    def all_less_than(limit: int) -> np.ndarray:
        """Sieve of Eratosthenes over [0, limit)."""
        if limit <= 2:
            return np.empty(0, dtype=np.uint64)

        t0 = perf_counter()
        mask = PackedBitSet.all_one(limit)
        mask.reset_unchecked(0)
        mask.reset_unchecked(1)

        for i in range(2, math.ceil(math.sqrt(limit))):
            if mask[i]:
                mask.reset_range(i * i, limit, i)

        primes = np.flatnonzero(mask.to_flags()[:limit]).astype(np.uint64)
        debug(f"sieved {len(primes)} primes below {limit} in {perf_counter() - t0:.3f} s")
        return primes

    # --- Factorization -------------------------------------------------------

    def factorize(self, num: int) -> dict[int, int]:
        """
        Return {prime_index: exponent} with ascending keys.

        Trial division by the cached primes while p*p <= num; what is left
        over (if > 1) must itself be a cached prime.
        """
        num = check_word(num)
        factors: dict[int, int] = {}

        for i, p in enumerate(self._values):
            if p * p > num:
                break
            exponent = 0
            while num % p == 0:
                num //= p
                exponent += 1
            if exponent:
                factors[i] = exponent

        if num > 1:
            factors[self.index_of(num)] = 1
        return factors

    def index_of(self, prime: int) -> int:
        """Binary-search ``prime`` in the table; InsufficientBoundError if absent."""
        i = int(np.searchsorted(self.primes, np.uint64(prime)))
        if i >= len(self._values) or self._values[i] != prime:
            raise InsufficientBoundError(prime, self.extent())
        return i

    def prime_factors(self, num: int) -> dict[int, int]:
        """factorize() with indices translated back to prime values."""
        return {self._values[i]: e for i, e in self.factorize(num).items()}

    # --- Container protocol --------------------------------------------------

    def __getitem__(self, index: int) -> int:
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __repr__(self) -> str:
        last = self._values[-1] if self._values else None
        return f"PrimeTable(extent={self.extent()}, largest={last})"

# src/primetree/utility.py
from __future__ import annotations

import re
from typing import Any

# Values are bounded by the native unsigned machine word.
WORD_BITS = 64
MAX_WORD = (1 << WORD_BITS) - 1

_NUMBER_RE = re.compile(r"^\+?\d+(?:_\d+)*$")


# --- Errors ------------------------------------------------------------------


class UserInputError(Exception):
    pass


class PrimeTreeError(Exception):
    """Base class for the fatal errors raised by the prime cache and factorizer."""


class CacheIOError(PrimeTreeError):
    """The cache file exists (or should) but cannot be opened, read or written."""


class CacheFormatError(PrimeTreeError):
    """The cache file does not hold a serialized prime sequence."""


class InsufficientBoundError(PrimeTreeError):
    """A prime factor lies beyond the primes held in the cache."""

    def __init__(self, num: int, extent: int):
        self.num = num
        self.extent = extent
        super().__init__(
            f"{num} is not in the primes list (extent {extent}). "
            "Try again with a larger bound."
        )


# --- Input -------------------------------------------------------------------


def check_word(num: int, label: str = "number") -> int:
    """Raise ValueError unless 0 <= num <= MAX_WORD."""
    if not isinstance(num, int) or isinstance(num, bool):
        raise ValueError(f"{label} must be an integer, got {typename(num)}")
    if num < 0 or num > MAX_WORD:
        raise ValueError(f"{label} {num} is outside 0..{MAX_WORD}")
    return num


def parse_number(token: str) -> int:
    """
    Parse one command-line number: plain decimal digits, optional leading '+',
    '_' allowed between digit groups (1_000_000).
    """
    s = (token or "").strip()
    if not _NUMBER_RE.match(s):
        raise UserInputError(f"Invalid input: '{token}' is not a non-negative integer.")
    n = int(s.replace("_", ""))
    if n > MAX_WORD:
        raise UserInputError(f"Invalid input: {token} does not fit in {WORD_BITS} bits (max {MAX_WORD}).")
    return n


# --- Misc --------------------------------------------------------------------


def typename(x: Any) -> str:
    return type(x).__name__


def flatten_dotted(d: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested dicts into {"SECTION.KEY": value}."""
    out: dict[str, Any] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out

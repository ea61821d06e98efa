# src/primetree/fmt.py
from __future__ import annotations

import re
from collections.abc import Mapping

from colorama import Fore, Style

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def format_factorization(fac: Mapping[int, int]) -> str:
    """
    Turn {p: e, ...} into 'p1 ^ e1 * p2 ^ e2 * ...' (ascending primes).
    Exponents of 1 are written out; 0 and 1 (no factors) give ''.
    """
    return " * ".join(f"{p} ^ {e}" for p, e in sorted(fac.items()))


def label(text: str) -> str:
    return f"{Fore.CYAN}{text}{Style.RESET_ALL}"


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm."""
    MAX_SECONDS = 60
    if seconds < 1:
        return f"{round(seconds * 1000)} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    return f"{int(m)}:{s:06.3f}"

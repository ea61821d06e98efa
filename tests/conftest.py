# tests/conftest.py
from __future__ import annotations

import pytest

from primetree import runtime
from primetree.primes import PrimeTable


@pytest.fixture(autouse=True)
def _isolated_workspace(tmp_path, monkeypatch):
    """Keep profiles out of the real home folder and start from a fresh runtime."""
    monkeypatch.setenv("PRIMETREE_HOME", str(tmp_path / "home"))
    runtime.reset()
    yield
    runtime.reset()


@pytest.fixture(scope="session")
def table() -> PrimeTable:
    """The first 1000+ primes (everything below ~8830)."""
    return PrimeTable(PrimeTable.approx_to_nth(1000))


@pytest.fixture(scope="session")
def small_table() -> PrimeTable:
    """Primes below 31 (2 .. 29)."""
    return PrimeTable(PrimeTable.approx_to_nth(10))

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("primetree")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .bitset import PackedBitSet
from .config import load_settings
from .primes import PrimeTable
from .runtime import APPLY, CFG
from .tree import FactorTree, Node, NodeId
from .utility import (
    CacheFormatError,
    CacheIOError,
    InsufficientBoundError,
    PrimeTreeError,
    UserInputError,
)
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "CacheFormatError",
    "CacheIOError",
    "FactorTree",
    "InsufficientBoundError",
    "Node",
    "NodeId",
    "PackedBitSet",
    "PrimeTable",
    "PrimeTreeError",
    "UserInputError",
    "__version__",
    "load_settings",
    "workspace_dir",
]

"""
Filterchain - Ordered, breakable chains of filters for routing events.

This is the main package that exports the public API.
"""

__version__ = "0.1.0"

# Import core components
from filterchain.core.box import Box
from filterchain.core.chain import FilterChain, SynchronizedFilterChain
from filterchain.core.errors import (
    ChainBusyError,
    ChainError,
    ChainIndexError,
    ConcurrentAccessError,
    InvalidArgumentError,
)
from filterchain.core.filter import Filter, FunctionFilter
from filterchain.core import registry

# Create namespace objects for clean API using types.SimpleNamespace
from types import SimpleNamespace

# Named chain API namespace
chains = SimpleNamespace(
    on=registry.on,
    chain=registry.chain,
    start=registry.start,
)

__all__ = [
    "__version__",
    "Box",
    "ChainBusyError",
    "ChainError",
    "ChainIndexError",
    "ConcurrentAccessError",
    "Filter",
    "FilterChain",
    "FunctionFilter",
    "InvalidArgumentError",
    "SynchronizedFilterChain",
    "chains",
]

"""
Exceptions raised by filter chains.
"""


class ChainError(Exception):
    """Base exception for filter chain errors."""

    pass


class ChainBusyError(ChainError, RuntimeError):
    """Raised when a chain is modified or restarted while a traversal is in progress."""

    pass


class ConcurrentAccessError(ChainBusyError):
    """Raised when a second thread touches a chain another thread is traversing."""

    pass


class ChainIndexError(ChainError, IndexError):
    """Raised when a filter is inserted at a position outside the chain."""

    pass


class InvalidArgumentError(ChainError, ValueError):
    """Raised for a missing disregard callback or an object that cannot act as a filter."""

    pass

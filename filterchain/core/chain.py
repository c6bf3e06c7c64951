"""
FilterChain - Ordered, breakable chain of filters driven by callbacks.

A FilterChain routes one event through its filters one stage at a time. Each
filter receives the event together with the chain itself and decides:
- chain.next(event) → the event (or a transformed one) goes to the next filter
- chain.disregard(message) → the rest of the chain is dropped, the disregard
  callback receives the message

Traversal is re-entrant: filters call back into next() before returning, so a
single routing pass grows the call stack by one filter per link. The chain
holds a single cursor and therefore supports one traversal at a time. While a
traversal is in progress the chain cannot be modified.
"""

import threading
import warnings
from collections.abc import Callable, Iterable
from typing import Any

from filterchain.core.filter import Filter, as_filter
from filterchain.core.errors import (
    ChainBusyError,
    ChainIndexError,
    ConcurrentAccessError,
    InvalidArgumentError,
)


def _ignore(message: str) -> None:
    pass


class FilterChain:
    """
    Ordered chain of filters through which an event is passed.

    Filters are added with add(), add_all() and add_at(). None of these are
    allowed while the chain is in use (see filter_is_being_used()).

    Example:
        chain = FilterChain(lambda msg: print("dropped:", msg))
        chain.add(Validate())
        chain.add(Enrich())
        chain.next(event)  # starts the traversal at Validate
    """

    def __init__(
        self,
        on_disregard: Callable[[str], None] = _ignore,
        *,
        name: str = "chain",
        warn_on_idle_disregard: bool = False,
    ):
        """
        Create an empty chain.

        Args:
            on_disregard: Called with the message whenever a filter disregards.
                Defaults to a callback that does nothing.
            name: Name used in diagnostics
            warn_on_idle_disregard: Emit a RuntimeWarning when disregard() is
                called on a chain that is not in use

        Raises:
            InvalidArgumentError: If on_disregard is None or not callable
        """
        if on_disregard is None or not callable(on_disregard):
            raise InvalidArgumentError(
                f"Disregard callback must be callable, got {on_disregard!r}"
            )

        self.name = name
        self.warn_on_idle_disregard = warn_on_idle_disregard
        self._on_disregard = on_disregard
        self._filters: list[Filter] = []

        # Index of the next filter to run, None while idle
        self._cursor: int | None = None

    @property
    def filters(self) -> tuple[Filter, ...]:
        """Snapshot of the filters in traversal order."""
        return tuple(self._filters)

    def add(self, filter: Filter | Callable) -> None:
        """
        Append a filter at the end of the chain.

        Raises:
            ChainBusyError: If the chain is currently in use
            InvalidArgumentError: If filter is neither a Filter nor callable
        """
        self._check_not_in_use()
        self._filters.append(as_filter(filter))

    def add_all(self, filters: Iterable[Filter | Callable]) -> None:
        """
        Append several filters, keeping their relative order.

        Either all filters are appended or, on error, none of them.

        Raises:
            ChainBusyError: If the chain is currently in use
            InvalidArgumentError: If filters is not iterable or any element is
                neither a Filter nor callable
        """
        self._check_not_in_use()
        try:
            items = iter(filters)
        except TypeError as e:
            raise InvalidArgumentError(
                f"Expected an iterable of filters, got {type(filters).__name__}"
            ) from e
        batch = [as_filter(f) for f in items]
        self._filters.extend(batch)

    def add_at(self, position: int, filter: Filter | Callable) -> None:
        """
        Insert a filter at position; the filter there and all following ones
        shift to the right. position == size() appends.

        Raises:
            ChainBusyError: If the chain is currently in use
            ChainIndexError: If position < 0 or position > size()
            InvalidArgumentError: If filter is neither a Filter nor callable
        """
        self._check_not_in_use()
        if not 0 <= position <= len(self._filters):
            raise ChainIndexError(
                f"Position {position} out of range for chain '{self.name}' "
                f"of size {len(self._filters)}"
            )
        self._filters.insert(position, as_filter(filter))

    def next(self, event: Any) -> None:
        """
        Pass event to the next filter in the chain.

        If the chain is idle a new traversal starts at the first filter. If no
        filter is left, the chain becomes idle again and nothing else happens;
        reaching the end is not a disregard.

        Args:
            event: The event handed to the next filter
        """
        if self._cursor is None:
            self._cursor = 0

        if self._cursor < len(self._filters):
            current = self._filters[self._cursor]
            self._cursor += 1
            current.process(event, self)
        else:
            self._release()

    def disregard(self, message: str) -> None:
        """
        Drop the rest of the chain and report message to the disregard callback.

        The chain is idle afterwards. The callback fires even if the chain was
        not in use.

        Args:
            message: Why the event was disregarded
        """
        was_idle = self._abort()
        if was_idle and self.warn_on_idle_disregard:
            warnings.warn(
                f"Filter chain '{self.name}' disregarded while idle: {message}",
                RuntimeWarning,
                stacklevel=2,
            )
        self._on_disregard(message)

    def reset(self) -> None:
        """Return to idle without calling the disregard callback."""
        self._abort()

    def filter_is_being_used(self) -> bool:
        """
        Whether a traversal is in progress: next() was called and the chain
        has neither reached its end nor been disregarded.
        """
        return self._cursor is not None

    def size(self) -> int:
        """Number of filters in the chain."""
        return len(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def _release(self) -> None:
        self._cursor = None

    def _abort(self) -> bool:
        """Return to idle; True if the chain already was idle."""
        was_idle = self._cursor is None
        self._cursor = None
        return was_idle

    def _check_not_in_use(self) -> None:
        if self.filter_is_being_used():
            raise ChainBusyError(
                f"Filter chain '{self.name}' is currently in use (next() was called "
                "and the chain hasn't reached its end yet). "
                "Either disregard first or wait until the chain has finished."
            )

    def __repr__(self) -> str:
        state = "in use" if self.filter_is_being_used() else "idle"
        return f"FilterChain({self.name}, size={len(self._filters)}, {state})"


class SynchronizedFilterChain(FilterChain):
    """
    FilterChain that reports use from a second thread instead of racing.

    The thread whose next() starts a traversal owns the chain until it is idle
    again. Any next(), disregard() or add*() call from another thread during
    that time raises ConcurrentAccessError. The owning thread may re-enter the
    chain freely, exactly as with FilterChain.
    """

    def __init__(
        self,
        on_disregard: Callable[[str], None] = _ignore,
        *,
        name: str = "chain",
        warn_on_idle_disregard: bool = False,
    ):
        super().__init__(
            on_disregard,
            name=name,
            warn_on_idle_disregard=warn_on_idle_disregard,
        )
        self._lock = threading.Lock()
        self._owner: int | None = None

    def add(self, filter: Filter | Callable) -> None:
        with self._lock:
            self._check_owner()
            super().add(filter)

    def add_all(self, filters: Iterable[Filter | Callable]) -> None:
        with self._lock:
            self._check_owner()
            super().add_all(filters)

    def add_at(self, position: int, filter: Filter | Callable) -> None:
        with self._lock:
            self._check_owner()
            super().add_at(position, filter)

    def next(self, event: Any) -> None:
        with self._lock:
            self._check_owner()
            if self._owner is None:
                self._owner = threading.get_ident()
        # The filter runs outside the lock so it can re-enter the chain
        super().next(event)

    def _release(self) -> None:
        with self._lock:
            self._cursor = None
            self._owner = None

    def _abort(self) -> bool:
        # Owner check and state clear must happen under one lock hold
        with self._lock:
            self._check_owner()
            was_idle = self._cursor is None
            self._cursor = None
            self._owner = None
            return was_idle

    def check_access(self) -> None:
        """
        Raise ConcurrentAccessError if another thread owns the chain.

        Raises:
            ConcurrentAccessError: If a traversal of another thread is in progress
        """
        with self._lock:
            self._check_owner()

    def _check_owner(self) -> None:
        """Must be called with self._lock held."""
        owner = self._owner
        if owner is not None and owner != threading.get_ident():
            raise ConcurrentAccessError(
                f"Filter chain '{self.name}' is being traversed by thread {owner}"
            )

"""
Chain Registry - Named filter chains with a decorator API.

The registry keeps one FilterChain per name, built from that name's settings
table. Filters are registered with the on() decorator and traversals are
started by name:

    @filterchain.chains.on('orders')
    def validate(event: Box, chain: FilterChain):
        if event.into().get('amount', 0) <= 0:
            chain.disregard('non-positive amount')
            return
        chain.next(event)

    filterchain.chains.start('orders', {'amount': 10})

A filter raising inside start() does not propagate: the failure is reported
as a RuntimeWarning and the chain is reset, so the next start() begins from
the first filter again.
"""

import threading
import warnings
from collections.abc import Callable
from typing import Any

from filterchain import config
from filterchain.core.box import Box
from filterchain.core.chain import FilterChain, SynchronizedFilterChain
from filterchain.core.errors import ChainBusyError, ConcurrentAccessError
from filterchain.core.filter import Filter


class RegistryError(Exception):
    """Base exception for registry errors."""

    pass


class ChainRegistry:
    """
    Registry of named chains.

    Chain creation is guarded by a lock, so several threads asking for the
    same name get the same chain.
    """

    def __init__(self):
        self._chains: dict[str, FilterChain] = {}
        self._box_events: dict[str, bool] = {}
        self._lock = threading.Lock()

    def chain(
        self, name: str, on_disregard: Callable[[str], None] | None = None
    ) -> FilterChain:
        """
        Get the chain called name, creating it from its settings if needed.

        Args:
            name: Chain name
            on_disregard: Disregard callback for a new chain

        Raises:
            RegistryError: If on_disregard is given for a chain that already exists
        """
        with self._lock:
            existing = self._chains.get(name)
            if existing is not None:
                if on_disregard is not None:
                    raise RegistryError(
                        f"Chain '{name}' already exists; its disregard callback is fixed"
                    )
                return existing

            settings = config.get(name)
            created = config.build_chain(name, on_disregard, settings=settings)
            self._chains[name] = created
            self._box_events[name] = settings.box_events
            return created

    def register(
        self,
        name: str,
        filter: Filter | Callable,
        position: int | None = None,
    ) -> None:
        """
        Add a filter to the chain called name.

        Args:
            name: Chain name (created if missing)
            filter: Filter instance or function taking (event, chain)
            position: Insert position, or None to append
        """
        target = self.chain(name)
        if position is None:
            target.add(filter)
        else:
            target.add_at(position, filter)

    def start(self, name: str, event: Any) -> None:
        """
        Start routing event through the chain called name.

        Unknown names are ignored.

        Raises:
            ConcurrentAccessError: If another thread is traversing a guarded chain
            ChainBusyError: If the chain is already in use
        """
        with self._lock:
            target = self._chains.get(name)
            box_events = self._box_events.get(name, True)
        if target is None:
            return

        if isinstance(target, SynchronizedFilterChain):
            target.check_access()
        if target.filter_is_being_used():
            raise ChainBusyError(
                f"Chain '{name}' is already routing an event; "
                "filters continue it with chain.next()"
            )

        if box_events:
            event = Box.any(event)

        try:
            target.next(event)
        except ConcurrentAccessError:
            # Another thread owns the traversal; leave it alone
            raise
        except Exception as e:
            warnings.warn(
                f"Filter chain '{name}' failed: {e}",
                RuntimeWarning,
                stacklevel=2,
            )
            target.reset()

    def names(self) -> list[str]:
        """Registered chain names in creation order."""
        with self._lock:
            return list(self._chains)

    def remove(self, name: str) -> None:
        """
        Forget the chain called name.

        Raises:
            RegistryError: If no such chain exists
            ChainBusyError: If the chain is in use
        """
        with self._lock:
            target = self._chains.get(name)
            if target is None:
                raise RegistryError(f"No chain named '{name}'")
            if target.filter_is_being_used():
                raise ChainBusyError(f"Chain '{name}' is in use and cannot be removed")
            del self._chains[name]
            del self._box_events[name]

    def clear(self) -> None:
        """Forget all chains."""
        with self._lock:
            self._chains.clear()
            self._box_events.clear()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._chains


# Global registry instance
_global_registry = ChainRegistry()


# Public API functions
def on(name: str, position: int | None = None):
    """
    Decorator to register a function as a filter of the chain called name.

    Example:
        @filterchain.chains.on('orders')
        def audit(event: Box, chain: FilterChain):
            log.append(event.into())
            chain.next(event)
    """

    def decorator(func: Callable) -> Callable:
        _global_registry.register(name, func, position)
        return func

    return decorator


def chain(
    name: str, on_disregard: Callable[[str], None] | None = None
) -> FilterChain:
    """
    Get or create a chain in the global registry.

    Example:
        filterchain.chains.chain('orders', on_disregard=rejected.append)
    """
    return _global_registry.chain(name, on_disregard)


def start(name: str, event: Any) -> None:
    """
    Start a traversal of a chain in the global registry.

    Example:
        filterchain.chains.start('orders', {'amount': 10})
    """
    _global_registry.start(name, event)

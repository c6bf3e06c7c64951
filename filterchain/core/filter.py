"""
Filter - A single processing stage of a FilterChain.

A filter receives the event and the chain it runs in. After doing its work it
either forwards the event with chain.next(event) or aborts with
chain.disregard(message). Returning without calling either leaves the chain
in use until someone disregards or resets it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from filterchain.core.errors import InvalidArgumentError

if TYPE_CHECKING:
    from filterchain.core.chain import FilterChain


class Filter(ABC):
    """Base class for chain filters."""

    @abstractmethod
    def process(self, event: Any, chain: FilterChain) -> None:
        """
        Process event and decide how the chain continues.

        Args:
            event: The event being routed
            chain: The chain this filter runs in
        """


@dataclass
class FunctionFilter(Filter):
    """
    Adapts a plain function into a Filter.

    Attributes:
        callback: Function taking (event, chain)
        name: Name used in reprs, defaults to the function's __name__
    """

    callback: Callable[[Any, FilterChain], None]
    name: str = field(default="")

    def __post_init__(self):
        if not self.name:
            self.name = getattr(self.callback, "__name__", repr(self.callback))

    def process(self, event: Any, chain: FilterChain) -> None:
        self.callback(event, chain)

    def __call__(self, event: Any, chain: FilterChain) -> None:
        self.callback(event, chain)

    def __repr__(self) -> str:
        return f"FunctionFilter({self.name})"


def as_filter(obj: Any) -> Filter:
    """
    Coerce obj into something the chain can dispatch to.

    Objects with a callable process() are used as they are, so filters don't
    have to inherit from Filter. Other callables are wrapped in FunctionFilter.

    Raises:
        InvalidArgumentError: If obj is None or neither kind of filter
    """
    if obj is None:
        raise InvalidArgumentError("Filter must not be None")
    if callable(getattr(obj, "process", None)):
        return obj
    if callable(obj):
        return FunctionFilter(obj)
    raise InvalidArgumentError(
        f"Expected a Filter or a callable taking (event, chain), got {type(obj).__name__}"
    )

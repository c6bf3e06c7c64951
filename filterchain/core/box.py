"""
Box - Event envelope handed from filter to filter.

Filters are allowed to transform the event they forward. To keep one filter's
changes from leaking into the producer's object (or into a retried traversal),
events can travel inside a Box. It has two transport modes:
1. copy: serializable values are snapshotted with dill, every into() returns
   a fresh copy
2. ref: values dill can't serialize (generators, live connections) are shared
   by reference
"""

import pickle
from typing import Any

import dill


class BoxError(Exception):
    """Base exception for Box-related errors."""

    pass


def _is_serializable(obj: Any) -> bool:
    """
    Detect if object can be dill-serialized.

    Try-except is slower than type checking, but more accurate.
    """
    try:
        dill.dumps(obj)
        return True
    except (TypeError, AttributeError, pickle.PicklingError):
        return False


class Box:
    """
    Envelope for an event travelling through a chain.

    Usage:
        box = Box.any({"user": 1})
        chain.next(box)

        # inside a filter
        data = box.into()            # private copy
        data["checked"] = True
        chain.next(Box.any(data))    # forward the transformed event
    """

    def __init__(self, inner_type: type, mode: str, data: Any):
        """
        Internal constructor. Use Box.any() instead.

        Args:
            inner_type: The type of the contained value
            mode: Either 'copy' or 'ref'
            data: Serialized bytes (copy) or the value itself (ref)
        """
        if mode not in ("copy", "ref"):
            raise BoxError(f"Unknown transport mode: {mode!r}")
        self._inner_type = inner_type
        self._mode = mode
        self._data = data

    @classmethod
    def any(cls, value: Any) -> "Box":
        """
        Box a value, picking the transport mode automatically.

        A Box passed in is returned unchanged.
        """
        if isinstance(value, Box):
            return value

        if _is_serializable(value):
            return cls(type(value), "copy", dill.dumps(value))
        return cls(type(value), "ref", value)

    @property
    def mode(self) -> str:
        return self._mode

    def into(self) -> Any:
        """
        Unpack the Box.

        For copy mode: a new deserialized copy on every call
        For ref mode: the same object every time
        """
        if self._mode == "copy":
            return dill.loads(self._data)
        return self._data

    def clone(self) -> "Box":
        """New Box with the same content; copy mode shares the snapshot bytes."""
        return Box(self._inner_type, self._mode, self._data)

    def inner_type(self) -> type:
        """Type of the contained value."""
        return self._inner_type

    def __repr__(self) -> str:
        return f"Box<{self._inner_type.__name__}, mode={self._mode}>"

"""
Node base class, creation-order allocation and the name-keyed container.

Every node receives a sequence number when it is constructed. The number
never takes part in equality; it only lets a NodeDict hand its values back
in the order they were created, which for a decoded document is the order
they appeared in the file.

Usage:
    with build_context() as allocator:
        doc = A2LParser().parse_text(text)
    # nodes created later in the same context sort after the decoded ones
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, MutableMapping, TypeVar

if TYPE_CHECKING:
    from .schema import Schema

# Sequence numbers mirror an unsigned 64-bit counter.
MAX_ORDER_ID: int = 2**64 - 1


# --------------------------
# Creation-order allocation
# --------------------------

_issue_lock = threading.Lock()
_high_water = 0


class SequenceAllocator:
    """
    Hands out strictly increasing creation-sequence numbers.

    Every allocator continues from the highest number issued anywhere in the
    process, so numbers stay unique and increasing even when nodes from
    several build contexts end up in the same document. ``start`` can only
    move an allocator further ahead.

    Thread safe; the lock only covers the increment.
    """

    def __init__(self, start: int = 0, limit: int = MAX_ORDER_ID) -> None:
        self._last = start
        self._limit = limit

    @property
    def last(self) -> int:
        """The most recently allocated number (``start`` before the first one)."""
        return self._last

    def allocate(self) -> int:
        global _high_water
        with _issue_lock:
            current = max(self._last, _high_water)
            if current >= self._limit:
                raise OverflowError(f"node sequence exhausted after {current}")
            self._last = _high_water = current + 1
            return self._last


_DEFAULT_ALLOCATOR = SequenceAllocator()
_active_allocator: ContextVar[SequenceAllocator] = ContextVar(
    "asap2_allocator", default=_DEFAULT_ALLOCATOR
)


def current_allocator() -> SequenceAllocator:
    """Return the allocator used by nodes constructed right now."""
    return _active_allocator.get()


@contextmanager
def build_context(allocator: SequenceAllocator | None = None) -> Iterator[SequenceAllocator]:
    """
    Scope node construction to a document-owned allocator.

    Args:
        allocator: Allocator to activate; a fresh one is created if omitted

    Yields:
        The active allocator
    """
    allocator = allocator if allocator is not None else SequenceAllocator()
    token = _active_allocator.set(allocator)
    try:
        yield allocator
    finally:
        _active_allocator.reset(token)


# --------------------------
# Node base
# --------------------------

class Node:
    """
    Base class of every ASAP2 construct.

    Concrete types are dataclasses declared with ``asap2_node``; the
    generated ``__init__`` calls ``__post_init__`` below.

    While a node is stored in a NodeDict its key field cannot be changed.
    Copies (shallow or deep) are new nodes with their own sequence number.
    """

    __asap2_schema__: ClassVar[Schema]

    def __post_init__(self) -> None:
        self.__asap2_schema__.prepare(self)
        self._order_id = current_allocator().allocate()

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_holders"):
            fd = self.__asap2_schema__.key_field
            if name == fd.name and value != getattr(self, name):
                raise AttributeError(
                    f"cannot rename {type(self).__name__} {self.key!r} while it is stored in a NodeDict"
                )
        super().__setattr__(name, value)

    def __copy__(self) -> Node:
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.__dict__["_holders"] = 0
        clone._order_id = current_allocator().allocate()
        return clone

    def __deepcopy__(self, memo: dict[int, Any]) -> Node:
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        clone._order_id = current_allocator().allocate()
        for name, value in self.__dict__.items():
            if name not in ("_order_id", "_holders"):
                clone.__dict__[name] = copy.deepcopy(value, memo)
        return clone

    @property
    def order_id(self) -> int:
        """Creation-sequence number, fixed at construction."""
        return self._order_id

    @property
    def key(self) -> str | None:
        """Name under which this node is stored in a parent dictionary."""
        fd = self.__asap2_schema__.key_field
        if fd is None:
            return None
        value = getattr(self, fd.name)
        if isinstance(value, Enum):
            return value.value
        return value


N = TypeVar("N", bound=Node)


class NodeDict(MutableMapping[str, N]):
    """
    Name-keyed container of nodes.

    Lookup is by key; iteration follows the values' creation order, not the
    order they were inserted in. Two NodeDicts are equal only if they hold
    equal nodes under the same keys in the same order.
    """

    def __init__(self, nodes: Iterable[N] = ()) -> None:
        self._nodes: dict[str, N] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: N) -> N:
        """
        Insert a node under its own key.

        Raises:
            ValueError: If a node with the same key is already present
        """
        key = self._key_of(node)
        if key in self._nodes:
            raise ValueError(f"duplicate key {key!r}")
        self._store(key, node)
        return node

    @staticmethod
    def _key_of(node: N) -> str:
        key = node.key
        if key is None:
            raise ValueError(f"{type(node).__name__} has no key field")
        return key

    def _store(self, key: str, node: N) -> None:
        node.__dict__["_holders"] = node.__dict__.get("_holders", 0) + 1
        self._nodes[key] = node

    def __getitem__(self, key: str) -> N:
        return self._nodes[key]

    def __setitem__(self, key: str, node: N) -> None:
        if self._key_of(node) != key:
            raise ValueError(f"{type(node).__name__} {node.key!r} cannot be stored as {key!r}")
        if key in self._nodes:
            del self[key]
        self._store(key, node)

    def __delitem__(self, key: str) -> None:
        node = self._nodes.pop(key)
        node.__dict__["_holders"] -= 1

    def __contains__(self, key: Any) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._nodes, key=lambda k: self._nodes[k].order_id))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeDict):
            return NotImplemented
        return list(self.items()) == list(other.items())

    __hash__ = None  # type: ignore[assignment]

    def __deepcopy__(self, memo: dict[int, Any]) -> NodeDict[N]:
        clone: NodeDict[N] = type(self)()
        memo[id(self)] = clone
        for node in self.values():
            clone.add(copy.deepcopy(node, memo))
        return clone

    def __repr__(self) -> str:
        return f"NodeDict({list(self.values())!r})"

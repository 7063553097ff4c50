"""Append-only node arena.

Nodes are addressed by ``NodeHandle`` values.  A handle is an index plus the
identity of the tree that issued it; handles are never invalidated or reused.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, NamedTuple, TypeVar

from .errors import InvalidHandle

T = TypeVar("T")

_tree_ids = itertools.count()


@dataclass(frozen=True)
class NodeHandle:
    index: int
    owner: int = field(default=-1, compare=False, repr=False)


class Edge(NamedTuple):
    start: Any
    end: Any


@dataclass
class _Node(Generic[T]):
    data: T
    children: list[NodeHandle] = field(default_factory=list)


class Tree(Generic[T]):
    def __init__(self) -> None:
        self._id = next(_tree_ids)
        self._nodes: list[_Node[T]] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        n_edges = sum(len(n.children) for n in self._nodes)
        return f"Tree(nodes={len(self._nodes)}, edges={n_edges})"

    def _node(self, handle: NodeHandle) -> _Node[T]:
        if not isinstance(handle, NodeHandle) or handle.owner != self._id:
            raise InvalidHandle(f"{handle!r} was not issued by this tree")
        if not 0 <= handle.index < len(self._nodes):
            raise InvalidHandle(f"{handle!r} is out of range")
        return self._nodes[handle.index]

    @property
    def root(self) -> NodeHandle:
        if not self._nodes:
            raise InvalidHandle("tree is empty")
        return NodeHandle(0, self._id)

    def add_node(self, data: T) -> NodeHandle:
        self._nodes.append(_Node(data))
        return NodeHandle(len(self._nodes) - 1, self._id)

    def add_edge(self, start: NodeHandle, end: NodeHandle) -> None:
        self._node(end)
        self._node(start).children.append(end)

    def get(self, handle: NodeHandle) -> T:
        return self._node(handle).data

    def children(self, handle: NodeHandle) -> list[NodeHandle]:
        return list(self._node(handle).children)

    def handles(self) -> Iterator[NodeHandle]:
        return (NodeHandle(i, self._id) for i in range(len(self._nodes)))

    def edges(self) -> Iterator[Edge]:
        """Yield ``(start, end)`` payload pairs.

        Nodes are walked in insertion order, then each node's children in the
        order their edges were added.  Call again to restart.
        """
        for node in self._nodes:
            for child in node.children:
                yield Edge(node.data, self._nodes[child.index].data)

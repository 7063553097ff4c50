"""Deterministic two-sided context-sensitive L-systems.

``evolve`` rewrites every symbol of a word in parallel: each position sees
only the previous generation, never the partly rewritten current one.
``construct_tree`` evolves an L-system and then feeds the result, one symbol
at a time, to the L-system's ``process`` hook which grows a ``Tree``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any, Generic, TypeVar, overload

from .alphabet import Symbol
from .errors import StackUnderflow, _require
from .grammar import GrammarFunc
from .tree import NodeHandle, Tree

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


# -------------------------
# Context windows
# -------------------------


class ContextWindow(Sequence[Symbol]):
    """Read-only view of ``data[start:stop]`` that does not copy.

    Slicing a window copies the slice into a list.
    """

    __slots__ = ("_data", "_start", "_stop")

    def __init__(self, data: tuple[Symbol, ...], start: int, stop: int) -> None:
        self._data = data
        self._start = start
        self._stop = stop

    def __len__(self) -> int:
        return self._stop - self._start

    @overload
    def __getitem__(self, i: int) -> Symbol: ...

    @overload
    def __getitem__(self, i: slice) -> list[Symbol]: ...

    def __getitem__(self, i: int | slice) -> Symbol | list[Symbol]:
        n = self._stop - self._start
        if isinstance(i, slice):
            lo, hi, step = i.indices(n)
            return list(self._data[self._start + lo : self._start + hi : step])
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError("context window index out of range")
        return self._data[self._start + i]

    def __iter__(self) -> Iterator[Symbol]:
        for i in range(self._start, self._stop):
            yield self._data[i]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (ContextWindow, list, tuple)):
            return tuple(self) == tuple(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ContextWindow({list(self)!r})"


# -------------------------
# Evolution
# -------------------------


def evolve(
    grammar: GrammarFunc, axiom: Iterable[Symbol], iterations: int
) -> list[Symbol]:
    """Apply ``grammar`` to every symbol of ``axiom`` for ``iterations`` generations."""
    _require(
        isinstance(iterations, int) and not isinstance(iterations, bool),
        "iterations must be an integer",
    )
    _require(iterations >= 0, "iterations must be >= 0")

    current = list(axiom)
    for gen in range(iterations):
        snapshot = tuple(current)
        n = len(snapshot)
        nxt: list[Symbol] = []
        for a in range(n):
            left = ContextWindow(snapshot, 0, a)
            right = ContextWindow(snapshot, a + 1, n)
            nxt.extend(grammar(snapshot[a], left, right))
        current = nxt
        logger.debug("generation %d: %d -> %d symbols", gen + 1, n, len(current))
    return current


# -------------------------
# Interpretation
# -------------------------


class Context(Generic[T, S]):
    """Mutable interpretation state: the tree being grown and a state stack."""

    def __init__(self, tree: Tree[T], state: S) -> None:
        self.tree = tree
        self.state = state
        self._stack: list[S] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def push(self) -> None:
        self._stack.append(self.state)

    def pop(self) -> None:
        if not self._stack:
            raise StackUnderflow("pop with no saved state on the stack")
        self.state = self._stack.pop()


Command = Callable[..., Any]


def interpret(
    symbols: Iterable[Symbol],
    context: Context[Any, Any],
    commands: Mapping[str, Command],
) -> None:
    """Run ``commands[tag](context, *params)`` for each symbol, in order.

    Tags without a command are skipped.
    """
    for sym in symbols:
        cmd = commands.get(sym.tag)
        if cmd is not None:
            cmd(context, *sym.params)


class LSystem(ABC, Generic[T, S]):
    @abstractmethod
    def axiom(self) -> list[Symbol]: ...

    @abstractmethod
    def production_rules(
        self, symbol: Symbol, left: Sequence[Symbol], right: Sequence[Symbol]
    ) -> Iterable[Symbol]: ...

    @abstractmethod
    def process(self, context: Context[T, S], symbol: Symbol) -> None: ...


class RuleLSystem(LSystem[T, S]):
    """An L-system assembled from an axiom, a grammar and a command table."""

    def __init__(
        self,
        axiom: Iterable[Symbol],
        grammar: GrammarFunc,
        commands: Mapping[str, Command] | None = None,
    ) -> None:
        self._axiom = list(axiom)
        self.grammar = grammar
        self.commands = dict(commands or {})

    def axiom(self) -> list[Symbol]:
        return list(self._axiom)

    def production_rules(
        self, symbol: Symbol, left: Sequence[Symbol], right: Sequence[Symbol]
    ) -> Iterable[Symbol]:
        return self.grammar(symbol, left, right)

    def process(self, context: Context[T, S], symbol: Symbol) -> None:
        interpret((symbol,), context, self.commands)


def evolve_lsystem(lsystem: LSystem[Any, Any], iterations: int) -> list[Symbol]:
    return evolve(lsystem.production_rules, lsystem.axiom(), iterations)


def interpret_tree(
    lsystem: LSystem[T, S],
    root: T,
    word: Sequence[Symbol],
    initialize_state: Callable[[NodeHandle], S],
    context_factory: Callable[[Tree[T], S], Context[T, S]] = Context,
) -> Tree[T]:
    """Interpret an already evolved ``word`` into a new tree.

    ``root`` becomes node 0 and ``initialize_state`` turns its handle into the
    starting state.  Raises ``StackUnderflow`` if the word pops more states
    than it pushed, or leaves pushed states behind.
    """
    tree: Tree[T] = Tree()
    root_handle = tree.add_node(root)
    context = context_factory(tree, initialize_state(root_handle))

    logger.debug("interpreting %d symbols", len(word))
    for sym in word:
        lsystem.process(context, sym)

    if context.depth:
        raise StackUnderflow(f"{context.depth} pushed state(s) never popped")

    logger.info("built tree with %d nodes from %d symbols", len(tree), len(word))
    return tree


def construct_tree(
    lsystem: LSystem[T, S],
    root: T,
    iterations: int,
    initialize_state: Callable[[NodeHandle], S],
    context_factory: Callable[[Tree[T], S], Context[T, S]] = Context,
) -> Tree[T]:
    """Evolve ``lsystem`` and interpret the result into a new tree."""
    word = evolve_lsystem(lsystem, iterations)
    return interpret_tree(lsystem, root, word, initialize_state, context_factory)

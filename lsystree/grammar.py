"""Ordered production-rule tables for context-sensitive L-systems.

A rule is written as patterns in word notation::

    Rule("A(x)", left="A(a)", right="B(b, c)",
         guard=lambda v: v.a + v.b + v.c < 10,
         produce=lambda v: [B(v.a + v.b, v.a + v.c), A(v.x + v.a + v.b + v.c)])

Each pattern slot is a name (binds the parameter), ``_`` (matches anything) or
a number (must be equal).  The left pattern must match the symbols directly
before the focus and the right pattern the symbols directly after it.  Rules
are tried in order and the first match wins; a symbol no rule matches is
copied unchanged.
"""

from __future__ import annotations

import keyword
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Union

from .alphabet import Alphabet, Number, Symbol, parse_number, tokenize_word
from .errors import MalformedGrammar


class GrammarFunc(Protocol):
    def __call__(
        self, symbol: Symbol, left: Sequence[Symbol], right: Sequence[Symbol]
    ) -> Iterable[Symbol]: ...


class Bindings:
    """Names bound by a rule's patterns; readable as ``v["x"]`` or ``v.x``."""

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, Number] = {}

    def __getitem__(self, name: str) -> Number:
        return self._values[name]

    def __setitem__(self, name: str, value: Number) -> None:
        self._values[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getattr__(self, name: str) -> Number:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"Bindings({self._values!r})"


# Pattern names that would be shadowed by attributes of Bindings itself.
_RESERVED_NAMES = frozenset(dir(Bindings))


Guard = Callable[[Bindings], bool]
Producer = Union[Callable[[Bindings], Iterable[Symbol]], str, Sequence[Symbol]]


@dataclass(frozen=True)
class Rule:
    focus: str
    produce: Producer
    left: str | None = None
    right: str | None = None
    guard: Guard | None = None


# -------------------------
# Compiled patterns
# -------------------------

_WILD = object()


@dataclass(frozen=True)
class _Module:
    tag: str
    # each slot is a name (str), _WILD, or a literal number
    slots: tuple[Any, ...]

    def match(self, sym: Symbol, env: Bindings) -> bool:
        if sym.tag != self.tag or len(sym.params) != len(self.slots):
            return False
        for slot, value in zip(self.slots, sym.params):
            if slot is _WILD:
                continue
            if isinstance(slot, str):
                env[slot] = value
            elif slot != value:
                return False
        return True


def _compile_pattern(
    text: str, alphabet: Alphabet, seen: set[str], where: str
) -> tuple[_Module, ...]:
    modules = []
    for tag, raw in tokenize_word(text):
        if tag not in alphabet:
            raise MalformedGrammar(f"{where}: unknown tag {tag!r} in {text!r}")
        if len(raw) != alphabet.arity(tag):
            raise MalformedGrammar(
                f"{where}: {tag} takes {alphabet.arity(tag)} parameter(s), "
                f"pattern {text!r} gives {len(raw)}"
            )
        slots: list[Any] = []
        for r in raw:
            if r == "_":
                slots.append(_WILD)
            elif r.isidentifier():
                if keyword.iskeyword(r) or r in _RESERVED_NAMES:
                    raise MalformedGrammar(f"{where}: {r!r} is a reserved word")
                if r in seen:
                    raise MalformedGrammar(f"{where}: name {r!r} is bound twice")
                seen.add(r)
                slots.append(r)
            else:
                slots.append(parse_number(r))
        modules.append(_Module(tag, tuple(slots)))
    return tuple(modules)


@dataclass(frozen=True)
class _CompiledRule:
    left: tuple[_Module, ...]
    focus: _Module
    right: tuple[_Module, ...]
    guard: Guard | None
    produce: Callable[[Bindings], Iterable[Symbol]]

    def fire(
        self, symbol: Symbol, left: Sequence[Symbol], right: Sequence[Symbol]
    ) -> list[Symbol] | None:
        env = Bindings()
        if not self.focus.match(symbol, env):
            return None

        k = len(self.left)
        if k:
            offset = len(left) - k
            if offset < 0:
                return None
            for i, m in enumerate(self.left):
                if not m.match(left[offset + i], env):
                    return None

        k = len(self.right)
        if k:
            if len(right) < k:
                return None
            for i, m in enumerate(self.right):
                if not m.match(right[i], env):
                    return None

        if self.guard is not None and not self.guard(env):
            return None
        return list(self.produce(env))


def _compile_rule(rule: Rule, alphabet: Alphabet, index: int) -> _CompiledRule:
    where = f"rule {index} ({rule.focus!r})"
    seen: set[str] = set()

    focus = _compile_pattern(rule.focus, alphabet, seen, where)
    if len(focus) != 1:
        raise MalformedGrammar(f"{where}: focus must be exactly one module")
    left = _compile_pattern(rule.left, alphabet, seen, where) if rule.left else ()
    right = _compile_pattern(rule.right, alphabet, seen, where) if rule.right else ()

    if rule.guard is not None and not callable(rule.guard):
        raise MalformedGrammar(f"{where}: guard must be callable")

    produce = rule.produce
    if isinstance(produce, str):
        word = tuple(alphabet.parse(produce))
        return _CompiledRule(left, focus[0], right, rule.guard, lambda _env: word)
    if callable(produce):
        return _CompiledRule(left, focus[0], right, rule.guard, produce)
    try:
        static = tuple(alphabet.check(s) for s in produce)
    except (TypeError, AttributeError) as e:
        raise MalformedGrammar(f"{where}: produce must be a word or callable") from e
    return _CompiledRule(left, focus[0], right, rule.guard, lambda _env: static)


class Grammar:
    """A total production function built from an ordered rule table."""

    def __init__(self, alphabet: Alphabet, rules: Iterable[Rule] = ()) -> None:
        self.alphabet = alphabet
        self._rules: list[_CompiledRule] = []
        for rule in rules:
            self.add(rule)

    def __len__(self) -> int:
        return len(self._rules)

    def add(self, rule: Rule) -> None:
        if not isinstance(rule, Rule):
            raise MalformedGrammar(f"expected a Rule, got {type(rule).__name__}")
        self._rules.append(_compile_rule(rule, self.alphabet, len(self._rules)))

    def rule(
        self,
        focus: str,
        *,
        left: str | None = None,
        right: str | None = None,
        guard: Guard | None = None,
    ) -> Callable[[Callable[[Bindings], Iterable[Symbol]]], Callable[..., Any]]:
        """Decorator form of ``add``; the decorated function is the producer."""

        def deco(fn: Callable[[Bindings], Iterable[Symbol]]) -> Callable[..., Any]:
            self.add(Rule(focus, fn, left=left, right=right, guard=guard))
            return fn

        return deco

    def apply(
        self, symbol: Symbol, left: Sequence[Symbol], right: Sequence[Symbol]
    ) -> list[Symbol]:
        for rule in self._rules:
            out = rule.fire(symbol, left, right)
            if out is not None:
                return out
        return [symbol]

    __call__ = apply

"""Tagged symbols with fixed-arity numeric payloads.

Words are written in a small text notation, one module per token:

    A(1) A(2) B(3, 4) [ R(0, 180, 25) F(10) ]

A tag is either an identifier or a single punctuation character.  ``FF`` is
one identifier, so identifier tags without arguments need whitespace between
them; punctuation tags may touch their neighbours (``F[``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from .errors import MalformedGrammar

Number = Union[int, float]

_PUNCT_TAGS = "[]+-&^/\\|!"
_TAG = r"[A-Za-z_][A-Za-z0-9_]*|[" + re.escape(_PUNCT_TAGS) + r"]"
_TAG_RE = re.compile(_TAG)
_TOKEN_RE = re.compile(r"\s*(?P<tag>" + _TAG + r")(?:\s*\((?P<args>[^()]*)\))?")


@dataclass(frozen=True)
class Symbol:
    tag: str
    params: tuple[Number, ...] = ()

    def __repr__(self) -> str:
        if not self.params:
            return self.tag
        return f"{self.tag}({', '.join(_fmt_number(p) for p in self.params)})"

    __str__ = __repr__


def _fmt_number(x: Number) -> str:
    if isinstance(x, float) and x.is_integer():
        return str(int(x)) if abs(x) < 1e16 else repr(x)
    return str(x)


def format_word(symbols: Iterable[Symbol]) -> str:
    return " ".join(repr(s) for s in symbols)


def tokenize_word(text: str) -> list[tuple[str, list[str]]]:
    """Split a word into ``(tag, [raw argument, ...])`` pairs."""
    out: list[tuple[str, list[str]]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise MalformedGrammar(
                f"cannot parse word {text!r} at offset {pos}: {text[pos:pos + 10]!r}"
            )
        args = m.group("args")
        if args is None:
            raw: list[str] = []
        else:
            raw = [a.strip() for a in args.split(",")] if args.strip() else []
            if any(not a for a in raw):
                raise MalformedGrammar(f"empty argument in {m.group(0).strip()!r}")
        out.append((m.group("tag"), raw))
        pos = m.end()
    return out


def parse_number(raw: str) -> Number:
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError as e:
        raise MalformedGrammar(f"expected a number, got {raw!r}") from e


class Alphabet:
    """A closed set of tags, each with a fixed number of parameters."""

    def __init__(self, arities: Mapping[str, int]) -> None:
        for tag, n in arities.items():
            if not isinstance(n, int) or n < 0:
                raise MalformedGrammar(f"arity of {tag!r} must be a non-negative int")
            if not isinstance(tag, str) or not _TAG_RE.fullmatch(tag):
                raise MalformedGrammar(f"invalid tag {tag!r}")
        self._arities = MappingProxyType(dict(arities))

    def __contains__(self, tag: object) -> bool:
        return tag in self._arities

    def __iter__(self) -> Iterator[str]:
        return iter(self._arities)

    def __len__(self) -> int:
        return len(self._arities)

    def __repr__(self) -> str:
        body = ", ".join(f"{t}/{n}" for t, n in self._arities.items())
        return f"Alphabet({body})"

    def arity(self, tag: str) -> int:
        try:
            return self._arities[tag]
        except KeyError:
            raise MalformedGrammar(f"tag {tag!r} is not in {self!r}") from None

    def symbol(self, tag: str, *params: Number) -> Symbol:
        n = self.arity(tag)
        if len(params) != n:
            raise MalformedGrammar(f"{tag} takes {n} parameter(s), got {len(params)}")
        return Symbol(tag, tuple(params))

    def check(self, sym: Symbol) -> Symbol:
        if len(sym.params) != self.arity(sym.tag):
            raise MalformedGrammar(f"{sym!r} does not match arity of {sym.tag!r}")
        return sym

    def parse(self, text: str) -> list[Symbol]:
        return [
            self.symbol(tag, *(parse_number(a) for a in raw))
            for tag, raw in tokenize_word(text)
        ]


def parse_word(text: str) -> list[Symbol]:
    """Parse a word without checking it against an alphabet."""
    return [
        Symbol(tag, tuple(parse_number(a) for a in raw))
        for tag, raw in tokenize_word(text)
    ]

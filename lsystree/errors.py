"""Exception types shared across the package."""

from __future__ import annotations


class LSystemError(Exception):
    pass


class ConfigError(LSystemError, ValueError):
    pass


class MalformedGrammar(LSystemError, ValueError):
    """A rule table or symbol that cannot be compiled against its alphabet."""


class InvalidHandle(LSystemError, IndexError):
    """A node handle that was not issued by the tree it is used with."""


class StackUnderflow(LSystemError, RuntimeError):
    """Unbalanced push/pop while interpreting a word."""


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)

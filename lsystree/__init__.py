"""Context-sensitive L-systems that grow 3D branching trees."""

from .alphabet import Alphabet, Symbol, format_word, parse_word
from .errors import (
    ConfigError,
    InvalidHandle,
    LSystemError,
    MalformedGrammar,
    StackUnderflow,
)
from .grammar import Bindings, Grammar, Rule
from .lsys import (
    Context,
    ContextWindow,
    LSystem,
    RuleLSystem,
    construct_tree,
    evolve,
    evolve_lsystem,
    interpret,
    interpret_tree,
)
from .premade import HONDA_DEFAULTS, HondaD0L, HondaParams
from .tree import Edge, NodeHandle, Tree
from .tree3d import (
    TURTLE_ALPHABET,
    TURTLE_COMMANDS,
    Tree3DContext,
    Tree3DNode,
    Tree3DState,
    build,
    construct_tree_3d,
    interpret_tree_3d,
)

__all__ = [
    "Alphabet",
    "Bindings",
    "ConfigError",
    "Context",
    "ContextWindow",
    "Edge",
    "Grammar",
    "HONDA_DEFAULTS",
    "HondaD0L",
    "HondaParams",
    "InvalidHandle",
    "LSystem",
    "LSystemError",
    "MalformedGrammar",
    "NodeHandle",
    "Rule",
    "RuleLSystem",
    "StackUnderflow",
    "Symbol",
    "TURTLE_ALPHABET",
    "TURTLE_COMMANDS",
    "Tree",
    "Tree3DContext",
    "Tree3DNode",
    "Tree3DState",
    "build",
    "construct_tree",
    "construct_tree_3d",
    "evolve",
    "evolve_lsystem",
    "format_word",
    "interpret",
    "interpret_tree",
    "interpret_tree_3d",
    "parse_word",
]

"""Premade species.

``HondaD0L`` is Honda's model of a monopodial tree: every apex ``A(s, w)``
lays down an internode of length ``s`` and diameter ``w`` and then splits into
two lateral apices, each rotated by its own pitch/yaw and shortened by its own
scale factor.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from .alphabet import Alphabet, Symbol
from .grammar import Bindings, Grammar, Rule
from .lsys import RuleLSystem
from .tree3d import TURTLE_COMMANDS, Tree3DNode, Tree3DState

# Turtle commands plus the apex A(length, diameter).
HONDA_ALPHABET = Alphabet({"F": 1, "W": 1, "R": 3, "[": 0, "]": 0, "A": 2})


@dataclass(frozen=True)
class HondaParams:
    internode_scale_factor_1: float = 0.60
    internode_scale_factor_2: float = 0.85
    branch_yaw_1: float = 25.0
    branch_yaw_2: float = -15.0
    branch_pitch_1: float = 180.0
    branch_pitch_2: float = 180.0
    branch_differential_diameter_factor: float = 0.45
    branch_diameter_conservation_factor: float = 0.50
    root_diameter: float = 10.0
    root_length: float = 100.0

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


HONDA_DEFAULTS = HondaParams()


def honda_grammar(p: HondaParams) -> Grammar:
    sym = HONDA_ALPHABET.symbol
    shrink = (
        p.branch_differential_diameter_factor
        ** p.branch_diameter_conservation_factor
    )

    def grow(v: Bindings) -> list[Symbol]:
        s, w = v.s, v.w
        return [
            sym("W", w),
            sym("F", s),
            sym("["),
            sym("R", 0.0, p.branch_pitch_1, p.branch_yaw_1),
            sym("A", s * p.internode_scale_factor_1, w * shrink),
            sym("]"),
            sym("["),
            sym("R", 0.0, p.branch_pitch_2, p.branch_yaw_2),
            sym("A", s * p.internode_scale_factor_2, w * shrink),
            sym("]"),
        ]

    return Grammar(HONDA_ALPHABET, [Rule("A(s, w)", grow)])


class HondaD0L(RuleLSystem[Tree3DNode, Tree3DState]):
    def __init__(self, params: HondaParams = HONDA_DEFAULTS) -> None:
        self.params = params
        super().__init__(
            [HONDA_ALPHABET.symbol("A", params.root_length, params.root_diameter)],
            honda_grammar(params),
            TURTLE_COMMANDS,
        )

    def root(self) -> Tree3DNode:
        return Tree3DNode(position=(0.0, 0.0, 0.0), diameter=self.params.root_diameter)


SPECIES = {"honda": (HondaParams, HondaD0L)}

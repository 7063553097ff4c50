"""3D turtle interpretation into a tree of positioned, sized nodes.

The turtle's heading is a 3x3 orientation matrix; it moves along its local
+Y axis.  Symbols are interpreted through ``TURTLE_COMMANDS``:

    F(length)    forward, adding a node and an edge
    W(diameter)  diameter used by the following nodes
    R(x, y, z)   rotate by Euler angles in degrees (x, then y, then z)
    [            push state
    ]            pop state
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

import numpy as np

from .alphabet import Alphabet, Symbol
from .lsys import Command, Context, LSystem, evolve_lsystem, interpret_tree
from .tree import NodeHandle, Tree

Vec3 = tuple[float, float, float]

UP = np.array([0.0, 1.0, 0.0])

# Tags and arities understood by the turtle.
TURTLE_ALPHABET = Alphabet({"F": 1, "W": 1, "R": 3, "[": 0, "]": 0})


@dataclass(frozen=True)
class Tree3DNode:
    position: Vec3
    diameter: float


def _frozen(m: np.ndarray) -> np.ndarray:
    m = np.array(m, dtype=float)
    m.setflags(write=False)
    return m


def _identity() -> np.ndarray:
    return _frozen(np.eye(3))


@dataclass(frozen=True, eq=False)
class Tree3DState:
    last_node: NodeHandle
    next_diameter: float
    heading: np.ndarray = field(default_factory=_identity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree3DState):
            return NotImplemented
        return (
            self.last_node == other.last_node
            and self.next_diameter == other.next_diameter
            and bool(np.array_equal(self.heading, other.heading))
        )

    __hash__ = None  # type: ignore[assignment]


def rotation_matrix(x_deg: float, y_deg: float, z_deg: float) -> np.ndarray:
    """Return ``Rx @ Ry @ Rz`` for angles given in degrees."""
    x, y, z = math.radians(x_deg), math.radians(y_deg), math.radians(z_deg)
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


class Tree3DContext(Context[Tree3DNode, Tree3DState]):
    def forward(self, length: float) -> None:
        """Add a node ``length`` along the heading and connect it to the last node."""
        delta = float(length) * (self.state.heading @ UP)
        start = np.asarray(self.tree.get(self.state.last_node).position, dtype=float)
        end = start + delta

        new_node = self.tree.add_node(
            Tree3DNode(
                position=(float(end[0]), float(end[1]), float(end[2])),
                diameter=self.state.next_diameter,
            )
        )
        self.tree.add_edge(self.state.last_node, new_node)
        self.state = replace(self.state, last_node=new_node)

    def diameter(self, diameter: float) -> None:
        # Only nodes created after this call use the new diameter.
        self.state = replace(self.state, next_diameter=float(diameter))

    def rotate(self, x: float, y: float, z: float) -> None:
        heading = self.state.heading @ rotation_matrix(x, y, z)
        self.state = replace(self.state, heading=_frozen(heading))


TURTLE_COMMANDS: Mapping[str, Command] = {
    "F": Tree3DContext.forward,
    "W": Tree3DContext.diameter,
    "R": Tree3DContext.rotate,
    "[": Tree3DContext.push,
    "]": Tree3DContext.pop,
}


def initial_state(handle: NodeHandle, diameter: float) -> Tree3DState:
    return Tree3DState(last_node=handle, next_diameter=float(diameter))


def interpret_tree_3d(
    lsystem: LSystem[Tree3DNode, Tree3DState],
    root: Tree3DNode,
    word: Sequence[Symbol],
) -> Tree[Tree3DNode]:
    """Interpret an evolved ``word`` from ``root`` with identity heading."""
    return interpret_tree(
        lsystem,
        root,
        word,
        lambda handle: initial_state(handle, root.diameter),
        Tree3DContext,
    )


def construct_tree_3d(
    lsystem: LSystem[Tree3DNode, Tree3DState], root: Tree3DNode, iterations: int
) -> Tree[Tree3DNode]:
    """Grow a tree from ``root`` with identity heading and the root's diameter."""
    return interpret_tree_3d(lsystem, root, evolve_lsystem(lsystem, iterations))


def build(
    species: LSystem[Tree3DNode, Tree3DState],
    root: Tree3DNode | None = None,
    iterations: int = 0,
) -> Tree[Tree3DNode]:
    """Build entry point.

    ``root`` defaults to ``species.root()`` when the species defines one, and
    otherwise to a unit-diameter node at the origin.
    """
    if root is None:
        make_root = getattr(species, "root", None)
        if callable(make_root):
            root = make_root()
        else:
            root = Tree3DNode(position=(0.0, 0.0, 0.0), diameter=1.0)
    return construct_tree_3d(species, root, iterations)

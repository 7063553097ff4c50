"""Command line interface.

Run:
  lsystree edges config.json
  lsystree validate config.json
  lsystree svg config.json output.svg
  lsystree --help
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import BuildConfig, load_json, parse_config
from .errors import ConfigError, LSystemError
from .lsys import evolve_lsystem
from .svg import write_svg
from .tree import Tree
from .tree3d import Tree3DNode, build, interpret_tree_3d

HELP_EPILOG = r"""
INPUT JSON SYNTAX

  name: string (optional)
      Title written into the SVG <title>.

  species: string (default "honda")
      Premade species to grow.

  iterations: integer >= 0 (default 0)
      Number of rewriting generations. 0 interprets the axiom as is.

  params: object (optional)
      Species parameters; omitted names keep their defaults. For "honda":
        internode_scale_factor_1 (0.60)   internode_scale_factor_2 (0.85)
        branch_yaw_1 (25)                 branch_yaw_2 (-15)
        branch_pitch_1 (180)              branch_pitch_2 (180)
        branch_differential_diameter_factor (0.45)
        branch_diameter_conservation_factor (0.50)
        root_diameter (10)                root_length (100)

  root: object (optional)
      root.position: [x, y, z] (default [0, 0, 0])
      root.diameter: number (default params.root_diameter)

  svg: object (optional, used by the svg command)
      margin (10), precision 0..10 (3), flip_y (true), width, height,
      background, style.stroke ("#000"), style.width_scale (1),
      style.min_width (0.1), style.stroke_linecap ("round")

The svg command projects the tree onto the XY plane; stroke widths follow
node diameters.
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lsystree",
        description="Grow a 3D branching tree from a context-sensitive L-system.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Log each rewriting generation."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("edges", help="Print every edge of the grown tree.")
    pe.add_argument("config", help="Path to the input JSON config.")

    pv = sub.add_parser(
        "validate", help="Validate a JSON config and print a brief summary."
    )
    pv.add_argument("config", help="Path to the input JSON config.")

    ps = sub.add_parser("svg", help="Write an XY projection of the tree as SVG.")
    ps.add_argument("config", help="Path to the input JSON config.")
    ps.add_argument("output", help="Path to write the SVG output.")

    return p


def _grow(config_path: str) -> tuple[BuildConfig, Tree[Tree3DNode]]:
    cfg = parse_config(load_json(config_path))
    return cfg, build(cfg.species, cfg.root, cfg.iterations)


def _fmt_node(node: Tree3DNode) -> str:
    x, y, z = node.position
    return f"(pos: ({x:.3f}, {y:.3f}, {z:.3f}), dia: {node.diameter:.3f})"


def cmd_edges(config_path: str) -> None:
    _, tree = _grow(config_path)
    for edge in tree.edges():
        print(f"Edge: {_fmt_node(edge.start)}, {_fmt_node(edge.end)}")


def cmd_validate(config_path: str) -> None:
    cfg = parse_config(load_json(config_path))
    word = evolve_lsystem(cfg.species, cfg.iterations)
    tree = interpret_tree_3d(cfg.species, cfg.root, word)

    print(f"name: {cfg.name}")
    print(f"species: {type(cfg.species).__name__}")
    print(f"iterations: {cfg.iterations}")
    print(f"symbols: {len(word)}")
    print(f"nodes: {len(tree)}")
    print(f"edges: {sum(1 for _ in tree.edges())}")


def cmd_svg(config_path: str, output_path: str) -> None:
    cfg, tree = _grow(config_path)
    write_svg(tree, output_path, cfg.svg, title=cfg.name)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "edges":
            cmd_edges(args.config)
        elif args.cmd == "validate":
            cmd_validate(args.config)
        elif args.cmd == "svg":
            cmd_svg(args.config, args.output)
        else:
            raise AssertionError("unreachable")
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except LSystemError as e:
        print(f"L-system error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0

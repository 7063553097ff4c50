"""SVG preview of a tree: edges projected onto the XY plane."""

from __future__ import annotations

import math
import os
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import _require
from .tree import Tree
from .tree3d import Tree3DNode

Point = tuple[float, float]
Segment = tuple[Point, Point, float]


@dataclass(frozen=True)
class SvgStyle:
    stroke: str = "#000"
    # multiplier applied to each node's diameter
    width_scale: float = 1.0
    min_width: float = 0.1
    stroke_linecap: str = "round"


@dataclass(frozen=True)
class SvgOptions:
    margin: float = 10.0
    precision: int = 3
    flip_y: bool = True
    width: float | None = None
    height: float | None = None
    style: SvgStyle = SvgStyle()
    background: str | None = None


def project_edges(tree: Tree[Tree3DNode]) -> list[Segment]:
    """Drop the Z coordinate; each segment is ``(start, end, end diameter)``."""
    return [
        (
            (e.start.position[0], e.start.position[1]),
            (e.end.position[0], e.end.position[1]),
            e.end.diameter,
        )
        for e in tree.edges()
    ]


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)


def compute_bounds(segments: Iterable[Segment]) -> tuple[float, float, float, float]:
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for a, b, _ in segments:
        for x, y in (a, b):
            min_x = min(min_x, x)
            max_x = max(max_x, x)
            min_y = min(min_y, y)
            max_y = max(max_y, y)
    _require(min_x != math.inf, "No drawable geometry produced.")
    return (min_x, min_y, max_x, max_y)


def _fmt(x: float, precision: int) -> str:
    # Normalise -0.0 so it never produces "-0" in SVG output.
    if not x:
        x = 0.0
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("", "-0"):
        s = "0"
    return s


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_svg(
    segments: list[Segment], options: SvgOptions, title: str | None = None
) -> str:
    minx, miny, maxx, maxy = compute_bounds(segments)
    p = options.precision

    minx -= options.margin
    miny -= options.margin
    maxx += options.margin
    maxy += options.margin
    w = maxx - minx
    h = maxy - miny
    _require(
        w > 0 and h > 0,
        "Degenerate bounds after margin (width or height is zero). "
        "Set svg.margin > 0 to render collinear geometry.",
    )

    size_attr = ""
    if options.width:
        size_attr += f' width="{_fmt(float(options.width), p)}"'
    if options.height:
        size_attr += f' height="{_fmt(float(options.height), p)}"'
    view_box = f"{_fmt(minx, p)} {_fmt(miny, p)} {_fmt(w, p)} {_fmt(h, p)}"

    lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    lines.append(
        '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
        f'viewBox="{view_box}"{size_attr}>'
    )
    if title:
        lines.append(f"  <title>{_escape(title)}</title>")
    if options.background and options.background.lower() != "none":
        lines.append(
            f'  <rect x="{_fmt(minx, p)}" y="{_fmt(miny, p)}" '
            f'width="{_fmt(w, p)}" height="{_fmt(h, p)}" '
            f'fill="{options.background}" />'
        )

    style = options.style
    if options.flip_y:
        # translate(0, miny+maxy) scale(1,-1) mirrors about the vertical centre.
        lines.append(
            f'  <g transform="translate(0,{_fmt(miny + maxy, p)}) scale(1,-1)" '
            f'stroke="{style.stroke}" stroke-linecap="{style.stroke_linecap}">'
        )
    else:
        lines.append(
            f'  <g stroke="{style.stroke}" stroke-linecap="{style.stroke_linecap}">'
        )

    for (x1, y1), (x2, y2), diameter in segments:
        sw = max(style.min_width, diameter * style.width_scale)
        lines.append(
            f'    <line x1="{_fmt(x1, p)}" y1="{_fmt(y1, p)}" '
            f'x2="{_fmt(x2, p)}" y2="{_fmt(y2, p)}" stroke-width="{_fmt(sw, p)}" />'
        )

    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def write_svg(
    tree: Tree[Tree3DNode], out_path: str, options: SvgOptions, title: str | None = None
) -> None:
    content = render_svg(project_edges(tree), options, title)
    _ensure_parent_dir(out_path)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(content)

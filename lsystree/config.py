"""JSON build configuration.

Example::

    {
      "name": "Honda tree",
      "species": "honda",
      "iterations": 6,
      "params": {"branch_yaw_1": 30, "root_length": 80},
      "root": {"position": [0, 0, 0], "diameter": 10},
      "svg": {"margin": 10, "style": {"stroke": "#3a2a1a"}}
    }

Parameters left out of ``params`` keep the species defaults.  ``root``
defaults to the origin with the species' root diameter.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, cast

from .errors import ConfigError, _require
from .lsys import LSystem
from .premade import SPECIES
from .svg import SvgOptions, SvgStyle
from .tree3d import Tree3DNode


def _as_float(x: Any, path: str) -> float:
    _require(
        isinstance(x, (int, float)) and not isinstance(x, bool),
        f"{path} must be a number",
    )
    return float(x)


def _as_int(x: Any, path: str) -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    return int(x)


def _as_str(x: Any, path: str) -> str:
    _require(isinstance(x, str), f"{path} must be a string")
    return cast(str, x)


def _as_bool(x: Any, path: str) -> bool:
    _require(isinstance(x, bool), f"{path} must be a boolean")
    return cast(bool, x)


def _as_dict(x: Any, path: str) -> dict[str, Any]:
    _require(isinstance(x, dict), f"{path} must be an object")
    return cast(dict[str, Any], x)


@dataclass(frozen=True)
class BuildConfig:
    name: str
    species: LSystem[Any, Any]
    iterations: int
    root: Tree3DNode
    svg: SvgOptions


def parse_svg(obj: dict[str, Any]) -> SvgOptions:
    margin = _as_float(obj.get("margin", 10), "svg.margin")
    _require(margin >= 0, "svg.margin must be >= 0")
    precision = _as_int(obj.get("precision", 3), "svg.precision")
    _require(0 <= precision <= 10, "svg.precision must be between 0 and 10")
    flip_y = _as_bool(obj.get("flip_y", True), "svg.flip_y")

    width = obj.get("width")
    height = obj.get("height")
    if width is not None:
        width = _as_float(width, "svg.width")
        _require(width > 0, "svg.width must be > 0")
    if height is not None:
        height = _as_float(height, "svg.height")
        _require(height > 0, "svg.height must be > 0")

    style_obj = _as_dict(obj.get("style", {}), "svg.style")
    style = SvgStyle(
        stroke=_as_str(style_obj.get("stroke", "#000"), "svg.style.stroke"),
        width_scale=_as_float(
            style_obj.get("width_scale", 1.0), "svg.style.width_scale"
        ),
        min_width=_as_float(style_obj.get("min_width", 0.1), "svg.style.min_width"),
        stroke_linecap=_as_str(
            style_obj.get("stroke_linecap", "round"), "svg.style.stroke_linecap"
        ),
    )

    background = obj.get("background")
    if background is not None:
        background = _as_str(background, "svg.background")

    return SvgOptions(
        margin=margin,
        precision=precision,
        flip_y=flip_y,
        width=width,
        height=height,
        style=style,
        background=background,
    )


def parse_config(obj: dict[str, Any]) -> BuildConfig:
    obj = _as_dict(obj, "config")

    name = _as_str(obj.get("name", "L-System tree"), "name")
    species_name = _as_str(obj.get("species", "honda"), "species")
    _require(
        species_name in SPECIES,
        f"species must be one of {sorted(SPECIES)}; got {species_name!r}",
    )
    params_cls, species_cls = SPECIES[species_name]

    iterations = _as_int(obj.get("iterations", 0), "iterations")
    _require(iterations >= 0, "iterations must be >= 0")

    params_obj = _as_dict(obj.get("params", {}), "params")
    known = params_cls.field_names()
    for k in params_obj:
        _require(k in known, f"params.{k} is not a {species_name} parameter")
    params = params_cls(
        **{k: _as_float(v, f"params.{k}") for k, v in params_obj.items()}
    )
    species = species_cls(params)

    root_obj = _as_dict(obj.get("root", {}), "root")
    pos = root_obj.get("position", [0, 0, 0])
    _require(
        isinstance(pos, list) and len(pos) == 3,
        "root.position must be a list of 3 numbers",
    )
    position = (
        _as_float(pos[0], "root.position[0]"),
        _as_float(pos[1], "root.position[1]"),
        _as_float(pos[2], "root.position[2]"),
    )
    diameter = _as_float(
        root_obj.get("diameter", params.root_diameter), "root.diameter"
    )
    _require(diameter >= 0, "root.diameter must be >= 0")

    svg = parse_svg(_as_dict(obj.get("svg", {}), "svg"))

    return BuildConfig(
        name=name,
        species=species,
        iterations=iterations,
        root=Tree3DNode(position=position, diameter=diameter),
        svg=svg,
    )


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            return cast(dict[str, Any], json.load(f))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

#!/usr/bin/env python3
import io
import json
import os
import tempfile
from contextlib import redirect_stderr
from typing import Any

import pytest

from lsystree import HondaD0L, Tree, Tree3DNode, build
from lsystree import lsys
from lsystree.cli import main
from lsystree.config import BuildConfig, load_json, parse_config
from lsystree.errors import ConfigError
from lsystree.svg import SvgOptions, SvgStyle, compute_bounds, project_edges, render_svg

_EXAMPLE_DIR = os.path.join(os.path.dirname(__file__), "example")
HONDA_JSON = os.path.join(_EXAMPLE_DIR, "honda.json")


def _write_json(tmpdir: str, obj: Any) -> str:
    path = os.path.join(tmpdir, "cfg.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f)
    return path


class TestConfigParsing:
    def test_basic_config(self) -> None:
        cfg = parse_config(
            {
                "name": "tree",
                "species": "honda",
                "iterations": 3,
                "params": {"branch_yaw_1": 30, "root_length": 80},
                "root": {"position": [1, 2, 3], "diameter": 7},
                "svg": {"margin": 5, "precision": 2},
            }
        )
        assert isinstance(cfg, BuildConfig)
        assert isinstance(cfg.species, HondaD0L)
        assert cfg.iterations == 3
        assert cfg.species.params.branch_yaw_1 == 30.0
        assert cfg.species.params.root_length == 80.0
        assert cfg.species.params.branch_yaw_2 == -15.0
        assert cfg.root == Tree3DNode(position=(1.0, 2.0, 3.0), diameter=7.0)
        assert cfg.svg.margin == 5
        assert cfg.svg.precision == 2

    def test_defaults(self) -> None:
        cfg = parse_config({})
        assert cfg.iterations == 0
        assert cfg.root == Tree3DNode(position=(0.0, 0.0, 0.0), diameter=10.0)
        assert cfg.svg == SvgOptions()

    def test_invalid_types(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"iterations": "1"})
        with pytest.raises(ConfigError):
            parse_config({"iterations": True})
        with pytest.raises(ConfigError):
            parse_config({"params": {"branch_yaw_1": "30"}})
        with pytest.raises(ConfigError):
            parse_config({"root": {"position": [0, 0]}})

    def test_negative_iterations(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"iterations": -1})

    def test_unknown_species(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"species": "oak"})

    def test_unknown_param(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"params": {"branch_roll": 3}})

    def test_precision_out_of_range(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"svg": {"precision": 15}})

    def test_example_config(self) -> None:
        cfg = parse_config(load_json(HONDA_JSON))
        assert cfg.iterations == 5
        assert cfg.svg.style.stroke == "#3a2a1a"


class TestLoadJson:
    def test_malformed_json(self) -> None:
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as tmp:
            tmp.write("{ not valid json }")
            tmp_path = tmp.name
        try:
            with pytest.raises(ConfigError):
                load_json(tmp_path)
        finally:
            os.unlink(tmp_path)


class TestSvg:
    def _tree(self, iterations: int = 2) -> Tree[Tree3DNode]:
        honda = HondaD0L()
        return build(honda, honda.root(), iterations)

    def test_project_edges(self) -> None:
        segments = project_edges(self._tree(1))
        assert len(segments) == 1
        (x1, y1), (x2, y2), diameter = segments[0]
        assert (x1, y1) == (0.0, 0.0)
        assert x2 == pytest.approx(0.0)
        assert y2 == pytest.approx(100.0)
        assert diameter == 10.0

    def test_bounds(self) -> None:
        segments = [((0.0, 5.0), (10.0, -2.0), 1.0), ((3.0, 8.0), (7.0, 1.0), 1.0)]
        assert compute_bounds(segments) == (0.0, -2.0, 10.0, 8.0)

    def test_empty_bounds_raises(self) -> None:
        with pytest.raises(ConfigError):
            compute_bounds([])

    def test_render(self) -> None:
        content = render_svg(project_edges(self._tree()), SvgOptions(), title="A <tree>")
        assert content.startswith("<?xml")
        assert content.count("<line ") == 3
        assert "scale(1,-1)" in content
        assert "<title>A &lt;tree&gt;</title>" in content

    def test_render_no_flip_with_background(self) -> None:
        options = SvgOptions(flip_y=False, background="#fff", width=200, height=100)
        content = render_svg(project_edges(self._tree(1)), options)
        assert "scale(1,-1)" not in content
        assert '<rect x="' in content
        assert 'width="200"' in content
        assert 'height="100"' in content

    def test_stroke_width_follows_diameter(self) -> None:
        options = SvgOptions(precision=2, style=SvgStyle(width_scale=0.5))
        content = render_svg(project_edges(self._tree(1)), options)
        assert 'stroke-width="5"' in content

    def test_degenerate_bounds(self) -> None:
        with pytest.raises(ConfigError):
            render_svg(project_edges(self._tree(1)), SvgOptions(margin=0))


class TestCLI:
    def test_validate_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["validate", HONDA_JSON]) == 0
        out = capsys.readouterr().out
        assert "nodes: 32" in out
        assert "edges: 31" in out

    def test_validate_evolves_once(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        calls = []
        real_evolve = lsys.evolve

        def counting_evolve(*args: Any) -> Any:
            calls.append(args[2])
            return real_evolve(*args)

        monkeypatch.setattr(lsys, "evolve", counting_evolve)
        assert main(["validate", HONDA_JSON]) == 0
        assert calls == [5]
        assert "symbols: " in capsys.readouterr().out

    def test_edges_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_json(tmpdir, {"iterations": 2})
            assert main(["edges", path]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("Edge: (pos: (0.000, 0.000, 0.000), dia: 10.000)")

    def test_svg_command(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "nested", "out.svg")
            assert main(["svg", HONDA_JSON, out]) == 0
            with open(out, encoding="utf-8") as f:
                content = f.read()
        assert content.count("<line ") == 31

    def test_verbose_flag(self) -> None:
        assert main(["-v", "validate", HONDA_JSON]) == 0

    def test_file_not_found_returns_error_code(self) -> None:
        with redirect_stderr(io.StringIO()):
            assert main(["edges", "nonexistent_config.json"]) == 2

    def test_invalid_config_returns_error_code(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_json(tmpdir, {"iterations": "bad"})
            err = io.StringIO()
            with redirect_stderr(err):
                assert main(["validate", path]) == 2
        assert "Config error" in err.getvalue()

"""Tests for the command-line front end.

Taichi is already initialized by conftest, so ``init_taichi`` is replaced
with a no-op wherever ``main`` is called.
"""

import pytest
from PIL import Image as PILImage

from raytracer import cli


@pytest.fixture
def no_taichi_init(monkeypatch):
    monkeypatch.setattr(cli, "init_taichi", lambda arch, num_threads: None)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = cli.parse_args([])
        assert args.scene is None
        assert args.out_file is None
        assert args.width is None
        assert args.height is None
        assert args.recurse_depth is None
        assert args.sequential is False
        assert args.num_threads == cli.DEFAULT_NUM_THREADS
        assert args.arch == "cpu"

    @pytest.mark.parametrize("flag", ["-f", "--file", "--scene"])
    def test_scene_aliases(self, flag):
        assert cli.parse_args([flag, "scene.json"]).scene == "scene.json"

    def test_overrides(self):
        args = cli.parse_args(
            ["-o", "out.png", "--width", "320", "--height", "200", "-r", "3", "--sequential"]
        )
        assert args.out_file == "out.png"
        assert (args.width, args.height, args.recurse_depth) == (320, 200, 3)
        assert args.sequential is True

    def test_non_positive_threads_rejected(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["-n", "0"])

    def test_verbose_and_quiet_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["-v", "-q"])


class TestRun:
    """Tests for run() and main()."""

    def test_run_demo_scene(self, tmp_path):
        out = tmp_path / "demo.png"
        args = cli.parse_args(["-o", str(out), "--width", "16", "--height", "12", "-r", "2"])

        path = cli.run(args)

        assert path == out
        with PILImage.open(path) as image:
            assert image.size == (16, 12)

    def test_run_scene_file_sequential(self, tmp_path):
        from pathlib import Path

        scene = Path(__file__).parent.parent / "examples" / "scenes" / "triangles.json"
        out = tmp_path / "triangles.png"
        args = cli.parse_args(
            ["-f", str(scene), "-o", str(out), "--width", "12", "--height", "8", "--sequential"]
        )

        assert cli.run(args) == out
        assert out.exists()

    def test_main_success(self, tmp_path, capsys, no_taichi_init):
        out = tmp_path / "main.png"
        code = cli.main(["-q", "-o", str(out), "--width", "8", "--height", "6"])

        assert code == 0
        assert out.exists()
        assert f"Saved image to {out}" in capsys.readouterr().out

    def test_main_missing_scene(self, tmp_path, capsys, no_taichi_init):
        code = cli.main(["-q", "-f", str(tmp_path / "missing.json")])

        assert code == 1
        assert capsys.readouterr().err.startswith("Error: ")

    def test_main_invalid_scene(self, tmp_path, capsys, no_taichi_init):
        scene = tmp_path / "bad.json"
        scene.write_text('{"objects": []}', encoding="utf-8")

        code = cli.main(["-q", "-f", str(scene), "-o", str(tmp_path / "x.png")])

        assert code == 1
        assert "exactly one camera" in capsys.readouterr().err
        assert not (tmp_path / "x.png").exists()

    def test_main_large_depth(self, tmp_path, no_taichi_init):
        out = tmp_path / "deep.png"
        code = cli.main(["-q", "-r", "20", "-o", str(out), "--width", "8", "--height", "6"])

        assert code == 0
        assert out.exists()

    def test_main_invalid_depth(self, tmp_path, capsys, no_taichi_init):
        code = cli.main(["-q", "-r", "-1", "-o", str(tmp_path / "x.png")])

        assert code == 1
        assert "Recursion depth" in capsys.readouterr().err

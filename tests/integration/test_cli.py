from __future__ import annotations

from pathlib import Path

import numpy as np
import yaml
from PIL import Image
from typer.testing import CliRunner

from partseed.cli.main import app


def _write_mask(path: Path, alpha: int = 255) -> None:
    data = np.zeros((5, 5, 4), dtype=np.uint8)
    data[:, :, 3] = alpha
    Image.fromarray(data).save(path)


def test_mesh_generate_command(tmp_path: Path) -> None:
    output = tmp_path / "demo_mesh.ply"
    runner = CliRunner()
    result = runner.invoke(app, ["mesh", "generate", str(output), "--preset", "demo", "--size", "4"])
    assert result.exit_code == 0, result.stdout
    with open(output, "r", encoding="utf-8") as f:
        header = f.readline().strip()
        second = f.readline().strip()
    assert header == "ply"
    assert second == "format ascii 1.0"


def test_mesh_generate_rejects_unknown_preset(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["mesh", "generate", str(tmp_path / "x.ply"), "--preset", "torus"])
    assert result.exit_code != 0


def test_cli_mask_border_with_generated_normals(tmp_path: Path) -> None:
    mask = tmp_path / "mask.png"
    _write_mask(mask)
    out = tmp_path / "mask.npz"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["mask", str(mask), "-o", str(out), "--mode", "border", "--direction", "generate", "--no-centered"],
    )
    assert result.exit_code == 0, result.stdout
    with np.load(out) as data:
        assert data["positions"].shape == (16, 2)
        assert data["normals"].shape == (16, 2)
        assert "colors" not in data.files


def test_cli_mask_empty_image_fails(tmp_path: Path) -> None:
    mask = tmp_path / "empty.png"
    _write_mask(mask, alpha=0)
    runner = CliRunner()
    result = runner.invoke(app, ["mask", str(mask), "-o", str(tmp_path / "out.npz")])
    assert result.exit_code == 1
    assert not (tmp_path / "out.npz").exists()


def test_cli_surface_and_volume(tmp_path: Path) -> None:
    mesh = tmp_path / "cube.ply"
    runner = CliRunner()
    assert runner.invoke(app, ["mesh", "generate", str(mesh), "--preset", "cube"]).exit_code == 0

    surface_out = tmp_path / "surface.npz"
    result = runner.invoke(app, ["surface", str(mesh), "-o", str(surface_out), "--amount", "50", "--normals", "--seed", "3"])
    assert result.exit_code == 0, result.stdout
    with np.load(surface_out) as data:
        assert data["positions"].shape == (50, 3)
        assert data["normals"].shape == (50, 3)

    volume_out = tmp_path / "volume.ply"
    result = runner.invoke(app, ["volume", str(mesh), "-o", str(volume_out), "--amount", "20", "--seed", "3"])
    assert result.exit_code == 0, result.stdout
    assert "of 20 requested" in result.stdout
    with open(volume_out, "r", encoding="utf-8") as f:
        assert f.readline().strip() == "ply"


def test_cli_run_config(tmp_path: Path) -> None:
    mesh = tmp_path / "tetra.ply"
    runner = CliRunner()
    assert runner.invoke(app, ["mesh", "generate", str(mesh), "--preset", "tetra"]).exit_code == 0

    config = {
        "job": {"kind": "surface", "mesh": mesh.name, "amount": 32},
        "output": {"path": "out.npz", "format": "npz"},
        "seed": 5,
    }
    cfg_path = tmp_path / "config.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)

    result = runner.invoke(app, ["run", str(cfg_path), "--log-level", "DEBUG"])
    assert result.exit_code == 0, result.stdout
    with np.load(tmp_path / "out.npz") as data:
        assert data["positions"].shape == (32, 3)


def test_cli_surface_rejects_bad_output_extension(tmp_path: Path) -> None:
    mesh = tmp_path / "cube.ply"
    runner = CliRunner()
    runner.invoke(app, ["mesh", "generate", str(mesh)])
    result = runner.invoke(app, ["surface", str(mesh), "-o", str(tmp_path / "out.txt")])
    assert result.exit_code != 0

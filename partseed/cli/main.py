from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import typer

from ..core.emission import EmissionPoints
from ..core.errors import EmissionError
from ..core.exporter import EmissionSink, NpzSink, PlySink
from ..core.imageio import load_pixel_grid
from ..core.mask import DirectionMode, ImageMaskSampler, MaskMode
from ..core.scene import MeshSource
from ..core.surface import MeshAreaSampler
from ..core.volume import MeshVolumeSampler
from ..examples.synthetic import generate_mesh
from ..sdk import emit_from_config

app = typer.Typer(help="Particle emission point utilities")
mesh_app = typer.Typer(help="Synthetic mesh helpers")
app.add_typer(mesh_app, name="mesh")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("partseed").setLevel(numeric)


def _build_sink(output: Path) -> EmissionSink:
    fmt = output.suffix.lower()
    if fmt == ".npz":
        return NpzSink(str(output))
    if fmt == ".ply":
        return PlySink(str(output))
    raise typer.BadParameter("Output must end with .npz or .ply", param_hint="--output")


def _write(points: EmissionPoints, output: Path) -> None:
    output = output.resolve()
    sink = _build_sink(output)
    try:
        sink.write(points)
    finally:
        sink.close()
    requested = f" of {points.requested} requested" if points.requested is not None else ""
    typer.echo(f"Emitted {len(points)} points{requested} → {output}")


def _fail(exc: EmissionError) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override random seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Run an emission job specified by a YAML config."""

    _configure_logging(log_level)
    if output is not None and output.suffix.lower() not in {".npz", ".ply"}:
        raise typer.BadParameter(f"Unsupported output extension '{output.suffix}'", param_hint="--output")
    try:
        result = emit_from_config(config, output=output, seed=seed)
    except EmissionError as exc:
        _fail(exc)
        return
    typer.echo(f"Emitted {result.points} points → {result.output_path}")


@app.command("mask")
def mask_cli(
    image: Path = typer.Argument(..., exists=True, readable=True, help="Emission mask image."),
    output: Path = typer.Option(..., "--output", "-o", help="Output path (.npz/.ply)."),
    mode: MaskMode = typer.Option(MaskMode.SOLID, "--mode", help="Emit solid pixels or only border pixels."),
    direction: DirectionMode = typer.Option(DirectionMode.NONE, "--direction", help="Direction source for normals."),
    direction_image: Optional[Path] = typer.Option(None, "--direction-image", exists=True, readable=True, help="Direction texture (required for --direction texture)."),
    colors: bool = typer.Option(False, "--colors", help="Copy pixel colors from the mask."),
    centered: bool = typer.Option(True, "--centered/--no-centered", help="Center points on the image."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Emission points from the opaque pixels of an image."""

    _configure_logging(log_level)
    if direction is DirectionMode.TEXTURE and direction_image is None:
        raise typer.BadParameter("--direction texture requires --direction-image.", param_hint="--direction-image")
    try:
        mask = load_pixel_grid(image)
        direction_grid = load_pixel_grid(direction_image) if direction is DirectionMode.TEXTURE else None
        sampler = ImageMaskSampler(mode=mode, direction_mode=direction, capture_colors=colors)
        points = sampler.sample(mask, direction_grid)
    except EmissionError as exc:
        _fail(exc)
        return
    if centered:
        points = points.translated(np.array([-mask.width * 0.5, -mask.height * 0.5]))
    _write(points, output)


@app.command("surface")
def surface_cli(
    mesh: Path = typer.Argument(..., exists=True, readable=True, help="Input mesh path."),
    output: Path = typer.Option(..., "--output", "-o", help="Output path (.npz/.ply)."),
    amount: int = typer.Option(512, "--amount", min=1, max=100_000, help="Number of emission points."),
    normals: bool = typer.Option(False, "--normals", help="Store face normals (directed points)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for deterministic sampling."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Area-weighted emission points on a mesh surface."""

    _configure_logging(log_level)
    try:
        source = MeshSource(mesh)
        points = MeshAreaSampler(include_normals=normals).sample(
            source.triangles, amount, rng=np.random.default_rng(seed)
        )
    except EmissionError as exc:
        _fail(exc)
        return
    _write(points, output)


@app.command("volume")
def volume_cli(
    mesh: Path = typer.Argument(..., exists=True, readable=True, help="Input mesh path."),
    output: Path = typer.Option(..., "--output", "-o", help="Output path (.npz/.ply)."),
    amount: int = typer.Option(512, "--amount", min=1, max=100_000, help="Number of emission points."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for deterministic sampling."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Emission points filling the volume enclosed by a mesh."""

    _configure_logging(log_level)
    try:
        source = MeshSource(mesh)
        points = MeshVolumeSampler().sample(source.triangles, amount, rng=np.random.default_rng(seed))
    except EmissionError as exc:
        _fail(exc)
        return
    _write(points, output)


@mesh_app.command("generate")
def mesh_generate(
    output: Path = typer.Argument(..., help="Output mesh path (.ply)."),
    preset: str = typer.Option("cube", "--preset", help="Synthetic mesh preset (cube, tetra, plane, demo)."),
    size: float = typer.Option(2.0, "--size", help="Mesh extent scaling factor."),
) -> None:
    """Generate a synthetic mesh useful for emission demos."""

    out = output.resolve()
    try:
        generate_mesh(preset=preset, size=size, path=out)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--preset")
    typer.echo(f"Wrote synthetic mesh to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..config import load_config
from ..core.errors import MeshError
from ..core.pointcloud import get_aabb
from ..core.processor import MeshProcessor, ProcessorConfig
from ..core.scene import MeshScene
from ..core.triangulation import get_triangulator
from ..examples.synthetic import PRESETS, generate_mesh
from ..runtime.builders import build_processor, build_writer, writer_for

app = typer.Typer(help="morphomesh surface analysis utilities")
mesh_app = typer.Typer(help="Synthetic mesh helpers")
app.add_typer(mesh_app, name="mesh")

DEFAULT_ATTRIBUTES = ["curvature", "orientation"]


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("morphomesh").setLevel(numeric)


def _run(processor: MeshProcessor, mesh_path: Path, csv_delimiter: Optional[str], writer, output: Path) -> None:
    try:
        scene = MeshScene(mesh_path, csv_delimiter=csv_delimiter)
        stats = processor.run_to_writer(writer, [scene.mesh_data()])
    except MeshError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Processed {stats['triangles']} triangles over {stats['vertices']} vertices → {output}")


def _execute_analyze(
    config: Path,
    output_override: Optional[Path],
    attribute_override: Optional[List[str]],
    log_level: str,
) -> None:
    _configure_logging(log_level)
    cfg = load_config(config)
    if attribute_override:
        cfg.attributes = list(attribute_override)
    if output_override is not None:
        out = output_override.resolve()
        ext = out.suffix.lower()
        if ext not in {".npz", ".ply"}:
            raise typer.BadParameter(f"Unsupported output extension '{ext}'", param_hint="--output")
        cfg.output.path = out
        cfg.output.format = ext.lstrip(".")
    cfg.output.path.parent.mkdir(parents=True, exist_ok=True)

    processor = build_processor(cfg)
    _run(processor, cfg.mesh.path, cfg.mesh.csv_delimiter, build_writer(cfg), cfg.output.path)


@app.command("analyze")
def analyze(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    attribute: Optional[List[str]] = typer.Option(None, "--attribute", "-a", help="Override attribute list."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Run the analysis specified by a YAML config."""

    attribute_override = list(attribute) if attribute else None
    _execute_analyze(config, output, attribute_override, log_level)


@app.command("process")
def process(
    mesh: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True, help="Input mesh or point list."),
    output: Path = typer.Option(..., "--output", "-o", help="Output path (.npz or .ply)."),
    triangulator: str = typer.Option("xy", "--triangulator", help="Triangulation for point clouds: xy or plane_fit."),
    normals: str = typer.Option("vertex", "--normals", help="Normal source: vertex, face or file."),
    center: bool = typer.Option(True, "--center/--no-center", help="Translate the points so their centroid is the origin."),
    on_degenerate: str = typer.Option("raise", "--on-degenerate", help="Degenerate triangles/vertices (including duplicate points left out by triangulation): raise or zero."),
    attribute: List[str] = typer.Option([], "--attribute", "-a", help="Attributes to compute (defaults to curvature, orientation)."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Process a single mesh driven entirely from CLI options."""

    if normals not in {"vertex", "face", "file"}:
        raise typer.BadParameter("normals must be one of vertex, face, file.", param_hint="--normals")
    if on_degenerate not in {"raise", "zero"}:
        raise typer.BadParameter("on_degenerate must be raise or zero.", param_hint="--on-degenerate")
    try:
        tri = get_triangulator(triangulator)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--triangulator")
    fmt = output.suffix.lower().lstrip(".")
    if fmt not in {"npz", "ply"}:
        raise typer.BadParameter("Output must end with .npz or .ply", param_hint="--output")

    _configure_logging(log_level)
    output = output.resolve()
    output.parent.mkdir(parents=True, exist_ok=True)

    processor = MeshProcessor(
        tri,
        cfg=ProcessorConfig(
            center=center,
            normals=normals,  # type: ignore[arg-type]
            on_degenerate=on_degenerate,  # type: ignore[arg-type]
            attributes=list(attribute or DEFAULT_ATTRIBUTES),
        ),
    )
    _run(processor, mesh.resolve(), ",", writer_for(output, fmt), output)


@app.command("info")
def info(
    mesh: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True, help="Input mesh or point list."),
) -> None:
    """Print point/triangle counts and the axis-aligned bounding box."""

    try:
        data = MeshScene(mesh.resolve()).mesh_data()
        box = get_aabb(data.points)
    except MeshError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    n_tri = 0 if data.triangles is None else len(data.triangles)
    typer.echo(f"points: {len(data.points)}")
    typer.echo(f"triangles: {n_tri}")
    typer.echo(f"normals: {'yes' if data.normals is not None else 'no'}")
    typer.echo("min: " + " ".join(f"{v:.6g}" for v in box.min))
    typer.echo("max: " + " ".join(f"{v:.6g}" for v in box.max))
    typer.echo("center: " + " ".join(f"{v:.6g}" for v in box.center))
    typer.echo(f"length: {box.length:.6g}")


@mesh_app.command("generate")
def mesh_generate(
    output: Path = typer.Argument(..., help="Output path (.ply; .csv for the terrain preset)."),
    preset: str = typer.Option("sphere", "--preset", help=f"Synthetic preset ({', '.join(PRESETS)})."),
    size: float = typer.Option(1.0, "--size", help="Scene extent scaling factor."),
) -> None:
    """Generate a synthetic mesh useful for analysis demos."""

    out = output.resolve()
    try:
        generate_mesh(preset=preset, size=size, path=out)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--preset")
    typer.echo(f"Wrote synthetic mesh to {out}")

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from morphomesh.cli.main import _execute_analyze  # type: ignore
from morphomesh.examples.synthetic import generate_mesh

matplotlib.use("Agg")


@dataclass(frozen=True)
class ExampleSpec:
    name: str
    preset: str
    triangulator: str = "xy"


EXAMPLES: List[ExampleSpec] = [
    ExampleSpec(name="sphere", preset="sphere"),
    ExampleSpec(name="saddle", preset="saddle"),
    ExampleSpec(name="box", preset="box"),
    ExampleSpec(name="terrain", preset="terrain"),
    ExampleSpec(name="terrain_plane_fit", preset="terrain", triangulator="plane_fit"),
]

MESH_DIR = Path("examples/meshes")
CONFIG_DIR = Path("examples/configs")
OUTPUT_DIR = Path("examples/outputs")
IMAGE_DIR = Path("examples/images")


def _ensure_dirs() -> None:
    for d in (MESH_DIR, CONFIG_DIR, OUTPUT_DIR, IMAGE_DIR):
        d.mkdir(parents=True, exist_ok=True)


def run_example(spec: ExampleSpec, overwrite: bool = True, log_level: str = "INFO") -> Path:
    suffix = ".csv" if spec.preset == "terrain" else ".ply"
    mesh_path = MESH_DIR / f"{spec.preset}{suffix}"
    if overwrite or not mesh_path.exists():
        generate_mesh(spec.preset, size=1.0, path=mesh_path)

    out_path = OUTPUT_DIR / f"{spec.name}.npz"
    if out_path.exists() and not overwrite:
        logging.info("Skipping %s (output exists)", spec.name)
        return out_path

    cfg_path = CONFIG_DIR / f"{spec.name}.yaml"
    cfg_path.write_text(
        "mesh:\n"
        f"  path: ../meshes/{mesh_path.name}\n"
        "processing:\n"
        f"  triangulator: {spec.triangulator}\n"
        "  on_degenerate: zero\n"
        "attributes: [curvature, orientation]\n"
        "output:\n"
        f"  path: ../outputs/{out_path.name}\n"
        "  format: npz\n",
        encoding="utf-8",
    )
    _execute_analyze(cfg_path, output_override=None, attribute_override=None, log_level=log_level)
    return out_path


def render_fields(name: str, path: Path) -> Path:
    with np.load(path) as data:
        xyz = data["xyz"]
        fields = {k: data[k] for k in ("curvature", "orientation") if k in data}
    if xyz.size == 0:
        raise ValueError(f"No triangles to render for {name}")
    tris = xyz.reshape(-1, 3, 3)

    fig = plt.figure(figsize=(5 * len(fields), 5), dpi=150)
    lo, hi = xyz.min(axis=0), xyz.max(axis=0)
    for i, (field, values) in enumerate(fields.items(), start=1):
        ax = fig.add_subplot(1, len(fields), i, projection="3d")
        per_tri = values.reshape(-1, 3).mean(axis=1)
        cmap = plt.get_cmap("viridis" if field == "curvature" else "hsv")
        coll = Poly3DCollection(tris, facecolors=cmap(np.clip(per_tri, 0.0, 1.0)), edgecolor="none")
        ax.add_collection3d(coll)
        ax.set_xlim(lo[0], hi[0])
        ax.set_ylim(lo[1], hi[1])
        ax.set_zlim(lo[2], hi[2] if hi[2] > lo[2] else lo[2] + 1e-3)
        ax.set_title(f"{name.replace('_', ' ').title()} – {field}")
        ax.set_box_aspect(np.maximum(hi - lo, 1e-3))

    fig.tight_layout()
    out_path = IMAGE_DIR / f"{name}.png"
    fig.savefig(out_path)
    plt.close(fig)
    return out_path


def generate_examples(names: List[str], overwrite_outputs: bool, log_level: str) -> None:
    _ensure_dirs()
    selected = EXAMPLES if not names else [spec for spec in EXAMPLES if spec.name in names]
    if not selected:
        raise ValueError("No matching examples selected.")
    for spec in selected:
        logging.info("Running example '%s'", spec.name)
        out_path = run_example(spec, overwrite=overwrite_outputs, log_level=log_level)
        if not out_path.exists():
            logging.warning("Output %s missing, skipping render", out_path)
            continue
        image_path = render_fields(spec.name, out_path)
        logging.info("Saved %s", image_path)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate morphomesh example outputs and preview images.")
    parser.add_argument("--example", "-e", action="append", help="Example name to run (default: all).")
    parser.add_argument("--no-overwrite", action="store_true", help="Skip generating outputs if they already exist.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="[%(levelname)s] %(message)s")
    generate_examples(args.example or [], overwrite_outputs=not args.no_overwrite, log_level=args.log_level)


if __name__ == "__main__":
    main()

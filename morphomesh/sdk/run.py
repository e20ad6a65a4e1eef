from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from ..config import AnalysisConfig, load_config
from ..core.scene import MeshScene
from ..runtime.builders import build_processor, build_writer


@dataclass(frozen=True)
class ConfigRunResult:
    """Summary of an analysis run driven by a configuration file."""

    stats: Dict[str, int]
    output_path: Path
    config: AnalysisConfig


def analyze_from_config(
    config: Union[str, Path, AnalysisConfig],
    *,
    output: Optional[Path] = None,
    attributes: Optional[Sequence[str]] = None,
) -> ConfigRunResult:
    """Run the mesh analysis described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~morphomesh.config.schema.AnalysisConfig`.
    output:
        Optional override for the output file. The extension drives the
        format (``.npz`` or ``.ply``).
    attributes:
        Optional iterable of attribute names to compute. When omitted the
        configuration's attribute list is used as-is.

    Returns
    -------
    ConfigRunResult
        Includes basic statistics (meshes, triangles, vertices), the resolved
        output path, and the resolved configuration object used for the run.
    """

    cfg = load_config(config) if not isinstance(config, AnalysisConfig) else config.model_copy(deep=True)

    if attributes is not None:
        cfg.attributes = list(attributes)

    if output is not None:
        out_path = Path(output).resolve()
        ext = out_path.suffix.lower()
        if ext not in {".npz", ".ply"}:
            raise ValueError(f"Unsupported output extension '{ext}'")
        cfg.output.path = out_path
        cfg.output.format = ext.lstrip(".")
    else:
        cfg.output.path = Path(cfg.output.path).resolve()
    cfg.output.path.parent.mkdir(parents=True, exist_ok=True)

    scene = MeshScene(Path(cfg.mesh.path), csv_delimiter=cfg.mesh.csv_delimiter)
    processor = build_processor(cfg)
    writer = build_writer(cfg)

    try:
        stats = processor.run_to_writer(writer, [scene.mesh_data()])
    finally:
        close = getattr(writer, "close", None)
        if callable(close):
            close()

    return ConfigRunResult(stats=stats, output_path=Path(cfg.output.path), config=cfg)

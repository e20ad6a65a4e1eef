from __future__ import annotations

from pathlib import Path
from typing import Union

from ..config import AnalysisConfig
from ..core.exporter import NpzWriter, PlyWriter
from ..core.processor import MeshProcessor, ProcessorConfig
from ..core.triangulation import Triangulator, get_triangulator

Writer = Union[NpzWriter, PlyWriter]


def build_triangulator(cfg: AnalysisConfig) -> Triangulator:
    return get_triangulator(cfg.processing.triangulator)


def build_processor(cfg: AnalysisConfig) -> MeshProcessor:
    proc = cfg.processing
    processor_cfg = ProcessorConfig(
        center=proc.center,
        normals=proc.normals,
        on_degenerate=proc.on_degenerate,
        orientation_bins=proc.orientation_bins,
        attributes=list(cfg.attributes),
    )
    return MeshProcessor(build_triangulator(cfg), cfg=processor_cfg)


def build_writer(cfg: AnalysisConfig) -> Writer:
    return writer_for(cfg.output.path, cfg.output.format)


def writer_for(path: Path, fmt: str) -> Writer:
    format_lower = fmt.lower()
    if format_lower == "npz":
        return NpzWriter(str(path))
    if format_lower == "ply":
        return PlyWriter(str(path))
    raise ValueError(f"Unsupported output format: {fmt}")

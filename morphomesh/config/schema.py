from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator


ATTRIBUTE_NAMES = ("curvature", "energy", "orientation")


class MeshConfig(BaseModel):
    path: Path
    csv_delimiter: Optional[str] = ","


class ProcessingConfig(BaseModel):
    center: bool = True
    triangulator: Literal["xy", "plane_fit"] = "xy"
    normals: Literal["vertex", "face", "file"] = "vertex"
    on_degenerate: Literal["raise", "zero"] = "raise"
    orientation_bins: int = Field(default=8, ge=2)


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz", "ply"] = "npz"

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        ext = self.path.suffix.lower().lstrip(".")
        if ext in ("npz", "ply") and ext != self.format:
            raise ValueError(f"output path extension '.{ext}' disagrees with format '{self.format}'")
        return self


class AnalysisConfig(BaseModel):
    mesh: MeshConfig
    processing: ProcessingConfig = ProcessingConfig()
    attributes: List[str] = Field(default_factory=lambda: ["curvature", "orientation"])
    output: OutputConfig

    @model_validator(mode="after")
    def _validate_attributes(self) -> "AnalysisConfig":
        unknown = [a for a in self.attributes if a not in ATTRIBUTE_NAMES]
        if unknown:
            raise ValueError(f"Unknown attribute(s) {unknown}; expected any of {list(ATTRIBUTE_NAMES)}")
        return self


def load_config(path: str | Path) -> AnalysisConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = AnalysisConfig.model_validate(data)
    cfg.output.path = (path.parent / cfg.output.path).resolve()
    if cfg.mesh.path and not cfg.mesh.path.is_absolute():
        cfg.mesh.path = (path.parent / cfg.mesh.path).resolve()
    return cfg

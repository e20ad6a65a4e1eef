from __future__ import annotations
from typing import Set
import numpy as np
from .pointcloud import SurfaceBatch
from .surface import ORIENTATION_BINS, dirichlet_energy, surface_orientation, surface_variation
from .utils import DegeneratePolicy


class AttributeComputer:
    name: str = "base"
    requires: Set[str] = set()        # prerequisite attribute names
    produces: Set[str] = set()        # names it will produce

    def compute(self, batch: SurfaceBatch) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _require(self, batch: SurfaceBatch) -> None:
        missing = sorted(k for k in self.requires if k not in batch.attrs)
        if missing:
            raise ValueError(f"{type(self).__name__} requires per-slot {', '.join(repr(k) for k in missing)}.")


class CurvatureComputer(AttributeComputer):
    name = "curvature"
    requires = {"normal"}
    produces = {"curvature"}
    def __init__(self, on_degenerate: DegeneratePolicy = "raise") -> None:
        self.on_degenerate = on_degenerate
    def compute(self, batch: SurfaceBatch) -> None:
        self._require(batch)
        batch.attrs["curvature"] = surface_variation(batch.xyz, batch.attrs["normal"], self.on_degenerate)


class EnergyComputer(AttributeComputer):
    name = "energy"
    requires = {"normal"}
    produces = {"energy"}
    def __init__(self, on_degenerate: DegeneratePolicy = "raise") -> None:
        self.on_degenerate = on_degenerate
    def compute(self, batch: SurfaceBatch) -> None:
        self._require(batch)
        e = dirichlet_energy(batch.xyz, batch.attrs["normal"], self.on_degenerate)
        batch.attrs["energy"] = np.repeat(e, 3)


class OrientationComputer(AttributeComputer):
    name = "orientation"
    requires = {"normal"}
    produces = {"orientation"}
    def __init__(self, bins: int = ORIENTATION_BINS) -> None:
        self.bins = int(bins)
    def compute(self, batch: SurfaceBatch) -> None:
        self._require(batch)
        batch.attrs["orientation"] = surface_orientation(batch.attrs["normal"], bins=self.bins)

from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict, Optional

from .errors import EmptyInputError
from .utils import as_points, as_triangles


@dataclass
class MeshData:
    """Indexed mesh as handed over by a loader: points, optional triangles and normals."""
    points: np.ndarray                          # (N, 3)
    triangles: Optional[np.ndarray] = None      # (M, 3)
    normals: Optional[np.ndarray] = None        # (N, 3)

    def __post_init__(self) -> None:
        self.points = as_points(self.points, allow_empty=True)
        if self.triangles is not None:
            self.triangles = as_triangles(self.triangles, len(self.points))
            if len(self.triangles) == 0:
                self.triangles = None
        if self.normals is not None:
            nrm = np.asarray(self.normals, dtype=np.float64)
            if nrm.shape != self.points.shape:
                raise ValueError(f"Normals shape {nrm.shape} != points shape {self.points.shape}")
            self.normals = nrm


@dataclass
class SurfaceBatch:
    """Unwrapped (triangle-major) vertex slots with per-slot attributes."""
    xyz: np.ndarray                       # (3M, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz, dtype=np.float64).reshape(-1, 3)
        if len(self.xyz) % 3 != 0:
            raise ValueError(f"Unwrapped vertex count {len(self.xyz)} is not a multiple of 3")
        n = len(self.xyz)
        for k, v in list(self.attrs.items()):
            v = np.asarray(v)
            if v.ndim == 1 and len(v) == 3 * n and not k.startswith("_"):
                v = v.reshape(n, 3)
            if v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' first dim {v.shape[0]} != {n}")
            self.attrs[k] = v

    @property
    def triangle_count(self) -> int:
        return len(self.xyz) // 3


@dataclass(frozen=True)
class Aabb:
    min: np.ndarray
    max: np.ndarray
    center: np.ndarray
    length: float


def centroid(points) -> np.ndarray:
    pts = as_points(points)
    return pts.sum(axis=0) / len(pts)


def center_point_cloud(points: np.ndarray) -> None:
    """Translate ``points`` in place so that their centroid is the origin.

    ``points`` must be a writable floating-point ``(N, 3)`` array owned by the
    caller; no other thread may read or write it while this runs.
    """
    if not isinstance(points, np.ndarray) or not np.issubdtype(points.dtype, np.floating):
        raise TypeError("center_point_cloud needs a floating-point numpy array to modify in place.")
    if points.size == 0:
        raise EmptyInputError("Cannot center an empty point set.")
    view = points.reshape(-1, 3)
    if not np.shares_memory(view, points):
        raise ValueError("Point buffer must be reshapeable to (N, 3) without copying.")
    view -= centroid(view)


def get_aabb(points) -> Aabb:
    pts = as_points(points)
    mn = pts.min(axis=0)
    mx = pts.max(axis=0)
    return Aabb(
        min=mn,
        max=mx,
        center=(mn + mx) / 2.0,
        length=float(np.sqrt(np.sum((mx - mn) ** 2))),
    )

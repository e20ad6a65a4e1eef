from __future__ import annotations
from typing import Dict, Optional, Type
import numpy as np
from scipy.spatial import Delaunay, QhullError

from .errors import DegenerateGeometryError
from .utils import as_points, get_logger

_log = get_logger()


class Triangulator:
    """Builds a TriangleSet over an unordered point set.

    Subclasses choose the 2-D projection; Delaunay runs on the projected
    coordinates and triangles come back counter-clockwise in that plane.
    """
    name: str = "base"

    def project(self, points: np.ndarray) -> np.ndarray:  # pragma: no cover - abstract
        raise NotImplementedError

    def triangulate(self, points) -> np.ndarray:
        pts = as_points(points)
        uv = self.project(pts)
        try:
            tri = Delaunay(uv)
        except (QhullError, ValueError) as exc:
            raise DegenerateGeometryError(
                f"Delaunay triangulation of {len(pts)} points failed (duplicate or collinear input?): {exc}"
            ) from exc
        simplices = tri.simplices.astype(np.int64, copy=True)
        a, b, c = uv[simplices[:, 0]], uv[simplices[:, 1]], uv[simplices[:, 2]]
        signed = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
        flip = signed < 0
        simplices[flip] = simplices[flip][:, [0, 2, 1]]
        unused = np.flatnonzero(np.bincount(simplices.ravel(), minlength=len(pts)) == 0)
        if len(unused):
            # duplicate points are left out of every simplex by Qhull
            _log.warning(
                "%s: %d point(s) not used by any triangle (first index %d); their vertex normals are zero-length.",
                self.name, len(unused), unused[0],
            )
        _log.debug("%s: %d points -> %d triangles", self.name, len(pts), len(simplices))
        return simplices


class XYDelaunayTriangulator(Triangulator):
    """Delaunay on the XY projection; Z is ignored."""
    name = "xy"

    def project(self, points: np.ndarray) -> np.ndarray:
        return np.ascontiguousarray(points[:, :2])


class PlaneFitDelaunayTriangulator(Triangulator):
    """Delaunay on the least-squares plane of the points (two leading principal axes)."""
    name = "plane_fit"

    def project(self, points: np.ndarray) -> np.ndarray:
        centered = points - points.mean(axis=0)
        if len(points) < 3:
            return np.ascontiguousarray(centered[:, :2])
        _, _, vt = np.linalg.svd(centered, full_matrices=False)
        axes = vt[:2]
        # keep the plane normal on the +Z side so XY-like scans match "xy"
        if np.cross(axes[0], axes[1])[2] < 0:
            axes = axes[::-1]
        return centered @ axes.T


_TRIANGULATORS: Dict[str, Type[Triangulator]] = {
    XYDelaunayTriangulator.name: XYDelaunayTriangulator,
    PlaneFitDelaunayTriangulator.name: PlaneFitDelaunayTriangulator,
}


def get_triangulator(name: str) -> Triangulator:
    try:
        return _TRIANGULATORS[name]()
    except KeyError:
        raise ValueError(f"Unknown triangulator '{name}' (expected one of {sorted(_TRIANGULATORS)})") from None


def triangulate(points, triangulator: Optional[Triangulator] = None) -> np.ndarray:
    return (triangulator or XYDelaunayTriangulator()).triangulate(points)

from __future__ import annotations
import numpy as np

from .utils import as_points, as_triangles


def unwrap_vector_array(points, triangles) -> np.ndarray:
    """Flat coordinate array, three points per triangle in triangle order: shape (9M,)."""
    pts = as_points(points, allow_empty=True)
    tris = as_triangles(triangles, len(pts))
    return pts[tris.ravel()].ravel()


def unwrap_array(values, triangles) -> np.ndarray:
    """Per-vertex scalars repeated once per incident triangle slot: shape (3M,)."""
    vals = np.asarray(values)
    if vals.ndim != 1:
        raise ValueError(f"Expected a 1-D value array, got shape {vals.shape}")
    tris = as_triangles(triangles, len(vals))
    return vals[tris.ravel()]

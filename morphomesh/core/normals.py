from __future__ import annotations
import numpy as np

from .utils import DegeneratePolicy, as_points, as_triangles, check_policy, normalize_rows


def _triangle_cross(pts: np.ndarray, tris: np.ndarray) -> np.ndarray:
    u = pts[tris[:, 1]] - pts[tris[:, 0]]
    v = pts[tris[:, 2]] - pts[tris[:, 0]]
    return np.cross(u, v)


def face_vectors(points, triangles) -> np.ndarray:
    """Unnormalized face vectors keyed by triangle slot ``3*t + k``: shape (3M, 3)."""
    pts = as_points(points)
    tris = as_triangles(triangles, len(pts))
    return np.repeat(_triangle_cross(pts, tris), 3, axis=0)


def face_normals(points, triangles, on_degenerate: DegeneratePolicy = "raise") -> np.ndarray:
    """Per-point face normal of the last triangle (in order) that uses the point.

    Points no triangle references keep a zero vector.
    """
    pts = as_points(points)
    tris = as_triangles(triangles, len(pts))
    n = normalize_rows(_triangle_cross(pts, tris), on_degenerate, "triangle(s)")
    last = np.full(len(pts), -1, dtype=np.int64)
    np.maximum.at(last, tris.ravel(), np.repeat(np.arange(len(tris), dtype=np.int64), 3))
    used = last >= 0
    out = np.zeros_like(pts)
    out[used] = n[last[used]]
    return out


def _adjacency(tris: np.ndarray, n_points: int) -> tuple[np.ndarray, np.ndarray]:
    """CSR-style table: vertex -> face-vector slots of the other two corners."""
    m = len(tris)
    base = 3 * np.arange(m, dtype=np.int64)
    owners = np.concatenate([tris[:, 0], tris[:, 0], tris[:, 1], tris[:, 1], tris[:, 2], tris[:, 2]])
    slots = np.concatenate([base + 1, base + 2, base, base + 2, base, base + 1])
    order = np.argsort(owners, kind="stable")
    counts = np.bincount(owners, minlength=n_points)
    offsets = np.concatenate([[0], np.cumsum(counts)])
    return offsets, slots[order]


def vertex_normals(points, triangles, on_degenerate: DegeneratePolicy = "raise") -> np.ndarray:
    """Unit vertex normals from the summed face vectors of each vertex's adjacency.

    Every incident triangle is visited through both of its other corners, so it
    contributes its cross product twice; the sum is area weighted.
    """
    check_policy(on_degenerate)
    pts = as_points(points)
    tris = as_triangles(triangles, len(pts))
    offsets, slots = _adjacency(tris, len(pts))
    fv = face_vectors(pts, tris)
    sums = np.zeros_like(pts)
    owners = np.repeat(np.arange(len(pts)), np.diff(offsets))
    np.add.at(sums, owners, fv[slots])
    return normalize_rows(sums, on_degenerate, "vertex normal(s)")

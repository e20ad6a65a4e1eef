"""Surface scalars over unwrapped triangle soups.

Both fields take the triangle-major arrays produced by
:func:`morphomesh.core.unwrap.unwrap_vector_array` and return one scalar per
vertex slot (three per triangle).

Surface variation follows the Dirichlet normal energy used for dental
topography ("Comparing Dirichlet normal surface energy of tooth crowns ...").
For a triangle with edges ``u, v`` and normal differences ``nu, nv``::

    G = [[u.u, u.v], [u.v, v.v]]
    H = [[nu.nu, nu.nv], [nu.nv, nv.nv]]
    e = trace(G^-1 H)

so ``e`` measures how spread out the vertex normals are relative to the size
of the triangle.
"""
from __future__ import annotations
import numpy as np

from .errors import DegenerateGeometryError, ZeroNormalizationRangeError
from .utils import DegeneratePolicy, check_policy, ensure_unit_vectors

ENERGY_CLAMP = 1000.0
CONTRAST_OFFSET = 2.99572315
CONTRAST_SLOPE = 15.0
CONTRAST_SCALE = 20.0
ORIENTATION_BINS = 8


def _as_slots(arr, what: str) -> np.ndarray:
    a = np.asarray(arr, dtype=np.float64).reshape(-1)
    if a.size % 9 != 0:
        raise ValueError(f"Unwrapped {what} length {a.size} is not a multiple of 9")
    return a.reshape(-1, 3, 3)


def dirichlet_energy(unwrapped_points, unwrapped_normals, on_degenerate: DegeneratePolicy = "raise") -> np.ndarray:
    """Clamped per-triangle energy ``trace(G^-1 H)``: shape (M,)."""
    check_policy(on_degenerate)
    p = _as_slots(unwrapped_points, "points")
    n = _as_slots(unwrapped_normals, "normals")
    if p.shape != n.shape:
        raise ValueError(f"Unwrapped points {p.shape[0]} and normals {n.shape[0]} triangle counts differ")

    u = p[:, 1] - p[:, 0]
    v = p[:, 2] - p[:, 0]
    nu = n[:, 1] - n[:, 0]
    nv = n[:, 2] - n[:, 0]
    guu = np.einsum("ij,ij->i", u, u)
    guv = np.einsum("ij,ij->i", u, v)
    gvv = np.einsum("ij,ij->i", v, v)
    huu = np.einsum("ij,ij->i", nu, nu)
    huv = np.einsum("ij,ij->i", nu, nv)
    hvv = np.einsum("ij,ij->i", nv, nv)

    det = guu * gvv - guv * guv
    singular = ~(det > np.finfo(np.float64).eps * guu * gvv)
    if on_degenerate == "raise" and np.any(singular):
        idx = np.flatnonzero(singular)
        raise DegenerateGeometryError(
            f"{len(idx)} triangle(s) have a singular first fundamental form (first index {idx[0]})",
            indices=idx,
        )

    # trace([[gvv, -guv], [-guv, guu]] @ H) / det
    num = gvv * huu - 2.0 * guv * huv + guu * hvv
    energy = np.zeros_like(det)
    np.divide(num, det, out=energy, where=~singular)
    return np.minimum(energy, ENERGY_CLAMP)


def contrast_curve(e: np.ndarray) -> np.ndarray:
    return 1.0 - np.exp(CONTRAST_OFFSET - CONTRAST_SLOPE * e) / CONTRAST_SCALE


def surface_variation(unwrapped_points, unwrapped_normals, on_degenerate: DegeneratePolicy = "raise") -> np.ndarray:
    """Normalized, contrast-mapped Dirichlet energy per vertex slot: shape (3M,).

    Raises ZeroNormalizationRangeError when every triangle is flat.
    """
    energy = dirichlet_energy(unwrapped_points, unwrapped_normals, on_degenerate)
    largest = float(energy.max()) if energy.size else 0.0
    if not largest > 0.0:
        raise ZeroNormalizationRangeError("Maximum surface energy is zero; the surface is flat or empty.")
    return np.repeat(contrast_curve(energy / largest), 3)


def surface_orientation(unwrapped_normals, bins: int = ORIENTATION_BINS) -> np.ndarray:
    """Azimuth of each normal's XY part quantized to ``bins`` levels in [0, 1].

    Bin ``k`` maps to ``k / (bins - 1)``. Normals with no XY component fall in bin 0.
    """
    if bins < 2:
        raise ValueError("surface_orientation needs at least 2 bins")
    n = np.asarray(unwrapped_normals, dtype=np.float64).reshape(-1)
    if n.size % 3 != 0:
        raise ValueError(f"Unwrapped normals length {n.size} is not a multiple of 3")
    xy = ensure_unit_vectors(n.reshape(-1, 3)[:, :2])
    theta = np.arctan2(xy[:, 1], xy[:, 0])
    theta = np.where(theta < 0.0, theta + 2.0 * np.pi, theta)
    region = np.floor(theta / (2.0 * np.pi / bins))
    region = np.minimum(region, bins - 1)
    return region / (bins - 1)

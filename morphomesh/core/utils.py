from __future__ import annotations
import numpy as np
import logging
from typing import Literal

from .errors import DegenerateGeometryError, EmptyInputError, IndexOutOfRangeError

DegeneratePolicy = Literal["raise", "zero"]


def get_logger(name: str = "morphomesh") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def ensure_unit_vectors(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    norms = np.linalg.norm(v, axis=1, keepdims=True)
    norms = np.clip(norms, eps, None)
    return v / norms


def as_points(points, allow_empty: bool = False) -> np.ndarray:
    """Coerce a PointSet into a float64 ``(N, 3)`` array (copy only if needed)."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        if not allow_empty:
            raise EmptyInputError("Point set is empty.")
        return arr.reshape(0, 3)
    if arr.ndim == 1 and arr.size % 3 == 0:
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Points must have shape (N, 3), got {arr.shape}")
    return arr


def as_triangles(triangles, n_points: int) -> np.ndarray:
    """Coerce a TriangleSet into an int64 ``(M, 3)`` array with indices checked."""
    arr = np.asarray(triangles)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.int64)
    if arr.ndim == 1 and arr.size % 3 == 0:
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Triangles must have shape (M, 3), got {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        if not np.all(np.equal(np.mod(arr, 1), 0)):
            raise ValueError("Triangle indices must be integers.")
    arr = arr.astype(np.int64, copy=False)
    bad = np.any((arr < 0) | (arr >= n_points), axis=1)
    if np.any(bad):
        rows = np.flatnonzero(bad)
        raise IndexOutOfRangeError(
            f"{len(rows)} triangle(s) reference indices outside [0, {n_points}), first is #{rows[0]} {arr[rows[0]].tolist()}",
            triangles=rows,
        )
    return arr


def check_policy(on_degenerate: str) -> None:
    if on_degenerate not in ("raise", "zero"):
        raise ValueError(f"Unknown degenerate policy '{on_degenerate}'")


def normalize_rows(v: np.ndarray, on_degenerate: DegeneratePolicy, what: str) -> np.ndarray:
    """Normalize each row; zero-length rows are reported or zeroed per policy."""
    check_policy(on_degenerate)
    norms = np.linalg.norm(v, axis=1)
    zero = ~(norms > 0.0)
    if on_degenerate == "raise" and np.any(zero):
        idx = np.flatnonzero(zero)
        raise DegenerateGeometryError(f"{len(idx)} {what} with zero length (first index {idx[0]})", indices=idx)
    out = np.zeros_like(v)
    np.divide(v, norms[:, None], out=out, where=~zero[:, None])
    return out

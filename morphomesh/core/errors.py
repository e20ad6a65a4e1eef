from __future__ import annotations
from typing import Iterable, Optional
import numpy as np


class MeshError(ValueError):
    """Base class for geometry errors raised by morphomesh."""


class IndexOutOfRangeError(MeshError):
    """A triangle references a point index outside the point set."""

    def __init__(self, message: str, triangles: Optional[Iterable[int]] = None) -> None:
        super().__init__(message)
        self.triangles = np.asarray(list(triangles) if triangles is not None else [], dtype=np.int64)


class EmptyInputError(MeshError):
    """An operation that needs at least one point got none."""


class DegenerateGeometryError(MeshError):
    """Per-element degeneracy (zero-area triangle, isolated vertex).

    ``indices`` holds the offending triangle or vertex indices so callers can
    substitute defaults and retry with ``on_degenerate="zero"``.
    """

    def __init__(self, message: str, indices: Optional[Iterable[int]] = None) -> None:
        super().__init__(message)
        self.indices = np.asarray(list(indices) if indices is not None else [], dtype=np.int64)


class ZeroNormalizationRangeError(MeshError):
    """The maximum surface energy is zero, so the field cannot be normalized."""

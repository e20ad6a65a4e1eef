from __future__ import annotations
from typing import Dict, List
import numpy as np
import pathlib

from .pointcloud import SurfaceBatch
from .utils import get_logger

_log = get_logger()


class _SoupWriter:
    """Buffers unwrapped batches and writes them as one file on ``close``."""
    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[SurfaceBatch] = []

    def write_batch(self, batch: SurfaceBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        if not self._batches:
            return
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._flush(path, self._batches)
        self._batches = []

    def _flush(self, path: pathlib.Path, batches: List[SurfaceBatch]) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class PlyWriter(_SoupWriter):
    """ASCII triangle-soup PLY: positions, normals and one float property per scalar field.

    Face ``i`` is ``(3i, 3i+1, 3i+2)``, matching the unwrapped slot layout, so
    a renderer can use the scalars directly as per-vertex shading attributes.
    Fields missing from any batch are left out.
    """
    def _flush(self, path: pathlib.Path, batches: List[SurfaceBatch]) -> None:
        xyz = np.vstack([b.xyz for b in batches])
        shared = set.intersection(*(set(b.attrs) for b in batches))
        has_normals = "normal" in shared
        scalar_keys = sorted(
            k for k in shared
            if not k.startswith("_") and np.asarray(batches[0].attrs[k]).ndim == 1
        )
        columns: List[np.ndarray] = [xyz]
        if has_normals:
            columns.append(np.vstack([b.attrs["normal"] for b in batches]))
        for k in scalar_keys:
            columns.append(np.concatenate([b.attrs[k] for b in batches])[:, None])
        table = np.hstack(columns).astype(np.float64, copy=False)

        with open(path, "w", encoding="utf-8") as f:
            n = len(xyz)
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {n}\n")
            f.write("property float x\nproperty float y\nproperty float z\n")
            if has_normals:
                f.write("property float nx\nproperty float ny\nproperty float nz\n")
            for k in scalar_keys:
                f.write(f"property float {k}\n")
            f.write(f"element face {n // 3}\n")
            f.write("property list uchar int vertex_indices\n")
            f.write("end_header\n")
            for row in table:
                f.write(" ".join(f"{float(v):.6f}" for v in row) + "\n")
            for i in range(0, n, 3):
                f.write(f"3 {i} {i + 1} {i + 2}\n")
        _log.info("Wrote %s (%d triangles, fields: %s)", path.name, n // 3, ", ".join(scalar_keys) or "-")


class NpzWriter(_SoupWriter):
    """Compressed NPZ with ``xyz`` plus one array per attribute.

    A field absent from some batches is zero-filled there, using the shape and
    dtype of its first occurrence.
    """
    def _flush(self, path: pathlib.Path, batches: List[SurfaceBatch]) -> None:
        templates: Dict[str, np.ndarray] = {}
        for b in batches:
            for k, v in b.attrs.items():
                templates.setdefault(k, np.asarray(v))

        out: Dict[str, np.ndarray] = {"xyz": np.vstack([b.xyz for b in batches])}
        for k in sorted(templates):
            ref = templates[k]
            out[k] = np.concatenate([
                np.asarray(b.attrs[k], dtype=ref.dtype) if k in b.attrs
                else np.zeros((len(b.xyz),) + ref.shape[1:], dtype=ref.dtype)
                for b in batches
            ])
        np.savez_compressed(path, **out)
        _log.info("Wrote %s (%d vertex slots, fields: %s)", path.name, len(out["xyz"]), ", ".join(sorted(templates)) or "-")

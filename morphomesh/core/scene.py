from __future__ import annotations
from pathlib import Path
from typing import Optional
import numpy as np
import trimesh

from .pointcloud import MeshData
from .utils import get_logger

_log = get_logger()

MESH_SUFFIXES = {".obj", ".ply", ".stl", ".off", ".glb", ".gltf"}
POINT_SUFFIXES = {".csv", ".txt", ".xyz"}


class MeshScene:
    """Holds a loaded mesh or point cloud in indexed form.

    Mesh formats go through trimesh with processing disabled so vertex order
    (the index space of the triangles) is exactly the file's. Plain text point
    lists are read as ``x, y, z`` rows and carry no triangles.
    """
    def __init__(
        self,
        mesh_path: str | Path | None = None,
        mesh_data: Optional[MeshData] = None,
        csv_delimiter: Optional[str] = ",",
    ) -> None:
        self.mesh_path = Path(mesh_path) if mesh_path is not None else None
        self._data: Optional[MeshData] = None

        if mesh_data is not None:
            self._data = mesh_data
        elif self.mesh_path is not None:
            self._load_from_path(self.mesh_path, csv_delimiter)
        else:
            raise ValueError("Provide either mesh_path or mesh_data.")

    # -- IO helpers --
    def _load_from_path(self, path: Path, csv_delimiter: Optional[str]) -> None:
        if not path.exists():
            raise FileNotFoundError(path)
        suffix = path.suffix.lower()
        if suffix in POINT_SUFFIXES:
            delimiter = None if suffix == ".xyz" else csv_delimiter
            pts = np.loadtxt(path, delimiter=delimiter, comments="#", usecols=(0, 1, 2), ndmin=2)
            self._data = MeshData(points=pts)
        elif suffix in MESH_SUFFIXES:
            self._data = self._load_trimesh(path)
        else:
            raise ValueError(f"Unsupported mesh extension '{suffix}'.")
        _log.info(
            "Loaded %s: %d points, %d triangles",
            path.name, len(self._data.points), 0 if self._data.triangles is None else len(self._data.triangles),
        )

    @staticmethod
    def _load_trimesh(path: Path) -> MeshData:
        loaded = trimesh.load(str(path), process=False)
        if isinstance(loaded, trimesh.Scene):
            geoms = [g for g in loaded.geometry.values() if len(getattr(g, "vertices", ())) > 0]
            if not geoms:
                raise ValueError(f"{path.name} contains no geometry.")
            loaded = trimesh.util.concatenate(geoms) if len(geoms) > 1 else geoms[0]
        vertices = np.asarray(loaded.vertices, dtype=np.float64)
        faces = getattr(loaded, "faces", None)
        normals = None
        if isinstance(loaded, trimesh.Trimesh):
            # trimesh caches normals it read from the file; otherwise they are not present yet
            if "vertex_normals" in loaded._cache:
                normals = np.asarray(loaded.vertex_normals, dtype=np.float64)
        return MeshData(
            points=vertices,
            triangles=None if faces is None or len(faces) == 0 else np.asarray(faces, dtype=np.int64),
            normals=normals,
        )

    # -- API --
    def mesh_data(self) -> MeshData:
        if self._data is None:
            raise RuntimeError("Scene not loaded.")
        return self._data

    def has_triangles(self) -> bool:
        return self.mesh_data().triangles is not None

    def has_normals(self) -> bool:
        return self.mesh_data().normals is not None

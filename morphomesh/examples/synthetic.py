from __future__ import annotations

from pathlib import Path
from typing import Tuple

import numpy as np

from ..core.normals import vertex_normals

Mesh = Tuple[np.ndarray, np.ndarray]


def _grid(size: float, divisions: int) -> Mesh:
    lin = np.linspace(-size / 2.0, size / 2.0, divisions + 1)
    xv, yv = np.meshgrid(lin, lin, indexing="ij")
    vertices = np.column_stack([xv.ravel(), yv.ravel(), np.zeros(xv.size)])

    faces = []
    for i in range(divisions):
        for j in range(divisions):
            idx0 = i * (divisions + 1) + j
            idx1 = idx0 + 1
            idx2 = idx0 + (divisions + 1)
            idx3 = idx2 + 1
            faces.append([idx0, idx2, idx3])
            faces.append([idx0, idx3, idx1])
    return vertices, np.asarray(faces, dtype=np.int64)


def plane(size: float = 1.0, divisions: int = 10) -> Mesh:
    return _grid(size, divisions)


def saddle(size: float = 1.0, divisions: int = 20) -> Mesh:
    vertices, faces = _grid(size, divisions)
    x, y = vertices[:, 0], vertices[:, 1]
    vertices[:, 2] = (x ** 2 - y ** 2) / size
    return vertices, faces


def tetrahedron(size: float = 1.0) -> Mesh:
    s = size / 2.0
    vertices = np.array([
        [s, s, s],
        [s, -s, -s],
        [-s, s, -s],
        [-s, -s, s],
    ])
    faces = np.array([
        [1, 3, 2],
        [0, 2, 3],
        [0, 3, 1],
        [0, 1, 2],
    ], dtype=np.int64)
    return vertices, faces


def box(size: float = 1.0) -> Mesh:
    h = size / 2.0
    vertices = np.array([
        [-h, -h, -h],
        [h, -h, -h],
        [h, h, -h],
        [-h, h, -h],
        [-h, -h, h],
        [h, -h, h],
        [h, h, h],
        [-h, h, h],
    ])
    faces = np.array([
        [0, 2, 1], [0, 3, 2],  # bottom
        [4, 5, 6], [4, 6, 7],  # top
        [0, 1, 5], [0, 5, 4],  # front
        [1, 2, 6], [1, 6, 5],  # right
        [2, 3, 7], [2, 7, 6],  # back
        [3, 0, 4], [3, 4, 7],  # left
    ], dtype=np.int64)
    return vertices, faces


def sphere(size: float = 1.0, n_lat: int = 16, n_lon: int = 32) -> Mesh:
    """UV sphere of diameter ``size`` with single pole vertices, outward winding."""
    r = size / 2.0
    rows = []
    for i in range(1, n_lat):
        theta = np.pi * i / n_lat
        phi = 2.0 * np.pi * np.arange(n_lon) / n_lon
        rows.append(np.column_stack([
            r * np.sin(theta) * np.cos(phi),
            r * np.sin(theta) * np.sin(phi),
            np.full(n_lon, r * np.cos(theta)),
        ]))
    vertices = np.vstack([[[0.0, 0.0, r]], *rows, [[0.0, 0.0, -r]]])
    south = len(vertices) - 1

    def ring(i: int, j: int) -> int:
        return 1 + i * n_lon + (j % n_lon)

    faces = []
    for j in range(n_lon):
        faces.append([0, ring(0, j), ring(0, j + 1)])
    for i in range(n_lat - 2):
        for j in range(n_lon):
            a, b = ring(i, j), ring(i, j + 1)
            c, d = ring(i + 1, j), ring(i + 1, j + 1)
            faces.append([a, c, d])
            faces.append([a, d, b])
    for j in range(n_lon):
        faces.append([south, ring(n_lat - 2, j + 1), ring(n_lat - 2, j)])
    return vertices, np.asarray(faces, dtype=np.int64)


def terrain_points(size: float = 1.0, count: int = 400, seed: int = 7) -> np.ndarray:
    """Scattered height-field samples, for the triangulation path."""
    rng = np.random.default_rng(seed)
    xy = rng.uniform(-size / 2.0, size / 2.0, size=(count, 2))
    z = 0.1 * size * np.sin(2.0 * np.pi * xy[:, 0] / size) * np.cos(2.0 * np.pi * xy[:, 1] / size)
    return np.column_stack([xy, z])


def _write_ascii_ply(path: Path, vertices: np.ndarray, faces: np.ndarray, normals: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("ply\n")
        f.write("format ascii 1.0\n")
        f.write(f"element vertex {len(vertices)}\n")
        f.write("property float x\nproperty float y\nproperty float z\n")
        f.write("property float nx\nproperty float ny\nproperty float nz\n")
        f.write(f"element face {len(faces)}\n")
        f.write("property list uchar int vertex_indices\n")
        f.write("end_header\n")
        for (x, y, z), (nx, ny, nz) in zip(vertices, normals):
            f.write(f"{x:.6f} {y:.6f} {z:.6f} {nx:.6f} {ny:.6f} {nz:.6f}\n")
        for tri in faces:
            f.write(f"3 {tri[0]} {tri[1]} {tri[2]}\n")


def _write_csv(path: Path, points: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, points, delimiter=",", fmt="%.6f", header="x,y,z")


_MESH_PRESETS = {
    "plane": plane,
    "saddle": saddle,
    "tetrahedron": tetrahedron,
    "box": box,
    "sphere": sphere,
}

PRESETS = tuple(sorted(_MESH_PRESETS)) + ("terrain",)


def generate_mesh(preset: str, size: float, path: Path) -> None:
    preset = preset.lower()
    if preset == "terrain":
        _write_csv(path, terrain_points(size=size))
        return
    if preset not in _MESH_PRESETS:
        raise ValueError(f"Unknown synthetic mesh preset '{preset}'.")
    vertices, faces = _MESH_PRESETS[preset](size)
    _write_ascii_ply(path, vertices, faces, vertex_normals(vertices, faces))

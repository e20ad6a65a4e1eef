from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional
import numpy as np

from .attributes import AttributeComputer, CurvatureComputer, EnergyComputer, OrientationComputer
from .normals import face_normals, vertex_normals
from .pointcloud import Aabb, MeshData, SurfaceBatch, center_point_cloud, get_aabb
from .surface import ORIENTATION_BINS
from .triangulation import Triangulator, XYDelaunayTriangulator
from .unwrap import unwrap_vector_array
from .utils import DegeneratePolicy, get_logger

_log = get_logger()

NormalSource = Literal["vertex", "face", "file"]


@dataclass
class ProcessorConfig:
    center: bool = True
    normals: NormalSource = "vertex"
    on_degenerate: DegeneratePolicy = "raise"
    orientation_bins: int = ORIENTATION_BINS
    attributes: List[str] = field(default_factory=lambda: ["curvature", "orientation"])

_ATTR_FACTORY: Dict[str, Any] = {
    "curvature": CurvatureComputer,
    "energy": EnergyComputer,
    "orientation": OrientationComputer,
}


@dataclass
class ProcessedMesh:
    """Indexed mesh after processing plus its unwrapped, attributed batch."""
    points: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray
    aabb: Aabb
    batch: SurfaceBatch


class MeshProcessor:
    """High-level orchestrator.

    Takes loaded meshes (points, optional triangles and normals), centers,
    triangulates point clouds, computes normals, unwraps everything into
    triangle-major slots and runs the attribute chain on the result.
    """
    def __init__(self, triangulator: Optional[Triangulator] = None, cfg: Optional[ProcessorConfig] = None) -> None:
        self.cfg = cfg or ProcessorConfig()
        self.triangulator = triangulator if triangulator is not None else XYDelaunayTriangulator()

    def _build_attribute_chain(self) -> List[AttributeComputer]:
        chain: List[AttributeComputer] = []
        seen = set()
        for name in self.cfg.attributes:
            if name in seen:
                continue
            if name not in _ATTR_FACTORY:
                _log.warning("Unknown attribute '%s' – skipping.", name)
                continue
            seen.add(name)
            if name == "orientation":
                chain.append(OrientationComputer(bins=self.cfg.orientation_bins))
            else:
                chain.append(_ATTR_FACTORY[name](on_degenerate=self.cfg.on_degenerate))
        return chain

    def _normals(self, mesh: MeshData, points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
        source = self.cfg.normals
        if source == "file":
            if mesh.normals is not None:
                return mesh.normals.copy()
            _log.info("Mesh carries no normals; computing vertex normals instead.")
            source = "vertex"
        if source == "face":
            return face_normals(points, triangles, self.cfg.on_degenerate)
        if source == "vertex":
            return vertex_normals(points, triangles, self.cfg.on_degenerate)
        raise ValueError(f"Unsupported normal source: {source}")

    def process(self, mesh: MeshData) -> ProcessedMesh:
        points = np.array(mesh.points, dtype=np.float64, copy=True)
        if self.cfg.center:
            center_point_cloud(points)

        triangles = mesh.triangles
        if triangles is None:
            triangles = self.triangulator.triangulate(points)
            _log.info("Triangulated %d points into %d triangles (%s)", len(points), len(triangles), self.triangulator.name)

        normals = self._normals(mesh, points, triangles)
        batch = SurfaceBatch(
            xyz=unwrap_vector_array(points, triangles),
            attrs={"normal": unwrap_vector_array(normals, triangles)},
        )
        for comp in self._build_attribute_chain():
            comp.compute(batch)

        return ProcessedMesh(
            points=points,
            triangles=triangles,
            normals=normals,
            aabb=get_aabb(points),
            batch=batch,
        )

    def run_to_writer(self, writer, meshes: Iterable[MeshData]) -> Dict[str, int]:
        """Stream: for each mesh → process → SurfaceBatch → write.

        Returns run statistics.
        """
        total_meshes = 0
        total_triangles = 0
        total_vertices = 0
        for mesh in meshes:
            result = self.process(mesh)
            writer.write_batch(result.batch)
            total_meshes += 1
            total_triangles += len(result.triangles)
            total_vertices += len(result.points)

        writer.close()
        stats = {"meshes": total_meshes, "triangles": total_triangles, "vertices": total_vertices}
        _log.info("Processor finished: %d meshes → %d triangles", total_meshes, total_triangles)
        return stats

"""morphomesh – surface normals, curvature and orientation fields for triangle meshes.

Core operations (pure functions over numpy arrays):
- centering and bounding boxes (core.pointcloud)
- Delaunay triangulation of scattered points (core.triangulation)
- index unwrapping into triangle-major arrays (core.unwrap)
- face and vertex normals (core.normals)
- Dirichlet-energy surface variation and orientation bins (core.surface)

Around them sit the loader (core.scene), the MeshProcessor pipeline with its
AttributeComputer plug-ins, NPZ/PLY writers, YAML configuration and a CLI.
"""

from .core.errors import (
    MeshError,
    IndexOutOfRangeError, EmptyInputError,
    DegenerateGeometryError, ZeroNormalizationRangeError,
)
from .core.pointcloud import MeshData, SurfaceBatch, Aabb, centroid, center_point_cloud, get_aabb
from .core.triangulation import (Triangulator, XYDelaunayTriangulator,
                                 PlaneFitDelaunayTriangulator, get_triangulator, triangulate)
from .core.unwrap import unwrap_vector_array, unwrap_array
from .core.normals import face_vectors, face_normals, vertex_normals
from .core.surface import dirichlet_energy, contrast_curve, surface_variation, surface_orientation
from .core.scene import MeshScene
from .core.attributes import AttributeComputer, CurvatureComputer, EnergyComputer, OrientationComputer
from .core.processor import MeshProcessor, ProcessorConfig, ProcessedMesh
from .core.exporter import NpzWriter, PlyWriter

import numpy as np
import pytest

from morphomesh.core.errors import ZeroNormalizationRangeError
from morphomesh.core.pointcloud import MeshData, SurfaceBatch
from morphomesh.core.processor import MeshProcessor, ProcessorConfig
from morphomesh.core.triangulation import PlaneFitDelaunayTriangulator
from morphomesh.examples.synthetic import plane, sphere, terrain_points, tetrahedron


class DummyWriter:
    def __init__(self) -> None:
        self.batches = []
        self.closed = False

    def write_batch(self, batch: SurfaceBatch) -> None:
        self.batches.append(batch)

    def close(self) -> None:
        self.closed = True


def test_process_indexed_mesh_unwraps_and_centers() -> None:
    verts, faces = tetrahedron(2.0)
    shifted = verts + np.array([10.0, -4.0, 3.0])
    result = MeshProcessor().process(MeshData(points=shifted, triangles=faces))
    np.testing.assert_allclose(result.points.mean(axis=0), 0.0, atol=1e-12)
    # input buffer untouched
    np.testing.assert_allclose(shifted.mean(axis=0), [10.0, -4.0, 3.0])
    np.testing.assert_array_equal(result.triangles, faces)
    assert result.batch.xyz.shape == (12, 3)
    assert result.batch.attrs["normal"].shape == (12, 3)
    assert result.batch.attrs["curvature"].shape == (12,)
    assert result.batch.attrs["orientation"].shape == (12,)
    np.testing.assert_allclose(result.aabb.center, 0.0, atol=1e-12)


def test_process_without_centering_keeps_coordinates() -> None:
    verts, faces = sphere(1.0, n_lat=6, n_lon=8)
    shifted = verts + 5.0
    proc = MeshProcessor(cfg=ProcessorConfig(center=False, attributes=[]))
    result = proc.process(MeshData(points=shifted, triangles=faces))
    np.testing.assert_allclose(result.points, shifted)
    assert set(result.batch.attrs) == {"normal"}


def test_point_cloud_is_triangulated() -> None:
    pts = terrain_points(size=1.0, count=60, seed=3)
    result = MeshProcessor().process(MeshData(points=pts))
    assert len(result.triangles) > 0
    assert result.batch.triangle_count == len(result.triangles)
    assert np.all(result.normals[:, 2] > 0.0)


def test_injected_triangulator_is_used() -> None:
    rng = np.random.default_rng(8)
    xz = rng.uniform(-1.0, 1.0, size=(40, 2))
    pts = np.column_stack([xz[:, 0], np.zeros(40), xz[:, 1]])
    proc = MeshProcessor(PlaneFitDelaunayTriangulator(), ProcessorConfig(attributes=["orientation"]))
    result = proc.process(MeshData(points=pts))
    assert len(result.triangles) > 0
    np.testing.assert_allclose(np.abs(result.normals[:, 1]), 1.0, atol=1e-9)


def test_unknown_and_duplicate_attributes_are_skipped() -> None:
    verts, faces = tetrahedron()
    proc = MeshProcessor(cfg=ProcessorConfig(attributes=["energy", "roughness", "energy"]))
    chain = proc._build_attribute_chain()
    assert [c.name for c in chain] == ["energy"]
    result = proc.process(MeshData(points=verts, triangles=faces))
    assert "roughness" not in result.batch.attrs
    assert result.batch.attrs["energy"].shape == (12,)


def test_file_normals_are_used_when_requested() -> None:
    verts, faces = plane(1.0, divisions=2)
    tilted = np.tile([0.0, 0.6, 0.8], (len(verts), 1))
    mesh = MeshData(points=verts, triangles=faces, normals=tilted)
    result = MeshProcessor(cfg=ProcessorConfig(normals="file", attributes=[])).process(mesh)
    np.testing.assert_allclose(result.normals, tilted)

    fallback = MeshProcessor(cfg=ProcessorConfig(normals="file", attributes=[]))
    result = fallback.process(MeshData(points=verts, triangles=faces))
    np.testing.assert_allclose(result.normals[:, 2], 1.0)


def test_face_normals_source() -> None:
    verts, faces = tetrahedron()
    result = MeshProcessor(cfg=ProcessorConfig(normals="face", attributes=[])).process(
        MeshData(points=verts, triangles=faces)
    )
    np.testing.assert_allclose(np.linalg.norm(result.normals, axis=1), 1.0)


def test_flat_mesh_curvature_propagates_error() -> None:
    verts, faces = plane(1.0, divisions=3)
    with pytest.raises(ZeroNormalizationRangeError):
        MeshProcessor().process(MeshData(points=verts, triangles=faces))


def test_run_to_writer_collects_stats_and_closes() -> None:
    verts, faces = tetrahedron()
    writer = DummyWriter()
    meshes = [MeshData(points=verts, triangles=faces), MeshData(points=verts * 2.0, triangles=faces)]
    stats = MeshProcessor().run_to_writer(writer, meshes)
    assert stats == {"meshes": 2, "triangles": 8, "vertices": 8}
    assert len(writer.batches) == 2
    assert writer.closed

import numpy as np
import pytest

from morphomesh.core.errors import DegenerateGeometryError, IndexOutOfRangeError
from morphomesh.core.normals import face_normals, face_vectors, vertex_normals
from morphomesh.examples.synthetic import plane, sphere, tetrahedron


def test_face_normal_follows_right_hand_rule() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    normals = face_normals(pts, [(0, 1, 2)])
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (3, 1)))


def test_face_normals_shared_vertex_keeps_last_triangle() -> None:
    pts = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ])
    tris = [(0, 1, 2), (0, 3, 1)]  # second triangle lies in the XZ plane, normal +Y
    normals = face_normals(pts, tris)
    np.testing.assert_allclose(normals[0], [0.0, 1.0, 0.0])
    np.testing.assert_allclose(normals[1], [0.0, 1.0, 0.0])
    np.testing.assert_allclose(normals[2], [0.0, 0.0, 1.0])
    np.testing.assert_allclose(normals[3], [0.0, 1.0, 0.0])


def test_face_normals_leave_unreferenced_points_zero() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [5.0, 5.0, 5.0]])
    normals = face_normals(pts, [(0, 1, 2)])
    np.testing.assert_array_equal(normals[3], [0.0, 0.0, 0.0])


def test_face_normals_report_zero_area_triangles() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    tris = [(0, 1, 3), (0, 1, 2)]
    with pytest.raises(DegenerateGeometryError) as info:
        face_normals(pts, tris)
    np.testing.assert_array_equal(info.value.indices, [1])
    zeroed = face_normals(pts, tris, on_degenerate="zero")
    np.testing.assert_array_equal(zeroed[2], [0.0, 0.0, 0.0])


def test_face_vectors_are_unnormalized_and_slot_keyed() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 3.0, 0.0], [0.0, 0.0, 1.0]])
    fv = face_vectors(pts, [(0, 1, 2), (0, 3, 1)])
    assert fv.shape == (6, 3)
    np.testing.assert_allclose(fv[:3], np.tile([0.0, 0.0, 6.0], (3, 1)))
    np.testing.assert_allclose(fv[3:], np.tile([0.0, 2.0, 0.0], (3, 1)))


def test_vertex_normals_on_tetrahedron_point_outward() -> None:
    verts, faces = tetrahedron(2.0)
    normals = vertex_normals(verts, faces)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)
    outward = verts - verts.mean(axis=0)
    outward /= np.linalg.norm(outward, axis=1, keepdims=True)
    cos = np.einsum("ij,ij->i", normals, outward)
    assert np.all(cos > 0.999)


def test_vertex_normals_match_incident_face_average() -> None:
    verts, faces = sphere(1.0, n_lat=8, n_lon=12)
    normals = vertex_normals(verts, faces)
    # area-weighted mean of incident face vectors, built independently
    expected = np.zeros_like(verts)
    cross = np.cross(verts[faces[:, 1]] - verts[faces[:, 0]], verts[faces[:, 2]] - verts[faces[:, 0]])
    for t, tri in enumerate(faces):
        for v in tri:
            expected[v] += cross[t]
    expected /= np.linalg.norm(expected, axis=1, keepdims=True)
    np.testing.assert_allclose(normals, expected, atol=1e-12)
    radial = verts / np.linalg.norm(verts, axis=1, keepdims=True)
    assert np.all(np.einsum("ij,ij->i", normals, radial) > 0.95)


def test_vertex_normals_on_plane_are_up() -> None:
    verts, faces = plane(1.0, divisions=4)
    normals = vertex_normals(verts, faces)
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (len(verts), 1)), atol=1e-12)


def test_vertex_normals_report_isolated_vertices() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [9.0, 9.0, 9.0]])
    with pytest.raises(DegenerateGeometryError) as info:
        vertex_normals(pts, [(0, 1, 2)])
    np.testing.assert_array_equal(info.value.indices, [3])
    normals = vertex_normals(pts, [(0, 1, 2)], on_degenerate="zero")
    np.testing.assert_array_equal(normals[3], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(normals[:3], np.tile([0.0, 0.0, 1.0], (3, 1)))


def test_normals_reject_index_equal_to_point_count() -> None:
    pts = np.zeros((3, 3))
    with pytest.raises(IndexOutOfRangeError):
        face_normals(pts, [(0, 1, 3)])
    with pytest.raises(IndexOutOfRangeError):
        vertex_normals(pts, [(0, 1, 3)])


def test_unknown_degenerate_policy_is_rejected() -> None:
    verts, faces = tetrahedron()
    with pytest.raises(ValueError):
        vertex_normals(verts, faces, on_degenerate="ignore")  # type: ignore[arg-type]

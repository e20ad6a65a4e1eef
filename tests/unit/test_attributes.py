import numpy as np
import pytest

from morphomesh.core.attributes import CurvatureComputer, EnergyComputer, OrientationComputer
from morphomesh.core.pointcloud import SurfaceBatch

UP = [0.0, 0.0, 1.0]
TILT = [0.6, 0.0, 0.8]


def make_batch(normals=None) -> SurfaceBatch:
    xyz = np.array([
        [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0],
    ])
    attrs = {}
    if normals is not None:
        attrs["normal"] = np.asarray(normals, dtype=np.float64)
    return SurfaceBatch(xyz=xyz, attrs=attrs)


def test_curvature_computer_adds_per_slot_field() -> None:
    batch = make_batch([UP, UP, UP, UP, TILT, UP])
    CurvatureComputer().compute(batch)
    curv = batch.attrs["curvature"]
    assert curv.shape == (6,)
    assert curv[3] == pytest.approx(1.0 - np.exp(2.99572315 - 15.0) / 20.0)
    assert curv[0] < curv[3]


def test_energy_computer_keeps_raw_values() -> None:
    batch = make_batch([UP, UP, UP, UP, TILT, UP])
    EnergyComputer().compute(batch)
    np.testing.assert_allclose(batch.attrs["energy"], [0.0, 0.0, 0.0, 0.4, 0.4, 0.4])


def test_orientation_computer_uses_bins() -> None:
    batch = make_batch([[1.0, 0.1, 0.0]] * 3 + [[-1.0, 0.1, 0.0]] * 3)
    OrientationComputer(bins=2).compute(batch)
    np.testing.assert_array_equal(batch.attrs["orientation"], [0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
    OrientationComputer().compute(batch)
    np.testing.assert_allclose(batch.attrs["orientation"], [0.0] * 3 + [3.0 / 7.0] * 3)


def test_computers_require_normals() -> None:
    batch = make_batch()
    for comp in (CurvatureComputer(), EnergyComputer(), OrientationComputer()):
        with pytest.raises(ValueError):
            comp.compute(batch)

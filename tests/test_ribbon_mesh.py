# tests/test_ribbon_mesh.py
"""Test the indexed mesh container."""

import numpy as np
import pytest

from proteinribbon.core.mesh.ribbon_mesh import EmptyMeshError, InvalidMeshError, RibbonMesh


def _triangle(offset=0.0, color=(1, 0, 0, 1)):
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=float) + offset
    normals = np.tile([0.0, 0.0, 1.0], (3, 1))
    return RibbonMesh(positions, normals, np.tile(color, (3, 1)), [[0, 1, 2]])


def test_dtypes():
    mesh = _triangle()
    assert mesh.positions.dtype == np.float32
    assert mesh.normals.dtype == np.float32
    assert mesh.colors.dtype == np.float32
    assert mesh.faces.dtype == np.int32
    assert mesh.n_vertices == 3
    assert mesh.n_faces == 1


def test_append_rebases_indices():
    a, b = _triangle(), _triangle(offset=5.0)
    combined = a.append(b)

    assert combined.n_vertices == 6
    assert combined.faces.tolist() == [[0, 1, 2], [3, 4, 5]]
    # Inputs untouched
    assert a.n_vertices == 3
    assert b.faces.tolist() == [[0, 1, 2]]


def test_merge_matches_repeated_append():
    meshes = [_triangle(offset=i) for i in range(4)]
    merged = RibbonMesh.merge(meshes)

    chained = RibbonMesh()
    for mesh in meshes:
        chained = chained.append(mesh)

    assert np.array_equal(merged.positions, chained.positions)
    assert np.array_equal(merged.faces, chained.faces)
    assert merged.faces.max() == merged.n_vertices - 1


def test_merge_skips_empty():
    merged = RibbonMesh.merge([RibbonMesh(), _triangle(), RibbonMesh()])
    assert merged.n_vertices == 3
    assert RibbonMesh.merge([]).is_empty


def test_scaled_leaves_normals():
    mesh = _triangle().scaled(0.5)
    assert np.allclose(mesh.positions[1], [0.5, 0, 0])
    assert np.allclose(mesh.normals, [0, 0, 1])


def test_centered_and_bounds():
    mesh = _triangle(offset=3.0).centered()
    assert np.allclose(mesh.positions.mean(axis=0), 0.0, atol=1e-6)
    lo, hi = _triangle().bounds()
    assert np.allclose(lo, [0, 0, 0])
    assert np.allclose(hi, [1, 1, 0])


def test_render_arrays():
    arrays = _triangle().to_render_arrays()
    assert set(arrays) == {"positions", "normals", "colors", "indices"}
    assert arrays["indices"].dtype == np.uint32
    assert arrays["indices"].tolist() == [0, 1, 2]
    assert arrays["colors"].shape == (3, 4)


def test_empty_mesh_conversion_raises():
    with pytest.raises(EmptyMeshError):
        RibbonMesh().to_render_arrays()


def test_invalid_mesh_raises():
    mesh = _triangle()
    mesh.faces = np.array([[0, 1, 7]], dtype=np.int32)
    with pytest.raises(InvalidMeshError):
        mesh.to_render_arrays()

    mesh = _triangle()
    mesh.normals = mesh.normals[:2]
    with pytest.raises(InvalidMeshError):
        mesh.validate()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

# tests/test_skeleton_imports.py
"""Test that all ribbon pipeline modules can be imported."""

import pytest


def test_geometry_imports():
    """Test geometry module imports."""
    from proteinribbon.core.geometry import SplineFitter, rotation_minimizing_frames
    from proteinribbon.core.geometry.frames import rotation_minimizing_frames as rmf2
    from proteinribbon.core.geometry.spline import SplineFitter as SF2

    assert SplineFitter is SF2
    assert rotation_minimizing_frames is rmf2


def test_mesh_imports():
    """Test mesh module imports."""
    from proteinribbon.core.mesh import RibbonMesh, RibbonMeshTessellator
    from proteinribbon.core.mesh.ribbon_mesh import RibbonMesh as RM2
    from proteinribbon.core.mesh.tessellator import RibbonMeshTessellator as RMT2

    assert RibbonMesh is RM2
    assert RibbonMeshTessellator is RMT2


def test_structure_and_bond_imports():
    """Test classifier and bond module imports."""
    from proteinribbon.core.bonds import detect_bonds
    from proteinribbon.core.bonds.bond_detector import detect_bonds as db2
    from proteinribbon.core.structure import classify
    from proteinribbon.core.structure.classifier import classify as c2

    assert detect_bonds is db2
    assert classify is c2


def test_package_exports():
    """Test top-level exports and version."""
    import proteinribbon

    assert proteinribbon.RibbonBuilder is not None
    assert proteinribbon.get_version() == proteinribbon.__version__


def test_instantiation_signatures():
    """Test that classes can be instantiated with minimal args."""
    import numpy as np

    from proteinribbon import RibbonBuilder, RibbonMesh, RibbonOptions

    vertices = np.zeros((10, 3), dtype=np.float32)
    faces = np.zeros((5, 3), dtype=np.int32)
    mesh = RibbonMesh(vertices, np.zeros((10, 3)), np.zeros((10, 4)), faces)
    assert mesh.positions.shape == (10, 3)
    assert mesh.faces.shape == (5, 3)

    builder = RibbonBuilder()
    assert builder.options.samples_per_residue == 24  # Default value
    assert RibbonOptions().tube_sides == 20


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

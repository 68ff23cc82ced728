# tests/test_coloring.py
"""Test residue and sample color assignment."""

import numpy as np
import pytest

from proteinribbon.core.coloring import (
    CHAIN_COLORS,
    ByChain,
    ByResidue,
    ByResidueType,
    ByStructure,
    Uniform,
    interpolate_colors,
    rainbow_colors,
    residue_colors,
    scheme_from_name,
    scheme_name,
    structure_color,
)
from proteinribbon.core.geometry.spline import CurveSample
from proteinribbon.core.models import HelixRange
from proteinribbon.core.structure.classifier import StructureType, classify


@pytest.fixture
def residues(make_ca_chain):
    chain = make_ca_chain([(i * 3.8, 0, 0) for i in range(5)])
    return chain


def test_by_structure(residues):
    segments = classify(residues, [HelixRange("A", 2, 3)], [])
    colors = residue_colors(residues, segments, ByStructure())

    assert colors[0] == structure_color(StructureType.COIL)
    assert colors[1] == colors[2] == structure_color(StructureType.HELIX)
    assert colors[4] == structure_color(StructureType.COIL)


def test_by_chain_cycles_palette(make_ca_chain):
    residues = []
    chains = [chr(ord("A") + i) for i in range(11)]
    for k, chain_id in enumerate(chains):
        residues += make_ca_chain([(0, k, 0)], chain_id=chain_id, serial_start=k + 1)
    colors = residue_colors(residues, [], ByChain(), chains)

    assert colors[0] == CHAIN_COLORS[0]
    assert colors[1] == CHAIN_COLORS[1]
    assert colors[10] == CHAIN_COLORS[0]


def test_by_residue_gradient(residues):
    scheme = ByResidue(start=(0, 0, 0, 1), end=(1, 1, 1, 1))
    colors = residue_colors(residues, [], scheme)

    assert colors[0] == (0.0, 0.0, 0.0, 1.0)
    assert colors[-1] == (1.0, 1.0, 1.0, 1.0)
    assert colors[2][0] == pytest.approx(0.5)


def test_by_residue_type(make_ca_chain):
    chain = make_ca_chain([(0, 0, 0)], res_name="LYS") + \
        make_ca_chain([(3.8, 0, 0)], res_name="ASP", serial_start=2)
    colors = residue_colors(chain, [], ByResidueType())
    assert colors[0] != colors[1]


def test_uniform(residues):
    colors = residue_colors(residues, [], Uniform((0.1, 0.2, 0.3, 1.0)))
    assert colors == [(0.1, 0.2, 0.3, 1.0)] * 5


def test_scheme_names_round_trip():
    for name in ("by_structure", "by_chain", "by_residue", "by_residue_type", "uniform"):
        assert scheme_name(scheme_from_name(name)) == name
    assert scheme_from_name("uniform", [0.5, 0.5, 0.5]) == Uniform((0.5, 0.5, 0.5, 1.0))
    with pytest.raises(ValueError):
        scheme_from_name("by_mood")


def test_interpolate_colors():
    colors = [(0, 0, 0, 1), (1, 0, 0, 1)]
    samples = [
        CurveSample(np.zeros(3), 0.0, 0, 0),
        CurveSample(np.zeros(3), 0.5, 0, 0),
        CurveSample(np.zeros(3), 1.0, 1, 1),
    ]
    out = interpolate_colors(colors, samples)

    assert out.dtype == np.float32
    assert out.shape == (3, 4)
    assert np.allclose(out[:, 0], [0.0, 0.5, 1.0])
    assert interpolate_colors([], samples).shape == (0, 4)


def test_rainbow_colors():
    colors = rainbow_colors(6)
    assert len(colors) == 6
    assert all(len(c) == 4 and c[3] == 1.0 for c in colors)
    assert len(set(colors)) == 6


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

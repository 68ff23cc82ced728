# tests/test_models.py
"""Test structure snapshot model and its adapters."""

import io

import numpy as np
import pandas as pd
import pytest
from Bio.PDB import PDBParser

from proteinribbon.core.models import (
    Atom,
    HelixRange,
    Residue,
    StructureSnapshot,
    extract_anchors,
)


def _pdb_line(serial, name, resname, chain, resseq, xyz, element):
    name_field = f" {name:<3}" if len(name) < 4 else name
    x, y, z = xyz
    return (f"ATOM  {serial:5d} {name_field} {resname:>3} {chain}{resseq:4d}    "
            f"{x:8.3f}{y:8.3f}{z:8.3f}{1.0:6.2f}{0.0:6.2f}          {element:>2}")


def test_residue_atom_lookup(make_backbone_chain):
    residue = make_backbone_chain(1)[0]

    assert residue.ca_atom.name == "CA"
    assert residue.n_atom.element == "N"
    assert residue.o_atom is not None
    assert residue.find_atom("CB") is None


def test_extract_anchors_skips_residues_without_ca(make_backbone_chain):
    residues = make_backbone_chain(3)
    stripped = Residue(seq=2, name="ALA", chain_id="A", atoms=(residues[1].n_atom,))
    anchors = extract_anchors([residues[0], stripped, residues[2]])

    assert [a.residue_index for a in anchors] == [0, 2]
    assert anchors[0].position == residues[0].ca_atom.position


def test_snapshot_chain_order(make_ca_chain, snapshot_from_residues):
    chain_b = make_ca_chain([(0, 0, 0), (3.8, 0, 0)], chain_id="B")
    chain_a = make_ca_chain([(0, 5, 0), (3.8, 5, 0)], chain_id="A", serial_start=10)
    snapshot = snapshot_from_residues(chain_b + chain_a)

    assert snapshot.chains == ["B", "A"]
    assert len(snapshot.chain_residues("A")) == 2
    assert len(snapshot.chain_atoms("B")) == 2
    assert snapshot.coordinates.shape == (4, 3)
    assert np.allclose(snapshot.center, [1.9, 2.5, 0.0])


def test_empty_snapshot():
    snapshot = StructureSnapshot(atoms=[], residues=[])
    assert snapshot.chains == []
    assert snapshot.coordinates.shape == (0, 3)
    assert np.allclose(snapshot.center, 0.0)


def test_group_residues_in_file_order():
    atoms = [
        Atom(1, "N", "N", "A", 1, "GLY", (0, 0, 0)),
        Atom(2, "CA", "C", "A", 1, "GLY", (1, 0, 0)),
        Atom(3, "N", "N", "A", 2, "SER", (3, 0, 0)),
        Atom(4, "N", "N", "B", 2, "SER", (9, 0, 0)),
    ]
    residues = StructureSnapshot.group_residues(atoms)

    assert [(r.chain_id, r.seq, r.name, len(r.atoms)) for r in residues] == [
        ("A", 1, "GLY", 2),
        ("A", 2, "SER", 1),
        ("B", 2, "SER", 1),
    ]


def test_from_dataframe():
    df = pd.DataFrame({
        "atom_id": [1, 2, 3, 4],
        "name": ["N", "CA", "C", "CA"],
        "resname": ["ALA", "ALA", "ALA", "GLY"],
        "chain": ["A", "A", "A", "A"],
        "resSeq": [1, 1, 1, 2],
        "x": [0.0, 1.46, 2.98, 5.0],
        "y": [0.0, 0.0, 0.0, 0.0],
        "z": [0.0, 0.0, 0.0, 0.0],
    })
    snapshot = StructureSnapshot.from_dataframe(df, helices=[HelixRange("A", 1, 2)])

    assert len(snapshot.atoms) == 4
    assert len(snapshot.residues) == 2
    assert snapshot.residues[0].ca_atom.position == (1.46, 0.0, 0.0)
    # Element inferred from the atom name when the column is absent
    assert [a.element for a in snapshot.atoms] == ["N", "C", "C", "C"]
    assert snapshot.helices == [HelixRange("A", 1, 2)]


def test_from_dataframe_empty():
    snapshot = StructureSnapshot.from_dataframe(pd.DataFrame())
    assert snapshot.atoms == []
    assert snapshot.chains == []


def test_from_biopython_skips_hetero_residues():
    lines = [
        _pdb_line(1, "N", "ALA", "A", 1, (0.0, 0.0, 0.0), "N"),
        _pdb_line(2, "CA", "ALA", "A", 1, (1.46, 0.0, 0.0), "C"),
        _pdb_line(3, "N", "GLY", "A", 2, (4.31, 0.0, 0.0), "N"),
        _pdb_line(4, "CA", "GLY", "A", 2, (5.77, 0.0, 0.0), "C"),
        _pdb_line(5, "N", "ALA", "B", 1, (0.0, 8.0, 0.0), "N"),
        "HETATM    6  O   HOH B 101      10.000  10.000  10.000  1.00  0.00           O",
        "END",
    ]
    structure = PDBParser(QUIET=True).get_structure("test", io.StringIO("\n".join(lines)))
    snapshot = StructureSnapshot.from_biopython(structure)

    assert len(snapshot.atoms) == 5
    assert snapshot.chains == ["A", "B"]
    assert [r.name for r in snapshot.chain_residues("A")] == ["ALA", "GLY"]
    assert snapshot.residues[1].ca_atom.element == "C"
    assert np.allclose(snapshot.residues[1].ca_atom.position, (5.77, 0.0, 0.0), atol=1e-3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

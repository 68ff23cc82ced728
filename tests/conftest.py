import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the repository root is on sys.path so tests can import proteinribbon
# without requiring an editable install.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from proteinribbon.core.models import Atom, Residue, StructureSnapshot  # noqa: E402

CA_SPACING = 3.8


def _residue(chain_id, seq, atom_defs, serial_start, res_name="ALA"):
    atoms = []
    for offset, (name, element, position) in enumerate(atom_defs):
        atoms.append(Atom(
            serial=serial_start + offset,
            name=name,
            element=element,
            chain_id=chain_id,
            res_seq=seq,
            res_name=res_name,
            position=tuple(float(c) for c in position),
        ))
    return Residue(seq=seq, name=res_name, chain_id=chain_id, atoms=tuple(atoms))


@pytest.fixture
def make_ca_chain():
    """Factory: CA-only residues (seq 1..n) at the given positions."""

    def factory(positions, chain_id="A", serial_start=1, res_name="ALA"):
        residues = []
        for i, pos in enumerate(positions):
            residues.append(_residue(chain_id, i + 1, [("CA", "C", pos)],
                                     serial_start + i, res_name))
        return residues

    return factory


@pytest.fixture
def make_backbone_chain():
    """Factory: residues with N, CA, C, O laid out along +x.

    Bond lengths: N-CA 1.46, CA-C 1.52, C-O 1.23, C-N(next) 1.33 Angstrom.
    """

    def factory(n_residues, chain_id="A", serial_start=1, origin=(0.0, 0.0, 0.0)):
        origin = np.asarray(origin, dtype=float)
        residues = []
        serial = serial_start
        for i in range(n_residues):
            x = i * 4.31
            atom_defs = [
                ("N", "N", origin + (x, 0.0, 0.0)),
                ("CA", "C", origin + (x + 1.46, 0.0, 0.0)),
                ("C", "C", origin + (x + 2.98, 0.0, 0.0)),
                ("O", "O", origin + (x + 2.98, 1.23, 0.0)),
            ]
            residues.append(_residue(chain_id, i + 1, atom_defs, serial))
            serial += len(atom_defs)
        return residues

    return factory


@pytest.fixture
def helix_ca_positions():
    """CA trace of an ideal alpha helix: radius 2.3, rise 1.5, 100 degrees per residue."""

    def factory(n=12):
        k = np.arange(n)
        angle = np.deg2rad(100.0) * k
        return np.stack([2.3 * np.cos(angle), 2.3 * np.sin(angle), 1.5 * k], axis=1)

    return factory


@pytest.fixture
def snapshot_from_residues():
    def factory(residues, helices=(), sheets=()):
        atoms = [a for r in residues for a in r.atoms]
        return StructureSnapshot(atoms=atoms, residues=list(residues),
                                 helices=list(helices), sheets=list(sheets))

    return factory

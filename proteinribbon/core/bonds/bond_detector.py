# proteinribbon/core/bonds/bond_detector.py
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from itertools import product
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist, pdist, squareform

from ..models import Atom, Residue

__all__ = [
    "Bond",
    "BondStrategy",
    "COVALENT_RADII",
    "BACKBONE_ATOM_NAMES",
    "covalent_radius",
    "is_bonded",
    "detect_bonds",
    "detect_bonds_residue_scoped",
    "detect_bonds_spatial_hash",
    "detect_bonds_brute_force",
    "detect_backbone_bonds",
    "without_backbone_bonds",
]

logger = logging.getLogger(__name__)

# Covalent radii in Angstroms
COVALENT_RADII = MappingProxyType({
    "H": 0.31,
    "C": 0.76,
    "N": 0.71,
    "O": 0.66,
    "P": 1.07,
    "S": 1.05,
    "F": 0.57,
    "CL": 1.02,
    "BR": 1.20,
    "I": 1.39,
    "SE": 1.20,
    "FE": 1.32,
    "ZN": 1.22,
    "MG": 1.41,
    "CA": 1.76,
    "NA": 1.66,
    "K": 2.03,
})

DEFAULT_RADIUS = COVALENT_RADII["C"]
DEFAULT_TOLERANCE = 1.3
DEFAULT_MAX_BOND_LENGTH = 2.0

# Peptide bond C(i)-N(i+1) accepted within this distance window
PEPTIDE_BOND_RANGE = (1.2, 1.5)

BACKBONE_ATOM_NAMES = frozenset({"N", "CA", "C", "O"})


@dataclass(frozen=True)
class Bond:
    """Covalent bond between two atoms, by index into the atom list."""

    atom1: int
    atom2: int
    length: float


class BondStrategy(str, Enum):
    RESIDUE_SCOPED = "residue"
    SPATIAL_HASH = "spatial_hash"
    BACKBONE = "backbone"
    BRUTE_FORCE = "brute_force"


def covalent_radius(element: str) -> float:
    """Covalent radius of ``element``; unknown elements use the carbon radius."""
    return COVALENT_RADII.get(element.strip().upper(), DEFAULT_RADIUS)


def is_bonded(distance: float, element_a: str, element_b: str,
              tolerance: float = DEFAULT_TOLERANCE,
              max_bond_length: float = DEFAULT_MAX_BOND_LENGTH) -> bool:
    """Distance criterion: ``d <= tolerance * (rA + rB)`` and ``d <= max_bond_length``."""
    expected = covalent_radius(element_a) + covalent_radius(element_b)
    return distance <= expected * tolerance and distance <= max_bond_length


def _coords_and_radii(atoms: Sequence[Atom]) -> Tuple[np.ndarray, np.ndarray]:
    coords = np.array([a.position for a in atoms], dtype=np.float64).reshape(-1, 3)
    radii = np.array([covalent_radius(a.element) for a in atoms], dtype=np.float64)
    return coords, radii


def _bond_mask(distances: np.ndarray, radii_a: np.ndarray, radii_b: np.ndarray,
               tolerance: float, max_bond_length: float) -> np.ndarray:
    expected = (radii_a[:, None] + radii_b[None, :]) * tolerance
    return (distances <= expected) & (distances <= max_bond_length)


def _sorted_bonds(bonds: List[Bond]) -> List[Bond]:
    return sorted(bonds, key=lambda b: (b.atom1, b.atom2))


def detect_bonds_brute_force(atoms: Sequence[Atom], tolerance: float = DEFAULT_TOLERANCE,
                             max_bond_length: float = DEFAULT_MAX_BOND_LENGTH) -> List[Bond]:
    """Check every atom pair. Quadratic; the reference for the faster strategies."""
    if len(atoms) < 2:
        return []
    coords, radii = _coords_and_radii(atoms)
    distances = squareform(pdist(coords))
    mask = _bond_mask(distances, radii, radii, tolerance, max_bond_length)
    i_idx, j_idx = np.nonzero(np.triu(mask, k=1))
    return [Bond(int(i), int(j), float(distances[i, j])) for i, j in zip(i_idx, j_idx)]


def detect_bonds_spatial_hash(atoms: Sequence[Atom], tolerance: float = DEFAULT_TOLERANCE,
                              max_bond_length: float = DEFAULT_MAX_BOND_LENGTH) -> List[Bond]:
    """Grid-bucketed search over all atoms.

    Atoms are hashed into cubic cells of edge ``max_bond_length * tolerance``
    and only the 27 neighbouring cells are searched, so each atom is compared
    against a bounded number of candidates. Each pair is reported once with
    ``atom1 < atom2``; the result is sorted.
    """
    if len(atoms) < 2:
        return []
    coords, radii = _coords_and_radii(atoms)
    cell_size = max_bond_length * tolerance
    keys = np.floor(coords / cell_size).astype(np.int64)

    cells: Dict[Tuple[int, int, int], List[int]] = defaultdict(list)
    for index, key in enumerate(map(tuple, keys)):
        cells[key].append(index)

    bonds: List[Bond] = []
    offsets = list(product((-1, 0, 1), repeat=3))
    for key, members in cells.items():
        members_arr = np.array(members)
        neighbours = []
        for dx, dy, dz in offsets:
            neighbours.extend(cells.get((key[0] + dx, key[1] + dy, key[2] + dz), ()))
        neighbours_arr = np.array(neighbours)

        distances = cdist(coords[members_arr], coords[neighbours_arr])
        mask = _bond_mask(distances, radii[members_arr], radii[neighbours_arr],
                          tolerance, max_bond_length)
        mask &= members_arr[:, None] < neighbours_arr[None, :]
        for a, b in zip(*np.nonzero(mask)):
            bonds.append(Bond(int(members_arr[a]), int(neighbours_arr[b]), float(distances[a, b])))

    return _sorted_bonds(bonds)


def detect_bonds_residue_scoped(
    atoms: Sequence[Atom],
    residues: Sequence[Residue],
    tolerance: float = DEFAULT_TOLERANCE,
    max_bond_length: float = DEFAULT_MAX_BOND_LENGTH,
) -> List[Bond]:
    """Bonds within each residue and between consecutive residues of one chain.

    Much cheaper than an all-pairs search for proteins. Long-range bonds such
    as disulfide bridges between distant residues are not found; use
    ``detect_bonds_spatial_hash`` when they matter.
    """
    if len(atoms) < 2:
        return []

    serial_to_index = {atom.serial: index for index, atom in enumerate(atoms)}
    coords, radii = _coords_and_radii(atoms)

    residue_indices = []
    for residue in residues:
        idx = [serial_to_index[a.serial] for a in residue.atoms if a.serial in serial_to_index]
        residue_indices.append(np.array(idx, dtype=np.int64))

    found = set()
    bonds: List[Bond] = []

    def check(block_a: np.ndarray, block_b: np.ndarray, same: bool) -> None:
        if len(block_a) == 0 or len(block_b) == 0:
            return
        distances = cdist(coords[block_a], coords[block_b])
        mask = _bond_mask(distances, radii[block_a], radii[block_b], tolerance, max_bond_length)
        if same:
            mask = np.triu(mask, k=1)
        for a, b in zip(*np.nonzero(mask)):
            i, j = int(block_a[a]), int(block_b[b])
            pair = (min(i, j), max(i, j))
            if pair[0] == pair[1] or pair in found:
                continue
            found.add(pair)
            bonds.append(Bond(pair[0], pair[1], float(distances[a, b])))

    for k, residue in enumerate(residues):
        check(residue_indices[k], residue_indices[k], same=True)
        if k + 1 < len(residues) and residues[k + 1].chain_id == residue.chain_id:
            check(residue_indices[k], residue_indices[k + 1], same=False)

    return _sorted_bonds(bonds)


def detect_backbone_bonds(residues: Sequence[Residue],
                          atoms: Optional[Sequence[Atom]] = None) -> List[Bond]:
    """N-CA, CA-C and C-O in every residue plus C(i)-N(i+1) peptide bonds.

    Peptide bonds are added only between consecutive residues of the same
    chain whose C-N distance lies in [1.2, 1.5] Angstroms.

    Args:
        residues: Residues in chain order
        atoms: Atom list the bond indices refer to (matched by serial); when
            omitted, indices refer to the residues' atoms flattened in order

    Returns:
        List of Bond
    """
    if atoms is None:
        atoms = [a for r in residues for a in r.atoms]
    serial_to_index = {atom.serial: index for index, atom in enumerate(atoms)}

    def index_of(atom: Optional[Atom]) -> Optional[int]:
        if atom is None:
            return None
        return serial_to_index.get(atom.serial)

    def make_bond(a: Optional[Atom], b: Optional[Atom]) -> Optional[Bond]:
        ia, ib = index_of(a), index_of(b)
        if ia is None or ib is None:
            return None
        length = float(np.linalg.norm(a.coords - b.coords))
        return Bond(ia, ib, length)

    bonds: List[Bond] = []
    for k, residue in enumerate(residues):
        for first, second in ((residue.n_atom, residue.ca_atom),
                              (residue.ca_atom, residue.c_atom),
                              (residue.c_atom, residue.o_atom)):
            bond = make_bond(first, second)
            if bond is not None:
                bonds.append(bond)

        if k + 1 < len(residues) and residues[k + 1].chain_id == residue.chain_id:
            bond = make_bond(residue.c_atom, residues[k + 1].n_atom)
            if bond is not None and PEPTIDE_BOND_RANGE[0] <= bond.length <= PEPTIDE_BOND_RANGE[1]:
                bonds.append(bond)
    return bonds


def without_backbone_bonds(bonds: Sequence[Bond], atoms: Sequence[Atom]) -> List[Bond]:
    """Drop bonds whose atoms are both backbone atoms (N, CA, C, O)."""
    return [b for b in bonds
            if not (atoms[b.atom1].name in BACKBONE_ATOM_NAMES
                    and atoms[b.atom2].name in BACKBONE_ATOM_NAMES)]


def detect_bonds(
    atoms: Sequence[Atom],
    residues: Optional[Sequence[Residue]] = None,
    strategy: BondStrategy = BondStrategy.RESIDUE_SCOPED,
    tolerance: float = DEFAULT_TOLERANCE,
    max_bond_length: float = DEFAULT_MAX_BOND_LENGTH,
) -> List[Bond]:
    """Detect covalent bonds with the chosen strategy.

    The residue-scoped and backbone strategies need ``residues``; without them
    the spatial hash is used.
    """
    strategy = BondStrategy(strategy)
    if strategy in (BondStrategy.RESIDUE_SCOPED, BondStrategy.BACKBONE) and residues is None:
        logger.debug("No residues given, falling back to spatial hash bond detection")
        strategy = BondStrategy.SPATIAL_HASH

    if strategy == BondStrategy.RESIDUE_SCOPED:
        bonds = detect_bonds_residue_scoped(atoms, residues, tolerance, max_bond_length)
    elif strategy == BondStrategy.BACKBONE:
        bonds = detect_backbone_bonds(residues, atoms)
    elif strategy == BondStrategy.BRUTE_FORCE:
        bonds = detect_bonds_brute_force(atoms, tolerance, max_bond_length)
    else:
        bonds = detect_bonds_spatial_hash(atoms, tolerance, max_bond_length)

    logger.debug("Detected %d bonds among %d atoms (%s)", len(bonds), len(atoms), strategy.value)
    return bonds

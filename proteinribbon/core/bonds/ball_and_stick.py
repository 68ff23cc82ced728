# proteinribbon/core/bonds/ball_and_stick.py
"""Ball-and-stick render records built from atoms and detected bonds.

Atoms become sphere records sized by van der Waals radius; every bond is split
at the midpoint of its visible part into two half-cylinders, each colored like
the atom it touches. The render layer instances spheres and sweeps cylinders.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..coloring import element_color
from ..geometry.frames import initial_normal, Frame
from ..mesh.ribbon_mesh import RibbonMesh
from ..mesh.tessellator import RibbonMeshTessellator
from ..models import Atom, Residue
from .bond_detector import BACKBONE_ATOM_NAMES, Bond, BondStrategy, detect_bonds

__all__ = [
    "VDW_RADII",
    "BallAndStickOptions",
    "AtomRecord",
    "BondRecord",
    "BallAndStickModel",
    "vdw_radius",
    "filter_atoms",
    "build_ball_and_stick",
    "bond_cylinder_mesh",
]

logger = logging.getLogger(__name__)

# Van der Waals radii in Angstroms
VDW_RADII = MappingProxyType({
    "H": 1.20,
    "C": 1.70,
    "N": 1.55,
    "O": 1.52,
    "S": 1.80,
    "P": 1.80,
    "F": 1.47,
    "CL": 1.75,
    "BR": 1.85,
    "I": 1.98,
})
DEFAULT_VDW_RADIUS = 1.70


def vdw_radius(element: str) -> float:
    return VDW_RADII.get(element.strip().upper(), DEFAULT_VDW_RADIUS)


@dataclass
class BallAndStickOptions:
    atom_scale: float = 0.3
    bond_radius: float = 0.15
    bond_tolerance: float = 1.3
    max_bond_length: float = 2.0
    backbone_only: bool = False
    show_hydrogens: bool = False
    bond_strategy: BondStrategy = BondStrategy.RESIDUE_SCOPED


@dataclass(frozen=True)
class AtomRecord:
    atom_index: int
    position: Tuple[float, float, float]
    radius: float
    color: Tuple[float, float, float, float]
    element: str


@dataclass(frozen=True)
class BondRecord:
    """Half of a bond, from ``start`` to ``end``, colored like ``atom_index``."""

    atom_index: int
    start: Tuple[float, float, float]
    end: Tuple[float, float, float]
    radius: float
    color: Tuple[float, float, float, float]


@dataclass
class BallAndStickModel:
    atoms: List[AtomRecord]
    bonds: List[BondRecord]
    source_bonds: List[Bond]

    def atoms_by_color(self) -> Dict[Tuple[float, ...], List[AtomRecord]]:
        """Group sphere records by (rounded) color for instanced drawing."""
        groups: Dict[Tuple[float, ...], List[AtomRecord]] = defaultdict(list)
        for record in self.atoms:
            groups[tuple(round(c, 2) for c in record.color)].append(record)
        return dict(groups)


def filter_atoms(atoms: Sequence[Atom], backbone_only: bool = False,
                 show_hydrogens: bool = False) -> List[Atom]:
    """Apply the backbone-only and hydrogen visibility filters."""
    selected = list(atoms)
    if backbone_only:
        selected = [a for a in selected if a.name in BACKBONE_ATOM_NAMES]
    if not show_hydrogens:
        selected = [a for a in selected if not a.is_hydrogen]
    return selected


def build_ball_and_stick(atoms: Sequence[Atom], residues: Optional[Sequence[Residue]] = None,
                         options: Optional[BallAndStickOptions] = None) -> BallAndStickModel:
    """Sphere and half-cylinder records for a ball-and-stick view.

    Args:
        atoms: Atoms of the structure
        residues: Residues, needed by the residue-scoped bond strategy
        options: Display options

    Returns:
        BallAndStickModel; indices refer to the filtered atom list
    """
    options = options or BallAndStickOptions()
    atoms = filter_atoms(atoms, options.backbone_only, options.show_hydrogens)
    if not atoms:
        return BallAndStickModel([], [], [])

    bonds = detect_bonds(atoms, residues, options.bond_strategy,
                         options.bond_tolerance, options.max_bond_length)
    logger.info("Ball-and-stick: %d atoms, %d bonds", len(atoms), len(bonds))

    radii = [vdw_radius(a.element) * options.atom_scale for a in atoms]
    colors = [element_color(a.element) for a in atoms]
    atom_records = [
        AtomRecord(i, tuple(a.position), radii[i], colors[i], a.element)
        for i, a in enumerate(atoms)
    ]

    bond_records: List[BondRecord] = []
    for bond in bonds:
        p1, p2 = atoms[bond.atom1].coords, atoms[bond.atom2].coords
        axis = p2 - p1
        length = float(np.linalg.norm(axis))
        if length <= 0.0:
            continue
        direction = axis / length
        # Cylinders start at the sphere surfaces, split halfway between them
        start = p1 + direction * radii[bond.atom1]
        end = p2 - direction * radii[bond.atom2]
        mid = 0.5 * (start + end)
        bond_records.append(BondRecord(bond.atom1, tuple(start), tuple(mid),
                                       options.bond_radius, colors[bond.atom1]))
        bond_records.append(BondRecord(bond.atom2, tuple(mid), tuple(end),
                                       options.bond_radius, colors[bond.atom2]))

    return BallAndStickModel(atom_records, bond_records, list(bonds))


def bond_cylinder_mesh(records: Sequence[BondRecord], sides: int = 8) -> RibbonMesh:
    """Open-ended cylinder mesh for half-bond records."""
    tessellator = RibbonMeshTessellator(segments=sides)
    meshes = []
    for record in records:
        start = np.asarray(record.start, dtype=np.float64)
        end = np.asarray(record.end, dtype=np.float64)
        axis = end - start
        length = float(np.linalg.norm(axis))
        if length <= 0.0:
            continue
        tangent = axis / length
        normal = initial_normal(tangent)
        binormal = np.cross(tangent, normal)
        frames = [Frame(start, tangent, normal, binormal), Frame(end, tangent, normal, binormal)]
        meshes.append(tessellator.tessellate_tube(frames, record.radius, [record.color] * 2,
                                                  cap_start=False, cap_end=False))
    return RibbonMesh.merge(meshes)

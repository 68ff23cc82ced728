# proteinribbon/core/models.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

__all__ = [
    "Atom",
    "Residue",
    "HelixRange",
    "SheetRange",
    "Anchor",
    "StructureSnapshot",
    "extract_anchors",
    "residues_for_chain",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Atom:
    """Single atom record of a loaded structure."""

    serial: int
    name: str
    element: str
    chain_id: str
    res_seq: int
    res_name: str
    position: Tuple[float, float, float]
    occupancy: float = 1.0

    @property
    def coords(self) -> np.ndarray:
        return np.asarray(self.position, dtype=np.float64)

    @property
    def is_hydrogen(self) -> bool:
        return self.element.upper() in ("H", "D")


@dataclass(frozen=True)
class Residue:
    """Residue with its atoms in file order."""

    seq: int
    name: str
    chain_id: str
    atoms: Tuple[Atom, ...] = ()

    def find_atom(self, name: str) -> Optional[Atom]:
        """Return the first atom called ``name``, or None if the residue lacks it."""
        for atom in self.atoms:
            if atom.name == name:
                return atom
        return None

    @property
    def ca_atom(self) -> Optional[Atom]:
        return self.find_atom("CA")

    @property
    def n_atom(self) -> Optional[Atom]:
        return self.find_atom("N")

    @property
    def c_atom(self) -> Optional[Atom]:
        return self.find_atom("C")

    @property
    def o_atom(self) -> Optional[Atom]:
        return self.find_atom("O")


@dataclass(frozen=True)
class HelixRange:
    """Helix annotation covering residues ``start``..``end`` (inclusive) of a chain."""

    chain_id: str
    start: int
    end: int

    def contains(self, chain_id: str, seq: int) -> bool:
        return chain_id == self.chain_id and self.start <= seq <= self.end


@dataclass(frozen=True)
class SheetRange:
    """Strand annotation covering residues ``start``..``end`` (inclusive) of a chain."""

    chain_id: str
    start: int
    end: int

    def contains(self, chain_id: str, seq: int) -> bool:
        return chain_id == self.chain_id and self.start <= seq <= self.end


@dataclass(frozen=True)
class Anchor:
    """Backbone control point: the CA position of one residue.

    ``residue_index`` is the position of the residue in the residue list the
    anchor was extracted from, not its sequence number.
    """

    position: Tuple[float, float, float]
    residue_index: int
    chain_id: str


def extract_anchors(residues: Sequence[Residue]) -> List[Anchor]:
    """Build one anchor per residue that has a CA atom.

    Residues without CA are skipped; the remaining anchors keep the index of
    their residue so geometry can be mapped back to residues later.
    """
    anchors = []
    for index, residue in enumerate(residues):
        ca = residue.ca_atom
        if ca is None:
            continue
        anchors.append(Anchor(position=tuple(ca.position), residue_index=index,
                              chain_id=residue.chain_id))
    if len(anchors) < len(residues):
        logger.debug("Skipped %d residues without CA", len(residues) - len(anchors))
    return anchors


def residues_for_chain(residues: Sequence[Residue], chain_id: str) -> List[Residue]:
    """Residues of a single chain, in input order."""
    return [r for r in residues if r.chain_id == chain_id]


@dataclass
class StructureSnapshot:
    """Read-only view of a loaded structure as consumed by the ribbon pipeline.

    The snapshot is produced by an external loader (PDB/mmCIF parsing is not
    part of this package). Two adapters are provided for in-memory objects
    commonly produced by such loaders: pandas atom tables and Bio.PDB
    structures.
    """

    atoms: List[Atom]
    residues: List[Residue]
    helices: List[HelixRange] = field(default_factory=list)
    sheets: List[SheetRange] = field(default_factory=list)
    chains: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.chains:
            seen: Dict[str, None] = {}
            for residue in self.residues:
                seen.setdefault(residue.chain_id, None)
            if not seen:
                for atom in self.atoms:
                    seen.setdefault(atom.chain_id, None)
            self.chains = list(seen)

    def chain_residues(self, chain_id: str) -> List[Residue]:
        return residues_for_chain(self.residues, chain_id)

    def chain_atoms(self, chain_id: str) -> List[Atom]:
        return [a for a in self.atoms if a.chain_id == chain_id]

    @property
    def coordinates(self) -> np.ndarray:
        """(N,3) array of all atom positions."""
        if not self.atoms:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([a.position for a in self.atoms], dtype=np.float64)

    @property
    def center(self) -> np.ndarray:
        coords = self.coordinates
        if len(coords) == 0:
            return np.zeros(3)
        return coords.mean(axis=0)

    @staticmethod
    def group_residues(atoms: Sequence[Atom]) -> List[Residue]:
        """Group consecutive atoms sharing (chain, residue number) into residues."""
        residues: List[Residue] = []
        current: List[Atom] = []
        key = None
        for atom in atoms:
            atom_key = (atom.chain_id, atom.res_seq)
            if key is not None and atom_key != key:
                residues.append(Residue(seq=key[1], name=current[0].res_name,
                                        chain_id=key[0], atoms=tuple(current)))
                current = []
            key = atom_key
            current.append(atom)
        if current:
            residues.append(Residue(seq=key[1], name=current[0].res_name,
                                    chain_id=key[0], atoms=tuple(current)))
        return residues

    @classmethod
    def from_atoms(cls, atoms: Sequence[Atom],
                   helices: Optional[Sequence[HelixRange]] = None,
                   sheets: Optional[Sequence[SheetRange]] = None) -> "StructureSnapshot":
        atoms = list(atoms)
        return cls(atoms=atoms, residues=cls.group_residues(atoms),
                   helices=list(helices or []), sheets=list(sheets or []))

    @classmethod
    def from_dataframe(cls, df,
                       helices: Optional[Sequence[HelixRange]] = None,
                       sheets: Optional[Sequence[SheetRange]] = None) -> "StructureSnapshot":
        """Build a snapshot from a pandas atom table.

        Args:
            df: DataFrame with columns ``atom_id, name, resname, chain, resSeq,
                x, y, z`` and optionally ``element`` and ``occupancy``
            helices: Helix annotations
            sheets: Strand annotations

        Returns:
            StructureSnapshot with residues grouped in table order
        """
        if df is None or len(df) == 0:
            return cls(atoms=[], residues=[], helices=list(helices or []),
                       sheets=list(sheets or []))

        has_element = "element" in df.columns
        has_occupancy = "occupancy" in df.columns
        atoms = []
        for row in df.itertuples(index=False):
            name = str(row.name).strip()
            element = str(row.element).strip() if has_element else ""
            if not element or element.lower() == "nan":
                # Fall back to the first letter of the atom name
                element = "".join(ch for ch in name if ch.isalpha())[:1]
            atoms.append(Atom(
                serial=int(row.atom_id),
                name=name,
                element=element.upper(),
                chain_id=str(row.chain),
                res_seq=int(row.resSeq),
                res_name=str(row.resname).strip(),
                position=(float(row.x), float(row.y), float(row.z)),
                occupancy=float(row.occupancy) if has_occupancy else 1.0,
            ))
        return cls.from_atoms(atoms, helices, sheets)

    @classmethod
    def from_biopython(cls, structure,
                       helices: Optional[Sequence[HelixRange]] = None,
                       sheets: Optional[Sequence[SheetRange]] = None,
                       model_index: int = 0) -> "StructureSnapshot":
        """Build a snapshot from a Bio.PDB structure (first model by default).

        Hetero residues and waters are skipped, matching the standard residue
        filter ``residue.id[0] == ' '``.
        """
        model = structure[model_index]
        atoms = []
        for chain in model:
            for residue in chain:
                if residue.id[0] != ' ':
                    continue
                for atom in residue:
                    element = (atom.element or atom.get_name()[:1]).upper()
                    occupancy = atom.get_occupancy()
                    atoms.append(Atom(
                        serial=int(atom.get_serial_number()),
                        name=atom.get_name(),
                        element=element,
                        chain_id=chain.id,
                        res_seq=int(residue.id[1]),
                        res_name=residue.get_resname(),
                        position=tuple(float(c) for c in atom.coord),
                        occupancy=1.0 if occupancy is None else float(occupancy),
                    ))
        return cls.from_atoms(atoms, helices, sheets)

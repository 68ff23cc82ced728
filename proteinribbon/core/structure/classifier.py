# proteinribbon/core/structure/classifier.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..models import HelixRange, Residue, SheetRange

__all__ = [
    "StructureType",
    "OverlapPolicy",
    "StructureSegment",
    "assignment_map",
    "structure_type_for",
    "classify",
    "segments_from_types",
    "residue_structure_types",
    "group_segments_by_chain",
    "segments_for_chain",
]

logger = logging.getLogger(__name__)


class StructureType(str, Enum):
    HELIX = "helix"
    SHEET = "sheet"
    COIL = "coil"


class OverlapPolicy(str, Enum):
    """Which annotation wins when a residue is listed as both helix and strand."""

    SHEET_OVER_HELIX = "sheet"
    HELIX_OVER_SHEET = "helix"


@dataclass(frozen=True)
class StructureSegment:
    """Maximal run of residues sharing one structure type within one chain.

    ``start_index`` and ``end_index`` are inclusive positions in the residue
    list that was classified, not sequence numbers.
    """

    structure_type: StructureType
    start_index: int
    end_index: int
    chain_id: str
    residues: Tuple[Residue, ...] = ()

    @property
    def length(self) -> int:
        return self.end_index - self.start_index + 1

    def contains(self, residue_index: int) -> bool:
        return self.start_index <= residue_index <= self.end_index

    @property
    def ca_positions(self) -> np.ndarray:
        """(K,3) CA positions of residues that have one."""
        coords = [r.ca_atom.position for r in self.residues if r.ca_atom is not None]
        if not coords:
            return np.zeros((0, 3))
        return np.array(coords, dtype=np.float64)

    @property
    def o_positions(self) -> np.ndarray:
        coords = [r.o_atom.position for r in self.residues if r.o_atom is not None]
        if not coords:
            return np.zeros((0, 3))
        return np.array(coords, dtype=np.float64)


def assignment_map(
    helices: Sequence[HelixRange],
    sheets: Sequence[SheetRange],
    overlap_policy: OverlapPolicy = OverlapPolicy.SHEET_OVER_HELIX,
) -> Dict[Tuple[str, int], StructureType]:
    """(chain, sequence number) -> structure type for every annotated residue."""
    layers = [(helices, StructureType.HELIX), (sheets, StructureType.SHEET)]
    if OverlapPolicy(overlap_policy) == OverlapPolicy.HELIX_OVER_SHEET:
        layers.reverse()

    # Later layers overwrite earlier ones
    assignment: Dict[Tuple[str, int], StructureType] = {}
    for ranges, structure_type in layers:
        for rng in ranges:
            for seq in range(rng.start, rng.end + 1):
                assignment[(rng.chain_id, seq)] = structure_type
    return assignment


def structure_type_for(
    residue: Residue,
    helices: Sequence[HelixRange],
    sheets: Sequence[SheetRange],
    overlap_policy: OverlapPolicy = OverlapPolicy.SHEET_OVER_HELIX,
) -> StructureType:
    """Structure type of a single residue, consistent with ``classify``."""
    in_helix = any(h.contains(residue.chain_id, residue.seq) for h in helices)
    in_sheet = any(s.contains(residue.chain_id, residue.seq) for s in sheets)
    if in_helix and in_sheet:
        if OverlapPolicy(overlap_policy) == OverlapPolicy.HELIX_OVER_SHEET:
            return StructureType.HELIX
        return StructureType.SHEET
    if in_sheet:
        return StructureType.SHEET
    if in_helix:
        return StructureType.HELIX
    return StructureType.COIL


def segments_from_types(residues: Sequence[Residue],
                        types: Sequence[StructureType]) -> List[StructureSegment]:
    """Group residues into segments, starting a new one on type or chain change."""
    segments: List[StructureSegment] = []
    start = 0
    for index in range(1, len(residues) + 1):
        at_end = index == len(residues)
        if not at_end and types[index] == types[start] \
                and residues[index].chain_id == residues[start].chain_id:
            continue
        segments.append(StructureSegment(
            structure_type=types[start],
            start_index=start,
            end_index=index - 1,
            chain_id=residues[start].chain_id,
            residues=tuple(residues[start:index]),
        ))
        start = index
    return segments


def classify(
    residues: Sequence[Residue],
    helices: Sequence[HelixRange],
    sheets: Sequence[SheetRange],
    overlap_policy: OverlapPolicy = OverlapPolicy.SHEET_OVER_HELIX,
) -> List[StructureSegment]:
    """Partition residues into contiguous structure segments.

    Every residue lands in exactly one segment. Residues not covered by any
    annotation are coil. Classification is deterministic and idempotent for
    the same inputs.

    Args:
        residues: Residues in chain order (may span several chains)
        helices: Helix annotations
        sheets: Strand annotations
        overlap_policy: Precedence when a residue is annotated as both

    Returns:
        Ordered list of StructureSegment
    """
    if not residues:
        return []

    assignment = assignment_map(helices, sheets, overlap_policy)
    types = [assignment.get((r.chain_id, r.seq), StructureType.COIL) for r in residues]
    segments = segments_from_types(residues, types)
    logger.debug("Classified %d residues into %d segments", len(residues), len(segments))
    return segments


def residue_structure_types(segments: Sequence[StructureSegment],
                            residue_count: Optional[int] = None) -> List[StructureType]:
    """Expand segments back into one structure type per residue index."""
    if residue_count is None:
        residue_count = max((s.end_index + 1 for s in segments), default=0)
    types = [StructureType.COIL] * residue_count
    for segment in segments:
        for index in range(segment.start_index, min(segment.end_index + 1, residue_count)):
            types[index] = segment.structure_type
    return types


def group_segments_by_chain(segments: Sequence[StructureSegment]) -> Dict[str, List[StructureSegment]]:
    grouped: Dict[str, List[StructureSegment]] = {}
    for segment in segments:
        grouped.setdefault(segment.chain_id, []).append(segment)
    return grouped


def segments_for_chain(segments: Sequence[StructureSegment], chain_id: str) -> List[StructureSegment]:
    return [s for s in segments if s.chain_id == chain_id]

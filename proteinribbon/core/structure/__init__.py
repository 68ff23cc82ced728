"""
Secondary structure handling for ribbon rendering.

This module provides tools for:
- Mapping helix/strand annotations onto residues
- Grouping residues into contiguous structure segments
"""

from .classifier import (
    OverlapPolicy,
    StructureSegment,
    StructureType,
    classify,
    residue_structure_types,
    structure_type_for,
)

__all__ = [
    "StructureType",
    "OverlapPolicy",
    "StructureSegment",
    "classify",
    "structure_type_for",
    "residue_structure_types",
]

"""
Core modules for ribbon geometry, secondary structure and bond detection.
"""

from .models import Anchor, Atom, HelixRange, Residue, SheetRange, StructureSnapshot
from .options import RibbonOptions
from .ribbon_builder import BackboneData, RibbonBuilder, structure_summary

# Submodules
from . import bonds, geometry, mesh, structure


__all__ = [
    "Atom",
    "Residue",
    "HelixRange",
    "SheetRange",
    "Anchor",
    "StructureSnapshot",
    "RibbonOptions",
    "RibbonBuilder",
    "BackboneData",
    "structure_summary",
    "bonds",
    "geometry",
    "mesh",
    "structure",
]

"""
Mesh generation for ribbon and tube diagrams.

This module provides tools for:
- Per-frame cross-section profiles (helix, strand arrow, coil)
- Rectangular, circular and elliptical cross-sections
- Swept body tessellation with caps and strand arrow heads
- Mesh accumulation and render-array conversion
"""

from .profiles import CrossSectionProfile, default_profile, profiles_for, transition_profiles
from .ribbon_mesh import EmptyMeshError, InvalidMeshError, MeshBuilderError, RibbonMesh
from .tessellator import CrossSectionShape, RibbonMeshTessellator

__all__ = [
    "CrossSectionProfile",
    "default_profile",
    "profiles_for",
    "transition_profiles",
    "RibbonMesh",
    "MeshBuilderError",
    "EmptyMeshError",
    "InvalidMeshError",
    "CrossSectionShape",
    "RibbonMeshTessellator",
]

"""
proteinribbon: cartoon ribbon geometry for protein backbones.

Turns CA traces and helix/strand annotations into tessellated ribbon, arrow and
tube meshes, and infers covalent bonds for ball-and-stick views.
"""

from .__version__ import __version__
from .core.bonds import BondStrategy, build_ball_and_stick, detect_bonds
from .core.mesh import EmptyMeshError, RibbonMesh
from .core.models import Atom, HelixRange, Residue, SheetRange, StructureSnapshot
from .core.options import RibbonOptions
from .core.ribbon_builder import RibbonBuilder, structure_summary
from .utils.config_parser import load_config


def get_version() -> str:
    """Return package version."""
    return __version__


__all__ = [
    "__version__",
    "get_version",
    "Atom",
    "Residue",
    "HelixRange",
    "SheetRange",
    "StructureSnapshot",
    "RibbonOptions",
    "RibbonBuilder",
    "RibbonMesh",
    "EmptyMeshError",
    "structure_summary",
    "BondStrategy",
    "detect_bonds",
    "build_ball_and_stick",
    "load_config",
]

"""
Covalent connectivity and ball-and-stick records.

This module provides tools for:
- Distance/element bond detection (residue-scoped, spatial hash, backbone)
- Sphere and half-cylinder records for ball-and-stick rendering
"""

from .ball_and_stick import BallAndStickOptions, build_ball_and_stick
from .bond_detector import Bond, BondStrategy, COVALENT_RADII, detect_bonds, is_bonded

__all__ = [
    "Bond",
    "BondStrategy",
    "COVALENT_RADII",
    "is_bonded",
    "detect_bonds",
    "BallAndStickOptions",
    "build_ball_and_stick",
]

# proteinribbon/core/mesh/profiles.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..options import RibbonOptions
from ..structure.classifier import StructureType

__all__ = [
    "CrossSectionProfile",
    "ARROW_WIDTH_MULTIPLIER",
    "ARROW_TRANSITION_POINTS",
    "smoothstep",
    "lerp",
    "default_profile",
    "profiles_for",
    "transition_profiles",
]

ARROW_WIDTH_MULTIPLIER = 2.0
ARROW_TRANSITION_POINTS = 4


@dataclass(frozen=True)
class CrossSectionProfile:
    """Cross-section dimensions at one frame.

    ``half_width`` spans the frame normal, ``half_thickness`` the binormal.
    """

    half_width: float
    half_thickness: float
    is_arrow_tip: bool = False
    arrow_width_multiplier: float = 1.0


def smoothstep(t: float) -> float:
    """Cubic ease ``3t^2 - 2t^3`` on t clamped to [0, 1]."""
    t = min(1.0, max(0.0, t))
    return t * t * (3.0 - 2.0 * t)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def default_profile(structure_type: StructureType,
                    options: Optional[RibbonOptions] = None) -> CrossSectionProfile:
    """Uniform profile of a structure type."""
    options = options or RibbonOptions()
    structure_type = StructureType(structure_type)
    if structure_type == StructureType.HELIX:
        return CrossSectionProfile(options.helix_width / 2.0, options.thickness / 2.0)
    if structure_type == StructureType.SHEET:
        return CrossSectionProfile(options.sheet_width / 2.0, options.thickness / 2.0)
    return CrossSectionProfile(options.coil_radius, options.coil_radius)


def _sheet_profiles(count: int, options: RibbonOptions) -> List[CrossSectionProfile]:
    base = default_profile(StructureType.SHEET, options)
    if count <= ARROW_TRANSITION_POINTS:
        return [base] * count

    profiles = [base] * (count - ARROW_TRANSITION_POINTS)
    wing = base.half_width * ARROW_WIDTH_MULTIPLIER

    widen = ARROW_TRANSITION_POINTS // 2
    for i in range(widen):
        t = (i + 1) / (widen + 1)
        profiles.append(CrossSectionProfile(lerp(base.half_width, wing, smoothstep(t)),
                                            base.half_thickness))

    taper = ARROW_TRANSITION_POINTS - widen
    for i in range(taper):
        t = (i + 1) / taper
        tip = i == taper - 1
        profiles.append(CrossSectionProfile(
            half_width=0.0 if tip else lerp(wing, 0.0, smoothstep(t)),
            half_thickness=base.half_thickness,
            is_arrow_tip=tip,
            arrow_width_multiplier=0.0 if tip else 1.0,
        ))
    return profiles


def profiles_for(structure_type: StructureType, count: int,
                 options: Optional[RibbonOptions] = None,
                 with_arrow: bool = True) -> List[CrossSectionProfile]:
    """Per-frame profiles for a segment of ``count`` frames.

    Helices and coils get a uniform profile. Sheets with more than four frames
    and ``with_arrow`` end in a tapered arrow: two widening samples toward
    twice the base half-width, then two tapering samples, the last one of zero
    width and flagged ``is_arrow_tip``.
    """
    if count <= 0:
        return []
    options = options or RibbonOptions()
    structure_type = StructureType(structure_type)
    if structure_type == StructureType.SHEET and with_arrow:
        return _sheet_profiles(count, options)
    return [default_profile(structure_type, options)] * count


def transition_profiles(from_type: StructureType, to_type: StructureType, length: int,
                        options: Optional[RibbonOptions] = None) -> List[CrossSectionProfile]:
    """Eased blend from one structure's profile to another's over ``length`` frames."""
    if length <= 0:
        return []
    start = default_profile(from_type, options)
    end = default_profile(to_type, options)
    if length == 1:
        return [start]
    profiles = []
    for i in range(length):
        s = smoothstep(i / (length - 1))
        profiles.append(CrossSectionProfile(lerp(start.half_width, end.half_width, s),
                                            lerp(start.half_thickness, end.half_thickness, s)))
    return profiles

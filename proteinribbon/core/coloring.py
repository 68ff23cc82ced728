# proteinribbon/core/coloring.py
"""Per-residue and per-sample colors for ribbon meshes.

Schemes are small frozen dataclasses; ``residue_colors`` dispatches on the
scheme type. Colors are RGBA float tuples in [0, 1].
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .models import Residue
from .structure.classifier import StructureSegment, StructureType

__all__ = [
    "ByStructure",
    "ByChain",
    "ByResidue",
    "ByResidueType",
    "Uniform",
    "ColorScheme",
    "STRUCTURE_COLORS",
    "CHAIN_COLORS",
    "ELEMENT_COLORS",
    "DEFAULT_UNIFORM_COLOR",
    "scheme_from_name",
    "scheme_name",
    "structure_color",
    "chain_color",
    "gradient_color",
    "residue_type_color",
    "element_color",
    "residue_colors",
    "interpolate_colors",
    "rainbow_colors",
]

RGBA = Tuple[float, float, float, float]

HELIX_COLOR: RGBA = (0.9, 0.2, 0.2, 1.0)
SHEET_COLOR: RGBA = (0.2, 0.4, 0.9, 1.0)
COIL_COLOR: RGBA = (0.2, 0.8, 0.3, 1.0)

STRUCTURE_COLORS = MappingProxyType({
    StructureType.HELIX: HELIX_COLOR,
    StructureType.SHEET: SHEET_COLOR,
    StructureType.COIL: COIL_COLOR,
})

CHAIN_COLORS: Tuple[RGBA, ...] = (
    (0.12, 0.47, 0.71, 1.0),  # blue
    (1.00, 0.50, 0.05, 1.0),  # orange
    (0.17, 0.63, 0.17, 1.0),  # green
    (0.84, 0.15, 0.16, 1.0),  # red
    (0.58, 0.40, 0.74, 1.0),  # purple
    (0.55, 0.34, 0.29, 1.0),  # brown
    (0.89, 0.47, 0.76, 1.0),  # pink
    (0.50, 0.50, 0.50, 1.0),  # gray
    (0.74, 0.74, 0.13, 1.0),  # yellow-green
    (0.09, 0.75, 0.81, 1.0),  # cyan
)

GRADIENT_START: RGBA = (0.2, 0.4, 0.9, 1.0)
GRADIENT_END: RGBA = (0.9, 0.2, 0.2, 1.0)

DEFAULT_UNIFORM_COLOR: RGBA = (0.7, 0.7, 0.7, 1.0)

# Amino acid groups by side-chain chemistry
RESIDUE_GROUPS = MappingProxyType({
    "hydrophobic": frozenset({"ALA", "VAL", "LEU", "ILE", "MET", "PHE", "TRP", "TYR"}),
    "polar": frozenset({"SER", "THR", "ASN", "GLN"}),
    "positive": frozenset({"LYS", "ARG", "HIS"}),
    "negative": frozenset({"ASP", "GLU"}),
    "special": frozenset({"GLY", "PRO", "CYS"}),
})

RESIDUE_GROUP_COLORS = MappingProxyType({
    "hydrophobic": (0.8, 0.8, 0.2, 1.0),
    "polar": (0.2, 0.8, 0.8, 1.0),
    "positive": (0.2, 0.4, 0.9, 1.0),
    "negative": (0.9, 0.2, 0.2, 1.0),
    "special": (0.8, 0.4, 0.8, 1.0),
})

# CPK element colors used for ball-and-stick atoms
ELEMENT_COLORS = MappingProxyType({
    "H": (1.0, 1.0, 1.0, 1.0),
    "C": (0.5, 0.5, 0.5, 1.0),
    "N": (0.2, 0.3, 1.0, 1.0),
    "O": (1.0, 0.2, 0.2, 1.0),
    "S": (1.0, 1.0, 0.2, 1.0),
    "P": (1.0, 0.5, 0.0, 1.0),
})
DEFAULT_ELEMENT_COLOR: RGBA = (0.7, 0.7, 0.7, 1.0)


@dataclass(frozen=True)
class ByStructure:
    """Helix red, sheet blue, coil green."""


@dataclass(frozen=True)
class ByChain:
    """One palette entry per chain, cycling after ten chains."""


@dataclass(frozen=True)
class ByResidue:
    """Gradient from N- to C-terminus."""

    start: RGBA = GRADIENT_START
    end: RGBA = GRADIENT_END


@dataclass(frozen=True)
class ByResidueType:
    """Color by amino acid chemistry group."""


@dataclass(frozen=True)
class Uniform:
    color: RGBA = DEFAULT_UNIFORM_COLOR


ColorScheme = Union[ByStructure, ByChain, ByResidue, ByResidueType, Uniform]

_SCHEME_NAMES = {
    "by_structure": ByStructure,
    "by_chain": ByChain,
    "by_residue": ByResidue,
    "by_residue_type": ByResidueType,
    "uniform": Uniform,
}


def scheme_from_name(name: str, color: Optional[Sequence[float]] = None) -> ColorScheme:
    """Build a scheme from its config name (``by_structure``, ``uniform``, ...)."""
    key = str(name).strip().lower()
    if key not in _SCHEME_NAMES:
        raise ValueError(f"Unknown color scheme: {name}. Must be one of {list(_SCHEME_NAMES)}")
    if key == "uniform" and color is not None:
        return Uniform(color=_rgba(color))
    return _SCHEME_NAMES[key]()


def scheme_name(scheme: ColorScheme) -> str:
    for name, cls in _SCHEME_NAMES.items():
        if isinstance(scheme, cls):
            return name
    raise ValueError(f"Unknown color scheme: {scheme!r}")


def _rgba(color: Sequence[float]) -> RGBA:
    values = [float(c) for c in color]
    if len(values) == 3:
        values.append(1.0)
    if len(values) != 4:
        raise ValueError(f"Color must have 3 or 4 components, got {len(values)}")
    return tuple(values)


def structure_color(structure_type: StructureType) -> RGBA:
    return STRUCTURE_COLORS[StructureType(structure_type)]


def chain_color(chain_id: str, chains: Sequence[str]) -> RGBA:
    """Palette color for ``chain_id`` by its position in ``chains``."""
    try:
        index = list(chains).index(chain_id)
    except ValueError:
        return CHAIN_COLORS[0]
    return CHAIN_COLORS[index % len(CHAIN_COLORS)]


def gradient_color(index: int, total: int, start: RGBA = GRADIENT_START,
                   end: RGBA = GRADIENT_END) -> RGBA:
    if total <= 1:
        return tuple(start)
    t = index / (total - 1)
    return tuple(float(a + (b - a) * t) for a, b in zip(start, end))


def residue_type_color(res_name: str) -> RGBA:
    name = res_name.upper()
    for group, members in RESIDUE_GROUPS.items():
        if name in members:
            return RESIDUE_GROUP_COLORS[group]
    return COIL_COLOR


def element_color(element: str) -> RGBA:
    return ELEMENT_COLORS.get(element.upper(), DEFAULT_ELEMENT_COLOR)


def residue_colors(
    residues: Sequence[Residue],
    segments: Sequence[StructureSegment],
    scheme: ColorScheme = ByStructure(),
    chains: Optional[Sequence[str]] = None,
) -> List[RGBA]:
    """One RGBA color per residue.

    Args:
        residues: Residues in the order the segments index into
        segments: Structure segments over ``residues``
        scheme: Coloring scheme
        chains: Chain order for ``ByChain``; defaults to the sorted chain ids
            of ``residues``

    Returns:
        List of RGBA tuples, same length as ``residues``
    """
    if isinstance(scheme, ByStructure):
        colors = [COIL_COLOR] * len(residues)
        for segment in segments:
            color = structure_color(segment.structure_type)
            for i in range(segment.start_index, min(segment.end_index + 1, len(colors))):
                colors[i] = color
        return colors

    if isinstance(scheme, ByChain):
        chain_list = list(chains) if chains is not None else sorted({r.chain_id for r in residues})
        return [chain_color(r.chain_id, chain_list) for r in residues]

    if isinstance(scheme, ByResidue):
        return [gradient_color(i, len(residues), scheme.start, scheme.end)
                for i in range(len(residues))]

    if isinstance(scheme, ByResidueType):
        return [residue_type_color(r.name) for r in residues]

    if isinstance(scheme, Uniform):
        return [tuple(scheme.color)] * len(residues)

    raise ValueError(f"Unknown color scheme: {scheme!r}")


def interpolate_colors(colors: Sequence[RGBA], samples) -> np.ndarray:
    """Per-sample colors, blending each residue's color toward the next by ``t``.

    Args:
        colors: One RGBA per residue
        samples: CurveSample list (``residue_index`` and ``t`` are used)

    Returns:
        (N,4) float32 array, empty if either input is empty
    """
    if len(colors) == 0 or len(samples) == 0:
        return np.zeros((0, 4), dtype=np.float32)

    palette = np.asarray(colors, dtype=np.float64)
    last = len(palette) - 1
    out = np.empty((len(samples), 4), dtype=np.float64)
    for k, sample in enumerate(samples):
        index = min(max(int(sample.residue_index), 0), last)
        if index < last:
            out[k] = palette[index] + (palette[index + 1] - palette[index]) * float(sample.t)
        else:
            out[k] = palette[index]
    return out.astype(np.float32)


def rainbow_colors(count: int, saturation: float = 0.9, value: float = 0.9) -> List[RGBA]:
    """Evenly spaced hues, useful for per-residue debugging views."""
    return [colorsys.hsv_to_rgb(i / count, saturation, value) + (1.0,)
            for i in range(max(0, count))]

# proteinribbon/core/options.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Union

from .coloring import ByStructure, ColorScheme, Uniform, scheme_from_name, scheme_name
from .geometry.spline import SplineMethod
from .structure.classifier import OverlapPolicy

__all__ = ["RibbonOptions", "ArrowStyle", "CrossSectionName"]


class ArrowStyle(str, Enum):
    WEDGE = "wedge"
    TAPER = "taper"
    NONE = "none"


class CrossSectionName(str, Enum):
    """Ribbon cross-section; values match CrossSectionShape."""

    ELLIPSE = "ellipse"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


_ENUM_FIELDS = {
    "spline_method": SplineMethod,
    "cross_section": CrossSectionName,
    "arrow_style": ArrowStyle,
    "overlap_policy": OverlapPolicy,
}


@dataclass
class RibbonOptions:
    """Rendering options for ribbon construction.

    Dimensions are in Angstroms; ``scale`` converts the finished mesh to scene
    units.
    """

    color_scheme: ColorScheme = field(default_factory=ByStructure)
    helix_width: float = 1.2
    sheet_width: float = 1.6
    coil_radius: float = 0.3
    thickness: float = 0.4
    samples_per_residue: int = 24
    tension: float = 0.5
    spline_method: str = SplineMethod.CATMULL_ROM
    position_smoothing_window: int = 7
    frame_smoothing_window: int = 5
    frame_smoothing_iterations: int = 5
    smooth_segments: int = 20
    cross_section: str = CrossSectionName.ELLIPSE
    arrow_style: str = ArrowStyle.WEDGE
    sheet_arrow_length: float = 2.4
    sheet_arrow_wing_extension: float = 0.8
    scale: float = 1.0
    use_peptide_plane: bool = False
    overlap_policy: OverlapPolicy = OverlapPolicy.SHEET_OVER_HELIX
    bond_strategy: str = "residue"
    bond_tolerance: float = 1.3
    max_bond_length: float = 2.0
    n_workers: Union[int, str, None] = 1
    show_progress: bool = False

    @property
    def position_smoothing_iterations(self) -> int:
        return self.frame_smoothing_iterations

    @property
    def frame_smoothing_passes(self) -> int:
        """Frames get twice the position passes for a smoother twist."""
        return 2 * self.frame_smoothing_iterations

    @property
    def tube_sides(self) -> int:
        return max(8, self.smooth_segments)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data dict suitable for YAML/JSON."""
        data = asdict(self)
        data["color_scheme"] = scheme_name(self.color_scheme)
        if isinstance(self.color_scheme, Uniform):
            data["uniform_color"] = list(self.color_scheme.color)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RibbonOptions":
        """Build options from a plain dict, ignoring unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}

        scheme = kwargs.get("color_scheme")
        if isinstance(scheme, str):
            kwargs["color_scheme"] = scheme_from_name(scheme, data.get("uniform_color"))
        for key, enum_type in _ENUM_FIELDS.items():
            if key in kwargs:
                kwargs[key] = enum_type(kwargs[key])
        return cls(**kwargs)

"""
Curve geometry for backbone ribbons.

This module provides tools for:
- Catmull-Rom, B-spline and Hermite fitting of CA anchors
- Position smoothing and arc-length resampling
- Rotation-minimizing, Frenet and peptide-plane seeded frames
"""

from .frames import (
    Frame,
    compute_tangents,
    frenet_frames,
    rotation_minimizing_frames,
    smooth_frames,
    validate_frames,
)
from .spline import (
    CurveSample,
    SplineFitter,
    SplineMethod,
    arc_length,
    b_spline,
    catmull_rom,
    hermite,
    resample_uniform,
    smooth_positions,
)

__all__ = [
    "CurveSample",
    "SplineFitter",
    "SplineMethod",
    "catmull_rom",
    "b_spline",
    "hermite",
    "smooth_positions",
    "arc_length",
    "resample_uniform",
    "Frame",
    "compute_tangents",
    "rotation_minimizing_frames",
    "frenet_frames",
    "smooth_frames",
    "validate_frames",
]

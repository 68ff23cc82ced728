# proteinribbon/core/geometry/spline.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

__all__ = [
    "CurveSample",
    "SplineMethod",
    "SplineFitter",
    "cardinal_basis_matrix",
    "catmull_rom",
    "b_spline",
    "hermite",
    "smooth_positions",
    "smooth_samples",
    "sample_positions",
    "arc_length",
    "cumulative_arc_length",
    "resample_uniform",
]

logger = logging.getLogger(__name__)

# Uniform cubic B-spline basis, rows ordered u^3, u^2, u, 1
B_SPLINE_BASIS = np.array([
    [-1.0, 3.0, -3.0, 1.0],
    [3.0, -6.0, 3.0, 0.0],
    [-3.0, 0.0, 3.0, 0.0],
    [1.0, 4.0, 1.0, 0.0],
]) / 6.0

# Hermite basis applied to (p0, p1, m0, m1)
HERMITE_BASIS = np.array([
    [2.0, -2.0, 1.0, 1.0],
    [-3.0, 3.0, -2.0, -1.0],
    [0.0, 0.0, 1.0, 0.0],
    [1.0, 0.0, 0.0, 0.0],
])


@dataclass
class CurveSample:
    """Point on the fitted backbone curve.

    Attributes:
        position: (3,) position
        t: Local parameter within the generating segment, in [0, 1]
        segment_index: Index of the generating spline segment
        residue_index: Index of the anchor (or residue) this sample belongs to
    """

    position: np.ndarray
    t: float
    segment_index: int
    residue_index: int


class SplineMethod(str, Enum):
    CATMULL_ROM = "catmull_rom"
    B_SPLINE = "b_spline"
    HERMITE = "hermite"


def _as_points(points) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return pts.reshape(-1, 3)


def _pass_through(pts: np.ndarray) -> List[CurveSample]:
    return [CurveSample(pts[i].copy(), 0.0, i, i) for i in range(len(pts))]


def _power_basis(samples_per_segment: int) -> tuple:
    u = np.arange(samples_per_segment, dtype=np.float64) / samples_per_segment
    U = np.stack([u ** 3, u ** 2, u, np.ones_like(u)], axis=1)
    return u, U


def cardinal_basis_matrix(tension: float = 0.5) -> np.ndarray:
    """Cardinal spline basis for control points (p[i-1], p[i], p[i+1], p[i+2]).

    ``tension = 0.5`` yields the standard Catmull-Rom basis.
    """
    s = float(tension)
    return np.array([
        [-s, 2.0 - s, s - 2.0, s],
        [2.0 * s, s - 3.0, 3.0 - 2.0 * s, -s],
        [-s, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
    ])


def catmull_rom(points, samples_per_segment: int = 8,
                tension: float = 0.5) -> List[CurveSample]:
    """Interpolate anchors with a Catmull-Rom (cardinal) spline.

    The curve passes through every anchor. Endpoints are extended by
    reflection (``2*p0 - p1`` and ``2*pn - pn-1``) so the first and last
    segments have neighbours. Each of the n-1 segments contributes
    ``samples_per_segment`` samples and the last anchor is appended once, for
    ``(n-1) * samples_per_segment + 1`` samples in total.

    Args:
        points: (N,3) anchor positions
        samples_per_segment: Samples per anchor interval (clamped to >= 1)
        tension: Cardinal tension, 0.5 for standard Catmull-Rom

    Returns:
        List of CurveSample. With fewer than 4 anchors the anchors are passed
        through unchanged (t=0, segment and residue index equal to the index).
    """
    pts = _as_points(points)
    n = len(pts)
    if n < 4:
        return _pass_through(pts)

    S = max(1, int(samples_per_segment))
    padded = np.vstack([2.0 * pts[0] - pts[1], pts, 2.0 * pts[-1] - pts[-2]])
    u, U = _power_basis(S)
    weights = U @ cardinal_basis_matrix(tension)

    samples: List[CurveSample] = []
    for i in range(n - 1):
        segment = weights @ padded[i:i + 4]
        for j in range(S):
            samples.append(CurveSample(segment[j], float(u[j]), i, i))

    samples.append(CurveSample(pts[-1].copy(), 1.0, n - 2, n - 1))
    return samples


def b_spline(points, samples_per_segment: int = 8) -> List[CurveSample]:
    """Approximate anchors with a uniform cubic B-spline.

    The curve does not pass through interior anchors; samples of segment i are
    attributed to anchor i+1. Produces ``(n-3) * samples_per_segment + 1``
    samples, the last one being the final anchor.
    """
    pts = _as_points(points)
    n = len(pts)
    if n < 4:
        return _pass_through(pts)

    S = max(1, int(samples_per_segment))
    u, U = _power_basis(S)
    weights = U @ B_SPLINE_BASIS

    samples: List[CurveSample] = []
    for i in range(n - 3):
        segment = weights @ pts[i:i + 4]
        for j in range(S):
            samples.append(CurveSample(segment[j], float(u[j]), i, i + 1))

    samples.append(CurveSample(pts[-1].copy(), 1.0, n - 4, n - 1))
    return samples


def hermite(points, samples_per_segment: int = 8) -> List[CurveSample]:
    """Cubic Hermite interpolation with finite-difference tangents.

    Needs at least 2 anchors; produces ``(n-1) * samples_per_segment + 1``
    samples.
    """
    pts = _as_points(points)
    n = len(pts)
    if n < 2:
        return _pass_through(pts)

    tangents = np.empty_like(pts)
    tangents[0] = pts[1] - pts[0]
    tangents[-1] = pts[-1] - pts[-2]
    if n > 2:
        tangents[1:-1] = 0.5 * (pts[2:] - pts[:-2])

    S = max(1, int(samples_per_segment))
    u, U = _power_basis(S)
    weights = U @ HERMITE_BASIS

    samples: List[CurveSample] = []
    for i in range(n - 1):
        ctrl = np.stack([pts[i], pts[i + 1], tangents[i], tangents[i + 1]])
        segment = weights @ ctrl
        for j in range(S):
            samples.append(CurveSample(segment[j], float(u[j]), i, i))

    samples.append(CurveSample(pts[-1].copy(), 1.0, n - 2, n - 1))
    return samples


def smooth_positions(positions, iterations: int = 2, window_size: int = 5) -> np.ndarray:
    """Weighted moving-average smoothing of a polyline.

    Each pass replaces every interior point by the average of its window with
    weights ``1 / (1 + 0.5 * |offset|)``; the window is truncated at the ends.
    The first and last points are pinned so curve endpoints stay exact. An even
    ``window_size`` is widened to the next odd size.

    Returns:
        New (N,3) array; the input is left untouched.
    """
    result = _as_points(positions).copy()
    n = len(result)
    if n < 3 or iterations <= 0:
        return result

    window_size = max(1, int(window_size))
    if window_size % 2 == 0:
        window_size += 1
    half = window_size // 2
    offsets = np.arange(-half, half + 1)
    kernel = 1.0 / (1.0 + np.abs(offsets) * 0.5)

    def windowed_sum(values: np.ndarray) -> np.ndarray:
        return np.convolve(values, kernel, mode="full")[half:half + n]

    # Normalisation per point accounts for truncated windows at the ends
    weight_sum = windowed_sum(np.ones(n))

    for _ in range(int(iterations)):
        smoothed = np.empty_like(result)
        for axis in range(3):
            smoothed[:, axis] = windowed_sum(result[:, axis]) / weight_sum
        smoothed[0] = result[0]
        smoothed[-1] = result[-1]
        result = smoothed

    return result


def sample_positions(samples: Sequence[CurveSample]) -> np.ndarray:
    """Stack sample positions into an (N,3) array."""
    if not samples:
        return np.zeros((0, 3), dtype=np.float64)
    return np.array([s.position for s in samples], dtype=np.float64)


def smooth_samples(samples: Sequence[CurveSample], iterations: int = 2,
                   window_size: int = 5) -> List[CurveSample]:
    """Smooth sample positions, keeping t, segment and residue metadata."""
    if len(samples) < 3 or iterations <= 0:
        return list(samples)
    smoothed = smooth_positions(sample_positions(samples), iterations, window_size)
    return [replace(s, position=p) for s, p in zip(samples, smoothed)]


def cumulative_arc_length(samples) -> np.ndarray:
    """Arc length from the first sample to each sample.

    Accepts a list of CurveSample or an (N,3) array.
    """
    if len(samples) and isinstance(samples[0], CurveSample):
        pts = sample_positions(samples)
    else:
        pts = _as_points(samples)
    if len(pts) == 0:
        return np.zeros(0)
    steps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    return np.concatenate([[0.0], np.cumsum(steps)])


def arc_length(samples) -> float:
    """Total polyline length of the samples."""
    cumulative = cumulative_arc_length(samples)
    return float(cumulative[-1]) if len(cumulative) else 0.0


def resample_uniform(samples: Sequence[CurveSample], target_count: int) -> List[CurveSample]:
    """Resample the curve to ``target_count`` samples evenly spaced in arc length.

    Endpoints are preserved. Each new sample takes the segment and residue
    index of the sample ending the interval it falls into; ``t`` is the
    fraction along that interval.
    """
    if len(samples) < 2 or target_count < 2:
        return list(samples)

    pts = sample_positions(samples)
    cumulative = cumulative_arc_length(pts)
    total = cumulative[-1]
    if total <= 0.0:
        logger.debug("Zero-length curve, resampling skipped")
        return list(samples)

    targets = np.linspace(0.0, total, int(target_count))
    result = [replace(samples[0], position=pts[0].copy())]
    for target in targets[1:-1]:
        k = int(np.searchsorted(cumulative, target, side="left"))
        k = min(max(k, 1), len(pts) - 1)
        span = cumulative[k] - cumulative[k - 1]
        ratio = 0.0 if span <= 0.0 else (target - cumulative[k - 1]) / span
        position = pts[k - 1] + ratio * (pts[k] - pts[k - 1])
        result.append(CurveSample(position, float(ratio), samples[k].segment_index,
                                  samples[k].residue_index))
    result.append(replace(samples[-1], position=pts[-1].copy()))
    return result


class SplineFitter:
    """Configurable anchor-to-curve fitting.

    Runs the chosen interpolation followed by optional position smoothing.
    """

    _METHODS = {
        SplineMethod.CATMULL_ROM: catmull_rom,
        SplineMethod.B_SPLINE: b_spline,
        SplineMethod.HERMITE: hermite,
    }

    def __init__(
        self,
        method: str = SplineMethod.CATMULL_ROM,
        samples_per_segment: int = 8,
        tension: float = 0.5,
        smoothing_iterations: int = 0,
        window_size: int = 5,
    ) -> None:
        try:
            self.method = SplineMethod(method)
        except ValueError:
            raise ValueError(
                f"Unknown spline method: {method}. Must be one of {[m.value for m in SplineMethod]}"
            ) from None
        self.samples_per_segment = max(1, int(samples_per_segment))
        self.tension = tension
        self.smoothing_iterations = max(0, int(smoothing_iterations))
        self.window_size = window_size

    def fit(self, points, residue_indices: Optional[Sequence[int]] = None) -> List[CurveSample]:
        """Fit the curve and optionally remap anchor indices to residue indices.

        Args:
            points: (N,3) anchor positions
            residue_indices: Optional residue index per anchor; sample residue
                indices (anchor positions) are translated through it

        Returns:
            List of CurveSample. Fewer than 4 anchors are never smoothed.
        """
        pts = _as_points(points)
        if self.method == SplineMethod.CATMULL_ROM:
            samples = catmull_rom(pts, self.samples_per_segment, self.tension)
        else:
            samples = self._METHODS[self.method](pts, self.samples_per_segment)

        if len(pts) >= 4:
            samples = smooth_samples(samples, self.smoothing_iterations, self.window_size)

        if residue_indices is not None and samples:
            lookup = list(residue_indices)
            samples = [replace(s, residue_index=lookup[min(s.residue_index, len(lookup) - 1)])
                       for s in samples]
        return samples

# proteinribbon/core/geometry/frames.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

__all__ = [
    "Frame",
    "compute_tangents",
    "initial_normal",
    "orthogonalize",
    "peptide_plane_normal",
    "rotation_minimizing_frames",
    "frenet_frames",
    "simple_frames",
    "smooth_frames",
    "orthonormalize_frame",
    "frame_orthonormality_error",
    "validate_frames",
    "frames_to_arrays",
]

logger = logging.getLogger(__name__)

EPS = 1e-8
ORTHO_TOL = 1e-4

UP = np.array([0.0, 1.0, 0.0])
RIGHT = np.array([1.0, 0.0, 0.0])


@dataclass
class Frame:
    """Local orthonormal frame at a curve sample.

    ``binormal = tangent x normal`` (right handed).
    """

    position: np.ndarray
    tangent: np.ndarray
    normal: np.ndarray
    binormal: np.ndarray


def _normalize(v: np.ndarray) -> Tuple[np.ndarray, float]:
    length = float(np.linalg.norm(v))
    if length < EPS:
        return v, length
    return v / length, length


def _as_points(points) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return pts.reshape(-1, 3)


def compute_tangents(positions) -> np.ndarray:
    """Unit tangents by finite differences.

    Central differences inside, one-sided at the ends. A zero-length
    difference (repeated points) retains the previous valid tangent.
    """
    pts = _as_points(positions)
    n = len(pts)
    if n == 0:
        return np.zeros((0, 3))
    if n == 1:
        return RIGHT.reshape(1, 3).copy()

    raw = np.empty_like(pts)
    raw[0] = pts[1] - pts[0]
    raw[-1] = pts[-1] - pts[-2]
    if n > 2:
        raw[1:-1] = pts[2:] - pts[:-2]

    lengths = np.linalg.norm(raw, axis=1)
    valid = lengths > EPS
    if not valid.any():
        logger.debug("All curve samples coincide, using default tangent")
        return np.tile(RIGHT, (n, 1))

    tangents = np.zeros_like(raw)
    tangents[valid] = raw[valid] / lengths[valid, None]

    # Leading degenerate samples take the first valid tangent
    first_valid = int(np.argmax(valid))
    tangents[:first_valid] = tangents[first_valid]
    for i in range(first_valid + 1, n):
        if not valid[i]:
            tangents[i] = tangents[i - 1]
    return tangents


def initial_normal(tangent: np.ndarray) -> np.ndarray:
    """Normal perpendicular to ``tangent`` built from a fixed reference axis.

    Uses +Y unless the tangent is nearly parallel to it (|t.y| > 0.9), then +X.
    """
    tangent = np.asarray(tangent, dtype=np.float64)
    ref = RIGHT if abs(float(np.dot(tangent, UP))) > 0.9 else UP
    normal, _ = _normalize(np.cross(ref, tangent))
    return normal


def orthogonalize(v: np.ndarray, tangent: np.ndarray) -> np.ndarray:
    """Gram-Schmidt ``v`` against ``tangent``; falls back to ``initial_normal``."""
    v = np.asarray(v, dtype=np.float64)
    projected = v - np.dot(v, tangent) * tangent
    normal, length = _normalize(projected)
    if length < ORTHO_TOL:
        return initial_normal(tangent)
    return normal


def peptide_plane_normal(ca_position, o_position) -> Optional[np.ndarray]:
    """Unit direction CA -> O, used to orient the ribbon with the peptide plane."""
    direction = np.asarray(o_position, dtype=np.float64) - np.asarray(ca_position, dtype=np.float64)
    direction, length = _normalize(direction)
    if length < EPS:
        return None
    return direction


def _make_frame(position, tangent, normal) -> Frame:
    binormal, _ = _normalize(np.cross(tangent, normal))
    return Frame(np.array(position, dtype=np.float64), tangent.copy(), normal, binormal)


def simple_frames(positions) -> List[Frame]:
    """Independent per-sample frames; used when a curve is too short to propagate."""
    pts = _as_points(positions)
    if len(pts) == 0:
        return []
    if len(pts) == 1:
        return [Frame(pts[0].copy(), RIGHT.copy(), UP.copy(), np.array([0.0, 0.0, 1.0]))]
    tangents = compute_tangents(pts)
    return [_make_frame(p, t, initial_normal(t)) for p, t in zip(pts, tangents)]


def _propagate(x0: np.ndarray, x1: np.ndarray, t0: np.ndarray, t1: np.ndarray,
               r0: np.ndarray) -> np.ndarray:
    """Double-reflection step (Wang et al. 2008) carrying normal r0 from x0 to x1."""
    v1 = x1 - x0
    c1 = float(np.dot(v1, v1))
    dt = t1 - t0
    if c1 < EPS or float(np.dot(dt, dt)) < EPS:
        # Straight step or coincident samples: keep the previous normal
        return orthogonalize(r0, t1)

    r_l = r0 - (2.0 / c1) * np.dot(v1, r0) * v1
    t_l = t0 - (2.0 / c1) * np.dot(v1, t0) * v1

    v2 = t1 - t_l
    c2 = float(np.dot(v2, v2))
    if c2 < EPS:
        r1 = r_l
    else:
        r1 = r_l - (2.0 / c2) * np.dot(v2, r_l) * v2
    return orthogonalize(r1, t1)


def rotation_minimizing_frames(positions, normal: Optional[np.ndarray] = None) -> List[Frame]:
    """Rotation-minimizing frames along a polyline.

    Args:
        positions: (N,3) curve samples
        normal: Optional starting normal; it is orthogonalized against the
            first tangent. Defaults to ``initial_normal(t0)``.

    Returns:
        One Frame per sample. An empty input gives [] and a single sample gets
        the canonical axes.
    """
    pts = _as_points(positions)
    n = len(pts)
    if n < 2:
        return simple_frames(pts)

    tangents = compute_tangents(pts)
    if normal is None:
        n0 = initial_normal(tangents[0])
    else:
        n0 = orthogonalize(normal, tangents[0])

    frames = [_make_frame(pts[0], tangents[0], n0)]
    for i in range(1, n):
        prev = frames[-1]
        ni = _propagate(pts[i - 1], pts[i], prev.tangent, tangents[i], prev.normal)
        frames.append(_make_frame(pts[i], tangents[i], ni))
    return frames


def frenet_frames(positions) -> List[Frame]:
    """Frenet-Serret frames (normal along curvature).

    Flips at inflection points; kept for comparison with rotation-minimizing
    frames. Zero-curvature samples use ``initial_normal``.
    """
    pts = _as_points(positions)
    n = len(pts)
    if n < 3:
        return simple_frames(pts)

    tangents = compute_tangents(pts)
    second = np.empty_like(pts)
    second[1:-1] = pts[2:] - 2.0 * pts[1:-1] + pts[:-2]
    second[0] = pts[2] - 2.0 * pts[1] + pts[0]
    second[-1] = pts[-1] - 2.0 * pts[-2] + pts[-3]

    frames = []
    for i in range(n):
        t = tangents[i]
        curvature = second[i] - np.dot(second[i], t) * t
        normal, magnitude = _normalize(curvature)
        if magnitude < ORTHO_TOL:
            normal = initial_normal(t)
        frames.append(_make_frame(pts[i], t, normal))
    return frames


def smooth_frames(frames: Sequence[Frame], iterations: int = 2,
                  window_size: int = 5) -> List[Frame]:
    """Gaussian-weighted smoothing of frame normals.

    Normals within the window are averaged with weights ``exp(-d^2 / half)``,
    re-orthogonalized against the unchanged tangent and the binormal rebuilt.
    The first and last ``window_size // 2`` frames are held fixed. If the
    averaged normal collapses onto the tangent the original normal is kept.
    """
    frames = list(frames)
    n = len(frames)
    if n < 3 or iterations <= 0:
        return frames

    half = max(1, int(window_size) // 2)
    offsets = np.arange(-half, half + 1)
    kernel = np.exp(-(offsets ** 2) / float(half))

    for _ in range(int(iterations)):
        normals = np.array([f.normal for f in frames])
        updated = list(frames)
        for i in range(half, n - half):
            avg = kernel @ normals[i - half:i + half + 1] / kernel.sum()
            tangent = frames[i].tangent
            projected = avg - np.dot(avg, tangent) * tangent
            normal, length = _normalize(projected)
            if length <= 1e-3:
                continue
            updated[i] = _make_frame(frames[i].position, tangent, normal)
        frames = updated

    return frames


def orthonormalize_frame(frame: Frame) -> Frame:
    """Re-derive an exactly orthonormal frame from its tangent and normal."""
    tangent, length = _normalize(np.asarray(frame.tangent, dtype=np.float64))
    if length < EPS:
        tangent = RIGHT.copy()
    return _make_frame(frame.position, tangent, orthogonalize(frame.normal, tangent))


def frame_orthonormality_error(frame: Frame) -> float:
    """Largest deviation from unit length or orthogonality among the three axes."""
    t, n, b = frame.tangent, frame.normal, frame.binormal
    errors = [
        abs(np.linalg.norm(t) - 1.0),
        abs(np.linalg.norm(n) - 1.0),
        abs(np.linalg.norm(b) - 1.0),
        abs(np.dot(t, n)),
        abs(np.dot(t, b)),
        abs(np.dot(n, b)),
    ]
    return float(max(errors))


def validate_frames(frames: Sequence[Frame], tolerance: float = 1e-2) -> bool:
    """True if every frame is orthonormal within ``tolerance``."""
    return all(frame_orthonormality_error(f) <= tolerance for f in frames)


def frames_to_arrays(frames: Sequence[Frame]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Stack frames into (positions, tangents, normals, binormals) arrays."""
    if not frames:
        empty = np.zeros((0, 3))
        return empty, empty.copy(), empty.copy(), empty.copy()
    return (
        np.array([f.position for f in frames]),
        np.array([f.tangent for f in frames]),
        np.array([f.normal for f in frames]),
        np.array([f.binormal for f in frames]),
    )

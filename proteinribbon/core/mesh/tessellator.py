# proteinribbon/core/mesh/tessellator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..geometry.frames import Frame
from .profiles import ARROW_TRANSITION_POINTS, CrossSectionProfile
from .ribbon_mesh import RibbonMesh

__all__ = [
    "CrossSectionShape",
    "CrossSection",
    "rectangular_cross_section",
    "circular_cross_section",
    "elliptical_cross_section",
    "RibbonMeshTessellator",
]

logger = logging.getLogger(__name__)

EPS = 1e-8


class CrossSectionShape(str, Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"


@dataclass
class CrossSection:
    """One ring of the swept surface.

    Attributes:
        vertices: (K,3) ring positions
        normals: (K,3) unit outward normals
        edges: (E,2) vertex index pairs, each swept into a quad
        outline: Indices tracing the closed outline once, for caps
    """

    vertices: np.ndarray
    normals: np.ndarray
    edges: np.ndarray
    outline: np.ndarray


def _unit(v: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(v)
    return v / length if length > EPS else v


def _closed_edges(k: int) -> np.ndarray:
    idx = np.arange(k)
    return np.stack([idx, (idx + 1) % k], axis=1)


def _angles(segments: int) -> np.ndarray:
    return np.arange(segments) / segments * 2.0 * np.pi


def rectangular_cross_section(frame: Frame, profile: CrossSectionProfile) -> np.ndarray:
    """Four corners ``p +/- hw*n +/- ht*b``.

    Order: (+n,+b), (-n,+b), (-n,-b), (+n,-b), i.e. counter-clockwise seen
    along the tangent.
    """
    p, n, b = frame.position, frame.normal, frame.binormal
    hw, ht = profile.half_width, profile.half_thickness
    return np.array([
        p + hw * n + ht * b,
        p - hw * n + ht * b,
        p - hw * n - ht * b,
        p + hw * n - ht * b,
    ])


def circular_cross_section(frame: Frame, radius: float, sides: int = 8) -> Tuple[np.ndarray, np.ndarray]:
    """``sides`` ring vertices at ``radius`` and their radial normals."""
    theta = _angles(sides)
    dirs = np.cos(theta)[:, None] * frame.normal + np.sin(theta)[:, None] * frame.binormal
    return frame.position + radius * dirs, dirs


def elliptical_cross_section(
    frame: Frame,
    profile: CrossSectionProfile,
    segments: int = 12,
    previous_normals: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Ellipse ring ``p + hw*cos(a)*n + ht*sin(a)*b`` with analytic normals.

    The normal at angle a is ``normalize(ht*cos(a)*n + hw*sin(a)*b)``. Where
    that vector vanishes (a zero-width or zero-thickness profile) the normal of
    the previous ring at the same index is used, or else the radial
    direction.
    """
    theta = _angles(segments)
    cos, sin = np.cos(theta)[:, None], np.sin(theta)[:, None]
    n, b = frame.normal, frame.binormal
    hw, ht = profile.half_width, profile.half_thickness

    vertices = frame.position + hw * cos * n + ht * sin * b
    raw = ht * cos * n + hw * sin * b
    lengths = np.linalg.norm(raw, axis=1)
    normals = np.zeros_like(raw)
    ok = lengths > EPS
    normals[ok] = raw[ok] / lengths[ok, None]
    if not ok.all():
        if previous_normals is not None and len(previous_normals) == segments:
            normals[~ok] = previous_normals[~ok]
        else:
            radial = cos * n + sin * b
            normals[~ok] = radial[~ok]
    return vertices, normals


class RibbonMeshTessellator:
    """Sweeps cross-sections along frames into a closed triangle mesh.

    Example:
        >>> tess = RibbonMeshTessellator(segments=12)
        >>> mesh = tess.tessellate(frames, profiles, colors)
    """

    def __init__(self, segments: int = 20,
                 shape: CrossSectionShape = CrossSectionShape.ELLIPSE) -> None:
        self.segments = max(3, int(segments))
        self.shape = CrossSectionShape(shape)

    def _ring(self, shape: CrossSectionShape, frame: Frame, profile: CrossSectionProfile,
              previous: Optional[CrossSection]) -> CrossSection:
        if shape == CrossSectionShape.RECTANGLE:
            c = rectangular_cross_section(frame, profile)
            n, b = frame.normal, frame.binormal
            # Corners duplicated per side so each side keeps a flat normal
            vertices = np.array([c[0], c[1], c[1], c[2], c[2], c[3], c[3], c[0]])
            normals = np.array([b, b, -n, -n, -b, -b, n, n])
            edges = np.array([[0, 1], [2, 3], [4, 5], [6, 7]])
            return CrossSection(vertices, normals, edges, np.array([0, 2, 4, 6]))

        if shape == CrossSectionShape.CIRCLE:
            vertices, normals = circular_cross_section(frame, profile.half_width, self.segments)
        else:
            prev_normals = previous.normals if previous is not None else None
            vertices, normals = elliptical_cross_section(frame, profile, self.segments, prev_normals)
        k = len(vertices)
        return CrossSection(vertices, normals, _closed_edges(k), np.arange(k))

    def cross_sections(self, frames: Sequence[Frame], profiles: Sequence[CrossSectionProfile],
                       shape: Optional[CrossSectionShape] = None) -> List[CrossSection]:
        shape = CrossSectionShape(shape or self.shape)
        rings: List[CrossSection] = []
        previous = None
        for frame, profile in zip(frames, profiles):
            previous = self._ring(shape, frame, profile, previous)
            rings.append(previous)
        return rings

    @staticmethod
    def _cap(ring: CrossSection, frame: Frame, color: np.ndarray, facing: float) -> RibbonMesh:
        """Triangle fan from the frame position over the ring outline.

        ``facing`` is -1 for a start cap (normal -T) and +1 for an end cap.
        """
        outline = ring.vertices[ring.outline]
        k = len(outline)
        positions = np.vstack([frame.position[None, :], outline])
        normal = facing * frame.tangent
        idx = np.arange(k)
        nxt = (idx + 1) % k
        center = np.zeros(k, dtype=np.int64)
        if facing < 0:
            faces = np.stack([center, nxt + 1, idx + 1], axis=1)
        else:
            faces = np.stack([center, idx + 1, nxt + 1], axis=1)
        return RibbonMesh(positions, np.tile(normal, (k + 1, 1)),
                          np.tile(color, (k + 1, 1)), faces)

    def tessellate(
        self,
        frames: Sequence[Frame],
        profiles: Sequence[CrossSectionProfile],
        colors,
        cap_start: bool = True,
        cap_end: bool = True,
        shape: Optional[CrossSectionShape] = None,
    ) -> RibbonMesh:
        """Build the swept mesh for one segment.

        Args:
            frames: Frames along the segment
            profiles: One profile per frame
            colors: One RGBA color per frame
            cap_start: Close the first ring with a fan facing -T
            cap_end: Close the last ring with a fan facing +T
            shape: Override the tessellator's cross-section shape

        Returns:
            RibbonMesh; empty if fewer than 2 frames or the input lengths differ
        """
        colors = np.asarray(colors, dtype=np.float32)
        colors = colors.reshape(-1, 4) if colors.size else np.zeros((0, 4), dtype=np.float32)
        if len(frames) < 2 or len(frames) != len(profiles) or len(frames) != len(colors):
            if len(frames) != len(profiles) or len(frames) != len(colors):
                logger.warning(
                    "Mismatched tessellation input: %d frames, %d profiles, %d colors",
                    len(frames), len(profiles), len(colors),
                )
            return RibbonMesh()

        rings = self.cross_sections(frames, profiles, shape)
        k = len(rings[0].vertices)
        edges = rings[0].edges
        n_frames = len(rings)

        positions = np.concatenate([r.vertices for r in rings])
        normals = np.concatenate([r.normals for r in rings])
        vertex_colors = np.repeat(colors, k, axis=0)

        ring_offsets = (np.arange(n_frames - 1) * k)[:, None]
        a0 = (ring_offsets + edges[None, :, 0]).ravel()
        b0 = (ring_offsets + edges[None, :, 1]).ravel()
        a1, b1 = a0 + k, b0 + k
        faces = np.concatenate([
            np.stack([a0, b0, b1], axis=1),
            np.stack([a0, b1, a1], axis=1),
        ])

        mesh = RibbonMesh(positions, normals, vertex_colors, faces)
        if cap_start:
            mesh = mesh.append(self._cap(rings[0], frames[0], colors[0], -1.0))
        if cap_end:
            mesh = mesh.append(self._cap(rings[-1], frames[-1], colors[-1], 1.0))
        return mesh

    def tessellate_tube(self, frames: Sequence[Frame], radius: float, colors,
                        sides: Optional[int] = None, cap_start: bool = True,
                        cap_end: bool = True) -> RibbonMesh:
        """Circular tube of constant ``radius`` (coil segments)."""
        profile = CrossSectionProfile(radius, radius)
        tube = RibbonMeshTessellator(sides or self.segments, CrossSectionShape.CIRCLE)
        return tube.tessellate(frames, [profile] * len(frames), colors, cap_start, cap_end)

    @staticmethod
    def build_arrow_head(
        last_frame: Frame,
        ribbon_half_width: float,
        ribbon_half_thickness: float,
        arrow_length: float = 2.4,
        wing_extension: float = 0.8,
        color=(0.2, 0.4, 0.9, 1.0),
    ) -> RibbonMesh:
        """Closed wedge arrow head for the C-terminal end of a strand.

        The base sits on ``last_frame``: notch vertices at the ribbon edge
        (+/-R along N), wing vertices at +/-(R + wing_extension), and a tip
        ``arrow_length`` ahead along T, each at +/-h along B. Every polygon is
        emitted with flat normals and wound counter-clockwise about its normal.
        """
        p = np.asarray(last_frame.position, dtype=np.float64)
        T, N, B = last_frame.tangent, last_frame.normal, last_frame.binormal
        R, h, L = ribbon_half_width, ribbon_half_thickness, arrow_length
        W = R + wing_extension

        notch_tl, notch_tr = p + R * N + h * B, p - R * N + h * B
        notch_bl, notch_br = p + R * N - h * B, p - R * N - h * B
        wing_tl, wing_tr = p + W * N + h * B, p - W * N + h * B
        wing_bl, wing_br = p + W * N - h * B, p - W * N - h * B
        tip_t, tip_b = p + L * T + h * B, p + L * T - h * B

        left_normal = _unit(W * T + L * N)
        right_normal = _unit(W * T - L * N)

        polygons = [
            # top
            ([wing_tl, tip_t, notch_tl], B),
            ([notch_tr, tip_t, wing_tr], B),
            ([notch_tl, tip_t, notch_tr], B),
            # bottom
            ([wing_bl, notch_bl, tip_b], -B),
            ([notch_br, wing_br, tip_b], -B),
            ([notch_bl, notch_br, tip_b], -B),
            # slanted sides
            ([wing_tl, tip_t, tip_b, wing_bl], left_normal),
            ([wing_tr, wing_br, tip_b, tip_t], right_normal),
            # back of the wings
            ([notch_tl, notch_bl, wing_bl, wing_tl], -T),
            ([notch_tr, wing_tr, wing_br, notch_br], -T),
        ]

        positions, normals, faces = [], [], []
        for polygon, normal in polygons:
            polygon = _orient(polygon, normal)
            base = len(positions)
            positions.extend(polygon)
            normals.extend([normal] * len(polygon))
            for j in range(1, len(polygon) - 1):
                faces.append([base, base + j, base + j + 1])

        rgba = np.asarray(color, dtype=np.float32).reshape(4)
        return RibbonMesh(np.array(positions), np.array(normals),
                          np.tile(rgba, (len(positions), 1)), np.array(faces))

    def tessellate_sheet(
        self,
        frames: Sequence[Frame],
        profiles: Sequence[CrossSectionProfile],
        colors,
        arrow_length: float = 2.4,
        wing_extension: float = 0.8,
    ) -> RibbonMesh:
        """Strand body with a start cap and a wedge arrow head instead of an end cap.

        Strands no longer than the arrow transition window stay uniform and
        get a plain end cap.
        """
        if len(frames) <= ARROW_TRANSITION_POINTS:
            return self.tessellate(frames, profiles, colors)
        body = self.tessellate(frames, profiles, colors, cap_start=True, cap_end=False)
        if body.n_vertices == 0:
            return body
        last = profiles[-1]
        arrow = self.build_arrow_head(frames[-1], last.half_width, last.half_thickness,
                                      arrow_length, wing_extension, np.asarray(colors)[-1])
        return body.append(arrow)


def _orient(polygon: List[np.ndarray], normal: np.ndarray) -> List[np.ndarray]:
    """Reverse a planar convex polygon if it winds clockwise about ``normal``."""
    a, b, c = polygon[0], polygon[1], polygon[2]
    if np.dot(np.cross(b - a, c - a), normal) < 0.0:
        return polygon[::-1]
    return polygon

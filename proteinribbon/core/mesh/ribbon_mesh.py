# proteinribbon/core/mesh/ribbon_mesh.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

__all__ = ["RibbonMesh", "MeshBuilderError", "EmptyMeshError", "InvalidMeshError"]

logger = logging.getLogger(__name__)


class MeshBuilderError(Exception):
    """Base class for mesh conversion errors."""


class EmptyMeshError(MeshBuilderError):
    """Raised when an empty mesh is converted to render arrays."""


class InvalidMeshError(MeshBuilderError):
    """Raised when mesh arrays are inconsistent."""


def _rows(array, width: int, dtype) -> np.ndarray:
    if array is None:
        return np.zeros((0, width), dtype=dtype)
    arr = np.asarray(array, dtype=dtype)
    if arr.size == 0:
        return np.zeros((0, width), dtype=dtype)
    return arr.reshape(-1, width)


class RibbonMesh:
    """Indexed triangle mesh with per-vertex normals and RGBA colors."""

    def __init__(
        self,
        positions: Optional[np.ndarray] = None,
        normals: Optional[np.ndarray] = None,
        colors: Optional[np.ndarray] = None,
        faces: Optional[np.ndarray] = None,
    ) -> None:
        """Initialize mesh arrays.

        Args:
            positions: (N,3) vertex positions
            normals: (N,3) unit vertex normals
            colors: (N,4) RGBA vertex colors
            faces: (M,3) triangle vertex indices, counter-clockwise seen from
                outside
        """
        self.positions = _rows(positions, 3, np.float32)
        self.normals = _rows(normals, 3, np.float32)
        self.colors = _rows(colors, 4, np.float32)
        self.faces = _rows(faces, 3, np.int32)

    @classmethod
    def empty(cls) -> "RibbonMesh":
        return cls()

    @property
    def n_vertices(self) -> int:
        return len(self.positions)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return self.n_vertices == 0 or self.n_faces == 0

    def __len__(self) -> int:
        return self.n_faces

    def __repr__(self) -> str:
        return f"RibbonMesh(vertices={self.n_vertices}, faces={self.n_faces})"

    def append(self, other: "RibbonMesh") -> "RibbonMesh":
        """Return a new mesh holding this mesh followed by ``other``.

        ``other``'s face indices are shifted by this mesh's vertex count.
        Neither input is modified.
        """
        if other.n_vertices == 0:
            return self.copy()
        if self.n_vertices == 0:
            return other.copy()
        offset = self.n_vertices
        return RibbonMesh(
            np.vstack([self.positions, other.positions]),
            np.vstack([self.normals, other.normals]),
            np.vstack([self.colors, other.colors]),
            np.vstack([self.faces, other.faces + offset]),
        )

    @staticmethod
    def merge(meshes: Iterable["RibbonMesh"]) -> "RibbonMesh":
        """Concatenate many meshes in order, rebasing every face block."""
        meshes = [m for m in meshes if m is not None and m.n_vertices > 0]
        if not meshes:
            return RibbonMesh()
        offsets = np.cumsum([0] + [m.n_vertices for m in meshes[:-1]])
        return RibbonMesh(
            np.vstack([m.positions for m in meshes]),
            np.vstack([m.normals for m in meshes]),
            np.vstack([m.colors for m in meshes]),
            np.vstack([m.faces + off for m, off in zip(meshes, offsets)]),
        )

    def copy(self) -> "RibbonMesh":
        return RibbonMesh(self.positions.copy(), self.normals.copy(),
                          self.colors.copy(), self.faces.copy())

    def scaled(self, factor: float) -> "RibbonMesh":
        """Uniformly scaled copy; normals are unchanged."""
        mesh = self.copy()
        mesh.positions = (mesh.positions * np.float32(factor)).astype(np.float32)
        return mesh

    def translated(self, offset) -> "RibbonMesh":
        mesh = self.copy()
        mesh.positions = (mesh.positions + np.asarray(offset, dtype=np.float32)).astype(np.float32)
        return mesh

    def centered(self, center=None) -> "RibbonMesh":
        """Copy translated so ``center`` (default: vertex centroid) sits at the origin."""
        if self.n_vertices == 0:
            return self.copy()
        if center is None:
            center = self.positions.mean(axis=0)
        return self.translated(-np.asarray(center, dtype=np.float32))

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        if self.n_vertices == 0:
            return np.zeros(3, dtype=np.float32), np.zeros(3, dtype=np.float32)
        return self.positions.min(axis=0), self.positions.max(axis=0)

    def validate(self) -> None:
        """Check array lengths, index bounds and finiteness.

        Raises:
            InvalidMeshError: If the arrays are inconsistent
        """
        n = self.n_vertices
        if len(self.normals) != n or len(self.colors) != n:
            raise InvalidMeshError(
                f"Array length mismatch: {n} positions, {len(self.normals)} normals, "
                f"{len(self.colors)} colors"
            )
        if self.n_faces:
            if self.faces.min() < 0 or self.faces.max() >= n:
                raise InvalidMeshError(
                    f"Face index out of range [0, {n}): "
                    f"min {int(self.faces.min())}, max {int(self.faces.max())}"
                )
        if not np.all(np.isfinite(self.positions)):
            raise InvalidMeshError("Non-finite vertex positions")

    def to_render_arrays(self) -> Dict[str, np.ndarray]:
        """Flat arrays for a renderer: positions, normals, colors, indices.

        Raises:
            EmptyMeshError: If the mesh has no vertices or no triangles
            InvalidMeshError: If the arrays are inconsistent
        """
        if self.is_empty:
            raise EmptyMeshError("Cannot convert an empty mesh")
        self.validate()
        return {
            "positions": self.positions,
            "normals": self.normals,
            "colors": self.colors,
            "indices": self.faces.reshape(-1).astype(np.uint32),
        }

# proteinribbon/core/ribbon_builder.py
"""
Per-chain ribbon construction.

Pipeline for each chain:
    CA anchors -> fitted, smoothed curve samples -> rotation-minimizing frames
    -> structure segments -> per-segment profiles and colors -> meshes

Chains are independent; with more than one worker they are built in a
process pool and the resulting meshes merged in chain order.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import platform
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from .bonds.bond_detector import Bond, detect_bonds
from .coloring import interpolate_colors, residue_colors
from .geometry.frames import (
    Frame,
    peptide_plane_normal,
    rotation_minimizing_frames,
    smooth_frames,
)
from .geometry.spline import CurveSample, SplineFitter, sample_positions
from .mesh.profiles import profiles_for
from .mesh.ribbon_mesh import RibbonMesh
from .mesh.tessellator import CrossSectionShape, RibbonMeshTessellator
from .models import Anchor, HelixRange, Residue, SheetRange, StructureSnapshot, extract_anchors
from .options import ArrowStyle, RibbonOptions
from .structure.classifier import (
    StructureSegment,
    StructureType,
    classify,
    residue_structure_types,
)
from ..utils.workers import format_workers_info, resolve_chain_workers

__all__ = ["BackboneData", "RibbonBuilder", "segment_frame_range", "structure_summary"]

logger = logging.getLogger(__name__)


@dataclass
class BackboneData:
    """Shared geometry of one chain, computed once per configuration."""

    chain_id: str
    residues: List[Residue]
    anchors: List[Anchor]
    samples: List[CurveSample]
    frames: List[Frame]
    segments: List[StructureSegment]
    residue_types: List[StructureType]


def segment_frame_range(segment: StructureSegment,
                        samples: Sequence[CurveSample]) -> Optional[Tuple[int, int]]:
    """First and last sample index whose residue lies in ``segment``.

    Returns None for segments without samples (e.g. residues lacking CA).
    """
    indices = [i for i, s in enumerate(samples) if segment.contains(s.residue_index)]
    if not indices:
        return None
    return indices[0], indices[-1]


def _build_chain_job(args) -> Tuple[str, RibbonMesh]:
    """Pool entry point; must stay importable at module level for pickling."""
    snapshot, chain_id, options = args
    return chain_id, RibbonBuilder(options).build_chain_mesh(snapshot, chain_id)


class RibbonBuilder:
    """Builds ribbon meshes from a structure snapshot.

    Example:
        >>> builder = RibbonBuilder(RibbonOptions(samples_per_residue=8))
        >>> mesh = builder.build(snapshot)
        >>> arrays = mesh.to_render_arrays()
    """

    def __init__(self, options: Optional[RibbonOptions] = None) -> None:
        self.options = options or RibbonOptions()
        self.fitter = SplineFitter(
            method=self.options.spline_method,
            samples_per_segment=self.options.samples_per_residue,
            tension=self.options.tension,
            smoothing_iterations=self.options.position_smoothing_iterations,
            window_size=self.options.position_smoothing_window,
        )
        shape = CrossSectionShape(self.options.cross_section)
        self.tessellator = RibbonMeshTessellator(self.options.smooth_segments, shape)

    # ------------------------------------------------------------------
    # Backbone geometry
    # ------------------------------------------------------------------

    def _seed_normal(self, residues: Sequence[Residue]) -> Optional[np.ndarray]:
        for residue in residues:
            ca, o = residue.ca_atom, residue.o_atom
            if ca is not None and o is not None:
                return peptide_plane_normal(ca.position, o.position)
        return None

    def build_backbone(self, residues: Sequence[Residue],
                       helices: Sequence[HelixRange] = (),
                       sheets: Sequence[SheetRange] = ()) -> Optional[BackboneData]:
        """Curve samples, frames and segments for the residues of one chain.

        Returns None when fewer than 2 residues have a CA atom.
        """
        residues = list(residues)
        anchors = extract_anchors(residues)
        if len(anchors) < 2:
            logger.debug("Chain has %d CA anchors, skipping", len(anchors))
            return None

        points = np.array([a.position for a in anchors], dtype=np.float64)
        samples = self.fitter.fit(points, [a.residue_index for a in anchors])

        seed = self._seed_normal(residues) if self.options.use_peptide_plane else None
        frames = rotation_minimizing_frames(sample_positions(samples), seed)
        if self.options.frame_smoothing_iterations > 0:
            frames = smooth_frames(frames, self.options.frame_smoothing_passes,
                                   self.options.frame_smoothing_window)

        segments = classify(residues, helices, sheets, self.options.overlap_policy)
        return BackboneData(
            chain_id=anchors[0].chain_id,
            residues=residues,
            anchors=anchors,
            samples=samples,
            frames=frames,
            segments=segments,
            residue_types=residue_structure_types(segments, len(residues)),
        )

    # ------------------------------------------------------------------
    # Meshes
    # ------------------------------------------------------------------

    def segment_mesh(self, segment: StructureSegment, frames: Sequence[Frame],
                     colors: np.ndarray) -> RibbonMesh:
        """Mesh for one segment's frames according to its structure type."""
        options = self.options
        count = len(frames)
        if count < 2:
            return RibbonMesh()

        if segment.structure_type == StructureType.HELIX:
            profiles = profiles_for(StructureType.HELIX, count, options)
            return self.tessellator.tessellate(frames, profiles, colors)

        if segment.structure_type == StructureType.SHEET:
            if options.arrow_style == ArrowStyle.WEDGE:
                profiles = profiles_for(StructureType.SHEET, count, options, with_arrow=False)
                return self.tessellator.tessellate_sheet(
                    frames, profiles, colors,
                    options.sheet_arrow_length, options.sheet_arrow_wing_extension,
                )
            with_taper = options.arrow_style == ArrowStyle.TAPER
            profiles = profiles_for(StructureType.SHEET, count, options, with_arrow=with_taper)
            return self.tessellator.tessellate(frames, profiles, colors)

        return self.tessellator.tessellate_tube(frames, options.coil_radius, colors,
                                                sides=options.tube_sides)

    def _segment_meshes(self, snapshot: StructureSnapshot,
                        chain_id: str) -> List[Tuple[StructureSegment, RibbonMesh]]:
        residues = snapshot.chain_residues(chain_id)
        helices = [h for h in snapshot.helices if h.chain_id == chain_id]
        sheets = [s for s in snapshot.sheets if s.chain_id == chain_id]
        backbone = self.build_backbone(residues, helices, sheets)
        if backbone is None:
            return []

        colors = residue_colors(residues, backbone.segments, self.options.color_scheme,
                                snapshot.chains)
        sample_colors = interpolate_colors(colors, backbone.samples)
        n_frames = len(backbone.frames)

        meshes = []
        for segment in backbone.segments:
            frame_range = segment_frame_range(segment, backbone.samples)
            if frame_range is None:
                continue
            # One frame of overlap on each side keeps neighbouring segments joined
            start = max(0, frame_range[0] - 1)
            end = min(n_frames - 1, frame_range[1] + 1)
            mesh = self.segment_mesh(segment, backbone.frames[start:end + 1],
                                     sample_colors[start:end + 1])
            if mesh.n_vertices:
                meshes.append((segment, mesh))
        return meshes

    def build_chain_mesh(self, snapshot: StructureSnapshot, chain_id: str) -> RibbonMesh:
        """Merged mesh of every segment of one chain (unscaled)."""
        meshes = [mesh for _, mesh in self._segment_meshes(snapshot, chain_id)]
        merged = RibbonMesh.merge(meshes)
        logger.debug("Chain %s: %d segments, %d vertices, %d triangles",
                     chain_id, len(meshes), merged.n_vertices, merged.n_faces)
        return merged

    def build_segment_meshes(self, snapshot: StructureSnapshot) -> List[Tuple[str, StructureSegment, RibbonMesh]]:
        """One scaled mesh per segment, for renderers that keep segments separate."""
        result = []
        for chain_id in snapshot.chains:
            for segment, mesh in self._segment_meshes(snapshot, chain_id):
                result.append((chain_id, segment, mesh.scaled(self.options.scale)))
        return result

    def build(self, snapshot: StructureSnapshot) -> RibbonMesh:
        """Ribbon mesh of all chains, scaled by ``options.scale``.

        Chains are built independently; with ``n_workers > 1`` and several
        chains they are distributed over a process pool. The result is empty
        (not an error) when no chain has at least two CA anchors.
        """
        chains = list(snapshot.chains)
        if not chains:
            return RibbonMesh()

        n_workers = resolve_chain_workers(self.options.n_workers, len(chains))
        jobs = [(snapshot, chain_id, self.options) for chain_id in chains]

        if n_workers > 1:
            logger.info("Building %d chains with %s", len(chains), format_workers_info(n_workers))
            start_method = "spawn" if platform.system() != "Linux" else "fork"
            with mp.get_context(start_method).Pool(processes=n_workers) as pool:
                results = list(tqdm(pool.imap(_build_chain_job, jobs), total=len(jobs),
                                    desc="Chains", disable=not self.options.show_progress))
        else:
            results = [_build_chain_job(job) for job in
                       tqdm(jobs, desc="Chains", disable=not self.options.show_progress)]

        mesh = RibbonMesh.merge(m for _, m in results)
        if mesh.n_vertices == 0:
            logger.warning("No chain produced ribbon geometry")
            return mesh
        logger.info("Ribbon mesh: %d vertices, %d triangles", mesh.n_vertices, mesh.n_faces)
        return mesh.scaled(self.options.scale)

    def detect_bonds(self, snapshot: StructureSnapshot) -> List[Bond]:
        """Covalent bonds of the snapshot using the configured strategy."""
        return detect_bonds(snapshot.atoms, snapshot.residues, self.options.bond_strategy,
                            self.options.bond_tolerance, self.options.max_bond_length)


def structure_summary(snapshot: StructureSnapshot,
                      options: Optional[RibbonOptions] = None) -> str:
    """Human-readable overview of chains and secondary structure content."""
    options = options or RibbonOptions()
    lines = [
        "Structure Summary",
        f"  Atoms: {len(snapshot.atoms)}",
        f"  Residues: {len(snapshot.residues)}",
        f"  Chains: {', '.join(snapshot.chains) if snapshot.chains else '-'}",
    ]
    for chain_id in snapshot.chains:
        residues = snapshot.chain_residues(chain_id)
        segments = classify(
            residues,
            [h for h in snapshot.helices if h.chain_id == chain_id],
            [s for s in snapshot.sheets if s.chain_id == chain_id],
            options.overlap_policy,
        )
        counts = {t: 0 for t in StructureType}
        for segment in segments:
            counts[segment.structure_type] += segment.length
        lines.append(
            f"  Chain {chain_id}: {len(residues)} residues, {len(segments)} segments "
            f"(helix {counts[StructureType.HELIX]}, sheet {counts[StructureType.SHEET]}, "
            f"coil {counts[StructureType.COIL]})"
        )
    lines.append(f"  Helix annotations: {len(snapshot.helices)}")
    lines.append(f"  Sheet annotations: {len(snapshot.sheets)}")
    return "\n".join(lines)

# proteinribbon/utils/config_parser.py
"""Configuration file parser for ribbon rendering options."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..core.coloring import scheme_from_name
from ..core.mesh.profiles import ARROW_TRANSITION_POINTS
from ..core.options import ArrowStyle, CrossSectionName, RibbonOptions
from ..core.bonds.bond_detector import BondStrategy
from ..core.geometry.spline import SplineMethod
from ..core.structure.classifier import OverlapPolicy
from .workers import parse_workers

__all__ = [
    "load_config",
    "save_config",
    "validate_config",
    "print_derived_constants",
    "create_example_config",
    "EXAMPLE_CONFIG",
]

logger = logging.getLogger(__name__)

CHOICE_FIELDS = {
    "spline_method": [m.value for m in SplineMethod],
    "cross_section": [c.value for c in CrossSectionName],
    "arrow_style": [a.value for a in ArrowStyle],
    "overlap_policy": [p.value for p in OverlapPolicy],
    "bond_strategy": [s.value for s in BondStrategy],
}

NUMERIC_RANGES = {
    "helix_width": (0.05, 20.0),
    "sheet_width": (0.05, 20.0),
    "coil_radius": (0.01, 10.0),
    "thickness": (0.01, 10.0),
    "samples_per_residue": (1, 256),
    "tension": (0.0, 1.0),
    "position_smoothing_window": (1, 99),
    "frame_smoothing_window": (3, 99),
    "frame_smoothing_iterations": (0, 100),
    "smooth_segments": (3, 256),
    "sheet_arrow_length": (0.0, 20.0),
    "sheet_arrow_wing_extension": (0.0, 20.0),
    "scale": (1e-6, 1e6),
    "bond_tolerance": (1.0, 3.0),
    "max_bond_length": (0.5, 5.0),
}

INTEGER_FIELDS = {
    "samples_per_residue",
    "position_smoothing_window",
    "frame_smoothing_window",
    "frame_smoothing_iterations",
    "smooth_segments",
}

BOOL_FIELDS = {"use_peptide_plane", "show_progress"}


def load_config(config_path: Union[str, Path]) -> RibbonOptions:
    """Load rendering options from a YAML or JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        RibbonOptions with file values over the defaults

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format or values are invalid
    """
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        elif config_path.suffix == ".json":
            config = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {config_path.suffix}")

    config = config or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(config).__name__}")

    # Options may sit under a top-level "ribbon" key
    if isinstance(config.get("ribbon"), dict):
        config = config["ribbon"]

    validate_config(config)
    logger.debug("Loaded ribbon configuration from %s", config_path)
    return RibbonOptions.from_dict(config)


def save_config(options: Union[RibbonOptions, Dict[str, Any]], output_path: Union[str, Path]) -> None:
    """Save options to a YAML file.

    Args:
        options: RibbonOptions or plain configuration dictionary
        output_path: Path to save configuration
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = options.to_dict() if isinstance(options, RibbonOptions) else dict(options)
    with open(output_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration keys, types and value ranges.

    Args:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    for field, choices in CHOICE_FIELDS.items():
        if field in config and config[field] not in choices:
            raise ValueError(f"Invalid {field}: {config[field]}. Must be one of {choices}")

    if "color_scheme" in config:
        scheme_from_name(config["color_scheme"], config.get("uniform_color"))

    if "uniform_color" in config:
        color = config["uniform_color"]
        if not isinstance(color, (list, tuple)) or len(color) not in (3, 4):
            raise ValueError("uniform_color must be a list of 3 or 4 numbers")
        if not all(isinstance(c, (int, float)) and 0.0 <= c <= 1.0 for c in color):
            raise ValueError(f"uniform_color components must be in [0, 1]: {color}")

    for field in BOOL_FIELDS:
        if field in config and not isinstance(config[field], bool):
            raise ValueError(f"Invalid type for {field}: expected bool")

    for field, (min_val, max_val) in NUMERIC_RANGES.items():
        if field not in config:
            continue
        value = config[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Invalid type for {field}: expected number")
        if field in INTEGER_FIELDS and not isinstance(value, int):
            raise ValueError(f"Invalid type for {field}: expected int")
        if not (min_val <= value <= max_val):
            raise ValueError(f"{field} out of range: {value} not in [{min_val}, {max_val}]")

    if "n_workers" in config:
        parse_workers(config["n_workers"])


def print_derived_constants(options: RibbonOptions, n_residues: int) -> None:
    """Print estimated mesh sizes for a dry run.

    Args:
        options: Rendering options
        n_residues: Number of residues (one anchor each) in a single chain
    """
    print("\n" + "=" * 80)
    print("DERIVED MESH ESTIMATES")
    print("=" * 80)

    S = options.samples_per_residue
    n_samples = (n_residues - 1) * S + 1 if n_residues >= 4 else n_residues
    print(f"\nResidues: {n_residues}")
    print(f"Curve samples: {n_samples} ({S} per residue)")

    ring = 8 if options.cross_section == CrossSectionName.RECTANGLE else options.smooth_segments
    tube = options.tube_sides
    print(f"Ribbon ring vertices: {ring}, coil tube sides: {tube}")

    ribbon_vertices = n_samples * ring
    ribbon_triangles = max(0, n_samples - 1) * ring * 2
    print("Upper bound if the whole chain were one ribbon segment:")
    print(f"  Vertices: {ribbon_vertices:,}")
    print(f"  Triangles: {ribbon_triangles:,}")

    print(f"\nPosition smoothing: {options.position_smoothing_iterations} passes, "
          f"window {options.position_smoothing_window}")
    print(f"Frame smoothing: {options.frame_smoothing_passes} passes, "
          f"window {options.frame_smoothing_window}")

    if options.arrow_style == ArrowStyle.TAPER:
        print(f"Strand arrows: tapered over the last {ARROW_TRANSITION_POINTS} samples")
    elif options.arrow_style == ArrowStyle.WEDGE:
        print(f"Strand arrows: wedge, length {options.sheet_arrow_length} Å, "
              f"wing extension {options.sheet_arrow_wing_extension} Å")

    print(f"Mesh scale: {options.scale}")
    print("\n" + "=" * 80)


# Example configuration template
EXAMPLE_CONFIG = """# Ribbon rendering configuration

# Coloring: by_structure, by_chain, by_residue, by_residue_type, uniform
color_scheme: by_structure
uniform_color: [0.7, 0.7, 0.7, 1.0]  # used when color_scheme is uniform

# Cross-section dimensions (Angstroms)
helix_width: 1.2
sheet_width: 1.6
coil_radius: 0.3
thickness: 0.4

# Curve fitting
spline_method: catmull_rom  # catmull_rom, b_spline or hermite
samples_per_residue: 24
tension: 0.5
position_smoothing_window: 7
frame_smoothing_window: 5
frame_smoothing_iterations: 5
use_peptide_plane: false

# Tessellation
smooth_segments: 20
cross_section: ellipse  # ellipse, rectangle or circle
arrow_style: wedge  # wedge, taper or none
sheet_arrow_length: 2.4
sheet_arrow_wing_extension: 0.8
scale: 1.0

# Secondary structure
overlap_policy: sheet  # sheet or helix wins on overlapping annotations

# Bond detection
bond_strategy: residue  # residue, spatial_hash, backbone or brute_force
bond_tolerance: 1.3
max_bond_length: 2.0

# Computational settings
n_workers: 1  # per-chain workers (or 'auto')
show_progress: false
"""


def create_example_config(output_path: str = "ribbon_config.yaml") -> None:
    """Create an example configuration file.

    Args:
        output_path: Path to save example config
    """
    with open(output_path, "w") as f:
        f.write(EXAMPLE_CONFIG)
    print(f"Created example configuration: {output_path}")

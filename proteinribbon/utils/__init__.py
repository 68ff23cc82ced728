"""
Utility modules for proteinribbon.

This module provides various utilities:
- CPU/worker management for per-chain building
- Configuration parsing
"""

from .config_parser import create_example_config, load_config, print_derived_constants, save_config
from .workers import format_workers_info, get_optimal_workers, parse_workers, resolve_chain_workers

__all__ = [
    "parse_workers",
    "get_optimal_workers",
    "resolve_chain_workers",
    "format_workers_info",
    "load_config",
    "save_config",
    "print_derived_constants",
    "create_example_config",
]

"""Worker-count helpers for building chains in parallel."""
import multiprocessing as mp
from typing import Optional, Union

__all__ = ["parse_workers", "get_optimal_workers", "resolve_chain_workers", "format_workers_info"]

AUTO_VALUES = (None, "", "auto")


def get_optimal_workers() -> int:
    """Default pool size: every core but one, and never below one."""
    return max(1, mp.cpu_count() - 1)


def parse_workers(value: Optional[Union[str, int]]) -> int:
    """Turn an ``n_workers`` setting into a process count.

    ``"auto"``, ``None`` and ``""`` select ``get_optimal_workers()``. Integers
    (or integer strings) below one are raised to one.

    Raises
    ------
    ValueError
        If ``value`` is neither ``"auto"`` nor convertible to an integer.
    """
    if value in AUTO_VALUES:
        return get_optimal_workers()

    try:
        requested = int(value)
    except (ValueError, TypeError) as e:
        raise ValueError(
            f"Invalid n_workers: '{value}'. Use 'auto' or a positive integer."
        ) from e
    return max(1, requested)


def resolve_chain_workers(value: Optional[Union[str, int]], n_chains: int) -> int:
    """Pool size for ``n_chains`` independent chain jobs.

    A pool larger than the number of chains would only idle, so the parsed
    setting is capped at ``n_chains``.
    """
    return max(1, min(parse_workers(value), n_chains))


def format_workers_info(n_workers: int) -> str:
    """One-line description of the chain pool for log messages.

    Args:
        n_workers: Resolved number of chain workers

    Returns:
        Description mentioning the available cores
    """
    cores = mp.cpu_count()
    if n_workers <= 1:
        return f"serial chain building ({cores} cores available)"
    label = "auto-sized " if n_workers == get_optimal_workers() else ""
    return f"{label}pool of {n_workers} chain workers ({cores} cores)"

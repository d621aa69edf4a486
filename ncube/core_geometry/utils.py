"""
Mathematical utilities and helper functions for hypercube geometry.

Contains bit helpers, combinatorics and debug formatting for vectors.
"""
import math
import numpy as np
from typing import Sequence

from .common import DimensionError


def _check_dimension(n) -> int:
    """Validate a dimension before anything is allocated for it."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise DimensionError(f"Dimension must be an integer, got {n!r}")
    if n <= 0:
        raise DimensionError(f"Dimension must be positive, got {n}")
    return int(n)


def n_choose_r(n: int, r: int) -> int:
    """Binomial coefficient C(n, r); zero when r is out of range."""
    if r < 0 or r > n:
        return 0
    return math.comb(n, r)


def rotation_plane_count(n: int) -> int:
    """Number of independent rotation planes C(n, 2)."""
    return n_choose_r(_check_dimension(n), 2)


def popcount(x: int) -> int:
    return bin(x).count("1")


def format_vector(v: Sequence[float]) -> str:
    """Debug string for an N-dimensional coordinate, e.g. (1.00, -1.00, 0.50)."""
    return "(" + ", ".join(f"{float(c):.2f}" for c in v) + ")"


def lerp(x, a, b):
    """Linear interpolation a*(1-x) + b*x; works on floats and numpy arrays."""
    return a * (1 - x) + b * x

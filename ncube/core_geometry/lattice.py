"""
Hypercube lattice construction.

Builds the vertex coordinates and edge set of the n-cube. Vertex i sits at
+1 on axis j when bit j of i is set and -1 otherwise; two vertices share an
edge when their indices differ in exactly one bit.
"""
import logging
from functools import lru_cache
from typing import List, Tuple
from dataclasses import dataclass, field

import numpy as np

from .utils import _check_dimension, popcount

logger = logging.getLogger('NCube')


@dataclass(frozen=True)
class Edge:
    u: int
    v: int


@dataclass(frozen=True)
class HypercubeLattice:
    """Vertex coordinates (2^n x n) and edge list of the n-cube."""
    dim: int
    vertices: np.ndarray
    edges: Tuple[Edge, ...]
    adjacency: np.ndarray = field(repr=False)

    @property
    def V(self) -> int:
        return self.vertices.shape[0]

    def has_edge(self, i: int, j: int) -> bool:
        if not (0 <= i < self.V and 0 <= j < self.V):
            return False
        return bool(self.adjacency[i, j])

    def neighbors(self, i: int) -> List[int]:
        """Vertex indices one bit-flip away from i, lowest axis first."""
        return [i ^ (1 << bit) for bit in range(self.dim)]


def hypercube_vertices(n: int) -> np.ndarray:
    """Return the (2^n, n) float64 coordinate matrix of the n-cube."""
    n = _check_dimension(n)
    idx = np.arange(1 << n, dtype=np.int64)[:, None]
    bits = (idx >> np.arange(n, dtype=np.int64)[None, :]) & 1
    return (bits * 2 - 1).astype(np.float64)


def hypercube_edges(n: int) -> List[Edge]:
    """Every Edge(i, j) with i > j and popcount(i ^ j) == 1, ordered by i then axis."""
    n = _check_dimension(n)
    edges = []
    for i in range(1 << n):
        for bit in range(n):
            if (j := i ^ (1 << bit)) < i:
                edges.append(Edge(i, j))
    return edges


@lru_cache(maxsize=16)
def build_hypercube(n: int) -> HypercubeLattice:
    """Build (and cache per dimension) the n-cube lattice."""
    n = _check_dimension(n)
    vertices = hypercube_vertices(n)
    vertices.setflags(write=False)
    edges = tuple(hypercube_edges(n))

    adjacency = np.zeros((1 << n, 1 << n), dtype=bool)
    for e in edges:
        adjacency[e.u, e.v] = adjacency[e.v, e.u] = True
    adjacency.setflags(write=False)

    logger.debug(f"Built {n}-cube lattice: V={1 << n}, E={len(edges)}")
    return HypercubeLattice(dim=n, vertices=vertices, edges=edges, adjacency=adjacency)


def is_edge(i: int, j: int) -> bool:
    """Hamming-distance-one test on two vertex indices."""
    return popcount(i ^ j) == 1
